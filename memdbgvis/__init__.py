"""
memdbgvis - on-demand memory/runtime snapshots for an external inspector.

Call ``visualize()`` anywhere in a program launched with an inspector agent
attached; without one it does nothing.
"""

from .core.bridge import object_to_bytes
from .core.metrics import get_runtime_metrics
from .core.signals import VisualizeSignal
from .core.trigger import visualize

__version__ = "1.0.0"

__all__ = ['visualize', 'get_runtime_metrics', 'object_to_bytes', 'VisualizeSignal']
