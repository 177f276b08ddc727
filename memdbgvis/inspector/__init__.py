"""
Inspector side of the memdbgvis protocol.
"""

from .listener import SignalListener

__all__ = ['SignalListener']
