"""The trigger: ask an attached inspector to take a snapshot right here.

Sequence per call (nothing is kept between calls)::

    Idle -> Scanning -> Writing -> Signaling -> Idle     (inspector attached)
    Idle -> Scanning -> Idle                              (no inspector)
"""

from __future__ import annotations

import sys
from typing import Iterable, Optional

from .diagnostics import report
from .handshake import write_handshake
from .launch import scan_launch_arguments
from .signals import create_signal_channel, raise_signal


def _caller_line(depth: int) -> int:
    try:
        return sys._getframe(depth + 1).f_lineno
    except (AttributeError, ValueError):
        return 0


def visualize(call_site: Optional[int] = None, args: Optional[Iterable[str]] = None) -> bool:
    """Trigger a visualization from the calling line.

    ``call_site`` defaults to the line number of the immediate caller.
    ``args`` overrides the live launch arguments (mainly for embedding and
    tests). Returns True when an inspector was listening for the cue. Never
    raises.
    """
    if call_site is None:
        call_site = _caller_line(1)

    try:
        scan = scan_launch_arguments(args)
        if not scan.attached:
            return False

        write_handshake(scan.handshake_path, call_site)
        return raise_signal(create_signal_channel(scan.handshake_path))
    except Exception as e:
        report("Trigger", f"Visualization request dropped: {type(e).__name__}: {e}")
        return False
