"""Handshake record: the call site of the latest trigger, shared with the inspector.

The record is a single line holding a decimal line number. It is replaced
atomically on every trigger, so the inspector sees either the previous record
or the new one, never a half-written file.

A symlinked handshake path is resolved first, so the link stays in place and
its target is replaced. An existing record keeps its permission bits; one
without any write bit counts as locked by the inspector and is left alone. A
new record is created with mode 0644.
"""

from __future__ import annotations

import os
import stat
import tempfile
from typing import Optional

from .diagnostics import report

NEW_RECORD_MODE = 0o644
_WRITE_BITS = stat.S_IWUSR | stat.S_IWGRP | stat.S_IWOTH


def write_handshake(path: str, call_site: int) -> bool:
    """Overwrite the handshake record at ``path`` with ``call_site``.

    A single best-effort attempt. Failures are reported and swallowed; the
    existing record is left untouched. Returns True when the record was
    replaced.
    """
    tmp_path = None
    try:
        line = f"{int(call_site)}\n"
        target = os.path.realpath(path)
        mode = NEW_RECORD_MODE
        if os.path.exists(target):
            mode = stat.S_IMODE(os.stat(target).st_mode)
            if not mode & _WRITE_BITS:
                raise PermissionError(f"record is read-only: {target}")

        fd, tmp_path = tempfile.mkstemp(
            dir=os.path.dirname(target), prefix=f".{os.path.basename(target)}.", suffix=".tmp"
        )
        with os.fdopen(fd, "w", encoding="ascii") as f:
            f.write(line)
            f.flush()
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, target)
        tmp_path = None
        return True
    except (OSError, ValueError, TypeError) as e:
        report("Handshake", f"Cannot write call site to {path!r}: {e}")
        return False
    finally:
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass


def read_handshake(path: str) -> Optional[int]:
    """Return the call site stored at ``path``, or None if absent or garbled."""
    try:
        with open(path, "r", encoding="ascii") as f:
            first = f.readline().strip()
    except (OSError, UnicodeDecodeError, ValueError):
        return None
    try:
        return int(first)
    except ValueError:
        return None
