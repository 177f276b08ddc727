"""Launch argument scanning.

An inspector attaches itself to the interpreter at launch with an argument of
the form ``-agentpath:<path-to-agent-module>[=<options>]``. It can arrive
through any of:

* the interpreter command line (``sys.orig_argv``)
* an ``-X`` option (``python -X agentpath=/opt/agent/inspector.so``)
* the ``MEMDBGVIS_AGENT_OPTIONS`` environment variable, for launchers that
  cannot touch the program's own command line

The handshake file lives next to the agent module, with the module extension
replaced by ``.dat``.
"""

from __future__ import annotations

import os
import shlex
import sys
from typing import Iterable, List, Optional

from .diagnostics import report
from .protocol import (
    AGENT_DELIMITER,
    AGENT_MARKER,
    DATA_EXTENSION,
    ENV_AGENT_OPTIONS,
    MODULE_EXTENSIONS,
)
from .types import LaunchScan


def get_launch_arguments() -> List[str]:
    """Return the live launch arguments of this interpreter (never cached)."""
    args = list(getattr(sys, "orig_argv", None) or sys.argv)

    for key, value in getattr(sys, "_xoptions", {}).items():
        if value is True:
            args.append(f"-{key}")
        else:
            args.append(f"-{key}{AGENT_DELIMITER}{value}")

    extra = os.environ.get(ENV_AGENT_OPTIONS)
    if extra:
        try:
            args.extend(shlex.split(extra))
        except ValueError as e:
            report("Launch", f"Ignoring unparsable {ENV_AGENT_OPTIONS}: {e}")
    return args


def find_agent_argument(args: Iterable[str]) -> Optional[str]:
    """Return the first argument carrying the agent marker."""
    for arg in args:
        if isinstance(arg, str) and arg.startswith(AGENT_MARKER):
            return arg
    return None


def derive_handshake_path(argument: str) -> Optional[str]:
    """Map an agent argument to its handshake file path.

    Returns None when the argument has no delimiter or an empty path.
    """
    _, sep, rest = argument.partition(AGENT_DELIMITER)
    if not sep:
        return None
    # JVM-style agent options follow the path after '='
    path = rest.partition("=")[0].strip()
    if not path:
        return None

    root, ext = os.path.splitext(path)
    if ext.lower() in MODULE_EXTENSIONS:
        return root + DATA_EXTENSION
    if ext.lower() == DATA_EXTENSION:
        return path
    return path + DATA_EXTENSION


def scan_launch_arguments(args: Optional[Iterable[str]] = None) -> LaunchScan:
    if args is None:
        args = get_launch_arguments()

    argument = find_agent_argument(args)
    if argument is None:
        return LaunchScan()

    path = derive_handshake_path(argument)
    if path is None:
        report("Launch", f"Malformed agent argument ignored: {argument!r}")
    return LaunchScan(argument=argument, handshake_path=path)
