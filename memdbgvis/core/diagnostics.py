"""Diagnostic output for code running inside the inspected process.

Messages are tagged the same way the rest of the project prints them
(``[Handshake] ...``) but go to stderr, so they never mix with the host
program's own output.
"""

import os
import sys

from .protocol import ENV_QUIET


def env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


def report(tag: str, message: str) -> None:
    if env_flag(ENV_QUIET):
        return
    try:
        print(f"[{tag}] {message}", file=sys.stderr)
    except (OSError, ValueError):
        # stderr closed or detached
        pass
