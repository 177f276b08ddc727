"""Inspector-side receiver for trigger cues.

Binds the socket the trigger side sends to and, for each cue, reads the call
site from the handshake file. This is the minimal other end of the protocol;
what to render is left to the tool embedding it.
"""

from __future__ import annotations

import os
import socket
import stat
from datetime import datetime
from typing import Optional

from ..core.handshake import read_handshake
from ..core.protocol import DEFAULT_SIGNAL_HOST, DEFAULT_SIGNAL_PORT, SIGNAL_DATAGRAM
from ..core.signals import default_channel_kind, socket_path_for
from ..core.types import TriggerNotice


def _ensure_socket_path(path: str) -> None:
    """Remove a stale socket file; refuse to clobber anything else."""
    if not os.path.lexists(path):
        return
    if stat.S_ISSOCK(os.lstat(path).st_mode):
        os.unlink(path)
        return
    raise FileExistsError(f"path exists and is not a socket: {path}")


class SignalListener:
    def __init__(self, handshake_path: str, channel: Optional[str] = None,
                 host: str = DEFAULT_SIGNAL_HOST, port: int = DEFAULT_SIGNAL_PORT):
        self.handshake_path = handshake_path
        self.channel = channel or default_channel_kind()
        self.address = None
        self._socket_file: Optional[str] = None

        if self.channel == "unix":
            path = socket_path_for(handshake_path)
            _ensure_socket_path(path)
            self._sock = socket.socket(socket.AF_UNIX, socket.SOCK_DGRAM)
            self._sock.bind(path)
            self._socket_file = path
            self.address = path
        elif self.channel == "udp":
            self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            self._sock.bind((host, port))
            self.address = self._sock.getsockname()
        else:
            raise ValueError(f"Unsupported signal channel '{self.channel}'")

    def wait(self, timeout: Optional[float] = None) -> Optional[TriggerNotice]:
        """Block until the next trigger cue, or return None on timeout."""
        self._sock.settimeout(timeout)
        while True:
            try:
                data, _ = self._sock.recvfrom(64)
            except socket.timeout:
                return None
            if data == SIGNAL_DATAGRAM:
                break
            # foreign datagram, keep waiting

        return TriggerNotice(
            handshake_path=self.handshake_path,
            call_site=read_handshake(self.handshake_path),
            received_at=datetime.now(),
        )

    def close(self) -> None:
        self._sock.close()
        if self._socket_file is not None:
            try:
                os.unlink(self._socket_file)
            except FileNotFoundError:
                pass
            self._socket_file = None

    def __enter__(self) -> "SignalListener":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
