"""Signal channel abstractions.

The "dump now" cue has to reach an inspector living in another process. This
module defines a minimal channel interface so different transports can be
plugged in:

* Unix datagram socket next to the handshake file (default on POSIX)
* UDP datagram on loopback (platforms without AF_UNIX, or by choice)
* Null channel (signalling disabled)

Every channel sends the same fixed datagram and nothing else; the call site
travels through the handshake file. Sending never blocks and never raises: an
inspector that is not listening is the common case.
"""

from __future__ import annotations

import os
import socket
import sys
from abc import ABC, abstractmethod

from .diagnostics import report
from .protocol import (
    AUDIT_EVENT,
    DATA_EXTENSION,
    DEFAULT_SIGNAL_HOST,
    DEFAULT_SIGNAL_PORT,
    ENV_SIGNAL,
    ENV_SIGNAL_HOST,
    ENV_SIGNAL_PORT,
    SIGNAL_DATAGRAM,
    SOCKET_EXTENSION,
)


class VisualizeSignal(Exception):
    """Named in-process cue, raised and caught inside ``raise_signal``.

    Debuggers set to break on this exception type stop at the trigger; it
    never propagates to user code.
    """


def socket_path_for(handshake_path: str) -> str:
    root, ext = os.path.splitext(handshake_path)
    if ext == DATA_EXTENSION:
        return root + SOCKET_EXTENSION
    return handshake_path + SOCKET_EXTENSION


class ISignalChannel(ABC):
    """Abstract interface every signal transport must implement."""

    @abstractmethod
    def notify(self) -> bool:
        """Send the trigger cue.

        Returns True when the cue was handed to a listening inspector and
        False when nobody is listening. Transport errors other than a missing
        listener may raise OSError; callers treat that as absence too.
        """

    def close(self) -> None:
        pass


class NullSignalChannel(ISignalChannel):
    def notify(self) -> bool:  # type: ignore[override]
        return False


class UnixSignalChannel(ISignalChannel):
    """Datagram to an AF_UNIX socket bound by the inspector."""

    def __init__(self, address: str):
        self.address = address

    def notify(self) -> bool:  # type: ignore[override]
        if not os.path.exists(self.address):
            return False
        with socket.socket(socket.AF_UNIX, socket.SOCK_DGRAM) as sock:
            sock.setblocking(False)
            try:
                sock.sendto(SIGNAL_DATAGRAM, self.address)
            except (FileNotFoundError, ConnectionRefusedError):
                # stale socket file, no inspector behind it
                return False
            except BlockingIOError:
                # inspector queue full; it already has a pending cue
                return False
        return True


class UdpSignalChannel(ISignalChannel):
    """Datagram to a UDP port on loopback.

    UDP gives no delivery feedback, so ``notify`` reports True once the
    datagram left the socket.
    """

    def __init__(self, host: str = DEFAULT_SIGNAL_HOST, port: int = DEFAULT_SIGNAL_PORT):
        self.host = host
        self.port = port

    def notify(self) -> bool:  # type: ignore[override]
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.setblocking(False)
            try:
                sock.sendto(SIGNAL_DATAGRAM, (self.host, self.port))
            except (ConnectionRefusedError, BlockingIOError):
                return False
        return True


def default_channel_kind() -> str:
    return "unix" if hasattr(socket, "AF_UNIX") else "udp"


def signal_port_from_env() -> int:
    port_str = os.environ.get(ENV_SIGNAL_PORT)
    if port_str:
        try:
            return int(port_str)
        except ValueError:
            report("Signal", f"Invalid {ENV_SIGNAL_PORT}={port_str!r}, using {DEFAULT_SIGNAL_PORT}")
    return DEFAULT_SIGNAL_PORT


def _udp_from_env() -> UdpSignalChannel:
    host = os.environ.get(ENV_SIGNAL_HOST, DEFAULT_SIGNAL_HOST)
    return UdpSignalChannel(host, signal_port_from_env())


def create_signal_channel(handshake_path: str) -> ISignalChannel:
    """Build the channel selected by ``MEMDBGVIS_SIGNAL`` for this handshake file."""
    chosen = os.environ.get(ENV_SIGNAL, "").strip().lower() or default_channel_kind()

    if chosen == "none":
        return NullSignalChannel()
    if chosen == "udp":
        return _udp_from_env()
    if chosen == "unix":
        if hasattr(socket, "AF_UNIX"):
            return UnixSignalChannel(socket_path_for(handshake_path))
        report("Signal", "AF_UNIX unavailable on this platform -> udp fallback")
        return _udp_from_env()

    fallback = default_channel_kind()
    report("Signal", f"Unknown signal channel '{chosen}', using {fallback}")
    if fallback == "unix":
        return UnixSignalChannel(socket_path_for(handshake_path))
    return _udp_from_env()


def raise_signal(channel: ISignalChannel) -> bool:
    """Raise the trigger cue and recover immediately.

    Returns True when a listening inspector received the cue. Never raises.
    """
    try:
        try:
            raise VisualizeSignal()
        except VisualizeSignal:
            pass

        try:
            sys.audit(AUDIT_EVENT)
        except Exception as e:
            # a host audit hook rejected the event; the socket cue still goes out
            report("Signal", f"Audit hook raised {type(e).__name__}: {e}")

        try:
            return channel.notify()
        except OSError as e:
            report("Signal", f"Inspector not reachable: {e}")
            return False
        finally:
            channel.close()
    except (AttributeError, TypeError) as e:
        # runtime state missing mid-dispatch (e.g. during interpreter shutdown)
        report("Signal", f"Signal dispatch skipped: {e}")
        return False
