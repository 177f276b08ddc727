"""Serialization bridge, called by the inspector with an object it picked up.

Every result is a frame::

    [Magic(4) | Ver(1) | Status(1) | Length(4)] body

The status byte says whether the body is a pickle of the object or one of the
fixed error messages, so a genuine payload can never be mistaken for a
sentinel.
"""

from __future__ import annotations

import io
import pickle
import struct

from .protocol import (
    FRAME_HEADER_FMT,
    FRAME_HEADER_LEN,
    FRAME_MAGIC,
    FRAME_VERSION,
    IO_ERROR_MESSAGE,
    NOT_SERIALIZABLE_MESSAGE,
)
from .types import PayloadStatus, SerializedPayload


def _frame(status: PayloadStatus, body: bytes) -> bytes:
    return struct.pack(FRAME_HEADER_FMT, FRAME_MAGIC, FRAME_VERSION, int(status), len(body)) + body


def _pickle_into(buffer: io.BytesIO, obj) -> None:
    pickle.Pickler(buffer, protocol=pickle.HIGHEST_PROTOCOL).dump(obj)


def object_to_bytes(obj, buffer: io.BytesIO | None = None) -> bytes:
    """Serialize ``obj`` and frame the result. Never raises.

    ``buffer`` lets the caller supply the scratch stream (defaults to a fresh
    in-memory buffer). Only the bytes written by this call are framed, so a
    reused buffer never leaks an earlier object into the payload.
    """
    if buffer is None:
        buffer = io.BytesIO()
    try:
        start = buffer.tell()
        _pickle_into(buffer, obj)
        end = buffer.tell()
        return _frame(PayloadStatus.OK, buffer.getvalue()[start:end])
    except (pickle.PicklingError, TypeError, AttributeError):
        return _frame(PayloadStatus.NOT_SERIALIZABLE, NOT_SERIALIZABLE_MESSAGE)
    except (OSError, ValueError):
        # ValueError: buffer already closed
        return _frame(PayloadStatus.IO_ERROR, IO_ERROR_MESSAGE)
    except Exception:
        # raised by the object's own __reduce__ / __getstate__
        return _frame(PayloadStatus.NOT_SERIALIZABLE, NOT_SERIALIZABLE_MESSAGE)


def decode_payload(data: bytes) -> SerializedPayload:
    """Parse a bridge frame. Raises ValueError on malformed input."""
    if len(data) < FRAME_HEADER_LEN:
        raise ValueError(f"Truncated frame header ({len(data)} bytes)")

    magic, ver, status, length = struct.unpack(FRAME_HEADER_FMT, data[:FRAME_HEADER_LEN])
    if magic != FRAME_MAGIC:
        raise ValueError(f"Bad frame magic {magic!r}")
    if ver != FRAME_VERSION:
        raise ValueError(f"Unsupported frame version {ver}")
    try:
        status = PayloadStatus(status)
    except ValueError:
        raise ValueError(f"Unknown payload status {status}") from None

    body = data[FRAME_HEADER_LEN:]
    if len(body) != length:
        raise ValueError(f"Frame length mismatch (header {length}, body {len(body)})")
    return SerializedPayload(status=status, body=bytes(body))


def hex_dump(data: bytes) -> str:
    return " ".join(f"{b:02x}" for b in data)
