"""Core shared data types for memdbgvis.

This module centralizes lightweight dataclasses that are shared between the
trigger side (running inside the inspected process) and the inspector side
(the listener that receives the "dump now" cue).

Keeping them apart from the individual components lets the listener import
the record types without pulling in the trigger machinery.
"""

from __future__ import annotations

import pickle
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from typing import Any, Optional


@dataclass(frozen=True)
class LaunchScan:
    """Result of scanning the interpreter's launch arguments.

    ``argument`` is the first token carrying the agent marker (if any) and
    ``handshake_path`` the file derived from it. A marker token that could not
    be parsed keeps ``argument`` but leaves ``handshake_path`` empty.
    """

    argument: Optional[str] = None
    handshake_path: Optional[str] = None

    @property
    def attached(self) -> bool:
        return self.handshake_path is not None


@dataclass
class RuntimeCounters:
    """Point-in-time runtime counters, in bytes / seconds.

    Any field may be ``None`` when the underlying source is unavailable on the
    current platform; the formatter renders those as ``unavailable``.
    """

    heap_used: Optional[int] = None
    non_heap_used: Optional[int] = None
    free: Optional[int] = None
    total: Optional[int] = None
    cpu_time: Optional[float] = None
    thread_count: Optional[int] = None


class PayloadStatus(IntEnum):
    OK = 0
    NOT_SERIALIZABLE = 1
    IO_ERROR = 2


@dataclass(frozen=True)
class SerializedPayload:
    """A decoded serialization bridge frame."""

    status: PayloadStatus
    body: bytes

    @property
    def ok(self) -> bool:
        return self.status == PayloadStatus.OK

    def load(self) -> Any:
        """Rebuild the serialized object. Only valid for OK payloads."""
        if not self.ok:
            raise ValueError(f"payload carries no object ({self.status.name}): {self.body.decode('utf-8', 'replace')}")
        return pickle.loads(self.body)


@dataclass
class TriggerNotice:
    """What the inspector learns when a trigger arrives."""

    handshake_path: str
    call_site: Optional[int]  # None if the record was missing or unreadable
    received_at: datetime
