"""Runtime metrics snapshot rendered as plain text for the inspector.

Counters are read fresh on every call; a counter whose source fails is
reported as unavailable instead of failing the whole snapshot.
"""

from __future__ import annotations

import threading
import time
import tracemalloc
from typing import Callable, List, Optional, TypeVar

import psutil

from .types import RuntimeCounters

T = TypeVar("T")


def _safe(read: Callable[[], T]) -> Optional[T]:
    try:
        return read()
    except (psutil.Error, OSError, AttributeError, NotImplementedError):
        return None


def _heap_used(mem_info) -> Optional[int]:
    if tracemalloc.is_tracing():
        return tracemalloc.get_traced_memory()[0]
    return mem_info.rss if mem_info is not None else None


def collect_counters() -> RuntimeCounters:
    """Read the live counters of this process."""
    mem_info = _safe(lambda: psutil.Process().memory_info())
    vm = _safe(psutil.virtual_memory)

    non_heap = None
    if mem_info is not None:
        non_heap = max(mem_info.vms - mem_info.rss, 0)

    return RuntimeCounters(
        heap_used=_heap_used(mem_info),
        non_heap_used=non_heap,
        free=vm.available if vm is not None else None,
        total=vm.total if vm is not None else None,
        cpu_time=_safe(time.thread_time),
        thread_count=_safe(threading.active_count),
    )


def usage_percent(total: int, free: int) -> float:
    """Used share of ``total`` in percent, 0.0 for an empty total."""
    if total <= 0:
        return 0.0
    pct = (total - free) / total * 100
    return min(max(pct, 0.0), 100.0)


def _kib(value: Optional[int]) -> str:
    return f"{value >> 10} KiB" if value is not None else "unavailable"


def format_metrics(counters: RuntimeCounters) -> str:
    lines: List[str] = [
        f"Heap Usage: {_kib(counters.heap_used)}",
        f"Non-Heap Usage: {_kib(counters.non_heap_used)}",
        f"Free Memory: {_kib(counters.free)}",
        f"Total Memory: {_kib(counters.total)}",
    ]

    if counters.total is not None and counters.free is not None:
        lines.append(f"Memory Usage: {usage_percent(counters.total, counters.free):.2f}%")
    else:
        lines.append("Memory Usage: unavailable")

    if counters.cpu_time is not None:
        lines.append(f"Execution Time: {counters.cpu_time * 1000:.3f} ms")
    else:
        lines.append("Execution Time: unavailable")

    if counters.thread_count is not None:
        lines.append(f"Live Thread Count: {counters.thread_count}")
    else:
        lines.append("Live Thread Count: unavailable")

    return "\n".join(lines)


def get_runtime_metrics() -> str:
    """One metric per line, in fixed order."""
    return format_metrics(collect_counters())
