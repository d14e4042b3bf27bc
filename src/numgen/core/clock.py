from __future__ import annotations

import time
from typing import Callable, TypeAlias

# Zero-argument callable returning a timestamp in whole milliseconds.
# Steps falling within the same millisecond see an elapsed time of 0.
Clock: TypeAlias = Callable[[], int]


def monotonic_ms() -> int:
    """Monotonic clock in milliseconds. Immune to wall-clock adjustments."""
    return time.monotonic_ns() // 1_000_000


def wall_clock_ms() -> int:
    """Wall-clock time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000
