"""
Clock Protocol

Polling loops never call time.sleep() or time.monotonic() directly: they go
through a Clock so the 2 s / 60 s payment polling window can be replayed instantly
in tests.
"""

from __future__ import annotations

import threading
import time
from typing import Protocol


class Clock(Protocol):
    """Injectable time source for scheduled work."""

    def monotonic(self) -> float:
        """Seconds on a monotonic scale."""
        ...  # pragma: no cover

    def wait(self, event: threading.Event, timeout: float) -> bool:
        """Block up to ``timeout`` seconds; True if ``event`` got set."""
        ...  # pragma: no cover


class SystemClock:
    """Production clock: real monotonic time, real waiting."""

    def monotonic(self) -> float:
        return time.monotonic()

    def wait(self, event: threading.Event, timeout: float) -> bool:
        return event.wait(timeout)


class ManualClock:
    """
    Test clock; time advances only when someone waits.

    Every ``wait`` jumps the clock forward by the full timeout unless the
    event is already set, so a 60 second polling window runs in microseconds
    and the tick/deadline order is fully deterministic.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._lock = threading.Lock()

    def monotonic(self) -> float:
        with self._lock:
            return self._now

    def advance(self, seconds: float) -> None:
        with self._lock:
            self._now += seconds

    def wait(self, event: threading.Event, timeout: float) -> bool:
        if event.is_set():
            return True
        self.advance(max(0.0, timeout))
        return event.is_set()


_default_clock: Clock = SystemClock()


def get_default_clock() -> Clock:
    return _default_clock


def set_default_clock(clock: Clock) -> None:
    global _default_clock
    _default_clock = clock
