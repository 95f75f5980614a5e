"""
Polling Schedule

A repeating tick and a one-shot deadline owned by one background thread and
stopped by one ``cancel()`` call. Both activities are selected in the same
control loop, so a tick and the deadline can never run at the same time.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from shared.infrastructure.clock import Clock, get_default_clock

logger = logging.getLogger(__name__)


class PollingSchedule:
    """
    Ticker plus deadline under a single cancellation flag

    - ``on_tick`` runs every ``interval`` seconds
    - ``on_deadline`` runs once, ``ceiling`` seconds after ``start()``
    - when a tick and the deadline fall on the same instant the tick runs
      first; the deadline only fires if that tick did not cancel the schedule
    - after ``cancel()`` returns, neither callback runs again
    """

    def __init__(
        self,
        *,
        interval: float,
        ceiling: float,
        on_tick: Callable[[], None],
        on_deadline: Callable[[], None],
        clock: Optional[Clock] = None,
        name: str = "polling-schedule",
        join_timeout: Optional[float] = 30.0,
    ):
        if interval <= 0:
            raise ValueError("Polling interval must be positive")
        if ceiling <= 0:
            raise ValueError("Polling ceiling must be positive")
        self._interval = interval
        self._ceiling = ceiling
        self._on_tick = on_tick
        self._on_deadline = on_deadline
        self._clock = clock or get_default_clock()
        self._name = name
        self._join_timeout = join_timeout
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._ticks = 0

    @property
    def ticks(self) -> int:
        """Number of ticks executed so far"""
        return self._ticks

    @property
    def active(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop.is_set()

    @property
    def cancelled(self) -> bool:
        return self._stop.is_set()

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError(f"{self._name} already started")
        if self._stop.is_set():
            raise RuntimeError(f"{self._name} was cancelled before start")
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()

    def cancel(self) -> None:
        """
        Stop both the ticker and the deadline

        Blocks until the loop thread exits, unless called from a callback
        running on that thread.
        """
        self._stop.set()
        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return
        if thread.is_alive():
            thread.join(self._join_timeout)
            if thread.is_alive():
                logger.warning(f"{self._name} did not stop within {self._join_timeout}s")

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the loop thread to exit; True once it has"""
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def _run(self) -> None:
        clock = self._clock
        started = clock.monotonic()
        deadline = started + self._ceiling
        tick_no = 1

        while True:
            next_tick = started + tick_no * self._interval
            wake_at = min(next_tick, deadline)
            if clock.wait(self._stop, max(0.0, wake_at - clock.monotonic())):
                return

            now = clock.monotonic()
            if next_tick <= now and next_tick <= deadline:
                self._ticks += 1
                try:
                    self._on_tick()
                except Exception:
                    logger.exception(f"{self._name}: tick {self._ticks} raised")
                if self._stop.is_set():
                    return
                # skip ticks missed while a slow tick was running
                tick_no += 1
                while started + tick_no * self._interval < clock.monotonic():
                    tick_no += 1

            if clock.monotonic() >= deadline:
                if not self._stop.is_set():
                    self._on_deadline()
                return
