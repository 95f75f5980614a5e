import threading
import time

import pytest

from shared.infrastructure.clock import ManualClock, SystemClock
from shared.infrastructure.scheduling import PollingSchedule


def make_schedule(clock, on_tick, on_deadline, interval=2, ceiling=60):
    return PollingSchedule(
        interval=interval,
        ceiling=ceiling,
        on_tick=on_tick,
        on_deadline=on_deadline,
        clock=clock,
    )


def test_ticks_every_interval_until_deadline():
    clock = ManualClock()
    tick_times = []
    deadline_fired = threading.Event()

    schedule = make_schedule(clock, lambda: tick_times.append(clock.monotonic()), deadline_fired.set)
    schedule.start()

    assert deadline_fired.wait(5)
    assert schedule.join(5)
    assert schedule.ticks == 30
    assert tick_times[0] == 2
    assert tick_times[-1] == 60


def test_cancel_from_tick_stops_deadline():
    clock = ManualClock()
    deadline_fired = []
    schedule = None

    def on_tick():
        if schedule.ticks == 3:
            schedule.cancel()

    schedule = make_schedule(clock, on_tick, lambda: deadline_fired.append(True))
    schedule.start()

    assert schedule.join(5)
    assert schedule.ticks == 3
    assert schedule.cancelled
    assert deadline_fired == []


def test_tick_errors_do_not_stop_the_loop():
    clock = ManualClock()
    deadline_fired = threading.Event()

    def on_tick():
        raise RuntimeError("flaky")

    schedule = make_schedule(clock, on_tick, deadline_fired.set, interval=10, ceiling=30)
    schedule.start()

    assert deadline_fired.wait(5)
    assert schedule.ticks == 3


def test_cancel_from_other_thread_is_synchronous():
    ticks = []
    schedule = make_schedule(SystemClock(), lambda: ticks.append(1), lambda: None, interval=0.01, ceiling=30)
    schedule.start()
    time.sleep(0.05)

    schedule.cancel()
    seen = len(ticks)
    time.sleep(0.05)

    assert not schedule.active
    assert len(ticks) == seen


def test_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        make_schedule(ManualClock(), lambda: None, lambda: None, interval=0)
