"""Tests for the periodic timer and time labels."""

import threading
import pytest
from trackplayer.concurrency.timer import PeriodicTimer
from trackplayer.utils.timefmt import format_time, position_labels


def test_timer_ticks_until_cancelled():
    ticks = []
    reached = threading.Event()

    def on_tick():
        ticks.append(1)
        if len(ticks) >= 3:
            reached.set()

    timer = PeriodicTimer(0.01, on_tick)
    timer.start()
    assert reached.wait(timeout=2.0)

    timer.cancel()
    timer.join(timeout=1.0)
    count = len(ticks)
    timer.cancel()  # idempotent

    assert not timer.is_running
    assert len(ticks) == count


def test_timer_survives_callback_errors():
    calls = []
    reached = threading.Event()

    def on_tick():
        calls.append(1)
        if len(calls) >= 2:
            reached.set()
        raise RuntimeError("boom")

    timer = PeriodicTimer(0.01, on_tick)
    timer.start()

    assert reached.wait(timeout=2.0)
    timer.cancel()
    timer.join(timeout=1.0)


def test_cancel_from_callback():
    calls = []

    timer = None

    def on_tick():
        calls.append(1)
        timer.cancel()

    timer = PeriodicTimer(0.01, on_tick)
    timer.start()
    timer.join(timeout=2.0)

    assert calls == [1]


def test_invalid_interval():
    with pytest.raises(ValueError):
        PeriodicTimer(0, lambda: None)


@pytest.mark.parametrize(
    "seconds,expected",
    [(0, "0:00"), (7, "0:07"), (59, "0:59"), (60, "1:00"), (125, "2:05"), (3600, "60:00"), (-3, "0:00")],
)
def test_format_time(seconds, expected):
    assert format_time(seconds) == expected


def test_position_labels():
    assert position_labels(7_400_000, 120_000_000) == ("0:07", "-1:53")
    assert position_labels(0, 0) == ("0:00", "-0:00")
