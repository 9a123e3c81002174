"""Tests for the response timer."""

import time

from mathquiz.timer import Timer


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_stop_returns_whole_seconds():
    clock = FakeClock()
    timer = Timer(clock=clock, interval=None)

    timer.start()
    clock.now += 7.9

    assert timer.stop() == 7
    assert not timer.running


def test_stop_without_start_returns_zero():
    timer = Timer(clock=FakeClock(), interval=None)

    assert timer.stop() == 0


def test_tick_updates_only_while_running():
    clock = FakeClock()
    timer = Timer(clock=clock, interval=None)
    timer.start()
    clock.now += 3.5

    assert timer.tick() == 3

    timer.stop()
    clock.now += 10

    assert timer.tick() == 3


def test_start_resets_elapsed():
    clock = FakeClock()
    timer = Timer(clock=clock, interval=None)
    timer.start()
    clock.now += 12
    timer.stop()

    timer.start()

    assert timer.elapsed == 0
    assert timer.read() == 0


def test_restart_cancels_previous_ticker():
    timer = Timer(interval=0.01)
    timer.start()
    first = timer._ticker

    timer.start()

    assert not first.active
    assert timer.ticking

    timer.stop()

    assert not timer.ticking


def test_background_tick_updates_elapsed():
    clock = FakeClock()
    timer = Timer(clock=clock, interval=0.01)
    timer.start()
    clock.now += 4.2

    deadline = time.monotonic() + 2
    while timer.elapsed != 4 and time.monotonic() < deadline:
        time.sleep(0.01)

    assert timer.elapsed == 4
    timer.stop()
