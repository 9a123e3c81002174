"""Per-question response timer."""

from __future__ import annotations

import math
import threading
import time
from typing import Callable, Optional

from mathquiz.config import settings


class _Ticker:
    """Recurring background task; `cancel()` is its handle."""

    def __init__(self, interval: float, callback: Callable[[], None]) -> None:
        self._interval = interval
        self._callback = callback
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)

    def start(self) -> None:
        self._thread.start()

    def _run(self) -> None:
        while not self._stopped.wait(self._interval):
            self._callback()

    def cancel(self) -> None:
        self._stopped.set()
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=self._interval * 2)

    @property
    def active(self) -> bool:
        return self._thread.is_alive() and not self._stopped.is_set()


class Timer:
    """Whole seconds elapsed since a question was shown.

    `clock` returns seconds as a float (monotonic by default). Pass
    `interval=None` to skip the background tick and read the clock on demand.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        interval: Optional[float] = settings.TIMER_INTERVAL_SECONDS,
    ) -> None:
        self._clock = clock
        self._interval = interval
        self._started_at: Optional[float] = None
        self._ticker: Optional[_Ticker] = None
        self.elapsed = 0
        self.running = False

    def _seconds_since_start(self) -> int:
        if self._started_at is None:
            return 0
        return math.floor(self._clock() - self._started_at)

    def tick(self) -> int:
        if self.running:
            self.elapsed = self._seconds_since_start()
        return self.elapsed

    def start(self) -> None:
        self.cancel()
        self.elapsed = 0
        self.running = True
        self._started_at = self._clock()
        if self._interval:
            self._ticker = _Ticker(self._interval, self.tick)
            self._ticker.start()

    def stop(self) -> int:
        """Stop and return the final elapsed seconds (0 if never started)."""
        self.cancel()
        if not self.running:
            return self.elapsed if self._started_at is not None else 0
        self.running = False
        self.elapsed = self._seconds_since_start()
        return self.elapsed

    def cancel(self) -> None:
        """Drop the ticking task without touching the reading."""
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None

    def read(self) -> int:
        """Current reading, refreshed from the clock while running."""
        return self.tick()

    @property
    def ticking(self) -> bool:
        return self._ticker is not None and self._ticker.active
