"""
Periodic timers.

The run lifecycle only needs two things from a timer: that it calls back on a
fixed interval, and that it can be cancelled. ``TimerScheduler`` provides
timers driven by elapsed frame time; the pygame adapter provides an
equivalent scheduler backed by ``pygame.time.set_timer``.
"""

from __future__ import annotations

from typing import Callable

from block_dodger.utils import logger

TimerCallback = Callable[[], None]


class TickTimer:
    """
    Repeating timer advanced by elapsed milliseconds.
    """

    def __init__(self, name: str, interval_ms: float, callback: TimerCallback):
        """
        :param name: Name used in log messages
        :type name: str

        :param interval_ms: Interval between callbacks, in milliseconds
        :type interval_ms: float

        :param callback: Called once per elapsed interval
        :type callback: Callable[[], None]

        :raises ValueError: If the interval is not positive.
        """
        if interval_ms <= 0:
            raise ValueError(f"Timer {name!r} needs a positive interval")

        self.name = name
        self.interval_ms = float(interval_ms)
        self._callback = callback
        self._elapsed = 0.0
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def advance(self, elapsed_ms: float) -> int:
        """
        Advance the timer and fire the callback once per whole interval.

        :return: Number of times the callback fired.
        :rtype: int
        """
        if not self._active:
            return 0

        self._elapsed += elapsed_ms
        fired = 0
        while self._active and self._elapsed >= self.interval_ms:
            self._elapsed -= self.interval_ms
            fired += 1
            self._callback()
        return fired

    def cancel(self):
        """Stop the timer. Cancelling twice is a no-op."""
        if not self._active:
            return
        self._active = False
        logger.debug(f"Timer {self.name} cancelled")


class TimerScheduler:
    """
    Owns tick timers and pumps them with the frame's elapsed time.
    """

    def __init__(self):
        self._timers: list[TickTimer] = []

    @property
    def timers(self) -> list[TickTimer]:
        return [t for t in self._timers if t.active]

    def every(
        self, name: str, interval_ms: float, callback: TimerCallback
    ) -> TickTimer:
        timer = TickTimer(name, interval_ms, callback)
        self._timers.append(timer)
        logger.debug(f"Timer {name} scheduled every {interval_ms}ms")
        return timer

    def advance(self, elapsed_ms: float):
        # callbacks may cancel timers (game over), so iterate over a copy
        for timer in list(self._timers):
            timer.advance(elapsed_ms)
        self._timers = [t for t in self._timers if t.active]

    def cancel_all(self):
        for timer in self._timers:
            timer.cancel()
        self._timers = []
