"""
Clocks and cancellable tasks
============================

The replay ticks on a fixed cadence. Timing goes through a `Clock` so the
same player code runs against real time (CLI) or a `LogicalClock` (tests),
where `advance()` moves virtual time forward and fires due tasks
immediately.

Both clocks are single-threaded: they are thin wrappers around the
standard library's `sched.scheduler`.
"""

from __future__ import annotations
from typing import Callable, Optional
import logging
import sched
import time

logger = logging.getLogger(__name__)

class Clock:
    """Real-time clock: `run()` blocks, sleeping until each task is due."""

    def __init__(self, timefunc: Callable[[], float] = time.monotonic,
                 delayfunc: Callable[[float], object] = time.sleep) -> None:
        self._sched = sched.scheduler(timefunc, delayfunc)

    def now(self) -> float:
        return self._sched.timefunc()

    def call_later(self, delay: float, fn: Callable[[], None]) -> "TaskHandle":
        event = self._sched.enter(delay, 0, fn)
        return TaskHandle(self, event)

    def every(self, period: float, fn: Callable[[], None]) -> "Interval":
        """Call `fn` every `period` seconds (first call after one period)."""
        return Interval(self, period, fn)

    def pending(self) -> int:
        """Number of scheduled, not yet fired tasks."""
        return len(self._sched.queue)

    def run(self) -> None:
        self._sched.run(blocking=True)

    def _cancel(self, event: sched.Event) -> bool:
        if event in self._sched.queue:
            self._sched.cancel(event)
            return True
        return False

class LogicalClock(Clock):
    """Virtual-time clock for tests: nothing fires until `advance()` is called."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        super().__init__(timefunc=lambda: self._now, delayfunc=self._sleep)

    def _sleep(self, seconds: float) -> None:
        self._now += max(0.0, seconds)

    def advance(self, seconds: float) -> None:
        """Move time forward by `seconds`, firing every task that becomes due."""
        target = self._now + seconds
        while True:
            queue = self._sched.queue
            if not queue or queue[0].time > target:
                break
            self._now = queue[0].time
            self._sched.run(blocking=False)
        self._now = target

    def run(self) -> None:
        """Jump straight through every pending task (no real sleeping)."""
        while self._sched.queue:
            self.advance(self._sched.queue[0].time - self._now)

class TaskHandle:
    """Handle to one scheduled call."""

    def __init__(self, clock: Clock, event: sched.Event) -> None:
        self._clock = clock
        self._event = event
        self.cancelled = False

    @property
    def active(self) -> bool:
        return not self.cancelled and self._event in self._clock._sched.queue

    def cancel(self) -> None:
        self.cancelled = True
        self._clock._cancel(self._event)

class Interval:
    """Repeating task (like JavaScript's setInterval) with explicit cancel.

    Only one underlying event is queued at a time: the next tick is armed
    after the current one has run.
    """

    def __init__(self, clock: Clock, period: float, fn: Callable[[], None]) -> None:
        if period <= 0:
            raise ValueError("period must be > 0")
        self._clock = clock
        self.period = period
        self._fn = fn
        self.ticks = 0
        self.cancelled = False
        self._handle: Optional[TaskHandle] = None
        self._arm()

    def _arm(self) -> None:
        self._handle = self._clock.call_later(self.period, self._fire)

    def _fire(self) -> None:
        if self.cancelled:
            return
        self.ticks += 1
        try:
            self._fn()
        except Exception:
            # a failed tick ends the interval; nothing is left armed
            self.cancel()
            raise
        if not self.cancelled:
            self._arm()

    @property
    def active(self) -> bool:
        return not self.cancelled

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        if self._handle is not None:
            self._handle.cancel()
        logger.debug("interval cancelled after %d ticks", self.ticks)
