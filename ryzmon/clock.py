"""Timer primitives the scheduler runs on.

``TimerHost`` is the shape of Textual's ``set_timer``/``set_interval``, so a
running ``App`` can drive the scheduler directly.  ``SchedClock`` provides
the same calls for headless use on top of ``sched``.
"""

from __future__ import annotations

import sched
import time
from typing import Callable, Protocol


class TimerHandle(Protocol):
    def stop(self) -> None: ...


class TimerHost(Protocol):
    def set_timer(self, delay: float, callback: Callable[[], object]) -> TimerHandle: ...

    def set_interval(
        self, interval: float, callback: Callable[[], object],
    ) -> TimerHandle: ...


class _SchedTimer:
    def __init__(
        self,
        clock: SchedClock,
        delay: float,
        callback: Callable[[], object],
        repeat: bool,
    ) -> None:
        self._clock = clock
        self._delay = delay
        self._callback = callback
        self._repeat = repeat
        self._event: sched.Event | None = None
        self.stopped = False
        self._arm()

    def _arm(self) -> None:
        self._event = self._clock._sched.enter(self._delay, 0, self._fire)

    def _fire(self) -> None:
        self._event = None
        if self.stopped or self._clock.closed:
            return
        if self._repeat:
            self._arm()
        else:
            self.stopped = True
        self._callback()

    def stop(self) -> None:
        self.stopped = True
        if self._event is not None:
            try:
                self._clock._sched.cancel(self._event)
            except ValueError:
                pass  # already popped by the scheduler
            self._event = None


class SchedClock:
    """Single-threaded timer host; ``run()`` blocks the calling thread."""

    def __init__(
        self,
        timefunc: Callable[[], float] = time.monotonic,
        delayfunc: Callable[[float], object] = time.sleep,
    ) -> None:
        self._sched = sched.scheduler(timefunc, delayfunc)
        self.closed = False

    def set_timer(self, delay: float, callback: Callable[[], object]) -> _SchedTimer:
        return _SchedTimer(self, delay, callback, repeat=False)

    def set_interval(
        self, interval: float, callback: Callable[[], object],
    ) -> _SchedTimer:
        return _SchedTimer(self, interval, callback, repeat=True)

    def run(self) -> None:
        """Process timers until ``close()`` is called or none remain."""
        while not self.closed and not self._sched.empty():
            self._sched.run(blocking=True)

    def close(self) -> None:
        self.closed = True
        for event in list(self._sched.queue):
            try:
                self._sched.cancel(event)
            except ValueError:
                pass
