from __future__ import annotations

import heapq
import itertools
from typing import Callable, List, Protocol, Tuple


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """One-shot timer source used by the controllers.

    Callbacks fire on the thread that owns the session; the GUI uses a
    ``QTimer`` based implementation, tests drive :class:`ManualScheduler`.
    """

    def now(self) -> float: ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class _ManualTimer:
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic scheduler whose clock only moves when told to."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)
        self._counter = itertools.count()
        self._queue: List[Tuple[float, int, _ManualTimer]] = []

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualTimer:
        timer = _ManualTimer(self._now + max(0.0, float(delay)), callback)
        heapq.heappush(self._queue, (timer.due, next(self._counter), timer))
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing due timers in order. Returns fired count."""
        target = self._now + max(0.0, float(seconds))
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            self._now = due
            if timer.cancelled:
                continue
            timer.cancelled = True
            timer.callback()
            fired += 1
        self._now = target
        return fired
