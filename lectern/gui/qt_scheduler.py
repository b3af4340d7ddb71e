from __future__ import annotations

import time
from typing import Callable, Optional, Set

from qtpy import QtCore


class _QtTimer:
    def __init__(self, owner: "QtTimerScheduler", timer: QtCore.QTimer) -> None:
        self._owner = owner
        self._timer = timer

    def cancel(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._owner._release(self._timer)
        self._timer = None


class QtTimerScheduler:
    """Scheduler backed by single-shot ``QTimer`` objects on the GUI thread."""

    def __init__(self, parent: Optional[QtCore.QObject] = None) -> None:
        self._parent = parent
        self._timers: Set[QtCore.QTimer] = set()

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, callback: Callable[[], None]) -> _QtTimer:
        timer = QtCore.QTimer(self._parent)
        timer.setSingleShot(True)
        self._timers.add(timer)

        def _fire() -> None:
            self._release(timer)
            callback()

        timer.timeout.connect(_fire)
        timer.start(max(0, int(round(float(delay) * 1000))))
        return _QtTimer(self, timer)

    def _release(self, timer: QtCore.QTimer) -> None:
        if timer in self._timers:
            self._timers.discard(timer)
            timer.deleteLater()

    def cancel_all(self) -> None:
        for timer in list(self._timers):
            timer.stop()
            self._release(timer)
