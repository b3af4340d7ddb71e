from __future__ import annotations

from lectern.core.scheduling import ManualScheduler


def test_manual_scheduler_fires_in_order() -> None:
    scheduler = ManualScheduler()
    fired = []
    scheduler.call_later(2.0, lambda: fired.append("late"))
    scheduler.call_later(1.0, lambda: fired.append("early"))

    assert scheduler.advance(1.5) == 1
    assert fired == ["early"]
    assert scheduler.now() == 1.5
    assert scheduler.advance(1.0) == 1
    assert fired == ["early", "late"]
    assert scheduler.pending == 0


def test_cancelled_timer_never_fires() -> None:
    scheduler = ManualScheduler()
    fired = []
    handle = scheduler.call_later(1.0, lambda: fired.append(True))
    handle.cancel()
    assert scheduler.pending == 0
    assert scheduler.advance(5.0) == 0
    assert fired == []
