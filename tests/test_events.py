from __future__ import annotations

from lectern.core.events import EventQueue


def test_events_posted_during_dispatch_run_afterwards() -> None:
    order = []
    queue = None

    def dispatch(event):
        order.append(f"start:{event}")
        if event == "first":
            queue.post("second")
        order.append(f"end:{event}")

    queue = EventQueue(dispatch)
    queue.post("first")
    assert order == ["start:first", "end:first", "start:second", "end:second"]
    assert len(queue) == 0


def test_on_drained_runs_after_each_batch() -> None:
    drained = []
    queue = EventQueue(lambda _event: None, on_drained=lambda: drained.append(True))
    queue.post("a")
    queue.post("b")
    assert drained == [True, True]


def test_failing_handler_does_not_block_queue() -> None:
    seen = []

    def dispatch(event):
        if event == "bad":
            raise RuntimeError("boom")
        seen.append(event)

    queue = EventQueue(dispatch)
    queue.post("bad")
    queue.post("good")
    assert seen == ["good"]


def test_failing_drain_listener_is_contained() -> None:
    seen = []

    def on_drained():
        raise RuntimeError("listener broke")

    queue = EventQueue(seen.append, on_drained=on_drained)
    queue.post("a")
    queue.post("b")
    assert seen == ["a", "b"]
