from __future__ import annotations

from typing import List

from lectern.core.drawer import DrawerState, DrawerStateMachine
from lectern.core.extraction import ExtractionRequest, ExtractionSessionController
from lectern.core.playback import SpeechPlaybackController


def _machine(scheduler, engine, injected: List[ExtractionRequest]):
    extraction = ExtractionSessionController(scheduler, injected.append)
    playback = SpeechPlaybackController(engine)
    return DrawerStateMachine(extraction, playback), extraction, playback


def test_extraction_request_opens_mini(scheduler, engine) -> None:
    injected: List[ExtractionRequest] = []
    drawer, extraction, _ = _machine(scheduler, engine, injected)
    assert drawer.state is DrawerState.CLOSED

    assert drawer.request_extraction("https://example.com") is DrawerState.MINI
    assert len(injected) == 1
    assert extraction.is_busy


def test_extraction_request_keeps_full(scheduler, engine) -> None:
    injected: List[ExtractionRequest] = []
    drawer, _, _ = _machine(scheduler, engine, injected)
    drawer.request_extraction("https://example.com")
    drawer.toggle()
    assert drawer.request_extraction("https://example.com") is DrawerState.FULL
    assert len(injected) == 2


def test_toggle_switches_mini_and_full(scheduler, engine) -> None:
    drawer, _, _ = _machine(scheduler, engine, [])
    assert drawer.toggle() is DrawerState.CLOSED
    drawer.request_extraction("https://example.com")
    assert drawer.toggle() is DrawerState.FULL
    assert drawer.toggle() is DrawerState.MINI


def test_close_stops_playback(scheduler, engine) -> None:
    drawer, _, playback = _machine(scheduler, engine, [])
    drawer.request_extraction("https://example.com")
    playback.speak("Read me.")

    assert drawer.close() is DrawerState.CLOSED
    assert not playback.is_speaking
    assert engine.stop_calls >= 1
    assert not drawer.is_open


def test_result_arriving_while_closed_is_kept(scheduler, engine) -> None:
    drawer, extraction, _ = _machine(scheduler, engine, [])
    drawer.request_extraction("https://example.com")
    drawer.close()

    scheduler.advance(5.0)
    assert drawer.state is DrawerState.CLOSED
    assert extraction.last_result is not None
