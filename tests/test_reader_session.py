from __future__ import annotations

import json

from lectern.core.config import ReaderConfig
from lectern.core.drawer import DrawerState
from lectern.core.extraction import PLACEHOLDER_TEXT
from lectern.core.session import ReaderSession

PAGE = "https://www.example.com/story"


def _session(renderer, engine, scheduler, **config):
    return ReaderSession(renderer, engine, scheduler, ReaderConfig(**config))


def _page_loaded(session, address=PAGE, title="Example story") -> None:
    session.on_load_started(address)
    session.on_load_progress(0.5)
    session.on_navigation_state(address, title, True, False)
    session.on_load_finished(address, True)


def _reply(session, seq: int, text: str, title: str = "Story") -> None:
    session.on_channel_message(
        json.dumps({"type": "pageText", "seq": seq, "title": title, "text": text})
    )


def test_navigate_normalizes_and_loads(renderer, engine, scheduler) -> None:
    session = _session(renderer, engine, scheduler)
    session.navigate("example.com")
    session.navigate("two words")

    assert renderer.loaded == [
        "https://example.com",
        "https://duckduckgo.com/?q=two%20words",
    ]


def test_history_follows_renderer_state(renderer, engine, scheduler) -> None:
    session = _session(renderer, engine, scheduler)
    session.go_back()
    session.go_forward()
    assert renderer.calls == []

    session.on_navigation_state(PAGE, "Title", True, True)
    session.go_back()
    session.go_forward()
    assert renderer.calls == ["back", "forward"]


def test_reload_or_stop_depends_on_loading(renderer, engine, scheduler) -> None:
    session = _session(renderer, engine, scheduler)
    session.reload_or_stop()
    session.on_load_started(PAGE)
    session.reload_or_stop()
    assert renderer.calls == ["reload", "stop"]


def test_read_extracts_and_reports(renderer, engine, scheduler) -> None:
    session = _session(renderer, engine, scheduler)
    views = []
    session.add_listener(views.append)
    _page_loaded(session)

    session.request_extraction()
    view = session.snapshot()
    assert view.drawer is DrawerState.MINI
    assert view.extracting
    assert not view.can_play
    assert "const seq = 1;" in renderer.scripts[-1]

    _reply(session, 1, "a b c")
    view = views[-1]
    assert not view.extracting
    assert view.title == "Story"
    assert view.host == "example.com"
    assert view.word_count == 3
    assert view.reading_minutes == 1
    assert view.can_play


def test_extraction_while_loading_runs_after_load(renderer, engine, scheduler) -> None:
    session = _session(renderer, engine, scheduler)
    session.on_load_started(PAGE)
    session.request_extraction()
    assert renderer.scripts == []
    assert session.snapshot().extracting

    session.on_load_finished(PAGE, True)
    assert len(renderer.scripts) == 1


def test_timeout_shows_placeholder(renderer, engine, scheduler) -> None:
    session = _session(renderer, engine, scheduler, extraction_timeout=1.0)
    _page_loaded(session)
    session.request_extraction()
    scheduler.advance(1.0)

    view = session.snapshot()
    assert view.text == PLACEHOLDER_TEXT
    assert view.result_kind == "timeout"
    assert view.word_count == 0
    assert not view.can_play


def test_play_speaks_extracted_text(renderer, engine, scheduler) -> None:
    session = _session(renderer, engine, scheduler, locale="en-GB", rate=1.1)
    _page_loaded(session)
    session.request_extraction()
    _reply(session, 1, "Read this aloud.")

    session.toggle_playback()
    assert session.snapshot().speaking
    request, utterance_id = engine.spoken[-1]
    assert request.text == "Read this aloud."
    assert request.locale == "en-GB"

    engine.finish(utterance_id, "done")
    assert not session.snapshot().speaking


def test_play_without_text_does_nothing(renderer, engine, scheduler) -> None:
    session = _session(renderer, engine, scheduler)
    session.toggle_playback()
    assert engine.spoken == []


def test_close_drawer_stops_speech(renderer, engine, scheduler) -> None:
    session = _session(renderer, engine, scheduler)
    _page_loaded(session)
    session.request_extraction()
    _reply(session, 1, "Words to read.")
    session.toggle_drawer()
    assert session.snapshot().drawer is DrawerState.FULL
    session.toggle_playback()

    session.close_drawer()
    view = session.snapshot()
    assert view.drawer is DrawerState.CLOSED
    assert not view.speaking


def test_navigating_away_discards_result(renderer, engine, scheduler) -> None:
    session = _session(renderer, engine, scheduler)
    _page_loaded(session)
    session.request_extraction()
    _reply(session, 1, "Old page text.")

    session.navigate("https://other.example")
    view = session.snapshot()
    assert view.text == ""
    assert view.result_kind is None


def test_late_reply_after_renavigation_is_dropped(renderer, engine, scheduler) -> None:
    session = _session(renderer, engine, scheduler)
    _page_loaded(session)
    session.request_extraction()
    session.navigate("https://other.example")
    _reply(session, 1, "Stale text.")

    assert session.snapshot().result_kind is None


def test_injection_failure_is_contained(renderer, engine, scheduler) -> None:
    renderer.fail_injection = True
    session = _session(renderer, engine, scheduler)
    _page_loaded(session)
    session.request_extraction()
    scheduler.advance(3.0)

    assert session.snapshot().result_kind == "timeout"


def test_shutdown_cancels_work(renderer, engine, scheduler) -> None:
    session = _session(renderer, engine, scheduler)
    _page_loaded(session)
    session.request_extraction()
    session.shutdown()

    assert scheduler.pending == 0
    assert not session.snapshot().extracting


def test_navigation_title_used_before_extraction(renderer, engine, scheduler) -> None:
    session = _session(renderer, engine, scheduler)
    assert session.snapshot().title == "Reader"
    _page_loaded(session, title="")
    assert session.snapshot().title == "Untitled"
