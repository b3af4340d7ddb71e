from __future__ import annotations

from lectern.speech import tts_router
from lectern.speech.tts_router import chunk_text, gtts_voice_for_locale, synthesize_tts


def test_gtts_voice_for_locale() -> None:
    assert gtts_voice_for_locale("en-US") == ("en", "us")
    assert gtts_voice_for_locale("en_GB") == ("en", "co.uk")
    assert gtts_voice_for_locale("fr-FR") == ("fr", "com")
    assert gtts_voice_for_locale("zh-cn") == ("zh-CN", "com")
    assert gtts_voice_for_locale("") == ("en", "com")


def test_chunk_text_keeps_sentences_together() -> None:
    text = "First sentence. Second sentence! Third one?"
    assert chunk_text(text, max_chars=100) == [text]
    assert chunk_text(text, max_chars=20) == [
        "First sentence.",
        "Second sentence!",
        "Third one?",
    ]


def test_chunk_text_splits_long_sentences_on_words() -> None:
    chunks = chunk_text("word " * 50, max_chars=30)
    assert all(len(chunk) <= 30 for chunk in chunks)
    assert " ".join(chunks).split() == ["word"] * 50


def test_chunk_text_blank() -> None:
    assert chunk_text("   ") == []


def test_synthesize_unknown_engine_returns_none() -> None:
    assert synthesize_tts("hello", {"engine": "nope"}) is None
    assert synthesize_tts("   ", {"engine": "gtts"}) is None


def test_synthesize_failure_returns_none(monkeypatch) -> None:
    def _fail(_text, _settings):
        raise RuntimeError("offline")

    monkeypatch.setitem(tts_router._ENGINES, "gtts", _fail)
    assert synthesize_tts("hello", {"engine": "gtts"}) is None
