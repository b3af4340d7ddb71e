from __future__ import annotations

import os

import numpy as np
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "minimal")

QtWidgets = pytest.importorskip("qtpy.QtWidgets")

from lectern.core.playback import SpeechRequest  # noqa: E402
from lectern.speech import engine as engine_mod  # noqa: E402
from lectern.speech.engine import (  # noqa: E402
    ThreadedSpeechEngine,
    _SpeakTask,
    _SpeakToken,
)


class _OutcomeRecorder:
    def __init__(self) -> None:
        self.outcomes: list[str] = []
        self.outcome_ready = self

    def emit(self, utterance_id: int, outcome: str) -> None:
        self.outcomes.append(outcome)


class _FakeThreadPool:
    def __init__(self) -> None:
        self.tasks = []

    def start(self, task) -> None:
        self.tasks.append(task)


@pytest.fixture
def audio(monkeypatch):
    calls = {"played": [], "stopped": 0, "waited": 0}

    def _synthesize(text, settings):
        return np.zeros(8, dtype=np.int16), 24000

    def _play(samples, sample_rate, *, blocking=False):
        calls["played"].append(sample_rate)
        return True

    def _stop():
        calls["stopped"] += 1

    def _wait():
        calls["waited"] += 1

    monkeypatch.setattr(engine_mod, "synthesize_tts", _synthesize)
    monkeypatch.setattr(engine_mod, "play_audio_buffer", _play)
    monkeypatch.setattr(engine_mod, "stop_audio_playback", _stop)
    monkeypatch.setattr(engine_mod, "wait_audio_playback", _wait)
    return calls


def _run(text: str = "Hello there.", token=None, rate: float = 1.0):
    recorder = _OutcomeRecorder()
    task = _SpeakTask(
        recorder,
        SpeechRequest(text=text, locale="en-US", rate=rate),
        1,
        token or _SpeakToken(),
        "gtts",
    )
    task.run()
    return recorder.outcomes


def test_finished_utterance_reports_done(audio) -> None:
    assert _run(rate=0.5) == ["done"]
    assert audio["played"] == [12000]
    assert audio["waited"] == 1


def test_missing_audio_reports_error(audio, monkeypatch) -> None:
    monkeypatch.setattr(engine_mod, "synthesize_tts", lambda text, settings: None)
    assert _run() == ["error"]
    assert audio["played"] == []


def test_unplayable_audio_reports_error(audio, monkeypatch) -> None:
    monkeypatch.setattr(
        engine_mod, "play_audio_buffer", lambda samples, rate, *, blocking=False: False
    )
    assert _run() == ["error"]


def test_cancelled_token_reports_stopped(audio) -> None:
    token = _SpeakToken()
    token.cancel()
    assert _run(token=token) == ["stopped"]
    assert audio["played"] == []


def test_cancel_during_playback_skips_remaining_chunks(audio, monkeypatch) -> None:
    token = _SpeakToken()
    monkeypatch.setattr(engine_mod, "wait_audio_playback", token.cancel)
    text = " ".join(f"Sentence number {i} is here." for i in range(60))

    assert _run(text=text, token=token) == ["stopped"]
    assert len(audio["played"]) == 1


def test_stop_cancels_active_token(audio) -> None:
    engine = ThreadedSpeechEngine()
    engine._thread_pool = _FakeThreadPool()
    engine.speak(SpeechRequest(text="Hello."), 1, lambda _id, _outcome: None)
    token = engine._thread_pool.tasks[-1].token

    engine.stop()
    assert token.cancelled
    assert audio["stopped"] >= 1


def test_outcome_is_delivered_once(audio) -> None:
    engine = ThreadedSpeechEngine()
    engine._thread_pool = _FakeThreadPool()
    seen = []
    engine.speak(SpeechRequest(text="Hello."), 7, lambda *args: seen.append(args))

    engine.outcome_ready.emit(7, "done")
    engine.outcome_ready.emit(7, "done")
    assert seen == [(7, "done")]
