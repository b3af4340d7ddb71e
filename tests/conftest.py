from __future__ import annotations

from typing import List, Tuple

import pytest

from lectern.core.playback import OutcomeCallback, SpeechRequest
from lectern.core.scheduling import ManualScheduler


class FakeRenderer:
    def __init__(self) -> None:
        self.loaded: List[str] = []
        self.scripts: List[str] = []
        self.calls: List[str] = []
        self.fail_injection = False

    def load(self, address: str) -> None:
        self.loaded.append(address)

    def go_back(self) -> None:
        self.calls.append("back")

    def go_forward(self) -> None:
        self.calls.append("forward")

    def reload(self) -> None:
        self.calls.append("reload")

    def stop_load(self) -> None:
        self.calls.append("stop")

    def inject_extractor(self, script: str) -> None:
        if self.fail_injection:
            raise RuntimeError("page is gone")
        self.scripts.append(script)


class FakeSpeechEngine:
    def __init__(self) -> None:
        self.spoken: List[Tuple[SpeechRequest, int]] = []
        self.callbacks = {}
        self.stop_calls = 0
        self.fail_speak = False

    def speak(
        self, request: SpeechRequest, utterance_id: int, on_outcome: OutcomeCallback
    ) -> None:
        if self.fail_speak:
            raise RuntimeError("no audio device")
        self.spoken.append((request, utterance_id))
        self.callbacks[utterance_id] = on_outcome

    def stop(self) -> None:
        self.stop_calls += 1

    def finish(self, utterance_id: int, outcome: str = "done") -> None:
        self.callbacks[utterance_id](utterance_id, outcome)

    @property
    def last_id(self) -> int:
        return self.spoken[-1][1]


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def engine() -> FakeSpeechEngine:
    return FakeSpeechEngine()
