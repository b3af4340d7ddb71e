from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Optional

from qtpy import QtCore

from lectern.core.playback import (
    OUTCOME_DONE,
    OUTCOME_ERROR,
    OUTCOME_STOPPED,
    OutcomeCallback,
    SpeechRequest,
)
from lectern.speech.tts_router import chunk_text, synthesize_tts
from lectern.utils.audio_playback import (
    play_audio_buffer,
    stop_audio_playback,
    wait_audio_playback,
)
from lectern.utils.logger import logger


class _SpeakToken:
    def __init__(self) -> None:
        self.cancelled = False
        # Guards the cancelled check together with the start of each chunk.
        self.lock = threading.Lock()

    def cancel(self) -> None:
        with self.lock:
            self.cancelled = True
            stop_audio_playback()


class _SpeakTask(QtCore.QRunnable):
    """Background task that streams TTS chunks for one utterance."""

    def __init__(
        self,
        engine: "ThreadedSpeechEngine",
        request: SpeechRequest,
        utterance_id: int,
        token: _SpeakToken,
        engine_name: str,
    ) -> None:
        super().__init__()
        self.engine = engine
        self.request = request
        self.utterance_id = utterance_id
        self.token = token
        self.tts_settings: Dict[str, object] = {
            "engine": engine_name,
            "locale": request.locale,
        }

    def _play_chunk(self, samples, sample_rate: int) -> bool:
        """Start one chunk unless cancelled, then wait for it. False when cancelled."""
        with self.token.lock:
            if self.token.cancelled:
                return False
            played = play_audio_buffer(
                samples,
                int(sample_rate * self.request.rate),
                blocking=False,
            )
        if not played:
            raise RuntimeError("No usable audio device found.")
        wait_audio_playback()
        return not self.token.cancelled

    def run(self) -> None:
        outcome = OUTCOME_DONE
        try:
            chunks = chunk_text(self.request.text)

            def synthesize(chunk: str):
                audio_data = synthesize_tts(chunk, self.tts_settings)
                if not audio_data:
                    raise RuntimeError("No audio returned by TTS engine.")
                return audio_data

            with ThreadPoolExecutor(max_workers=1) as executor:
                next_future = executor.submit(synthesize, chunks[0]) if chunks else None
                for idx in range(len(chunks)):
                    if self.token.cancelled:
                        break
                    samples, sample_rate = next_future.result()
                    if idx + 1 < len(chunks):
                        next_future = executor.submit(synthesize, chunks[idx + 1])
                    if not self._play_chunk(samples, sample_rate):
                        break
            if self.token.cancelled:
                outcome = OUTCOME_STOPPED
        except Exception as exc:
            logger.warning("Speech for utterance %s failed: %s", self.utterance_id, exc)
            outcome = OUTCOME_STOPPED if self.token.cancelled else OUTCOME_ERROR
        finally:
            self.engine.outcome_ready.emit(self.utterance_id, outcome)


class ThreadedSpeechEngine(QtCore.QObject):
    """Speech engine that synthesises and plays on a worker thread.

    Outcomes are delivered back on the thread that owns this object, so the
    playback controller only ever sees them from the GUI thread.
    """

    outcome_ready = QtCore.Signal(int, str)

    def __init__(
        self,
        engine_name: str = "gtts",
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._engine_name = engine_name
        self._thread_pool = QtCore.QThreadPool.globalInstance()
        self._active_token: Optional[_SpeakToken] = None
        self._callbacks: Dict[int, OutcomeCallback] = {}
        self.outcome_ready.connect(self._deliver_outcome)

    def speak(
        self, request: SpeechRequest, utterance_id: int, on_outcome: OutcomeCallback
    ) -> None:
        self.stop()
        token = _SpeakToken()
        self._active_token = token
        self._callbacks[utterance_id] = on_outcome
        self._thread_pool.start(
            _SpeakTask(self, request, utterance_id, token, self._engine_name)
        )

    def stop(self) -> None:
        token = self._active_token
        self._active_token = None
        if token is not None:
            token.cancel()
        else:
            stop_audio_playback()

    @QtCore.Slot(int, str)
    def _deliver_outcome(self, utterance_id: int, outcome: str) -> None:
        callback = self._callbacks.pop(utterance_id, None)
        if callback is not None:
            callback(utterance_id, outcome)
