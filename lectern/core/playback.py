from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Union

from lectern.utils.logger import logger

DEFAULT_LOCALE = "en-US"
DEFAULT_RATE = 0.95

OUTCOME_DONE = "done"
OUTCOME_STOPPED = "stopped"
OUTCOME_ERROR = "error"
OUTCOMES = frozenset({OUTCOME_DONE, OUTCOME_STOPPED, OUTCOME_ERROR})

OutcomeCallback = Callable[[int, str], None]


@dataclass(frozen=True)
class SpeechRequest:
    text: str
    locale: str = DEFAULT_LOCALE
    rate: float = DEFAULT_RATE


class SpeechEngine(Protocol):
    """Text-to-speech backend.

    ``speak`` starts an utterance and later reports exactly one outcome
    (``done``, ``stopped`` or ``error``) for ``utterance_id``. ``stop`` must
    silence any audio before it returns.
    """

    def speak(
        self, request: SpeechRequest, utterance_id: int, on_outcome: OutcomeCallback
    ) -> None: ...

    def stop(self) -> None: ...


@dataclass(frozen=True)
class Idle:
    speaking = False


@dataclass(frozen=True)
class Speaking:
    text: str
    utterance_id: int

    speaking = True


PlaybackState = Union[Idle, Speaking]


class SpeechPlaybackController:
    """Single playback slot. Only this object starts or stops audio."""

    def __init__(
        self,
        engine: SpeechEngine,
        *,
        locale: str = DEFAULT_LOCALE,
        rate: float = DEFAULT_RATE,
        on_outcome: Optional[OutcomeCallback] = None,
    ) -> None:
        self._engine = engine
        self._locale = locale
        self._rate = float(rate)
        # Engine callbacks are routed here; the session swaps in its event queue.
        self._on_outcome = on_outcome or self.on_engine_outcome
        self._state: PlaybackState = Idle()
        self._next_id = 0

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def is_speaking(self) -> bool:
        return isinstance(self._state, Speaking)

    def speak(self, text: str) -> bool:
        value = str(text or "")
        if not value.strip():
            return False
        self.stop()
        self._next_id += 1
        utterance_id = self._next_id
        self._state = Speaking(text=value, utterance_id=utterance_id)
        request = SpeechRequest(text=value, locale=self._locale, rate=self._rate)
        logger.debug("Starting utterance %s (%d chars).", utterance_id, len(value))
        try:
            self._engine.speak(request, utterance_id, self._on_outcome)
        except Exception as exc:
            logger.warning("Speech engine failed to start: %s", exc)
            self._state = Idle()
            return False
        return True

    def stop(self) -> None:
        try:
            self._engine.stop()
        except Exception as exc:
            logger.warning("Speech engine failed to stop cleanly: %s", exc)
        if self.is_speaking:
            logger.debug("Stopped utterance %s.", self._state.utterance_id)
        self._state = Idle()

    def toggle(self, text: str) -> bool:
        """Stop when speaking, otherwise speak ``text``. Returns the new speaking flag."""
        if self.is_speaking:
            self.stop()
            return False
        return self.speak(text)

    def on_engine_outcome(self, utterance_id: int, outcome: str) -> bool:
        """Collapse done/stopped/error of the current utterance into Idle."""
        state = self._state
        if not isinstance(state, Speaking) or state.utterance_id != utterance_id:
            logger.debug(
                "Ignoring '%s' from superseded utterance %s.", outcome, utterance_id
            )
            return False
        if outcome == OUTCOME_ERROR:
            logger.warning("Utterance %s failed; playback is idle.", utterance_id)
        elif outcome not in OUTCOMES:
            logger.warning("Unknown speech outcome '%s'; treating as finished.", outcome)
        self._state = Idle()
        return True
