from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Optional

from lectern.utils.logger import logger


@dataclass(frozen=True)
class NavigateRequested:
    raw: str


@dataclass(frozen=True)
class HistoryRequested:
    action: str  # back | forward | reload | stop


@dataclass(frozen=True)
class ExtractionRequested:
    pass


@dataclass(frozen=True)
class DrawerToggled:
    pass


@dataclass(frozen=True)
class DrawerClosed:
    pass


@dataclass(frozen=True)
class PlaybackToggled:
    pass


@dataclass(frozen=True)
class LoadStarted:
    address: str = ""


@dataclass(frozen=True)
class LoadProgressed:
    progress: float


@dataclass(frozen=True)
class LoadFinished:
    address: str = ""
    ok: bool = True


@dataclass(frozen=True)
class NavigationChanged:
    address: str
    title: str = ""
    can_go_back: bool = False
    can_go_forward: bool = False


@dataclass(frozen=True)
class ChannelMessageReceived:
    payload: object


@dataclass(frozen=True)
class ExtractionTimedOut:
    seq: int


@dataclass(frozen=True)
class SpeechFinished:
    utterance_id: int
    outcome: str


class EventQueue:
    """FIFO of session events dispatched one at a time.

    Events posted while a handler runs are appended and handled after it
    returns, so handlers never re-enter each other. ``on_drained`` runs once
    the queue is empty again.
    """

    def __init__(
        self,
        dispatch: Callable[[object], None],
        *,
        on_drained: Optional[Callable[[], None]] = None,
    ) -> None:
        self._dispatch = dispatch
        self._on_drained = on_drained
        self._events: Deque[object] = deque()
        self._draining = False

    def __len__(self) -> int:
        return len(self._events)

    def post(self, event: object) -> None:
        self._events.append(event)
        if not self._draining:
            self.drain()

    def drain(self) -> None:
        if self._draining:
            return
        self._draining = True
        try:
            while self._events:
                event = self._events.popleft()
                try:
                    self._dispatch(event)
                except Exception:
                    logger.exception("Handler for %s failed.", type(event).__name__)
        finally:
            self._draining = False
        if self._on_drained is not None:
            try:
                self._on_drained()
            except Exception:
                logger.exception("Drain listener failed.")
