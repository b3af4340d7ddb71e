from __future__ import annotations

from enum import Enum

from lectern.core.extraction import ExtractionSessionController
from lectern.core.playback import SpeechPlaybackController
from lectern.utils.logger import logger


class DrawerState(str, Enum):
    CLOSED = "closed"
    MINI = "mini"
    FULL = "full"


class DrawerStateMachine:
    """Closed/mini/full presentation state of the reading drawer.

    Results that arrive while the drawer is closed are kept by the
    extraction controller; the drawer only opens on user request.
    """

    def __init__(
        self,
        extraction: ExtractionSessionController,
        playback: SpeechPlaybackController,
    ) -> None:
        self._extraction = extraction
        self._playback = playback
        self._state = DrawerState.CLOSED

    @property
    def state(self) -> DrawerState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is not DrawerState.CLOSED

    def request_extraction(self, address: str) -> DrawerState:
        if self._state is DrawerState.CLOSED:
            self._set(DrawerState.MINI)
        self._extraction.start_extraction(address)
        return self._state

    def toggle(self) -> DrawerState:
        if self._state is DrawerState.MINI:
            self._set(DrawerState.FULL)
        elif self._state is DrawerState.FULL:
            self._set(DrawerState.MINI)
        return self._state

    def close(self) -> DrawerState:
        # Closing always stops playback.
        self._playback.stop()
        self._set(DrawerState.CLOSED)
        return self._state

    def _set(self, state: DrawerState) -> None:
        if state is not self._state:
            logger.debug("Drawer %s -> %s", self._state.value, state.value)
        self._state = state
