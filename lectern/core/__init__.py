"""Qt-free reader core: navigation, extraction, playback and drawer state."""

from .config import ReaderConfig
from .drawer import DrawerState, DrawerStateMachine
from .extraction import (
    PLACEHOLDER_TEXT,
    Empty,
    ExtractionRequest,
    ExtractionResult,
    ExtractionSessionController,
    Success,
    Timeout,
)
from .navigation import NavigationState, display_host, normalize
from .playback import (
    Idle,
    SpeechEngine,
    SpeechPlaybackController,
    SpeechRequest,
    Speaking,
)
from .scheduling import ManualScheduler, Scheduler
from .session import ReaderSession, ReaderView, Renderer

__all__ = [
    "ReaderConfig",
    "DrawerState",
    "DrawerStateMachine",
    "PLACEHOLDER_TEXT",
    "Empty",
    "ExtractionRequest",
    "ExtractionResult",
    "ExtractionSessionController",
    "Success",
    "Timeout",
    "NavigationState",
    "display_host",
    "normalize",
    "Idle",
    "SpeechEngine",
    "SpeechPlaybackController",
    "SpeechRequest",
    "Speaking",
    "ManualScheduler",
    "Scheduler",
    "ReaderSession",
    "ReaderView",
    "Renderer",
]
