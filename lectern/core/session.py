"""Coordinator wiring renderer, extraction, playback and drawer together.

Every input (user gestures, renderer callbacks, timer fires, speech engine
outcomes) is posted to one :class:`EventQueue` and handled in order on the
owning thread. Listeners receive a fresh :class:`ReaderView` after each
batch of events.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Protocol

from lectern.core.config import ReaderConfig
from lectern.core.drawer import DrawerState, DrawerStateMachine
from lectern.core.events import (
    ChannelMessageReceived,
    DrawerClosed,
    DrawerToggled,
    EventQueue,
    ExtractionRequested,
    ExtractionTimedOut,
    HistoryRequested,
    LoadFinished,
    LoadProgressed,
    LoadStarted,
    NavigateRequested,
    NavigationChanged,
    PlaybackToggled,
    SpeechFinished,
)
from lectern.core.extraction import (
    ExtractionRequest,
    ExtractionResult,
    ExtractionSessionController,
    Success,
)
from lectern.core.extractor_script import build_extraction_script
from lectern.core.navigation import NavigationState, display_host, normalize
from lectern.core.playback import SpeechEngine, SpeechPlaybackController
from lectern.core.scheduling import Scheduler
from lectern.utils.logger import logger


class Renderer(Protocol):
    """Content surface the session drives; events come back via the session."""

    def load(self, address: str) -> None: ...

    def go_back(self) -> None: ...

    def go_forward(self) -> None: ...

    def reload(self) -> None: ...

    def stop_load(self) -> None: ...

    def inject_extractor(self, script: str) -> None: ...


@dataclass(frozen=True)
class ReaderView:
    """Everything the reader UI needs to render one frame."""

    drawer: DrawerState
    navigation: NavigationState
    title: str
    host: str
    text: str
    extracting: bool
    speaking: bool
    word_count: int
    reading_minutes: int
    result_kind: Optional[str]

    @property
    def can_play(self) -> bool:
        return self.result_kind == "success" and not self.extracting


ViewListener = Callable[[ReaderView], None]


class ReaderSession:
    def __init__(
        self,
        renderer: Renderer,
        engine: SpeechEngine,
        scheduler: Scheduler,
        config: Optional[ReaderConfig] = None,
    ) -> None:
        self.config = config or ReaderConfig()
        self._renderer = renderer
        self._listeners: List[ViewListener] = []
        self.queue = EventQueue(self._dispatch, on_drained=self._notify)
        self.extraction = ExtractionSessionController(
            scheduler,
            self._inject,
            timeout=self.config.extraction_timeout,
            max_chars=self.config.max_chars,
            on_timer=lambda seq: self.queue.post(ExtractionTimedOut(seq)),
        )
        self.playback = SpeechPlaybackController(
            engine,
            locale=self.config.locale,
            rate=self.config.rate,
            on_outcome=lambda utterance_id, outcome: self.queue.post(
                SpeechFinished(utterance_id, outcome)
            ),
        )
        self.drawer = DrawerStateMachine(self.extraction, self.playback)
        self.navigation = NavigationState(address=self.config.home_url)
        self._handlers = {
            NavigateRequested: self._handle_navigate,
            HistoryRequested: self._handle_history,
            ExtractionRequested: self._handle_extraction_requested,
            DrawerToggled: lambda _event: self.drawer.toggle(),
            DrawerClosed: lambda _event: self.drawer.close(),
            PlaybackToggled: self._handle_playback_toggled,
            LoadStarted: self._handle_load_started,
            LoadProgressed: self._handle_load_progressed,
            LoadFinished: self._handle_load_finished,
            NavigationChanged: self._handle_navigation_changed,
            ChannelMessageReceived: lambda event: self.extraction.on_channel_message(
                event.payload
            ),
            ExtractionTimedOut: lambda event: self.extraction.on_timeout(event.seq),
            SpeechFinished: lambda event: self.playback.on_engine_outcome(
                event.utterance_id, event.outcome
            ),
        }

    # -- listeners ---------------------------------------------------------

    def add_listener(self, listener: ViewListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ViewListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # -- user gestures -----------------------------------------------------

    def navigate(self, raw: str) -> None:
        self.queue.post(NavigateRequested(raw))

    def go_back(self) -> None:
        self.queue.post(HistoryRequested("back"))

    def go_forward(self) -> None:
        self.queue.post(HistoryRequested("forward"))

    def reload_or_stop(self) -> None:
        self.queue.post(HistoryRequested("stop" if self.navigation.loading else "reload"))

    def request_extraction(self) -> None:
        self.queue.post(ExtractionRequested())

    def toggle_drawer(self) -> None:
        self.queue.post(DrawerToggled())

    def close_drawer(self) -> None:
        self.queue.post(DrawerClosed())

    def toggle_playback(self) -> None:
        self.queue.post(PlaybackToggled())

    # -- renderer callbacks ------------------------------------------------

    def on_load_started(self, address: str = "") -> None:
        self.queue.post(LoadStarted(address))

    def on_load_progress(self, progress: float) -> None:
        self.queue.post(LoadProgressed(progress))

    def on_load_finished(self, address: str = "", ok: bool = True) -> None:
        self.queue.post(LoadFinished(address, ok))

    def on_navigation_state(
        self,
        address: str,
        title: str = "",
        can_go_back: bool = False,
        can_go_forward: bool = False,
    ) -> None:
        self.queue.post(NavigationChanged(address, title, can_go_back, can_go_forward))

    def on_channel_message(self, payload: object) -> None:
        self.queue.post(ChannelMessageReceived(payload))

    # -- state -------------------------------------------------------------

    def snapshot(self) -> ReaderView:
        result: Optional[ExtractionResult] = self.extraction.last_result
        text = result.text if result is not None else ""
        if isinstance(result, Success):
            title = result.title
        else:
            title = self.navigation.title or "Reader"
        return ReaderView(
            drawer=self.drawer.state,
            navigation=self.navigation,
            title=title,
            host=display_host(self.navigation.address),
            text=text,
            extracting=self.extraction.is_busy,
            speaking=self.playback.is_speaking,
            word_count=result.word_count if isinstance(result, Success) else 0,
            reading_minutes=result.reading_minutes if isinstance(result, Success) else 0,
            result_kind=result.kind if result is not None else None,
        )

    def shutdown(self) -> None:
        self.extraction.cancel()
        self.playback.stop()

    # -- dispatch ----------------------------------------------------------

    def _dispatch(self, event: object) -> None:
        handler = self._handlers.get(type(event))
        if handler is None:
            logger.warning("No handler for session event %r.", event)
            return
        handler(event)

    def _notify(self) -> None:
        if not self._listeners:
            return
        view = self.snapshot()
        for listener in list(self._listeners):
            listener(view)

    def _inject(self, request: ExtractionRequest) -> None:
        script = build_extraction_script(
            request.seq,
            max_chars=self.config.max_chars,
            readability_url=self.config.readability_url,
        )
        self._renderer.inject_extractor(script)

    def _handle_navigate(self, event: NavigateRequested) -> None:
        address = normalize(
            event.raw,
            home_url=self.config.home_url,
            search_url=self.config.search_url,
        )
        logger.info("Navigating to %s", address)
        self.navigation = replace(self.navigation, address=address)
        self.extraction.on_address_changed(address)
        self._renderer.load(address)

    def _handle_history(self, event: HistoryRequested) -> None:
        action = event.action
        if action == "back":
            if self.navigation.can_go_back:
                self._renderer.go_back()
        elif action == "forward":
            if self.navigation.can_go_forward:
                self._renderer.go_forward()
        elif action == "reload":
            self._renderer.reload()
        elif action == "stop":
            self._renderer.stop_load()
        else:
            logger.warning("Unknown history action '%s'.", action)

    def _handle_extraction_requested(self, _event: ExtractionRequested) -> None:
        self.drawer.request_extraction(self.navigation.address)

    def _handle_playback_toggled(self, _event: PlaybackToggled) -> None:
        result = self.extraction.last_result
        if self.playback.is_speaking:
            self.playback.stop()
        elif isinstance(result, Success) and not self.extraction.is_busy:
            self.playback.speak(result.text)

    def _handle_load_started(self, event: LoadStarted) -> None:
        self.navigation = replace(self.navigation, loading=True, progress=0.0)
        self.extraction.on_load_started(event.address)

    def _handle_load_progressed(self, event: LoadProgressed) -> None:
        self.navigation = self.navigation.with_progress(event.progress)

    def _handle_load_finished(self, event: LoadFinished) -> None:
        self.navigation = replace(self.navigation, loading=False, progress=1.0)
        if not event.ok:
            logger.info("Page failed to load: %s", event.address or self.navigation.address)
        self.extraction.on_load_finished(event.address or self.navigation.address)

    def _handle_navigation_changed(self, event: NavigationChanged) -> None:
        self.navigation = replace(
            self.navigation,
            address=event.address or self.navigation.address,
            title=event.title or "Untitled",
            can_go_back=bool(event.can_go_back),
            can_go_forward=bool(event.can_go_forward),
        )
        self.extraction.on_address_changed(self.navigation.address)
