from __future__ import annotations

import time
from typing import Optional

from qtpy import QtCore

from lectern.core.extractor_script import BRIDGE_OBJECT_NAME, build_channel_bootstrap
from lectern.gui.widgets.reader_bridge import _ReaderBridge
from lectern.utils.logger import logger

try:
    from qtpy import QtWebEngineWidgets  # type: ignore

    _WEBENGINE_AVAILABLE = True
except Exception:
    QtWebEngineWidgets = None  # type: ignore
    _WEBENGINE_AVAILABLE = False

try:
    from qtpy import QtWebChannel  # type: ignore

    _WEBCHANNEL_AVAILABLE = True
except Exception:
    QtWebChannel = None  # type: ignore
    _WEBCHANNEL_AVAILABLE = False


_NOISY_CONSOLE_MARKERS = (
    "unrecognized feature: 'attribution-reporting'",
    "unrecognized feature: 'browsing-topics'",
    "deprecated api for given entry type",
    "the source list for content security policy directive",
    "contains an invalid source",
    "failed to find a valid digest in the 'integrity' attribute for resource",
    "has been blocked by cors policy",
    "no 'access-control-allow-origin' header is present on the requested resource",
    "was preloaded using link preload but not used within a few seconds",
)


def _is_ignorable_js_console_message(message: str) -> bool:
    value = str(message or "").strip().lower()
    if not value or value in {"error", "[object object]"}:
        return True
    return any(marker in value for marker in _NOISY_CONSOLE_MARKERS)


def webengine_available() -> bool:
    return bool(_WEBENGINE_AVAILABLE)


def _read_qwebchannel_source() -> str:
    resource = QtCore.QFile(":/qtwebchannel/qwebchannel.js")
    if not resource.open(QtCore.QIODevice.ReadOnly):
        logger.warning("qwebchannel.js resource is unavailable; page text cannot be reported.")
        return ""
    try:
        return bytes(resource.readAll()).decode("utf-8")
    finally:
        resource.close()


if _WEBENGINE_AVAILABLE:

    class _LecternWebEnginePage(QtWebEngineWidgets.QWebEnginePage):
        """Page that filters third-party console noise and forces same-view popups."""

        def __init__(
            self,
            parent: Optional[QtCore.QObject] = None,
            profile: Optional[QtCore.QObject] = None,
        ) -> None:
            if profile is not None:
                super().__init__(profile, parent)
            else:
                super().__init__(parent)
            self._console_seen: dict[str, int] = {}
            self._console_last_cleanup = time.monotonic()

        def createWindow(self, windowType):  # noqa: N802 - Qt override
            # Popups and target=_blank links open in this page.
            return self

        def _cleanup_console_seen(self) -> None:
            now = time.monotonic()
            if now - self._console_last_cleanup < 120:
                return
            if len(self._console_seen) > 500:
                self._console_seen.clear()
            self._console_last_cleanup = now

        def javaScriptConsoleMessage(  # noqa: N802 - Qt override
            self, level, message: str, lineNumber: int, sourceID: str
        ) -> None:
            msg = str(message or "").strip()
            if _is_ignorable_js_console_message(msg):
                return
            self._cleanup_console_seen()
            count = self._console_seen.get(msg, 0) + 1
            self._console_seen[msg] = count
            if count > 3:
                if count == 4:
                    logger.debug("QtWebEngine js: suppressing repeated message: %s", msg)
                return
            logger.debug("QtWebEngine js: %s (%s:%s)", msg, sourceID, lineNumber)


def _create_ephemeral_web_profile(
    parent: Optional[QtCore.QObject],
) -> Optional[QtCore.QObject]:
    if not _WEBENGINE_AVAILABLE:
        return None
    profile = QtWebEngineWidgets.QWebEngineProfile(parent)
    profile.setPersistentCookiesPolicy(
        QtWebEngineWidgets.QWebEngineProfile.NoPersistentCookies
    )
    profile.setHttpCacheType(QtWebEngineWidgets.QWebEngineProfile.MemoryHttpCache)
    return profile


class QtWebRenderer(QtCore.QObject):
    """Adapts a ``QWebEngineView`` to the reader session's renderer contract.

    Commands go to the view; load, navigation and channel events are
    forwarded to the session.
    """

    def __init__(self, view, session=None, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self._view = view
        self._session = None
        self._web_channel = None
        self._bridge = _ReaderBridge(self)
        self._profile = _create_ephemeral_web_profile(view)
        page = _LecternWebEnginePage(view, profile=self._profile)
        view.setPage(page)
        self._install_channel(page)
        if session is not None:
            self.attach(session)

    @property
    def channel_available(self) -> bool:
        return self._web_channel is not None

    def attach(self, session) -> None:
        self._session = session
        view = self._view
        view.loadStarted.connect(self._on_load_started)
        view.loadProgress.connect(self._on_load_progress)
        view.loadFinished.connect(self._on_load_finished)
        view.urlChanged.connect(lambda _url: self._emit_navigation_state())
        view.titleChanged.connect(lambda _title: self._emit_navigation_state())
        self._bridge.message_received.connect(session.on_channel_message)

    def _install_channel(self, page) -> None:
        if not _WEBCHANNEL_AVAILABLE:
            logger.info("QtWebChannel unavailable; extraction will time out.")
            return
        source = _read_qwebchannel_source()
        if not source:
            return
        self._web_channel = QtWebChannel.QWebChannel(page)
        self._web_channel.registerObject(BRIDGE_OBJECT_NAME, self._bridge)
        page.setWebChannel(self._web_channel)

        script = QtWebEngineWidgets.QWebEngineScript()
        script.setName("lectern_channel_bootstrap")
        script.setSourceCode(build_channel_bootstrap(source))
        script.setInjectionPoint(QtWebEngineWidgets.QWebEngineScript.DocumentCreation)
        script.setWorldId(QtWebEngineWidgets.QWebEngineScript.MainWorld)
        script.setRunsOnSubFrames(False)
        page.scripts().insert(script)

    # -- renderer contract -------------------------------------------------

    def load(self, address: str) -> None:
        self._view.setUrl(QtCore.QUrl(address))

    def go_back(self) -> None:
        self._view.back()

    def go_forward(self) -> None:
        self._view.forward()

    def reload(self) -> None:
        self._view.reload()

    def stop_load(self) -> None:
        self._view.stop()

    def inject_extractor(self, script: str) -> None:
        page = self._view.page()
        if page is None:
            raise RuntimeError("Web page object is unavailable.")
        page.runJavaScript(script)

    # -- view signals ------------------------------------------------------

    def _current_address(self) -> str:
        return str(self._view.url().toString() or "").strip()

    def _on_load_started(self) -> None:
        if self._session is not None:
            self._session.on_load_started(self._current_address())

    def _on_load_progress(self, percent: int) -> None:
        if self._session is not None:
            self._session.on_load_progress(max(0, min(100, int(percent))) / 100.0)

    def _on_load_finished(self, ok: bool) -> None:
        if self._session is None:
            return
        self._emit_navigation_state()
        self._session.on_load_finished(self._current_address(), bool(ok))

    def _emit_navigation_state(self) -> None:
        if self._session is None:
            return
        history = self._view.history()
        self._session.on_navigation_state(
            self._current_address(),
            str(self._view.title() or "").strip(),
            bool(history.canGoBack()),
            bool(history.canGoForward()),
        )
