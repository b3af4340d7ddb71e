from __future__ import annotations

from typing import Optional

from qtpy import QtCore, QtGui, QtWidgets

from lectern.core.config import ReaderConfig
from lectern.core.session import ReaderSession, ReaderView
from lectern.gui.qt_scheduler import QtTimerScheduler
from lectern.gui.widgets.reader_drawer import ReaderDrawerWidget
from lectern.gui.widgets.web_renderer import QtWebRenderer, webengine_available
from lectern.speech.engine import ThreadedSpeechEngine
from lectern.utils.logger import logger

try:
    from qtpy import QtWebEngineWidgets  # type: ignore
except Exception:
    QtWebEngineWidgets = None  # type: ignore


_NAV_BUTTON_STYLE = """
    QToolButton {
        background-color: transparent;
        border: none;
        border-radius: 4px;
        padding: 4px;
        color: #5f6368;
    }
    QToolButton:hover {
        background-color: #e8eaed;
    }
    QToolButton:pressed {
        background-color: #dfe0e0;
    }
    QToolButton:disabled {
        color: #9aa0a6;
    }
"""

_ADDRESS_BAR_STYLE = """
    QLineEdit {
        background-color: #f1f3f4;
        border: none;
        border-radius: 8px;
        padding: 8px 12px;
        font-size: 13px;
        color: #202124;
    }
    QLineEdit:focus {
        background-color: #ffffff;
        border: 2px solid #4285f4;
        padding: 6px 10px;
    }
"""

_PROGRESS_STYLE = """
    QProgressBar {
        border: none;
        background: transparent;
        max-height: 2px;
    }
    QProgressBar::chunk {
        background-color: #4285f4;
    }
"""


def read_button_label(view: ReaderView) -> str:
    return "Extracting…" if view.extracting else "Read"


class WebReaderWidget(QtWidgets.QWidget):
    """Embedded browser with a reader drawer that extracts and speaks pages."""

    status_changed = QtCore.Signal(str)

    def __init__(
        self,
        config: Optional[ReaderConfig] = None,
        parent: Optional[QtWidgets.QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.config = config or ReaderConfig()
        self.session: Optional[ReaderSession] = None
        self._web_view = None
        self._renderer: Optional[QtWebRenderer] = None
        self._scheduler = QtTimerScheduler(self)
        self._engine = ThreadedSpeechEngine(self.config.engine, parent=self)
        self._last_view: Optional[ReaderView] = None
        self._shortcuts: list[QtWidgets.QShortcut] = []
        self._build_ui()

    @property
    def webengine_available(self) -> bool:
        return webengine_available()

    @staticmethod
    def _apply_nav_icon(
        button: QtWidgets.QToolButton, theme_icon: str, fallback: str
    ) -> None:
        icon = QtGui.QIcon.fromTheme(theme_icon)
        if icon.isNull():
            button.setText(fallback)
            font = button.font()
            font.setPointSize(14)
            button.setFont(font)
        else:
            button.setIcon(icon)
            button.setIconSize(QtCore.QSize(18, 18))

    def _build_ui(self) -> None:
        root = QtWidgets.QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.setSpacing(0)

        if not webengine_available():
            placeholder = QtWidgets.QLabel(
                "Qt WebEngine is unavailable. The reader is disabled.", self
            )
            placeholder.setAlignment(QtCore.Qt.AlignCenter)
            placeholder.setWordWrap(True)
            root.addWidget(placeholder, 1)
            return

        toolbar = QtWidgets.QWidget(self)
        toolbar.setObjectName("webReaderToolbar")
        toolbar_layout = QtWidgets.QHBoxLayout(toolbar)
        toolbar_layout.setContentsMargins(8, 4, 8, 4)
        toolbar_layout.setSpacing(4)

        self.back_button = QtWidgets.QToolButton(toolbar)
        self.back_button.setToolTip("Go back")
        self.back_button.setEnabled(False)
        self._apply_nav_icon(self.back_button, "go-previous", "←")
        self.back_button.setStyleSheet(_NAV_BUTTON_STYLE)
        toolbar_layout.addWidget(self.back_button)

        self.forward_button = QtWidgets.QToolButton(toolbar)
        self.forward_button.setToolTip("Go forward")
        self.forward_button.setEnabled(False)
        self._apply_nav_icon(self.forward_button, "go-next", "→")
        self.forward_button.setStyleSheet(_NAV_BUTTON_STYLE)
        toolbar_layout.addWidget(self.forward_button)

        self.reload_button = QtWidgets.QToolButton(toolbar)
        self.reload_button.setStyleSheet(_NAV_BUTTON_STYLE)
        toolbar_layout.addWidget(self.reload_button)
        self._set_reload_mode(loading=False)

        self.security_icon = QtWidgets.QLabel(toolbar)
        self.security_icon.setStyleSheet("padding: 2px;")
        toolbar_layout.addWidget(self.security_icon)

        self.url_edit = QtWidgets.QLineEdit(toolbar)
        self.url_edit.setPlaceholderText("Search or enter URL")
        self.url_edit.setObjectName("webReaderUrlEdit")
        self.url_edit.setStyleSheet(_ADDRESS_BAR_STYLE)
        toolbar_layout.addWidget(self.url_edit, 1)

        self.read_button = QtWidgets.QPushButton("Read", toolbar)
        self.read_button.setToolTip("Extract the article text of this page")
        toolbar_layout.addWidget(self.read_button)

        root.addWidget(toolbar, 0)

        self.progress_bar = QtWidgets.QProgressBar(self)
        self.progress_bar.setRange(0, 100)
        self.progress_bar.setTextVisible(False)
        self.progress_bar.setFixedHeight(2)
        self.progress_bar.setStyleSheet(_PROGRESS_STYLE)
        self.progress_bar.setVisible(False)
        root.addWidget(self.progress_bar, 0)

        splitter = QtWidgets.QSplitter(QtCore.Qt.Vertical, self)
        self._web_view = QtWebEngineWidgets.QWebEngineView(splitter)
        self._renderer = QtWebRenderer(self._web_view, parent=self)
        splitter.addWidget(self._web_view)
        self.drawer = ReaderDrawerWidget(splitter)
        splitter.addWidget(self.drawer)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 1)
        root.addWidget(splitter, 1)

        self.session = ReaderSession(
            self._renderer, self._engine, self._scheduler, self.config
        )
        self._renderer.attach(self.session)
        self.session.add_listener(self._render)
        if not self._renderer.channel_available:
            logger.warning("Page channel unavailable; extraction will always time out.")

        self.back_button.clicked.connect(self.session.go_back)
        self.forward_button.clicked.connect(self.session.go_forward)
        self.reload_button.clicked.connect(self.session.reload_or_stop)
        self.url_edit.returnPressed.connect(self._on_url_entered)
        self.read_button.clicked.connect(self.session.request_extraction)
        self.drawer.playToggled.connect(self.session.toggle_playback)
        self.drawer.expandToggled.connect(self.session.toggle_drawer)
        self.drawer.closeRequested.connect(self.session.close_drawer)
        self.drawer.refreshRequested.connect(self.session.request_extraction)
        self._setup_shortcuts()

    def _setup_shortcuts(self) -> None:
        def _add_shortcut(sequence: QtGui.QKeySequence, callback) -> None:
            shortcut = QtWidgets.QShortcut(sequence, self)
            shortcut.setContext(QtCore.Qt.WidgetWithChildrenShortcut)
            shortcut.activated.connect(callback)
            self._shortcuts.append(shortcut)

        _add_shortcut(QtGui.QKeySequence("Ctrl+L"), self._focus_address_bar)
        _add_shortcut(QtGui.QKeySequence("Ctrl+R"), self.session.reload_or_stop)
        _add_shortcut(QtGui.QKeySequence("Ctrl+Shift+R"), self.session.request_extraction)
        _add_shortcut(QtGui.QKeySequence("Escape"), self.session.close_drawer)

    def _focus_address_bar(self) -> None:
        self.url_edit.setFocus()
        self.url_edit.selectAll()

    def _set_reload_mode(self, *, loading: bool) -> None:
        if loading:
            self.reload_button.setToolTip("Stop loading this page")
            self._apply_nav_icon(self.reload_button, "process-stop", "✕")
        else:
            self.reload_button.setToolTip("Reload this page")
            self._apply_nav_icon(self.reload_button, "view-refresh", "↻")

    def load_url(self, raw: str) -> bool:
        if self.session is None:
            return False
        self.session.navigate(raw)
        return True

    def _on_url_entered(self) -> None:
        self.load_url(self.url_edit.text())

    def _render(self, view: ReaderView) -> None:
        previous = self._last_view
        self._last_view = view
        nav = view.navigation
        self.back_button.setEnabled(nav.can_go_back)
        self.forward_button.setEnabled(nav.can_go_forward)
        if previous is None or previous.navigation.loading != nav.loading:
            self._set_reload_mode(loading=nav.loading)
        if not self.url_edit.hasFocus():
            self.url_edit.setText(nav.address)
        self.security_icon.setText("🔒" if nav.is_secure else "")
        self.security_icon.setToolTip(
            "Connection is secure" if nav.is_secure else "Connection is not secure"
        )
        self.progress_bar.setVisible(nav.loading)
        self.progress_bar.setValue(int(round(nav.progress * 100)))
        self.read_button.setText(read_button_label(view))
        self.read_button.setEnabled(not view.extracting)
        self.drawer.render(view)

        if previous is not None and previous.extracting and not view.extracting:
            if view.result_kind == "success":
                self.status_changed.emit(
                    f"Extracted {view.word_count:,} words from {view.host or 'page'}."
                )
            elif view.result_kind is not None:
                self.status_changed.emit("Couldn't pull text from this page.")
        if previous is not None and previous.speaking != view.speaking:
            self.status_changed.emit("Reading aloud…" if view.speaking else "Stopped reading.")

    def shutdown(self) -> None:
        if self.session is not None:
            self.session.shutdown()
        self._scheduler.cancel_all()
        logger.info("Reader widget shut down.")

    def closeEvent(self, event) -> None:  # noqa: N802 - Qt override
        self.shutdown()
        super().closeEvent(event)
