from __future__ import annotations

from typing import Optional

from qtpy import QtCore, QtWidgets

from lectern.core.drawer import DrawerState
from lectern.core.session import ReaderView

EMPTY_HINT = "Tap Read to extract article content."
EXTRACTING_HINT = "Extracting content…"


def format_meta(view: ReaderView, *, full: bool = False) -> str:
    """Build the ``host · N words · N min`` line under the drawer title."""
    parts = [view.host] if view.host else []
    if full and view.word_count:
        parts.append(f"{view.word_count:,} words")
    if view.reading_minutes:
        parts.append(f"{view.reading_minutes} min")
    return " · ".join(parts)


def drawer_title(view: ReaderView) -> str:
    if view.extracting:
        return "Extracting…"
    return view.title or "Reader"


def drawer_body(view: ReaderView) -> str:
    if view.extracting:
        return EXTRACTING_HINT
    return view.text or EMPTY_HINT


def play_label(view: ReaderView) -> str:
    return "Pause" if view.speaking else "Play"


def play_enabled(view: ReaderView) -> bool:
    return view.speaking or view.can_play


class ReaderDrawerWidget(QtWidgets.QFrame):
    """Bottom drawer showing the extracted article and speech controls."""

    playToggled = QtCore.Signal()
    expandToggled = QtCore.Signal()
    closeRequested = QtCore.Signal()
    refreshRequested = QtCore.Signal()

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("readerDrawer")
        self.setFrameShape(QtWidgets.QFrame.StyledPanel)
        self.setStyleSheet(
            "QFrame#readerDrawer { border-top: 1px solid palette(mid); }"
            "QLabel#drawerTitle { font-weight: 600; }"
            "QLabel#drawerMeta { color: palette(mid); }"
        )
        self._state = DrawerState.CLOSED

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(8, 6, 8, 6)
        layout.setSpacing(4)

        header = QtWidgets.QHBoxLayout()
        header.setSpacing(6)
        self.play_button = QtWidgets.QPushButton("Play", self)
        self.play_button.clicked.connect(self.playToggled.emit)
        header.addWidget(self.play_button)

        titles = QtWidgets.QVBoxLayout()
        titles.setSpacing(0)
        self.title_label = QtWidgets.QLabel("Reader", self)
        self.title_label.setObjectName("drawerTitle")
        self.meta_label = QtWidgets.QLabel("", self)
        self.meta_label.setObjectName("drawerMeta")
        titles.addWidget(self.title_label)
        titles.addWidget(self.meta_label)
        header.addLayout(titles, 1)

        self.refresh_button = QtWidgets.QToolButton(self)
        self.refresh_button.setText("Re-extract")
        self.refresh_button.setToolTip("Extract this page again")
        self.refresh_button.clicked.connect(self.refreshRequested.emit)
        header.addWidget(self.refresh_button)

        self.expand_button = QtWidgets.QToolButton(self)
        self.expand_button.setText("Expand")
        self.expand_button.clicked.connect(self.expandToggled.emit)
        header.addWidget(self.expand_button)

        self.close_button = QtWidgets.QToolButton(self)
        self.close_button.setText("Close")
        self.close_button.setToolTip("Close reader")
        self.close_button.clicked.connect(self.closeRequested.emit)
        header.addWidget(self.close_button)
        layout.addLayout(header)

        self.text_view = QtWidgets.QPlainTextEdit(self)
        self.text_view.setReadOnly(True)
        self.text_view.setMinimumHeight(180)
        layout.addWidget(self.text_view, 1)

        self.setVisible(False)

    @property
    def state(self) -> DrawerState:
        return self._state

    def render(self, view: ReaderView) -> None:
        self._state = view.drawer
        if view.drawer == DrawerState.CLOSED:
            self.setVisible(False)
            return
        full = view.drawer == DrawerState.FULL
        self.title_label.setText(drawer_title(view))
        self.meta_label.setText(format_meta(view, full=full))
        self.play_button.setText(play_label(view))
        self.play_button.setEnabled(play_enabled(view))
        self.expand_button.setText("Collapse" if full else "Expand")
        self.refresh_button.setVisible(full)
        self.refresh_button.setEnabled(not view.extracting)
        self.text_view.setVisible(full)
        if full:
            body = drawer_body(view)
            if self.text_view.toPlainText() != body:
                self.text_view.setPlainText(body)
        self.setVisible(True)
