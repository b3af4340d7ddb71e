from __future__ import annotations

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "minimal")

QtWidgets = pytest.importorskip("qtpy.QtWidgets")

from lectern.core.drawer import DrawerState  # noqa: E402
from lectern.core.navigation import NavigationState  # noqa: E402
from lectern.core.session import ReaderView  # noqa: E402
from lectern.gui.widgets.reader_drawer import (  # noqa: E402
    EMPTY_HINT,
    ReaderDrawerWidget,
    format_meta,
    play_enabled,
    play_label,
)
from lectern.gui.widgets.web_reader import read_button_label  # noqa: E402

_QAPP = None


def _ensure_qapp():
    global _QAPP
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    _QAPP = app
    return _QAPP


def _view(**overrides) -> ReaderView:
    values = dict(
        drawer=DrawerState.MINI,
        navigation=NavigationState(address="https://example.com"),
        title="Story",
        host="example.com",
        text="",
        extracting=False,
        speaking=False,
        word_count=0,
        reading_minutes=0,
        result_kind=None,
    )
    values.update(overrides)
    return ReaderView(**values)


def test_format_meta_variants() -> None:
    view = _view(word_count=1234, reading_minutes=7, result_kind="success")
    assert format_meta(view) == "example.com · 7 min"
    assert format_meta(view, full=True) == "example.com · 1,234 words · 7 min"
    assert format_meta(_view(host="")) == ""


def test_play_controls_follow_state() -> None:
    assert not play_enabled(_view())
    assert not play_enabled(_view(result_kind="success", extracting=True))
    assert play_enabled(_view(result_kind="success"))
    assert play_label(_view(speaking=True)) == "Pause"
    assert play_enabled(_view(speaking=True))
    assert read_button_label(_view(extracting=True)) == "Extracting…"
    assert read_button_label(_view()) == "Read"


def test_drawer_widget_renders_states() -> None:
    _ensure_qapp()
    widget = ReaderDrawerWidget()

    widget.render(_view(drawer=DrawerState.CLOSED))
    assert widget.isHidden()

    widget.render(_view(drawer=DrawerState.MINI, extracting=True))
    assert not widget.isHidden()
    assert widget.title_label.text() == "Extracting…"
    assert widget.text_view.isHidden()
    assert not widget.play_button.isEnabled()

    widget.render(_view(drawer=DrawerState.FULL))
    assert not widget.text_view.isHidden()
    assert widget.text_view.toPlainText() == EMPTY_HINT
    assert widget.expand_button.text() == "Collapse"

    widget.render(
        _view(
            drawer=DrawerState.FULL,
            text="a b c",
            word_count=3,
            reading_minutes=1,
            result_kind="success",
        )
    )
    assert widget.text_view.toPlainText() == "a b c"
    assert widget.play_button.isEnabled()
    assert widget.play_button.text() == "Play"
    assert widget.meta_label.text() == "example.com · 3 words · 1 min"
    widget.deleteLater()


def test_drawer_widget_emits_signals() -> None:
    _ensure_qapp()
    widget = ReaderDrawerWidget()
    seen = []
    widget.playToggled.connect(lambda: seen.append("play"))
    widget.closeRequested.connect(lambda: seen.append("close"))
    widget.render(_view(result_kind="success"))

    widget.play_button.click()
    widget.close_button.click()
    assert seen == ["play", "close"]
    widget.deleteLater()
