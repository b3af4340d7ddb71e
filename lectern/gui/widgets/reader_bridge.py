from __future__ import annotations

from qtpy import QtCore


class _ReaderBridge(QtCore.QObject):
    """Object exposed to page JavaScript over QWebChannel as ``lecternBridge``."""

    message_received = QtCore.Signal(str)

    @QtCore.Slot(str)
    def postMessage(self, payload: str) -> None:  # noqa: N802 - JS-facing slot name
        self.message_received.emit(str(payload or ""))


__all__ = ["_ReaderBridge"]
