import sys
from typing import Optional

from qtpy import QtCore, QtGui, QtWidgets

from lectern.core.config import ReaderConfig
from lectern.gui.application import create_qapp
from lectern.gui.cli import config_from_settings, parse_cli
from lectern.gui.widgets.web_reader import WebReaderWidget
from lectern.utils.logger import __appname__, logger, set_log_level
from lectern.version import get_version


class LecternWindow(QtWidgets.QMainWindow):
    def __init__(
        self,
        config: Optional[ReaderConfig] = None,
        parent: Optional[QtWidgets.QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Lectern")
        self.resize(1100, 800)
        self.settings = QtCore.QSettings("lectern", "lectern")
        geometry = self.settings.value("window/geometry")
        if isinstance(geometry, QtCore.QByteArray):
            self.restoreGeometry(geometry)

        self.reader = WebReaderWidget(config=config, parent=self)
        self.reader.status_changed.connect(
            lambda message: self.statusBar().showMessage(message, 5000)
        )
        self.setCentralWidget(self.reader)
        self.statusBar().showMessage(self.tr("%s started.") % __appname__)
        self.statusBar().show()

    def open(self, raw: str = "") -> None:
        self.reader.load_url(raw)

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # noqa: N802 - Qt override
        self.settings.setValue("window/geometry", self.saveGeometry())
        self.reader.shutdown()
        super().closeEvent(event)


def main(argv=None):
    settings, namespace, version_requested = parse_cli(argv)
    if version_requested:
        print(get_version())
        return 0

    set_log_level(settings.get("log_level", "INFO"))
    config = config_from_settings(settings)

    qt_args = sys.argv if argv is None else [sys.argv[0], *argv]
    app = create_qapp(qt_args)

    win = LecternWindow(config=config)
    logger.info("Qt settings file: %s", win.settings.fileName())
    win.show()
    win.raise_()
    win.open(namespace.url)
    return app.exec_()


if __name__ == "__main__":
    sys.exit(main())
