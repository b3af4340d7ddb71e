from lectern.gui.widgets.reader_drawer import ReaderDrawerWidget
from lectern.gui.widgets.web_reader import WebReaderWidget

__all__ = ["ReaderDrawerWidget", "WebReaderWidget"]
