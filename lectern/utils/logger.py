import datetime
import logging
import os
import sys
from pathlib import Path

import termcolor

__appname__ = "lectern"

if os.name == "nt":  # Windows
    import colorama

    colorama.init()


COLORS = {
    "WARNING": "yellow",
    "INFO": "white",
    "DEBUG": "blue",
    "CRITICAL": "red",
    "ERROR": "red",
}


def resolve_path(path: Path | str) -> Path:
    return Path(path).expanduser().resolve()


def log_dir() -> Path:
    """Directory for dated log files; ``LECTERN_LOG_DIR`` overrides ``~/lectern_logs``."""
    override = os.getenv("LECTERN_LOG_DIR", "").strip()
    if override:
        return resolve_path(override)
    return resolve_path(Path.home() / f"{__appname__}_logs")


def log_file_path() -> Path:
    current_date = datetime.datetime.now().strftime("%Y-%m-%d")
    return log_dir() / f"{__appname__}_{current_date}.log"


class ColoredFormatter(logging.Formatter):
    def __init__(self, fmt, use_color=True):
        logging.Formatter.__init__(self, fmt)
        self.use_color = use_color

    def format(self, record):
        levelname = record.levelname
        record.levelname2 = "{:<7}".format(levelname)
        record.message2 = record.getMessage()
        record.asctime2 = datetime.datetime.fromtimestamp(record.created)
        record.module2 = record.module
        record.funcName2 = record.funcName
        record.lineno2 = record.lineno
        if self.use_color and levelname in COLORS:

            def colored(text):
                return termcolor.colored(
                    text,
                    color=COLORS[levelname],
                    attrs=["bold"],
                )

            record.levelname2 = colored(record.levelname2)
            record.message2 = colored(record.message2)
            record.asctime2 = termcolor.colored(str(record.asctime2), color="green")
            record.module2 = termcolor.colored(record.module, color="cyan")
            record.funcName2 = termcolor.colored(record.funcName, color="cyan")
            record.lineno2 = termcolor.colored(str(record.lineno), color="cyan")
        return logging.Formatter.format(self, record)


logger = logging.getLogger(__appname__)
logger.setLevel(logging.INFO)

# Colored output on stderr
stream_handler = logging.StreamHandler(sys.stderr)
stream_handler.setFormatter(
    ColoredFormatter(
        "%(asctime2)s [%(levelname2)s] %(module2)s:%(funcName2)s:%(lineno2)s"
        " - %(message2)s"
    )
)
logger.addHandler(stream_handler)

# Plain output in the dated log file
try:
    _log_file = log_file_path()
    _log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(_log_file)
except OSError as exc:
    logger.warning("File logging disabled: %s", exc)
else:
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(levelname)s] %(module)s:%(funcName)s:%(lineno)d - %(message)s"
        )
    )
    logger.addHandler(file_handler)


def set_log_level(level: str) -> None:
    """Apply ``level`` (e.g. ``"DEBUG"``) to the package logger."""
    value = str(level or "").strip().upper()
    if not isinstance(logging.getLevelName(value), int):
        logger.warning("Unknown log level '%s'; keeping %s.", level, logging.getLevelName(logger.level))
        return
    logger.setLevel(value)
