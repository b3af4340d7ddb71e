import argparse
from pathlib import Path
from typing import Optional, Sequence, Tuple

from lectern.core.config import ReaderConfig
from lectern.utils.reader_settings import load_reader_settings

__all__ = ["build_parser", "parse_cli"]

_OVERRIDE_KEYS = ("home_url", "locale", "rate", "log_level")


def build_parser() -> argparse.ArgumentParser:
    """Construct the argument parser used by the ``lectern`` entry point."""
    parser = argparse.ArgumentParser(
        description="Browse the web and listen to pages read aloud."
    )
    parser.add_argument(
        "url",
        nargs="?",
        default="",
        help="address or search terms to open (default: the home page)",
    )
    parser.add_argument(
        "--version",
        "-V",
        action="store_true",
        help="show version and exit",
    )
    default_config_file = str(Path.home() / ".lectern" / "reader_settings.json")
    parser.add_argument(
        "--config",
        dest="config",
        default=None,
        help=f"JSON or YAML settings file (default {default_config_file})",
    )
    parser.add_argument(
        "--home",
        dest="home_url",
        default=argparse.SUPPRESS,
        help="home page used for empty addresses",
    )
    parser.add_argument(
        "--locale",
        default=argparse.SUPPRESS,
        help="speech locale, e.g. en-GB",
    )
    parser.add_argument(
        "--rate",
        type=float,
        default=argparse.SUPPRESS,
        help="speech rate multiplier",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=argparse.SUPPRESS,
        help="logging level (DEBUG, INFO, WARNING, ...)",
    )
    return parser


def parse_cli(
    argv: Optional[Sequence[str]] = None,
) -> Tuple[dict, argparse.Namespace, bool]:
    """Parse CLI arguments and return `(settings, namespace, version_requested)`.

    Command-line options override values read from the settings file.
    """
    parser = build_parser()
    namespace = parser.parse_args(argv)

    settings = load_reader_settings(namespace.config)
    for key in _OVERRIDE_KEYS:
        if hasattr(namespace, key):
            settings[key] = getattr(namespace, key)
    return settings, namespace, bool(namespace.version)


def config_from_settings(settings: dict) -> ReaderConfig:
    try:
        return ReaderConfig.from_settings(settings)
    except (TypeError, ValueError) as exc:
        raise SystemExit(f"lectern: invalid settings: {exc}")
