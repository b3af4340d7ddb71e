from __future__ import annotations

import json
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from lectern.utils.logger import logger

_SETTINGS_DIR = Path.home() / ".lectern"
_SETTINGS_FILE = _SETTINGS_DIR / "reader_settings.json"

_DEFAULT_SETTINGS: Dict[str, Any] = {
    "home_url": "https://duckduckgo.com",
    "search_url": "https://duckduckgo.com/?q={query}",
    "max_chars": 20000,
    "extraction_timeout": 2.5,
    "readability_url": "https://unpkg.com/@mozilla/readability@0.5.0/Readability.js",
    "locale": "en-US",
    "rate": 0.95,
    "engine": "gtts",
    "log_level": "INFO",
}


def _normalise_settings(settings: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in _DEFAULT_SETTINGS.items():
        settings.setdefault(key, value)
    return settings


def _read_settings_file(path: Path) -> Optional[Dict[str, Any]]:
    with path.open("r", encoding="utf-8") as fh:
        if path.suffix.lower() in {".yaml", ".yml"}:
            persisted = yaml.safe_load(fh)
        else:
            persisted = json.load(fh)
    return persisted if isinstance(persisted, dict) else None


def load_reader_settings(path: Optional[Path | str] = None) -> Dict[str, Any]:
    """Load reader settings from disk, falling back to defaults.

    ``path`` may point at a JSON or YAML file; the per-user JSON file is used
    when it is omitted.
    """
    source = Path(path).expanduser() if path else _SETTINGS_FILE
    if not source.exists():
        return deepcopy(_DEFAULT_SETTINGS)

    try:
        persisted = _read_settings_file(source)
    except (json.JSONDecodeError, yaml.YAMLError, OSError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", source, exc)
        return deepcopy(_DEFAULT_SETTINGS)

    merged = deepcopy(_DEFAULT_SETTINGS)
    if persisted:
        merged.update(persisted)
    return _normalise_settings(merged)


def save_reader_settings(settings: Dict[str, Any]) -> None:
    """Persist (and merge) reader settings to the per-user JSON file."""
    merged = load_reader_settings()
    if isinstance(settings, dict):
        merged.update(settings)
    merged = _normalise_settings(merged)
    _SETTINGS_DIR.mkdir(parents=True, exist_ok=True)
    with _SETTINGS_FILE.open("w", encoding="utf-8") as fh:
        json.dump(merged, fh, indent=2)


def default_reader_settings() -> Dict[str, Any]:
    """Return a copy of the default reader settings."""
    return deepcopy(_DEFAULT_SETTINGS)
