from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from lectern.utils.reader_settings import default_reader_settings


@dataclass(frozen=True)
class ReaderConfig:
    """Validated, immutable view of the reader settings used by the core."""

    home_url: str = "https://duckduckgo.com"
    search_url: str = "https://duckduckgo.com/?q={query}"
    max_chars: int = 20000
    extraction_timeout: float = 2.5
    readability_url: str = (
        "https://unpkg.com/@mozilla/readability@0.5.0/Readability.js"
    )
    locale: str = "en-US"
    rate: float = 0.95
    engine: str = "gtts"

    def __post_init__(self) -> None:
        if self.max_chars <= 0:
            raise ValueError("max_chars must be positive")
        if self.extraction_timeout <= 0:
            raise ValueError("extraction_timeout must be positive")
        if self.rate <= 0:
            raise ValueError("rate must be positive")
        if "{query}" not in self.search_url:
            raise ValueError("search_url must contain a '{query}' placeholder")
        if "://" not in self.home_url:
            raise ValueError("home_url must be an absolute address")

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any] | None = None) -> "ReaderConfig":
        values = default_reader_settings()
        values.update(dict(settings or {}))
        return cls(
            home_url=str(values["home_url"]).strip(),
            search_url=str(values["search_url"]).strip(),
            max_chars=int(values["max_chars"]),
            extraction_timeout=float(values["extraction_timeout"]),
            readability_url=str(values["readability_url"]).strip(),
            locale=str(values["locale"]).strip() or "en-US",
            rate=float(values["rate"]),
            engine=str(values["engine"] or "gtts").strip().lower(),
        )
