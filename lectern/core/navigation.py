from __future__ import annotations

import re
import urllib.parse
from dataclasses import dataclass, replace

DEFAULT_HOME_URL = "https://duckduckgo.com"
DEFAULT_SEARCH_URL = "https://duckduckgo.com/?q={query}"

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")
# Characters left alone by JavaScript's encodeURIComponent.
_QUERY_SAFE = "-_.!~*'()"


def normalize(
    raw: str,
    *,
    home_url: str = DEFAULT_HOME_URL,
    search_url: str = DEFAULT_SEARCH_URL,
) -> str:
    """Turn address-bar input into a loadable address.

    Blank input goes home, anything with a scheme passes through, dotted
    single tokens are treated as hosts and the rest becomes a search query.
    """
    value = str(raw or "").strip()
    if not value:
        return home_url
    if _SCHEME_RE.match(value):
        return value
    if "." in value and not re.search(r"\s", value):
        return f"https://{value}"
    query = urllib.parse.quote(value, safe=_QUERY_SAFE)
    return search_url.replace("{query}", query)


def display_host(address: str) -> str:
    """Hostname without a leading ``www.``; empty when there is none."""
    try:
        host = urllib.parse.urlsplit(str(address or "").strip()).hostname or ""
    except ValueError:
        return ""
    return re.sub(r"^www\.", "", host)


@dataclass(frozen=True)
class NavigationState:
    """Renderer-reported navigation snapshot."""

    address: str = ""
    title: str = ""
    can_go_back: bool = False
    can_go_forward: bool = False
    progress: float = 0.0
    loading: bool = False

    def with_progress(self, progress: float) -> "NavigationState":
        return replace(self, progress=max(0.0, min(1.0, float(progress))))

    @property
    def is_secure(self) -> bool:
        return self.address.lower().startswith("https")
