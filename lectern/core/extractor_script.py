"""Page-side text extraction script and the host-side view of its messages.

The script runs inside whatever page the renderer currently shows, so every
step is wrapped in ``try``/``catch`` and it reports through a single
``pageText`` message posted to the host bridge. Nothing it does may throw
back into the page or the host.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Optional

PAGE_TEXT_TYPE = "pageText"
TRUNCATION_MARKER = "\n\n…"
DEFAULT_MAX_CHARS = 20000
DEFAULT_READABILITY_URL = (
    "https://unpkg.com/@mozilla/readability@0.5.0/Readability.js"
)
BRIDGE_OBJECT_NAME = "lecternBridge"
POST_FUNCTION = "__lecternPost"

_BLANK_RUN_RE = re.compile(r"\n{3,}")


def clean_text(text: str) -> str:
    """Collapse runs of 3+ newlines to a paragraph break and trim."""
    return _BLANK_RUN_RE.sub("\n\n", str(text or "")).strip()


def truncate_text(text: str, max_chars: int = DEFAULT_MAX_CHARS) -> str:
    """Bound ``text`` to ``max_chars`` followed by the ellipsis marker.

    Already-truncated script output is returned unchanged.
    """
    value = str(text or "")
    if len(value) <= max_chars:
        return value
    if len(value) == max_chars + len(TRUNCATION_MARKER) and value.endswith(
        TRUNCATION_MARKER
    ):
        return value
    return value[:max_chars] + TRUNCATION_MARKER


@dataclass(frozen=True)
class ChannelMessage:
    """One message received from the page, after parsing."""

    text: str
    title: str = ""
    seq: Optional[int] = None
    raw: bool = False


def parse_channel_payload(
    payload: object, *, max_chars: int = DEFAULT_MAX_CHARS
) -> ChannelMessage:
    """Parse a channel payload, falling back to treating it as raw text.

    Well-formed payloads are JSON objects with ``type == "pageText"``.
    Anything else (bad JSON, another ``type``, a bare string) keeps the
    whole payload string as the text.
    """
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8", errors="replace")
    if isinstance(payload, dict):
        data = payload
        raw_text = json.dumps(payload)
    else:
        raw_text = "" if payload is None else str(payload)
        try:
            data = json.loads(raw_text)
        except (TypeError, ValueError):
            data = None

    if not isinstance(data, dict) or data.get("type") != PAGE_TEXT_TYPE:
        return ChannelMessage(
            text=truncate_text(clean_text(raw_text), max_chars), raw=True
        )

    seq_value = data.get("seq")
    try:
        seq = int(seq_value) if seq_value is not None else None
    except (TypeError, ValueError):
        seq = None
    return ChannelMessage(
        text=truncate_text(clean_text(str(data.get("text") or "")), max_chars),
        title=str(data.get("title") or "").strip(),
        seq=seq,
    )


def build_channel_bootstrap(qwebchannel_source: str) -> str:
    """Script installed at document creation that wires ``__lecternPost``.

    Messages posted before the QWebChannel handshake completes are buffered
    and flushed once the bridge object is available.
    """
    return f"""
{qwebchannel_source}
(() => {{
  try {{
    if (window.{POST_FUNCTION}) return;
    const backlog = [];
    let bridge = null;
    window.{POST_FUNCTION} = (message) => {{
      try {{
        if (bridge) bridge.postMessage(String(message));
        else backlog.push(String(message));
      }} catch (e) {{}}
    }};
    if (window.qt && window.qt.webChannelTransport && typeof QWebChannel !== "undefined") {{
      new QWebChannel(window.qt.webChannelTransport, (channel) => {{
        bridge = channel.objects.{BRIDGE_OBJECT_NAME} || null;
        if (!bridge) return;
        while (backlog.length) bridge.postMessage(backlog.shift());
      }});
    }}
  }} catch (e) {{}}
}})();
""".strip()


def build_extraction_script(
    seq: int,
    *,
    max_chars: int = DEFAULT_MAX_CHARS,
    readability_url: str = DEFAULT_READABILITY_URL,
) -> str:
    """JavaScript that pulls readable text from the page and posts it once."""
    limit = max(1, int(max_chars))
    src_js = json.dumps(str(readability_url or ""))
    marker_js = json.dumps(TRUNCATION_MARKER)
    return f"""
(() => {{
  const seq = {int(seq)};
  const max = {limit};
  const post = (payload) => {{
    try {{
      if (typeof window.{POST_FUNCTION} === "function") {{
        window.{POST_FUNCTION}(JSON.stringify(payload));
      }}
    }} catch (e) {{}}
  }};
  const ensureReadability = () => new Promise((resolve) => {{
    try {{
      if (window.Readability) return resolve(true);
      const src = {src_js};
      if (!src || !document.head) return resolve(false);
      const script = document.createElement("script");
      script.src = src;
      script.onload = () => resolve(true);
      script.onerror = () => resolve(false);
      document.head.appendChild(script);
    }} catch (e) {{
      resolve(false);
    }}
  }});
  const innerTextOf = (selector) => {{
    try {{
      const el = document.querySelector(selector);
      return (el && el.innerText) ? String(el.innerText) : "";
    }} catch (e) {{
      return "";
    }}
  }};
  const extract = () => {{
    let text = "";
    let title = "Untitled";
    try {{
      if (window.Readability) {{
        const article = new window.Readability(document.cloneNode(true)).parse();
        if (article && article.textContent) text = String(article.textContent);
      }}
    }} catch (e) {{}}
    const articleText = innerTextOf("article");
    if (articleText.length > text.length) text = articleText;
    const mainText = innerTextOf("main");
    if (mainText.length > text.length) text = mainText;
    try {{
      if (!text.trim() && document.body && document.body.innerText) {{
        text = String(document.body.innerText);
      }}
    }} catch (e) {{}}
    try {{
      title = String(document.title || "Untitled");
    }} catch (e) {{}}
    text = text.replace(/\\n{{3,}}/g, "\\n\\n").trim();
    if (text.length > max) text = text.slice(0, max) + {marker_js};
    post({{ type: "{PAGE_TEXT_TYPE}", seq, title, text }});
  }};
  ensureReadability().then(extract, extract);
}})();
true;
""".strip()
