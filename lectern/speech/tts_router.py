from __future__ import annotations

import re
from io import BytesIO
from typing import Callable, Dict, Optional, Tuple

import numpy as np

from lectern.utils.logger import logger

AudioBuffer = Tuple[np.ndarray, int]

# gTTS picks the accent from the Google domain rather than the language code.
_GTTS_TLD_BY_REGION = {
    "us": "us",
    "gb": "co.uk",
    "uk": "co.uk",
    "au": "com.au",
    "ca": "ca",
    "in": "co.in",
    "ie": "ie",
    "za": "co.za",
}


def gtts_voice_for_locale(locale: str) -> Tuple[str, str]:
    """Map a BCP-47 locale (``en-US``) to gTTS ``(lang, tld)``."""
    value = str(locale or "").strip().replace("_", "-")
    if not value:
        return "en", "com"
    lang, _, region = value.partition("-")
    lang = lang.lower() or "en"
    if lang == "zh" and region:
        return f"zh-{region.upper()}", "com"
    return lang, _GTTS_TLD_BY_REGION.get(region.lower(), "com")


def _synthesize_gtts(text: str, settings: Dict[str, object]) -> Optional[AudioBuffer]:
    from gtts import gTTS
    from pydub import AudioSegment

    lang, tld = gtts_voice_for_locale(str(settings.get("locale", "en-US")))
    tts = gTTS(text=text, lang=lang, tld=tld)
    buf = BytesIO()
    tts.write_to_fp(buf)
    buf.seek(0)
    audio = AudioSegment.from_file(buf, format="mp3")
    samples = np.array(audio.get_array_of_samples())
    if samples.size == 0:
        return None
    if audio.channels == 2:
        samples = samples.reshape((-1, 2))
    return samples, int(audio.frame_rate)


_ENGINES: Dict[str, Callable[[str, Dict[str, object]], Optional[AudioBuffer]]] = {
    "gtts": _synthesize_gtts,
}


def synthesize_tts(
    text: str, tts_settings: Optional[Dict[str, object]] = None
) -> Optional[AudioBuffer]:
    """
    Synthesise audio for ``text`` using the configured TTS engine.

    Returns ``(samples, sample_rate)`` or None when synthesis failed.
    """
    settings: Dict[str, object] = dict(tts_settings or {})
    engine = str(settings.get("engine", "gtts") or "gtts").strip().lower()
    text = (text or "").strip()
    if not text:
        return None

    synthesize = _ENGINES.get(engine)
    if synthesize is None:
        logger.warning(f"Unknown TTS engine '{engine}'.")
        return None
    try:
        return synthesize(text, settings)
    except Exception as exc:
        logger.warning(f"TTS engine '{engine}' failed: {exc}")
        return None


def chunk_text(text: str, max_chars: int = 420) -> list[str]:
    """Split text into sentence-aligned chunks no longer than ``max_chars``.

    Sentences longer than the limit are split on word boundaries.
    """
    cleaned = re.sub(r"\s+", " ", str(text or "").strip())
    if not cleaned:
        return []
    sentences = [s.strip() for s in re.split(r"(?<=[.!?。！？])\s+", cleaned) if s.strip()]

    chunks: list[str] = []
    current = ""
    for sentence in sentences:
        if len(sentence) > max_chars:
            if current:
                chunks.append(current)
                current = ""
            piece = ""
            for word in sentence.split(" "):
                if piece and len(piece) + 1 + len(word) > max_chars:
                    chunks.append(piece)
                    piece = word
                else:
                    piece = f"{piece} {word}" if piece else word
            current = piece
            continue
        if current and len(current) + 1 + len(sentence) > max_chars:
            chunks.append(current)
            current = sentence
        else:
            current = f"{current} {sentence}" if current else sentence
    if current:
        chunks.append(current)
    return chunks
