"""Best-effort audio output for spoken page text.

Opening PortAudio on hosts without output devices (servers, containers,
WSL) can crash the process, so device detection happens once up front and
playback is skipped with a log line when nothing usable is found.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional

from lectern.utils.logger import logger

try:
    import sounddevice as sd
except Exception as exc:  # pragma: no cover - PortAudio missing
    sd = None
    _IMPORT_ERROR = str(exc)
else:
    _IMPORT_ERROR = ""

_AUDIO_AVAILABLE: Optional[bool] = None
_DISABLE_VALUES = {"1", "true", "yes", "on"}


def _audio_disabled_by_env() -> bool:
    env_value = os.getenv("LECTERN_DISABLE_AUDIO", "").strip().lower()
    if env_value in _DISABLE_VALUES:
        logger.info("Audio playback disabled because LECTERN_DISABLE_AUDIO=%s", env_value)
        return True
    return False


def _linux_has_audio_device() -> bool:
    if not sys.platform.startswith("linux"):
        return True
    snd_path = Path("/dev/snd")
    if not snd_path.exists() or not any(snd_path.iterdir()):
        logger.info("Audio playback disabled: no ALSA devices under /dev/snd.")
        return False
    return True


def audio_playback_available() -> bool:
    """Returns True when sounddevice can play audio without crashing."""
    global _AUDIO_AVAILABLE
    if _AUDIO_AVAILABLE is not None:
        return _AUDIO_AVAILABLE

    if _audio_disabled_by_env() or not _linux_has_audio_device():
        _AUDIO_AVAILABLE = False
        return False

    if sd is None:
        logger.warning(
            "Audio playback disabled: sounddevice could not be imported (%s).",
            _IMPORT_ERROR,
        )
        _AUDIO_AVAILABLE = False
        return False

    try:
        devices = sd.query_devices()
    except Exception as exc:  # pragma: no cover
        logger.warning("Audio playback disabled: cannot enumerate devices (%s).", exc)
        _AUDIO_AVAILABLE = False
        return False

    _AUDIO_AVAILABLE = any(
        device.get("max_output_channels", 0) > 0 for device in devices
    )
    if not _AUDIO_AVAILABLE:
        logger.info("Audio playback disabled: PortAudio found no output devices.")
    return _AUDIO_AVAILABLE


def reset_audio_detection() -> None:
    global _AUDIO_AVAILABLE
    _AUDIO_AVAILABLE = None


def play_audio_buffer(samples, sample_rate: int, *, blocking: bool = False) -> bool:
    """Play ``samples``; False when skipped (no device, bad input, backend error)."""
    if samples is None or getattr(samples, "size", 0) == 0:
        return False
    if sample_rate is None or sample_rate <= 0:
        logger.debug("Audio playback skipped: invalid sample rate %s", sample_rate)
        return False
    if not audio_playback_available():
        return False
    try:
        sd.play(samples, int(sample_rate), blocking=blocking)
        return True
    except Exception as exc:  # pragma: no cover
        logger.warning("Audio playback failed and was skipped: %s", exc)
        return False


def stop_audio_playback() -> None:
    """Stops any active sounddevice playback."""
    if sd is None:
        return
    try:
        sd.stop()
    except Exception as exc:  # pragma: no cover
        logger.debug("sounddevice.stop() failed: %s", exc)


def wait_audio_playback() -> None:
    """Blocks until the current sounddevice playback finishes or is stopped."""
    if sd is None:
        return
    try:
        sd.wait()
    except Exception as exc:  # pragma: no cover
        logger.debug("sounddevice.wait() failed: %s", exc)
