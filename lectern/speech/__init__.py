"""Text-to-speech backends used by the reader's playback controller."""
