"""Configuration constants, caption limit overrides, and .env loading.

WHY: Centralizes all configurable values so they are easy to find, update,
and override: the Groq endpoint and model names, accepted upload types, and
the caption constraint set the engine runs with.

HOW: python-dotenv loads the .env file on import. Constants are module-level
strings and sets read from the environment with defaults. load_api_key()
gives a clear error when the key is missing. load_caption_config() returns a
fresh copy of the engine constraints with environment overrides applied.

RULES:
- API key is loaded from .env via python-dotenv, never hardcoded
- Caption overrides use seconds for durations; the engine dict stores ms
- A malformed override raises ValueError naming the variable
- The returned caption config is a copy; the engine constants are never touched
"""

from __future__ import annotations

import copy
import os

from dotenv import load_dotenv

from caption_engine.models import seconds_to_ms
from caption_engine.presets import CAPTION_CONSTRAINTS

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Groq API configuration defaults
# ---------------------------------------------------------------------------

GROQ_BASE_URL = os.getenv("GROQ_BASE_URL", "https://api.groq.com/openai/v1")
GROQ_TRANSCRIPTION_MODEL = os.getenv("GROQ_TRANSCRIPTION_MODEL", "whisper-large-v3-turbo")
GROQ_HIGH_QUALITY_MODEL = os.getenv("GROQ_HIGH_QUALITY_MODEL", "whisper-large-v3")
GROQ_TRANSLATION_MODEL = os.getenv("GROQ_TRANSLATION_MODEL", "whisper-large-v3-turbo")
GROQ_CHAT_MODEL = os.getenv("GROQ_CHAT_MODEL", "llama-3.1-70b-versatile")

# ---------------------------------------------------------------------------
# Supported upload extensions
# ---------------------------------------------------------------------------

SUPPORTED_MEDIA_FORMATS: set[str] = {
    ".mp4", ".mov", ".mkv", ".webm", ".avi", ".m4v",
    ".mp3", ".wav", ".m4a", ".flac", ".ogg", ".aac",
}
"""Audio/video file extensions ffmpeg is asked to decode (lowercase, with dot)."""

# ---------------------------------------------------------------------------
# Caption constraint overrides
# ---------------------------------------------------------------------------

# env var → config key
_INT_OVERRIDES = {
    "CAPTION_MAX_WORDS": "max_words",
    "CAPTION_MAX_CHARS_PER_LINE": "max_chars_per_line",
    "CAPTION_MAX_LINES": "max_lines",
}
_SECONDS_OVERRIDES = {
    "CAPTION_MIN_DURATION": "min_duration_ms",
    "CAPTION_MAX_DURATION": "max_duration_ms",
    "CAPTION_MIN_GAP": "min_gap_ms",
}


def load_api_key() -> str:
    """Load the Groq API key from the environment.

    WHY: The key is required for every Groq call. Loading it from the
    environment (via .env) keeps it out of source code.

    RULES:
    - Raises ValueError if the key is missing or empty
    - Never returns a default/placeholder value
    """
    key = os.getenv("GROQ_API_KEY", "").strip()
    if not key:
        raise ValueError(
            "Groq API key not configured. "
            "Add GROQ_API_KEY to the .env file or the environment."
        )
    return key


def load_caption_config() -> dict:
    """Return the caption constraint dict with environment overrides applied.

    WHY: Broadcasters and social clips want different limits, but the engine
    must see one fixed dict for a whole run. Reading overrides once, up
    front, gives both.

    HOW: Deep-copies CAPTION_CONSTRAINTS, then applies any CAPTION_* variable
    that is set. Durations are given in seconds and stored in milliseconds.

    RULES:
    - Unset or empty variables leave the default in place
    - Integers must parse as int, durations and reading speed as float
    - CAPTION_PRESERVE_DURATION accepts true/false (case-insensitive)
    """
    config = copy.deepcopy(CAPTION_CONSTRAINTS)

    for env_name, key in _INT_OVERRIDES.items():
        raw = _read(env_name)
        if raw is not None:
            config[key] = _parse(env_name, raw, int)

    for env_name, key in _SECONDS_OVERRIDES.items():
        raw = _read(env_name)
        if raw is not None:
            config[key] = seconds_to_ms(_parse(env_name, raw, float))

    raw = _read("CAPTION_READING_SPEED")
    if raw is not None:
        config["reading_speed"] = _parse("CAPTION_READING_SPEED", raw, float)

    raw = _read("CAPTION_PRESERVE_DURATION")
    config["preserve_duration"] = (raw or "false").lower() == "true"

    return config


def _read(env_name: str) -> str | None:
    value = os.getenv(env_name, "").strip()
    return value or None


def _parse(env_name: str, raw: str, kind: type):
    try:
        value = kind(raw)
    except ValueError:
        raise ValueError(
            "Invalid value for {}: {!r} (expected {})".format(env_name, raw, kind.__name__)
        ) from None
    if value <= 0:
        raise ValueError("{} must be positive, got {}".format(env_name, raw))
    return value
