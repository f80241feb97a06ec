"""Configuration constants, segmentation defaults, and .env loading.

WHY: Centralizes all tunable values so they are easy to find, update,
and override. The utterance segmentation thresholds in particular are
heuristics that editors tweak per project, so they live here as plain
data and not buried in the segmenter.

HOW: python-dotenv loads the .env file on import. Constants are defined
at module level and may be overridden via environment variables.
_env_int() gives a clear error when an override is not an integer.

RULES:
- Segmentation defaults: gap 500 ms, min 2 words, min 800 ms,
  max 5000 ms, max 10 words
- All defaults can be overridden via VIDSCRIBER_* environment variables
- OUTPUT_VERSION is part of the output contract; change with care
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()


def _env_int(name: str, default: int) -> int:
    """Read an integer override from the environment.

    RULES:
    - Missing or blank variable → default
    - Non-integer value → ValueError naming the variable
    """
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(
            "Environment variable {} must be an integer, got {!r}".format(name, raw)
        ) from None


# ---------------------------------------------------------------------------
# Output contract
# ---------------------------------------------------------------------------

OUTPUT_VERSION = "vidscriber.v1"
"""Version tag written at the top of every compiled document."""

# ---------------------------------------------------------------------------
# Utterance segmentation defaults
# ---------------------------------------------------------------------------

DEFAULT_GAP_THRESHOLD_MS = _env_int("VIDSCRIBER_GAP_THRESHOLD_MS", 500)
DEFAULT_MIN_WORDS_PER_SEGMENT = _env_int("VIDSCRIBER_MIN_WORDS_PER_SEGMENT", 2)
DEFAULT_MIN_DURATION_MS = _env_int("VIDSCRIBER_MIN_DURATION_MS", 800)
DEFAULT_MAX_DURATION_MS = _env_int("VIDSCRIBER_MAX_DURATION_MS", 5000)
DEFAULT_MAX_WORDS_PER_SEGMENT = _env_int("VIDSCRIBER_MAX_WORDS_PER_SEGMENT", 10)

TERMINAL_PUNCTUATION = (".", "?", "!", "…")
"""A word ending in one of these may close an utterance."""

# ---------------------------------------------------------------------------
# Logging and HTTP API
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("VIDSCRIBER_LOG_LEVEL", "INFO").upper()
API_HOST = os.getenv("VIDSCRIBER_API_HOST", "0.0.0.0")
API_PORT = _env_int("VIDSCRIBER_API_PORT", 8000)
