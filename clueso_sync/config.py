"""Configuration constants and .env loading.

WHY: Speech-rate heuristics, drift tolerances, and loop frequencies are
tuning knobs. Keeping them as plain module-level values (not buried in
logic) makes them easy to find and override per deployment.

HOW: python-dotenv loads the .env file on import. Every constant reads an
environment variable with a typed fallback via the small _env_float and
_env_int helpers.

RULES:
- Speech rate is 3.5 syllables/second; each pause mark adds 0.15 s
- Drift tolerance is 0.15 s, checked every 100 ms
- The clock-pull loop runs at 60 Hz
- Play/pause toggles are debounced for 100 ms
- Malformed environment values fall back to the default (logged)
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load .env from the project root (where the process is started)
load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


# ---------------------------------------------------------------------------
# Narration estimation
# ---------------------------------------------------------------------------

SPEECH_RATE_SYLLABLES_PER_S = _env_float("CLUESO_SPEECH_RATE", 3.5)
"""Assumed natural speaking rate used by the duration estimator."""

PUNCTUATION_PAUSE_S = _env_float("CLUESO_PUNCTUATION_PAUSE_S", 0.15)
"""Pause added per punctuation mark in the duration estimate."""

PUNCTUATION_WEIGHT = 0.3
"""Extra alignment weight for a word carrying trailing punctuation."""

TIME_DECIMALS = 3
"""Word span timestamps are rounded to milliseconds."""

# ---------------------------------------------------------------------------
# Synchronization loop
# ---------------------------------------------------------------------------

DRIFT_TOLERANCE_S = _env_float("CLUESO_DRIFT_TOLERANCE_S", 0.15)
DRIFT_CHECK_INTERVAL_S = _env_float("CLUESO_DRIFT_CHECK_INTERVAL_S", 0.1)
CLOCK_TICK_HZ = _env_int("CLUESO_CLOCK_TICK_HZ", 60)
TOGGLE_DEBOUNCE_S = _env_float("CLUESO_TOGGLE_DEBOUNCE_S", 0.1)

# ---------------------------------------------------------------------------
# Timeline UI
# ---------------------------------------------------------------------------

DEFAULT_PIXELS_PER_SECOND = _env_float("CLUESO_PIXELS_PER_SECOND", 50.0)

# ---------------------------------------------------------------------------
# HTTP API
# ---------------------------------------------------------------------------

API_HOST = os.getenv("CLUESO_API_HOST", "0.0.0.0")
API_PORT = _env_int("CLUESO_API_PORT", 8000)
