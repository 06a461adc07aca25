"""Configuration constants, playback defaults, and .env loading.

WHY: Speed bounds, loop pacing, and server settings are tuning knobs that
belong in one place. Keeping them as plain module-level values (not
buried in the engine) makes them easy to find and override per machine.

HOW: python-dotenv loads the .env file on import. Every default can be
overridden with an ``RSVP_*`` environment variable. clamp_speed_range()
applies the settings-screen bounds to a requested [min, max] range.

RULES:
- Speeds are words per second; sign encodes direction
- The forward range may start below zero (down to SPEED_FLOOR) but never
  exceeds SPEED_CEILING
- max_wps is never below min_wps after clamping
- Loop timings are integer milliseconds
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Speed range
# ---------------------------------------------------------------------------

SPEED_FLOOR = -5
"""Lowest value the forward range minimum may be set to."""

SPEED_CEILING = 100
"""Highest value the forward range maximum may be set to."""

FAST_REVERSE_SPEED = -5
SLOW_REVERSE_SPEED = -1

DEFAULT_MIN_WPS = int(os.getenv("RSVP_MIN_WPS", "3"))
DEFAULT_MAX_WPS = int(os.getenv("RSVP_MAX_WPS", "45"))
DEFAULT_MODE = os.getenv("RSVP_MODE", "naive").lower()

# ---------------------------------------------------------------------------
# Timing loop
# ---------------------------------------------------------------------------

IDLE_POLL_MS = int(os.getenv("RSVP_IDLE_POLL_MS", "100"))
MIN_WORD_INTERVAL_MS = int(os.getenv("RSVP_MIN_WORD_INTERVAL_MS", "50"))

# ---------------------------------------------------------------------------
# Reconciliation and gestures
# ---------------------------------------------------------------------------

CONTEXT_RADIUS = int(os.getenv("RSVP_CONTEXT_RADIUS", "3"))

GESTURE_REFERENCE_EXTENT = float(os.getenv("RSVP_GESTURE_EXTENT", "150.0"))
"""Drag distance (px) that maps to a full-scale offset of 1.0."""

# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

SERVER_HOST = os.getenv("RSVP_HOST", "127.0.0.1")
SERVER_PORT = int(os.getenv("RSVP_PORT", "8765"))
LOG_LEVEL = os.getenv("RSVP_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def clamp_speed_range(min_wps: int, max_wps: int) -> tuple[int, int]:
    """Bound a requested forward speed range to the supported limits.

    WHY: A settings UI or HTTP client can ask for anything. Passing
    min > max is a caller contract violation, but the reader should keep
    working rather than fail, so the range is repaired instead.

    HOW: min is clamped to [SPEED_FLOOR, SPEED_CEILING], max to
    [min, SPEED_CEILING].

    RULES:
    - Returns (min_wps, max_wps) with SPEED_FLOOR <= min <= max <= SPEED_CEILING
    - Never raises
    """
    low = max(SPEED_FLOOR, min(int(min_wps), SPEED_CEILING))
    high = max(low, min(int(max_wps), SPEED_CEILING))
    return low, high
