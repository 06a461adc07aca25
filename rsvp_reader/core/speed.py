"""Gesture-to-speed mapping and the matching speed-indicator scale.

WHY: The reader's pace is a single vertical drag. Small hand tremor around
the touch point must not move the text, reverse is a rare correction
gesture, and forward reading needs fine control across the whole usable
range. The indicator next to the drag area has to show the same bands.

HOW: normalize_offset() turns a raw drag distance into [-1, 1].
speed_for_offset() applies the piecewise mapping: two discrete reverse
presets, a wide neutral band, and a linear forward ramp into the
configured SpeedRange. indicator_fraction() and indicator_tone() map a
speed back onto the indicator's 0..1 scale and colour band.
word_interval_ms() turns a speed into the timing loop's delay.

RULES:
- offset < -0.55 → -5 (fast reverse)
- -0.55 <= offset < -0.15 → -1 (slow reverse)
- -0.15 <= offset < 0.15 → 0 (neutral hold, not a pause)
- offset >= 0.15 → (offset - 0.15) / 0.85 clamped to [0, 1], interpolated
  into [min, max], rounded half-up
- Indicator: -5 → 0.9, -1 → 0.4, 0 → 0.15, forward 0.15..1.0
- Word interval is 1000 / |speed| ms, never below the minimum interval
"""

from __future__ import annotations

import math

from rsvp_reader.config import FAST_REVERSE_SPEED, SLOW_REVERSE_SPEED
from rsvp_reader.core.models import SpeedRange

FAST_REVERSE_THRESHOLD = -0.55
SLOW_REVERSE_THRESHOLD = -0.15
FORWARD_THRESHOLD = 0.15
_FORWARD_SPAN = 1.0 - FORWARD_THRESHOLD  # 0.85

INDICATOR_FAST_REVERSE = 0.9
INDICATOR_SLOW_REVERSE = 0.4
INDICATOR_NEUTRAL = 0.15
INDICATOR_RESTING = 0.5
"""Indicator size while no gesture is in progress."""


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def normalize_offset(delta: float, extent: float) -> float:
    """Normalize a drag distance by the reference extent into [-1, 1].

    WHY: Overlays differ in size; the speed mapping works on a unitless
    offset so the same gesture feels the same on any surface.

    RULES:
    - Positive delta means dragging up (forward)
    - A non-positive extent has no meaningful scale and yields 0.0
    """
    if extent <= 0:
        return 0.0
    return _clamp(delta / extent, -1.0, 1.0)


def speed_for_offset(offset: float, speed_range: SpeedRange) -> int:
    """Map a normalized gesture offset to a signed integer speed.

    WHY: Reverse speeds are two presets by design; only forward reading is
    continuously variable. The neutral band is deliberately wide.

    HOW: Threshold checks from the most negative band upward; the forward
    branch re-normalizes into [0, 1] and interpolates into the range.

    Args:
        offset: Gesture offset, expected in [-1, 1] (clamped here too).
        speed_range: Forward speed bounds.

    Returns:
        Signed speed; negative is reverse, zero is hold.
    """
    offset = _clamp(offset, -1.0, 1.0)
    if offset < FAST_REVERSE_THRESHOLD:
        return FAST_REVERSE_SPEED
    if offset < SLOW_REVERSE_THRESHOLD:
        return SLOW_REVERSE_SPEED
    if offset < FORWARD_THRESHOLD:
        return 0

    fraction = _clamp((offset - FORWARD_THRESHOLD) / _FORWARD_SPAN, 0.0, 1.0)
    # Half-up rounding; round() would use banker's rounding
    return int(math.floor(speed_range.min_wps + fraction * speed_range.span + 0.5))


def indicator_fraction(speed: int, speed_range: SpeedRange) -> float:
    """Return the speed indicator's fill fraction (0..1) for a speed.

    RULES:
    - Reverse presets and neutral use fixed bands
    - Forward speeds scale from 0.15 at min to 1.0 at max
    - A zero-width range shows full scale
    """
    if speed == FAST_REVERSE_SPEED:
        return INDICATOR_FAST_REVERSE
    if speed == SLOW_REVERSE_SPEED:
        return INDICATOR_SLOW_REVERSE
    if speed == 0:
        return INDICATOR_NEUTRAL
    if speed_range.span == 0:
        return 1.0
    forward = (speed - speed_range.min_wps) / speed_range.span
    return _clamp(INDICATOR_NEUTRAL + forward * _FORWARD_SPAN, INDICATOR_NEUTRAL, 1.0)


def indicator_tone(speed: int) -> str:
    """Colour band of the indicator: reverse, neutral, or forward."""
    if speed < 0:
        return "reverse"
    if speed == 0:
        return "neutral"
    return "forward"


def word_interval_ms(speed: int, min_interval_ms: int) -> int:
    """Delay between words for a non-zero speed, capped at the max display rate."""
    return max(int(1000.0 / abs(speed)), min_interval_ms)
