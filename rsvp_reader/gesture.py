"""Pointer gesture session driving the engine's speed and play state.

WHY: The whole reading interaction is one drag: touch down to start or
resume, slide up to read faster, slide down to back up, lift to pause.
The overlay only reports raw pointer events; this module turns them into
engine calls and the state of the speed indicator drawn beside the drag
area.

HOW: GestureSession wraps one ReaderEngine. start() and end() call the
engine's touch handlers. move() normalizes the drag distance by the
reference extent, maps it through the speed controller with the engine's
current speed range, pushes the speed, and returns the new IndicatorState.

RULES:
- delta is measured from the touch-down point; positive is upward
- The reference extent is half the overlay height unless overridden
- Speed is not reset on end(); the next touch resumes at the last speed
  until the pointer moves
- The indicator rests at 0.5 in the forward tone between gestures
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from rsvp_reader.config import GESTURE_REFERENCE_EXTENT
from rsvp_reader.core.engine import ReaderEngine
from rsvp_reader.core.speed import (
    INDICATOR_RESTING,
    indicator_fraction,
    indicator_tone,
    normalize_offset,
    speed_for_offset,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndicatorState:
    """Speed indicator appearance.

    RULES:
    - fraction: fill of the indicator scale, 0..1
    - tone: "reverse", "neutral", or "forward"
    """

    fraction: float
    tone: str


RESTING_INDICATOR = IndicatorState(fraction=INDICATOR_RESTING, tone="forward")


class GestureSession:
    """Translates pointer down/move/up into engine calls."""

    def __init__(
        self,
        engine: ReaderEngine,
        reference_extent: float = GESTURE_REFERENCE_EXTENT,
    ) -> None:
        self._engine = engine
        self._reference_extent = reference_extent
        self._indicator = RESTING_INDICATOR
        self._active = False

    @property
    def indicator(self) -> IndicatorState:
        return self._indicator

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> None:
        self._active = True
        self._engine.handle_touch_start()

    def move(self, delta: float, extent: Optional[float] = None) -> IndicatorState:
        """Apply a drag of ``delta`` from the touch point.

        Args:
            delta: Drag distance, positive upward.
            extent: Reference extent for this surface; defaults to the
                    session's configured extent.

        Returns:
            The indicator state for the resulting speed.
        """
        offset = normalize_offset(delta, extent if extent is not None else self._reference_extent)
        speed_range = self._engine.speed_range
        speed = speed_for_offset(offset, speed_range)
        self._engine.set_speed(speed)
        self._indicator = IndicatorState(
            fraction=indicator_fraction(speed, speed_range),
            tone=indicator_tone(speed),
        )
        logger.debug("Gesture offset %.3f → speed %d", offset, speed)
        return self._indicator

    def end(self) -> None:
        self._active = False
        self._engine.handle_touch_end()
        self._indicator = RESTING_INDICATOR
