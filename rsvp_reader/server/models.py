"""Pydantic request/response models for the HTTP API.

WHY: The overlay, the scraper bridge, and any settings UI talk to the
engine over HTTP. Typed schemas validate their payloads at the boundary
and generate the OpenAPI docs they are written against.

HOW: One model per request body and per response shape. Enum values
reuse the core enums so the wire values match the engine's exactly.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Mode and state values are the lowercase enum values from core.models
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from rsvp_reader.core.models import DisplayMode, PlaybackState


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class CaptureRequest(BaseModel):
    """Raw text scraped from the source screen."""

    text: str = Field(description="Visible source text, exactly as captured.")


class GestureMoveRequest(BaseModel):
    """A pointer move relative to the touch-down point.

    RULES:
    - delta is positive when dragging up (forward)
    - extent, when given, must be positive; it defaults to the server's
      configured reference extent
    """

    delta: float = Field(description="Vertical drag distance from the touch point (px, up is positive).")
    extent: Optional[float] = Field(
        default=None,
        gt=0,
        description="Reference extent (px) for a full-scale offset. Defaults to server config.",
    )


class SpeedRangeRequest(BaseModel):
    """Forward speed range; clamped by the engine, never rejected for order."""

    min_wps: int = Field(description="Slowest forward speed (words per second).")
    max_wps: int = Field(description="Fastest forward speed (words per second).")


class ModeRequest(BaseModel):
    mode: DisplayMode = Field(description="Display mode: 'naive' or 'orp'.")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class WordResponse(BaseModel):
    """The word currently on screen."""

    text: str = Field(description="Formatted display text.")
    speed: int = Field(description="Signed speed when the word was emitted.")
    is_paused: bool = Field(description="True when re-shown by a pause.")


class CaptureResponse(BaseModel):
    accepted: bool = Field(description="False when the text was blank or unchanged.")
    token_count: int = Field(description="Tokens in the engine's buffer after the capture.")
    index: int = Field(description="Engine position after the capture.")
    state: PlaybackState = Field(description="Playback state after the capture.")


class IndicatorResponse(BaseModel):
    fraction: float = Field(description="Indicator fill, 0..1.")
    tone: str = Field(description="'reverse', 'neutral' or 'forward'.")


class GestureResponse(BaseModel):
    speed: int = Field(description="Current signed speed.")
    state: PlaybackState = Field(description="Playback state after the gesture event.")
    indicator: IndicatorResponse = Field(description="Speed indicator appearance.")


class StateResponse(BaseModel):
    """Snapshot of the engine for UI affordances."""

    state: PlaybackState = Field(description="Playback state.")
    index: int = Field(description="Next position to read.")
    last_displayed_index: int = Field(description="Index of the word on screen, or -1.")
    token_count: int = Field(description="Tokens in the active buffer.")
    speed: int = Field(description="Current signed speed.")
    mode: DisplayMode = Field(description="Display mode.")
    min_wps: int = Field(description="Forward speed range minimum.")
    max_wps: int = Field(description="Forward speed range maximum.")
    word: Optional[WordResponse] = Field(default=None, description="Word on screen, if any.")


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is always a human-readable error message
    """

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
