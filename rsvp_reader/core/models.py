"""Enums and dataclasses shared by the reader core.

WHY: The engine, the adapters, and the HTTP layer all talk about the same
handful of things — what mode words are drawn in, what state playback is
in, the word currently on screen, and the context remembered at a pause.
Defining them once keeps every layer agreeing on field names and meaning.

HOW: Two str-backed enums and three frozen dataclasses:
  DisplayMode   — NAIVE or ORP presentation
  PlaybackState — STOPPED, PLAYING, PAUSED
  RSVPWord      — one emitted display word with its speed and pause flag
  WordContext   — target token plus its surrounding window, for resuming
  SpeedRange    — the forward [min, max] words-per-second range

RULES:
- Enums inherit from str so values serialize cleanly to JSON
- All dataclasses are frozen; observers may hold references safely
- WordContext.context_tokens always contains the target token
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Tuple

from rsvp_reader.config import clamp_speed_range


class DisplayMode(str, enum.Enum):
    """How a token is drawn.

    RULES:
    - naive: the token as-is
    - orp: the focal character wrapped in brackets
    """

    NAIVE = "naive"
    ORP = "orp"


class PlaybackState(str, enum.Enum):
    """Playback lifecycle states.

    WHY: The UI enables and disables controls from this, and gesture
    handling only starts or pauses from specific states.

    RULES:
    - stopped: initial and terminal; index at 0, nothing displayed
    - playing: the timing loop is running
    - paused: loop suspended, last word shown with the paused flag
    """

    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"


@dataclass(frozen=True)
class RSVPWord:
    """One word as published to display consumers.

    RULES:
    - text: already formatted for the active DisplayMode
    - speed: the signed speed in effect when the word was emitted
    - is_paused: True only for the re-emission made by pause()
    """

    text: str
    speed: int
    is_paused: bool = False


@dataclass(frozen=True)
class WordContext:
    """The token under the reader's eye at pause time and its neighbours.

    WHY: Scraped text shifts when the source app scrolls or re-renders, so
    a bare index is useless after the buffer is replaced. The target word
    plus a small window around it is enough to find the same spot again.

    HOW: Built by reconciler.capture_context() from the live buffer. Can
    also be built by hand, in which case target_offset may be left None.

    RULES:
    - target_word: the token at the paused index, unmodified
    - context_tokens: up to radius tokens on each side, clamped at edges
    - target_offset: index of the target inside context_tokens, or None
      to locate it by the first case-insensitive match
    """

    target_word: str
    context_tokens: Tuple[str, ...]
    target_offset: Optional[int] = None


@dataclass(frozen=True)
class SpeedRange:
    """Forward speed range in words per second."""

    min_wps: int
    max_wps: int

    @classmethod
    def clamped(cls, min_wps: int, max_wps: int) -> SpeedRange:
        """Build a range with the configured bounds applied (max >= min)."""
        low, high = clamp_speed_range(min_wps, max_wps)
        return cls(min_wps=low, max_wps=high)

    @property
    def span(self) -> int:
        return self.max_wps - self.min_wps
