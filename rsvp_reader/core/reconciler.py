"""Resume-point reconciliation between token buffers.

WHY: The source text is re-scraped whenever the source app scrolls or
re-renders, and each capture replaces the buffer wholesale. Indices are
not stable across captures, so the paused position has to be found again
in the new buffer by content. Common words repeat, so the target word
alone is not enough; its neighbours disambiguate.

HOW: capture_context() snapshots the target token and a ±radius window
when playback pauses. find_resume_index() enumerates case-insensitive
occurrences of the target in the new buffer, lays the remembered window
over each one, counts position-wise matches, and accepts the first
occurrence with at least half the window matching.

RULES:
- New buffer shorter than the window → None (not enough data)
- Window start is clamped to 0; comparison stops at the buffer end
- Threshold is len(window) // 2 (a window of 7 needs 3 matches)
- Candidates are tried in ascending index order; first pass wins
- Comparison is case-insensitive (str.casefold)
- No match → None; the caller treats the buffer as fresh
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from rsvp_reader.config import CONTEXT_RADIUS
from rsvp_reader.core.models import WordContext

logger = logging.getLogger(__name__)


def _same(a: str, b: str) -> bool:
    return a.casefold() == b.casefold()


def capture_context(
    tokens: Sequence[str],
    index: int,
    radius: int = CONTEXT_RADIUS,
) -> Optional[WordContext]:
    """Snapshot the token at ``index`` and up to ``radius`` neighbours each side.

    RULES:
    - Returns None if index is outside the buffer
    - The window is clamped at both buffer edges
    - target_offset records where the target sits inside the window

    Args:
        tokens: The live token buffer.
        index: Index of the word currently shown (last displayed).
        radius: Tokens to keep on each side of the target.

    Returns:
        A WordContext, or None when there is nothing to remember.
    """
    if index < 0 or index >= len(tokens):
        return None

    start = max(index - radius, 0)
    end = min(index + radius, len(tokens) - 1)
    return WordContext(
        target_word=tokens[index],
        context_tokens=tuple(tokens[start:end + 1]),
        target_offset=index - start,
    )


def _target_offset(context: WordContext) -> Optional[int]:
    """Position of the target inside the remembered window."""
    window = context.context_tokens
    offset = context.target_offset
    if offset is not None and 0 <= offset < len(window):
        return offset
    for i, token in enumerate(window):
        if _same(token, context.target_word):
            return i
    return None


def _window_matches(tokens: Sequence[str], start: int, window: Sequence[str]) -> int:
    """Count window positions whose token equals the buffer token at start + i."""
    matches = 0
    for i, expected in enumerate(window):
        position = start + i
        if position >= len(tokens):
            break
        if _same(tokens[position], expected):
            matches += 1
    return matches


def find_resume_index(
    tokens: Sequence[str],
    context: WordContext,
) -> Optional[int]:
    """Find the index in ``tokens`` that corresponds to the remembered context.

    WHY: Resuming by exact index after a re-scrape either skips or repeats
    text. Anchoring on the target word and checking its neighbourhood
    tolerates small drift while rejecting unrelated repeats of the word.

    HOW: See module docstring; this is the whole algorithm.

    Args:
        tokens: The freshly tokenized buffer.
        context: The context remembered at pause time.

    Returns:
        The resume index, or None when no occurrence clears the threshold.
    """
    window = context.context_tokens
    if len(tokens) < len(window):
        logger.debug(
            "Resume rejected: buffer has %d tokens, window needs %d",
            len(tokens), len(window),
        )
        return None

    offset = _target_offset(context)
    if offset is None:
        return None

    candidates: List[int] = [
        i for i, token in enumerate(tokens) if _same(token, context.target_word)
    ]
    threshold = len(window) // 2

    for candidate in candidates:
        start = max(candidate - offset, 0)
        matches = _window_matches(tokens, start, window)
        if matches >= threshold:
            logger.debug(
                "Resume at %d (%d/%d window matches, %d candidates)",
                candidate, matches, len(window), len(candidates),
            )
            return candidate

    logger.debug(
        "No resume point for %r among %d candidates",
        context.target_word, len(candidates),
    )
    return None
