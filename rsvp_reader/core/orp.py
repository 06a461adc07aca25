"""Word formatting with an optional optimal-recognition-point marker.

WHY: In ORP mode the eye is given a fixation target inside each word so
it does not wander between frames. The focal character is picked from the
word length alone; display tests compare strings exactly, so the length
breakpoints are fixed.

HOW: orp_index() maps length to a focal index, format_orp() wraps that
character in brackets, format_word() dispatches on DisplayMode.

RULES:
- Length <= 1: no focal point, word returned unchanged
- Length <= 5 → 1, <= 9 → 2, <= 13 → 3, longer → 4
- Output is prefix + "[" + focal char + "]" + suffix
"""

from __future__ import annotations

from typing import Optional

from rsvp_reader.core.models import DisplayMode

# (max length, focal index) pairs, checked in order
_ORP_BREAKPOINTS = ((5, 1), (9, 2), (13, 3))
_ORP_LONG_INDEX = 4


def orp_index(word: str) -> Optional[int]:
    """Return the focal character index for a word, or None if it has none."""
    length = len(word)
    if length <= 1:
        return None
    for max_length, index in _ORP_BREAKPOINTS:
        if length <= max_length:
            return index
    return _ORP_LONG_INDEX


def format_orp(word: str) -> str:
    """Wrap the focal character of ``word`` in brackets.

    Example: ``format_orp("international")`` → ``"int[e]rnational"``.
    """
    index = orp_index(word)
    if index is None:
        return word
    return "{}[{}]{}".format(word[:index], word[index], word[index + 1:])


def format_word(word: str, mode: DisplayMode) -> str:
    """Render a token for display in the given mode."""
    if mode is DisplayMode.ORP:
        return format_orp(word)
    return word
