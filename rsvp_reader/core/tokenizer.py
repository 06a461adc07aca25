"""Whitespace tokenizer for captured text.

WHY: The reader shows one token at a time. Scraped text carries arbitrary
runs of spaces, tabs, and newlines from the source layout; none of that
should turn into blank frames on screen.

HOW: str.split() with no separator splits on runs of any whitespace and
drops empty pieces, which is exactly the token rule.

RULES:
- Tokens are non-empty and contain no whitespace
- No case, punctuation, or Unicode normalization
- Empty or all-whitespace input yields an empty list
"""

from __future__ import annotations

from typing import List


def tokenize(text: str) -> List[str]:
    """Split raw text into an ordered list of whitespace-delimited tokens."""
    if not text:
        return []
    return text.split()
