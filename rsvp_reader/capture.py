"""Text capture adapter between the screen scraper and the engine.

WHY: Accessibility-style scrapers fire on every content change, scroll,
and window-state event, and most of those re-deliver the exact same text.
Forwarding duplicates would make the engine re-tokenize and, while paused,
re-run reconciliation for nothing. Empty captures (transient blank
windows) would wipe a perfectly good buffer.

HOW: TextCapture remembers the last accepted raw text. capture_text()
drops blank and unchanged text and forwards everything else to
ReaderEngine.update_buffer(), logging the captured word count.

RULES:
- Blank or whitespace-only text is ignored
- Text identical to the last accepted capture is ignored
- Accepted text is forwarded unmodified; tokenizing is the engine's job
- reset() forgets the last capture so the same text is accepted again
"""

from __future__ import annotations

import logging

from rsvp_reader.core.engine import ReaderEngine
from rsvp_reader.core.tokenizer import tokenize

logger = logging.getLogger(__name__)


class TextCapture:
    """De-duplicating feed from a text source into one engine."""

    def __init__(self, engine: ReaderEngine, source: str = "screen") -> None:
        self._engine = engine
        self._source = source
        self._last_text = ""

    @property
    def last_text(self) -> str:
        return self._last_text

    def capture_text(self, raw: str) -> bool:
        """Forward ``raw`` to the engine unless it is blank or unchanged.

        Returns:
            True if the text reached the engine.
        """
        if not raw or not raw.strip():
            logger.debug("Ignored blank capture from %s", self._source)
            return False
        if raw == self._last_text:
            logger.debug("Ignored unchanged capture from %s", self._source)
            return False

        self._last_text = raw
        resume_index = self._engine.update_buffer(raw)
        logger.info(
            "Captured %d words from %s%s",
            len(tokenize(raw)),
            self._source,
            "" if resume_index is None else " (resumed at {})".format(resume_index),
        )
        return True

    def reset(self) -> None:
        self._last_text = ""
