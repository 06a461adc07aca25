"""RSVP Reader — gesture-paced, word-at-a-time reading engine.

WHY: Scraped screen text is hard to read in a tiny overlay. Rapid serial
visual presentation shows one word at a time at a pace the reader drives
with a single drag gesture, forward or backward, while the source text
keeps changing underneath as the user scrolls.

HOW: Three core pieces in ``rsvp_reader.core`` — the speed controller
(gesture → signed speed), the buffer reconciler (find where to resume in
a freshly scraped buffer), and the playback engine (state machine plus an
asyncio timing loop). Thin adapters around it feed captured text and
gestures in and expose words out (CLI, HTTP/WebSocket service).

RULES:
- One ReaderEngine per reading session, owned explicitly by its driver
- The core never raises for control flow; failures are explicit outcomes
- Source text is replaced wholesale and reconciled by context, never diffed
"""

__version__ = "0.1.0"
