"""Shared test fixtures for the rsvp_reader test suite.

WHY: Most engine, adapter, and API tests need the same sample texts and a
reading engine with fast loop timings so a whole buffer plays in
milliseconds instead of seconds.

HOW: Module-level sample strings plus fixtures returning fresh engines.
Each fixture call builds a new ReaderEngine (no shared mutable state).

RULES:
- fast_engine: range 3..45, naive mode, 5 ms idle poll, 1 ms min interval
- Engines are never module-level; every test gets its own
"""

import pytest

from rsvp_reader.core.engine import ReaderEngine
from rsvp_reader.core.models import DisplayMode

SHORT_TEXT = "the quick brown fox jumps"
LONG_TEXT = "the quick brown fox jumps over the lazy dog"


@pytest.fixture
def fast_engine():
    """A ReaderEngine with explicit config and millisecond loop timings."""
    return ReaderEngine(
        min_wps=3,
        max_wps=45,
        mode=DisplayMode.NAIVE,
        idle_poll_ms=5,
        min_interval_ms=1,
    )


@pytest.fixture
def default_timing_engine():
    """A ReaderEngine with the standard 100 ms idle poll and 50 ms cap."""
    return ReaderEngine(
        min_wps=3,
        max_wps=45,
        mode=DisplayMode.NAIVE,
        idle_poll_ms=100,
        min_interval_ms=50,
    )
