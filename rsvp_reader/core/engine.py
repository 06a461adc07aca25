"""Playback state machine and timing loop.

WHY: Everything else in the reader exists to feed or display this. The
engine owns the token buffer, the reading position, the speed, and the
play/pause/stop state, and it is the only thing that moves the position.
Text captures, gesture updates, and UI controls arrive from independent
sources at arbitrary times, so every mutation goes through one lock.

HOW: ReaderEngine is constructed once per reading session. play() starts
an asyncio task running _read_loop(); each step takes the lock, reads the
current speed, advances one token in the speed's direction, publishes the
formatted word on current_word, releases the lock, and sleeps. pause() and
stop() cancel the task. update_buffer() replaces the buffer and, when
paused, relocates the position with the reconciler.

RULES:
- States: STOPPED → PLAYING ⇄ PAUSED, any → STOPPED
- play() while PLAYING is a no-op; at most one live loop (generation guard)
- pause() only from PLAYING; captures the remembered context and
  re-emits the last word with is_paused=True
- stop() resets index to 0, clears last-displayed index, context, and word
- Speed 0 holds: the loop polls every idle interval without advancing
- Word interval is 1000 / |speed| ms, floored at the minimum interval
- Forward exhaustion (index >= len) or reverse exhaustion (index <= 0)
  stops playback; it is not an error
- update_buffer() while PLAYING leaves the index alone; a dangling index
  is caught by the next step's exhaustion check
- The lock is never held across an await
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Optional, Tuple, Union

from rsvp_reader.config import (
    CONTEXT_RADIUS,
    DEFAULT_MAX_WPS,
    DEFAULT_MIN_WPS,
    DEFAULT_MODE,
    IDLE_POLL_MS,
    MIN_WORD_INTERVAL_MS,
)
from rsvp_reader.core.models import (
    DisplayMode,
    PlaybackState,
    RSVPWord,
    SpeedRange,
    WordContext,
)
from rsvp_reader.core.observable import Observable
from rsvp_reader.core.orp import format_word
from rsvp_reader.core.reconciler import capture_context, find_resume_index
from rsvp_reader.core.speed import word_interval_ms
from rsvp_reader.core.tokenizer import tokenize

logger = logging.getLogger(__name__)


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class ReaderEngine:
    """Word-at-a-time playback over a replaceable token buffer.

    WHY: One explicitly owned object per reading session instead of a
    process-wide singleton, so drivers pass it around by reference and
    tests can run several side by side.

    HOW: Plain attributes guarded by a threading.RLock; two Observables
    publish output. The timing loop is an asyncio.Task created on the
    running loop of whoever calls play().

    RULES:
    - All public methods may be called from any thread
    - play() needs a running event loop in the calling thread, or a loop
      this engine has already played on
    - current_word is None while stopped
    - current_speed only notifies on change
    """

    def __init__(
        self,
        min_wps: int = DEFAULT_MIN_WPS,
        max_wps: int = DEFAULT_MAX_WPS,
        mode: Union[DisplayMode, str] = DEFAULT_MODE,
        idle_poll_ms: int = IDLE_POLL_MS,
        min_interval_ms: int = MIN_WORD_INTERVAL_MS,
        context_radius: int = CONTEXT_RADIUS,
    ) -> None:
        self._lock = threading.RLock()
        self._speed_range = SpeedRange.clamped(min_wps, max_wps)
        self._mode = DisplayMode(mode)
        self._idle_poll_ms = idle_poll_ms
        self._min_interval_ms = min_interval_ms
        self._context_radius = context_radius

        self._state = PlaybackState.STOPPED
        self._tokens: Tuple[str, ...] = ()
        self._index = 0
        self._last_displayed_index = -1
        self._context: Optional[WordContext] = None

        self._generation = 0
        self._reading_task: Optional[asyncio.Task] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

        self.current_word: Observable[Optional[RSVPWord]] = Observable(None)
        self.current_speed: Observable[int] = Observable(0, distinct=True)

    # ------------------------------------------------------------------
    # Lifetime
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ReaderEngine:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.close()

    def close(self) -> None:
        """End the session: stop playback and drop the loop reference."""
        self.stop()
        with self._lock:
            self._loop = None

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def get_state(self) -> PlaybackState:
        return self._state

    @property
    def index(self) -> int:
        """Next position the loop will read from."""
        return self._index

    @property
    def last_displayed_index(self) -> int:
        """Index of the word most recently shown, or -1."""
        return self._last_displayed_index

    @property
    def tokens(self) -> Tuple[str, ...]:
        return self._tokens

    @property
    def remembered_context(self) -> Optional[WordContext]:
        return self._context

    @property
    def mode(self) -> DisplayMode:
        return self._mode

    @property
    def speed_range(self) -> SpeedRange:
        return self._speed_range

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_speed_range(self, min_wps: int, max_wps: int) -> SpeedRange:
        """Set the forward speed range; out-of-bounds values are clamped."""
        with self._lock:
            self._speed_range = SpeedRange.clamped(min_wps, max_wps)
            logger.info(
                "Speed range set to %d..%d wps",
                self._speed_range.min_wps, self._speed_range.max_wps,
            )
            return self._speed_range

    def set_mode(self, mode: Union[DisplayMode, str]) -> None:
        """Switch display mode; affects words emitted from now on."""
        with self._lock:
            self._mode = DisplayMode(mode)
            logger.info("Display mode set to %s", self._mode.value)

    def set_speed(self, speed: int) -> None:
        """Set the signed playback speed (0 holds without pausing)."""
        with self._lock:
            self.current_speed.set(int(speed))

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def play(self) -> None:
        """STOPPED or PAUSED → PLAYING; no-op when already playing."""
        with self._lock:
            if self._state is PlaybackState.PLAYING:
                return
            if _running_loop() is None and (self._loop is None or not self._loop.is_running()):
                raise RuntimeError(
                    "ReaderEngine.play() needs a running event loop; call it from "
                    "a coroutine or after the engine has played on a live loop"
                )
            previous = self._state
            self._state = PlaybackState.PLAYING
            self._context = None
            self._start_reading()
        logger.info("Playback %s → playing at index %d", previous.value, self._index)

    def pause(self) -> None:
        """PLAYING → PAUSED, remembering where the reader was."""
        with self._lock:
            if self._state is not PlaybackState.PLAYING:
                logger.debug("pause() ignored in state %s", self._state.value)
                return
            self._state = PlaybackState.PAUSED
            self._cancel_reading()

            last = self._last_displayed_index
            if 0 <= last < len(self._tokens):
                self._context = capture_context(self._tokens, last, self._context_radius)
                self.current_word.set(
                    RSVPWord(
                        text=format_word(self._tokens[last], self._mode),
                        speed=self.current_speed.value,
                        is_paused=True,
                    )
                )
        logger.info("Playback paused at index %d", self._last_displayed_index)

    def stop(self) -> None:
        """Any state → STOPPED; resets the position and clears output."""
        with self._lock:
            self._cancel_reading()
            self._reset_to_stopped()
        logger.info("Playback stopped")

    def handle_touch_start(self) -> None:
        """Pointer down: start or resume unless already playing."""
        with self._lock:
            if self._state in (PlaybackState.STOPPED, PlaybackState.PAUSED):
                self.play()

    def handle_touch_end(self) -> None:
        """Pointer up: pause if playing."""
        with self._lock:
            if self._state is PlaybackState.PLAYING:
                self.pause()

    # ------------------------------------------------------------------
    # Text updates
    # ------------------------------------------------------------------

    def update_buffer(self, raw_text: str) -> Optional[int]:
        """Replace the token buffer with freshly captured text.

        WHY: The scraper calls this whenever visible content changes. When
        paused, the reader expects to continue from the same word even
        though the text around it moved.

        HOW: Tokenize. If paused with a remembered context, try the
        reconciler; on success swap the buffer and jump to the resume
        point. Otherwise swap the buffer and only reset the index when
        stopped.

        RULES:
        - A successful resume clears the remembered context; a later
          capture while still paused just replaces the buffer
        - A failed resume keeps the old context
        - While paused, the index is clamped into the new buffer and a
          last-displayed index past its end is dropped
        - While playing, the index is left as-is (the loop's exhaustion
          check catches a dangling index)
        - Never raises for any text input

        Returns:
            The resume index if the position was reconciled, else None.
        """
        words = tokenize(raw_text)

        with self._lock:
            if self._state is PlaybackState.PAUSED and self._context is not None:
                resume_index = find_resume_index(words, self._context)
                if resume_index is not None:
                    self._tokens = tuple(words)
                    self._index = resume_index
                    self._last_displayed_index = resume_index
                    self._context = None
                    logger.info(
                        "Resumed at index %d in new buffer of %d tokens",
                        resume_index, len(words),
                    )
                    return resume_index
                logger.info(
                    "No resume point in new buffer of %d tokens", len(words),
                )

            self._tokens = tuple(words)
            if self._state is PlaybackState.STOPPED:
                self._index = 0
            elif self._state is PlaybackState.PAUSED:
                self._index = min(self._index, len(words))
                if self._last_displayed_index >= len(words):
                    self._last_displayed_index = -1
            logger.debug(
                "Buffer replaced: %d tokens, state %s, index %d",
                len(words), self._state.value, self._index,
            )
            return None

    # ------------------------------------------------------------------
    # Timing loop
    # ------------------------------------------------------------------

    def _start_reading(self) -> None:
        """Cancel any previous loop and start a new one (lock held)."""
        self._cancel_reading()
        self._generation += 1
        generation = self._generation

        loop = _running_loop()
        if loop is not None:
            self._loop = loop
            self._reading_task = loop.create_task(self._read_loop(generation))
        else:
            self._loop.call_soon_threadsafe(self._spawn_reader, generation)

    def _spawn_reader(self, generation: int) -> None:
        """Create the loop task on the engine's loop (cross-thread play)."""
        with self._lock:
            if generation != self._generation or self._state is not PlaybackState.PLAYING:
                return
            self._reading_task = asyncio.get_running_loop().create_task(
                self._read_loop(generation)
            )

    def _cancel_reading(self) -> None:
        """Invalidate and cancel the running loop, if any (lock held)."""
        self._generation += 1
        task = self._reading_task
        self._reading_task = None
        if task is None or task.done():
            return
        task_loop = task.get_loop()
        if _running_loop() is task_loop:
            task.cancel()
        elif not task_loop.is_closed():
            task_loop.call_soon_threadsafe(task.cancel)

    def _reset_to_stopped(self) -> None:
        self._state = PlaybackState.STOPPED
        self._index = 0
        self._last_displayed_index = -1
        self._context = None
        self.current_word.set(None)

    def _advance(self, speed: int) -> Optional[str]:
        """Step one token in the speed's direction; None when exhausted (lock held)."""
        size = len(self._tokens)
        if speed > 0:
            if self._index >= size:
                return None
            self._last_displayed_index = self._index
            word = self._tokens[self._index]
            self._index += 1
            return word

        if self._index <= 0 or self._index > size:
            return None
        self._index -= 1
        self._last_displayed_index = self._index
        return self._tokens[self._index]

    async def _read_loop(self, generation: int) -> None:
        while True:
            with self._lock:
                if self._state is not PlaybackState.PLAYING or generation != self._generation:
                    return

                speed = self.current_speed.value
                if speed == 0:
                    delay_ms = self._idle_poll_ms
                else:
                    word = self._advance(speed)
                    if word is None:
                        logger.info(
                            "Buffer exhausted (%s) at index %d",
                            "forward" if speed > 0 else "reverse", self._index,
                        )
                        self._reading_task = None
                        self._reset_to_stopped()
                        return
                    self.current_word.set(
                        RSVPWord(text=format_word(word, self._mode), speed=speed)
                    )
                    delay_ms = word_interval_ms(speed, self._min_interval_ms)

            await asyncio.sleep(delay_ms / 1000.0)
