"""Command-line RSVP reader for text files.

WHY: The quickest way to try the engine, tune a speed range, or compare
display modes is to read a file in the terminal. The CLI drives the same
engine, capture adapter, and speed controller the HTTP service uses, so
it doubles as a manual end-to-end check.

HOW: Reads the input file (or stdin for "-"), feeds it through
TextCapture into a fresh ReaderEngine, sets a fixed speed (given directly
with --speed or as a gesture offset with --offset), and plays until the
buffer is exhausted. Each word is redrawn in place on stdout; status
messages go to stderr.

RULES:
- Positional argument: input text file path, or "-" for stdin
- --speed and --offset are mutually exclusive; the result must be a
  positive (forward) speed
- --min-wps / --max-wps set the speed range used by --offset
- --mode selects naive or orp display
- Exit codes: 0 done, 1 bad input, 130 interrupted
- Python 3.9.6 compatible — no match/case, no X | Y unions
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from rsvp_reader.capture import TextCapture
from rsvp_reader.config import (
    DEFAULT_MAX_WPS,
    DEFAULT_MIN_WPS,
    DEFAULT_MODE,
    LOG_FORMAT,
)
from rsvp_reader.core.engine import ReaderEngine
from rsvp_reader.core.models import DisplayMode, PlaybackState, RSVPWord
from rsvp_reader.core.speed import speed_for_offset

logger = logging.getLogger(__name__)

DEFAULT_CLI_SPEED = 5
_POLL_INTERVAL_S = 0.1


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: stdout carries the word display; status must not overwrite it.

    RULES:
    - All status messages go to stderr
    - Always flush after writing
    """
    print(msg, file=sys.stderr, flush=True)


def _read_input(input_file: str) -> str:
    """Load the text to read; "-" reads stdin."""
    if input_file == "-":
        return sys.stdin.read()
    return Path(input_file).read_text(encoding="utf-8")


class _WordRenderer:
    """Redraws the current word in place on a terminal line."""

    def __init__(self, out: TextIO) -> None:
        self._out = out
        self._width = 0
        self.count = 0

    def __call__(self, word: Optional[RSVPWord]) -> None:
        if word is None or word.is_paused:
            return
        self.count += 1
        text = word.text
        self._out.write("\r" + text.ljust(self._width))
        self._out.flush()
        self._width = max(self._width, len(text))

    def finish(self) -> None:
        if self.count:
            self._out.write("\n")
            self._out.flush()


def _resolve_speed(args: argparse.Namespace, engine: ReaderEngine) -> int:
    if args.offset is not None:
        return speed_for_offset(args.offset, engine.speed_range)
    if args.speed is not None:
        return args.speed
    return DEFAULT_CLI_SPEED


async def _run_reader(args: argparse.Namespace, out: TextIO) -> int:
    """Play the input once, start to finish.

    RULES:
    - Returns the number of words shown
    - Empty input shows nothing and returns 0
    """
    text = _read_input(args.input_file)

    async with ReaderEngine(
        min_wps=args.min_wps,
        max_wps=args.max_wps,
        mode=args.mode,
    ) as engine:
        capture = TextCapture(engine, source=args.input_file)
        if not capture.capture_text(text):
            _status("Nothing to read in {}".format(args.input_file))
            return 0

        speed = _resolve_speed(args, engine)
        if speed <= 0:
            raise ValueError(
                "Reading speed must be positive (got {}); reverse and hold "
                "speeds need a live gesture".format(speed)
            )

        renderer = _WordRenderer(out)
        unsubscribe = engine.current_word.subscribe(renderer)
        _status("Reading {} words at {} wps ({} mode)".format(
            len(engine.tokens), speed, engine.mode.value,
        ))
        try:
            engine.set_speed(speed)
            engine.play()
            while engine.get_state() is PlaybackState.PLAYING:
                await asyncio.sleep(_POLL_INTERVAL_S)
        finally:
            unsubscribe()
            renderer.finish()

        return renderer.count


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable — tests can inspect the parser without running the reader.
    """
    parser = argparse.ArgumentParser(
        prog="rsvp_reader",
        description="Read a text file one word at a time (rapid serial visual presentation). "
                    "Use --serve to start the HTTP API instead.",
    )

    parser.add_argument(
        "input_file",
        help="Path to a UTF-8 text file, or '-' to read stdin.",
    )

    speed_group = parser.add_mutually_exclusive_group()
    speed_group.add_argument(
        "--speed",
        type=int,
        default=None,
        help="Words per second (default: {}).".format(DEFAULT_CLI_SPEED),
    )
    speed_group.add_argument(
        "--offset",
        type=float,
        default=None,
        help="Simulated gesture offset in [-1, 1], mapped through the speed range.",
    )

    parser.add_argument(
        "--min-wps",
        type=int,
        default=DEFAULT_MIN_WPS,
        help="Forward speed range minimum (default: %(default)s).",
    )

    parser.add_argument(
        "--max-wps",
        type=int,
        default=DEFAULT_MAX_WPS,
        help="Forward speed range maximum (default: %(default)s).",
    )

    parser.add_argument(
        "--mode",
        choices=[m.value for m in DisplayMode],
        default=DEFAULT_MODE,
        help="Display mode (default: %(default)s).",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log engine activity to stderr.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
    )

    try:
        count = asyncio.run(_run_reader(args, sys.stdout))
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    except (OSError, UnicodeDecodeError) as e:
        print("Error: Cannot read {}: {}".format(args.input_file, e), file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)

    _status("Done! Read {} word(s).".format(count))


if __name__ == "__main__":
    main()
