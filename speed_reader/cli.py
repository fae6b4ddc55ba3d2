"""Command-line interface: read text in the terminal, one word at a time.

WHY: A terminal reader is the quickest way to try pacing settings, read a
file without a window, or inspect how a text will be paced. It drives the
same engine the GUI uses through the same polling loop.

HOW: argparse picks the text source (file, stdin via "-", or the
clipboard) and optional speed overrides on top of the loaded config. In
play mode the CLI polls ``engine.update()`` every ``--tick`` seconds and
redraws the current word in place, with the focus letter in a fixed
column. In ``--list`` mode it prints every word's ORP split and display
time at its ramp WPM instead of playing.

RULES:
- Status output goes to stderr; words and listings go to stdout
- Speed flags override the config for this run only (never saved)
- No usable text → "Error: ..." on stderr and exit 1
- Invalid config file → "Error: ..." on stderr and exit 1
- Ctrl+C stops playback with exit code 130
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, NoReturn, Optional, TextIO

from speed_reader.config import Config, load_config
from speed_reader.core.engine import RSVPEngine
from speed_reader.core.word import Word
from speed_reader.sources import (
    ClipboardTextSource,
    FileTextSource,
    StaticTextSource,
    TextSource,
)

DEFAULT_TICK_S = 0.01
_FIELD_WIDTH = 20


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> NoReturn:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def format_word(word: Word, width: int = _FIELD_WIDTH) -> str:
    """Render a word so its focus letter lands in column ``width``.

    The focus letter is wrapped in brackets so it stands out without
    terminal colours.
    """
    before, focus, after = word.get_parts()
    return "{:>{w}}[{}]{:<{w}}".format(before, focus, after, w=width)


def _select_source(args: argparse.Namespace) -> TextSource:
    if args.clipboard:
        return ClipboardTextSource()
    if args.input_file is None or args.input_file == "-":
        return StaticTextSource(sys.stdin.read())
    path = Path(args.input_file)
    if not path.is_file():
        _fail("File not found: {}".format(path))
    return FileTextSource(path)


def _apply_overrides(config: Config, args: argparse.Namespace) -> None:
    speed = config.speed
    if args.start_wpm is not None:
        speed.start_wpm = args.start_wpm
    if args.target_wpm is not None:
        speed.target_wpm = args.target_wpm
    if args.warmup_words is not None:
        speed.warmup_words = args.warmup_words


def build_engine(text: str, config: Config) -> RSVPEngine:
    """Create an engine from text and the speed section of ``config``."""
    speed = config.speed
    return RSVPEngine(
        text,
        speed.start_wpm,
        speed.target_wpm,
        speed.warmup_words,
        min_wpm=speed.min_wpm,
        max_wpm=speed.max_wpm,
    )


def list_words(engine: RSVPEngine, out: TextIO) -> None:
    """Print each word with its ORP split, ramp WPM, and display time.

    WHY: Lets users see exactly how a text will be paced without waiting
    for playback.

    RULES:
    - One line per word: index, rendered word, WPM, milliseconds
    - WPM is the ramp value at that word's index
    """
    for index, word in enumerate(engine.words):
        wpm = engine.wpm_at(index)
        timed = word.at_wpm(wpm)
        out.write("{:>5}  {}  {:>4} WPM  {:>5.0f} ms\n".format(
            index, format_word(timed), wpm, timed.display_time_s * 1000,
        ))


def play(engine: RSVPEngine, out: TextIO, tick_s: float = DEFAULT_TICK_S) -> None:
    """Play the engine in the terminal until it finishes.

    HOW: Polls ``update()`` in a loop and redraws the line with a carriage
    return whenever a new word comes under the cursor.
    """
    shown_index: Optional[int] = None
    while not engine.is_finished:
        index = engine.current_index
        word = engine.update()
        if word is not None and index != shown_index:
            out.write("\r{}  [{} WPM]".format(format_word(word), engine.current_wpm))
            out.flush()
            shown_index = index
        time.sleep(tick_s)
    out.write("\n")
    out.flush()


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="speed-reader",
        description="Read text one word at a time (RSVP) with ORP alignment "
                    "and a warmup speed ramp.",
    )

    parser.add_argument(
        "input_file",
        nargs="?",
        default=None,
        help="Text file to read. Use '-' or omit to read from stdin.",
    )

    parser.add_argument(
        "--clipboard",
        action="store_true",
        help="Read the current clipboard contents instead of a file.",
    )

    parser.add_argument(
        "--start-wpm",
        type=int,
        default=None,
        help="Starting speed in words per minute (default: from config).",
    )

    parser.add_argument(
        "--target-wpm",
        type=int,
        default=None,
        help="Speed reached after the warmup (default: from config).",
    )

    parser.add_argument(
        "--warmup-words",
        type=int,
        default=None,
        help="Number of words over which speed ramps up (default: from config).",
    )

    parser.add_argument(
        "--list",
        action="store_true",
        help="Print every word with its display time instead of playing.",
    )

    parser.add_argument(
        "--tick",
        type=float,
        default=DEFAULT_TICK_S,
        help="Polling interval in seconds (default: %(default)s).",
    )

    parser.add_argument(
        "--config",
        default=None,
        help="Path to a config.json file (default: user config directory).",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging on stderr.",
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
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        config = load_config(Path(args.config) if args.config else None)
    except ValueError as e:
        _fail(str(e))
    _apply_overrides(config, args)

    source = _select_source(args)
    text = source.try_acquire_text()
    if text is None:
        _fail("No text to read.")

    engine = build_engine(text, config)

    if args.list:
        list_words(engine, sys.stdout)
        return

    _status("Reading {} words: {} → {} WPM over {} words (Ctrl+C to stop)".format(
        len(engine),
        config.speed.start_wpm,
        config.speed.target_wpm,
        config.speed.warmup_words,
    ))
    try:
        play(engine, sys.stdout, tick_s=args.tick)
    except KeyboardInterrupt:
        _status("\nStopped at word {} of {}.".format(engine.current_index, len(engine)))
        sys.exit(130)
    _status("Finished reading!")


if __name__ == "__main__":
    main()
