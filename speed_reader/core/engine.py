"""RSVP pacing engine — word sequence, speed ramp, and playback state machine.

WHY: The host renders one word per frame and needs a single object that
answers "which word is on screen now?" on every tick, while the reader can
pause, seek, change speed, or restart at any moment. Speed should ramp up
gently from a starting WPM to the target instead of jumping straight to it.

HOW: RSVPEngine owns an immutable-length list of Words, a cursor, and a
timestamp marking when the current word went on screen. The host calls
``update()`` once per tick; the engine re-derives the WPM from the cursor
position (the ramp), re-times only the current word, and advances the
cursor once that word's display window has elapsed. Control operations
mutate the cursor, pause flag, or speed directly.

RULES:
- Single-threaded: update() and control calls come from the same loop
- The ramp is keyed to words advanced, not wall-clock time, so pausing
  never stalls or skews it
- current_wpm is always clamped to [min_wpm, max_wpm]
- 0 <= current_index <= len(words); == len(words) means finished
- Finished is only reached by update() advancing past the last word
- No method raises for out-of-range input; everything is clamped
"""

from __future__ import annotations

import enum
import time
from typing import Callable, List, Optional, Tuple

from speed_reader.core.word import Word

MIN_WPM = 100
MAX_WPM = 1200


class PlaybackState(str, enum.Enum):
    """Observable playback states of an engine.

    RULES:
    - idle: never polled since construction or reset()
    - playing: polled at least once and neither paused nor finished
    - paused: pause() called and not yet resumed
    - finished: cursor is past the last word (or there are no words)
    """

    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    FINISHED = "finished"


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


class RSVPEngine:
    """Paces a word sequence at a ramping words-per-minute rate.

    WHY: Keeps all pacing policy (ramp, per-word timing, seek and speed
    clamping) in one place that can be driven by any render loop or by
    tests with a fake clock.

    HOW: Construction splits the source text on whitespace and builds one
    Word per token at ``start_wpm``. Each ``update()`` compares elapsed
    time on ``clock`` against the current word's display time.

    RULES:
    - Words are built at the clamped start_wpm; only the word under the
      cursor is re-timed as current_wpm changes
    - adjust_speed() bypasses the ramp and applies the new target at once
    - resume() and seek() give the landed-on word a fresh display window
    """

    def __init__(
        self,
        text: str,
        start_wpm: int,
        target_wpm: int,
        warmup_words: int,
        min_wpm: int = MIN_WPM,
        max_wpm: int = MAX_WPM,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._clock = clock
        self._min_wpm = min_wpm
        self._max_wpm = max(min_wpm, max_wpm)
        self._start_wpm = start_wpm
        self._target_wpm = target_wpm
        self._warmup_words = max(0, warmup_words)

        self._current_wpm = self._clamp_wpm(start_wpm)
        self._words: List[Word] = [
            Word.build(token, self._current_wpm) for token in text.split()
        ]
        self._current_index = 0
        self._is_paused = False
        self._started = False
        self._last_update = clock()

    # ------------------------------------------------------------------
    # Ramp
    # ------------------------------------------------------------------

    def _clamp_wpm(self, wpm: int) -> int:
        return _clamp(wpm, self._min_wpm, self._max_wpm)

    def wpm_at(self, index: int) -> int:
        """Ramp WPM for a cursor position, without touching any state.

        Linear from start_wpm to target_wpm over the first warmup_words
        advances, truncated to an integer; target_wpm afterwards.
        """
        if index < self._warmup_words:
            # Integer math truncates toward zero in both ramp directions
            span = self._target_wpm - self._start_wpm
            step = abs(span) * index // self._warmup_words
            wpm = self._start_wpm + (step if span >= 0 else -step)
        else:
            wpm = self._target_wpm
        return self._clamp_wpm(wpm)

    def _ramp_wpm(self) -> int:
        return self.wpm_at(self._current_index)

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def update(self) -> Optional[Word]:
        """Poll the engine once per render tick.

        Returns None when paused, empty, or finished. Otherwise returns the
        current word; when its display window has elapsed the word is still
        returned but the cursor advances past it.
        """
        if self._is_paused or self.is_finished:
            return None

        self._started = True
        self._current_wpm = self._ramp_wpm()

        index = self._current_index
        word = self._words[index].at_wpm(self._current_wpm)
        self._words[index] = word

        now = self._clock()
        if now - self._last_update < word.display_time_s:
            return word

        self._last_update = now
        self._current_index += 1
        self._current_wpm = self._ramp_wpm()
        return word

    # ------------------------------------------------------------------
    # Control operations
    # ------------------------------------------------------------------

    def pause(self) -> None:
        self._is_paused = True

    def resume(self) -> None:
        """Unpause and treat the current word as freshly shown."""
        self._is_paused = False
        self._last_update = self._clock()

    def toggle_pause(self) -> None:
        if self._is_paused:
            self.resume()
        else:
            self.pause()

    def reset(self) -> None:
        """Rewind to the first word and the start of the ramp."""
        self._current_index = 0
        self._last_update = self._clock()
        self._current_wpm = self._clamp_wpm(self._start_wpm)
        self._started = False

    def adjust_speed(self, delta: int) -> None:
        """Shift the target WPM by ``delta`` and apply it immediately."""
        new_wpm = self._clamp_wpm(self._target_wpm + delta)
        self._target_wpm = new_wpm
        self._current_wpm = new_wpm

    def seek(self, delta_words: int) -> None:
        """Move the cursor by ``delta_words``, clamped to the last word."""
        self.seek_to(self._current_index + delta_words)

    def seek_to(self, index: int) -> None:
        """Move the cursor to ``index``, clamped to [0, len(words) - 1]."""
        last = max(0, len(self._words) - 1)
        self._current_index = _clamp(index, 0, last)
        self._last_update = self._clock()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._words)

    @property
    def word_count(self) -> int:
        return len(self._words)

    @property
    def words(self) -> Tuple[Word, ...]:
        return tuple(self._words)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current_word(self) -> Optional[Word]:
        if self.is_finished:
            return None
        return self._words[self._current_index]

    @property
    def is_finished(self) -> bool:
        return self._current_index >= len(self._words)

    @property
    def is_paused(self) -> bool:
        return self._is_paused

    @property
    def progress(self) -> float:
        if not self._words:
            return 0.0
        return self._current_index / len(self._words)

    @property
    def current_wpm(self) -> int:
        return self._current_wpm

    @property
    def target_wpm(self) -> int:
        return self._target_wpm

    @property
    def start_wpm(self) -> int:
        return self._start_wpm

    @property
    def warmup_words(self) -> int:
        return self._warmup_words

    @property
    def state(self) -> PlaybackState:
        if self.is_finished:
            return PlaybackState.FINISHED
        if self._is_paused:
            return PlaybackState.PAUSED
        if not self._started:
            return PlaybackState.IDLE
        return PlaybackState.PLAYING
