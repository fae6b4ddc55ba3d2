"""Word unit with Optimal Recognition Point placement and display timing.

WHY: RSVP shows one word at a time with the reader's gaze fixed on a single
column. Each word must be aligned so its Optimal Recognition Point (ORP)
lands on that column, and each word must stay on screen long enough to be
read — longer for long words and for words that end a clause or sentence.

HOW: A frozen dataclass holds the text, its ORP index, and the display time
at the WPM it was built for. ``Word.build()`` computes both from the text;
``at_wpm()`` returns a copy re-timed for a different speed so the engine
can follow the speed ramp without rebuilding the whole sequence.

RULES:
- ORP table by character length: 1-3 → 0, 4-5 → 1, 6-9 → 2, 10-13 → 3,
  14+ → min(4, L-1)
- base = 60 / wpm seconds
- length factor = max(0.8, 1 + (L - 5) * 0.03)
- punctuation factor = 1.4 if any of ". ! ? ;", else 1.15 if ",", else 1.0
- display_time_s = base * length factor * punctuation factor
- get_parts() never raises; a degenerate ORP yields (text, " ", "")
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple

LENGTH_FACTOR_PER_CHAR = 0.03
MIN_LENGTH_FACTOR = 0.8

SENTENCE_PUNCTUATION = frozenset(".!?;")
CLAUSE_PUNCTUATION = frozenset(",")

SENTENCE_PAUSE_FACTOR = 1.4
CLAUSE_PAUSE_FACTOR = 1.15


def calculate_orp(text: str) -> int:
    """Return the zero-based fixation index for a word.

    The fixation point moves right as words lengthen and settles on the
    fifth character for long words.
    """
    length = len(text)
    if length <= 3:
        return 0
    if length <= 5:
        return 1
    if length <= 9:
        return 2
    if length <= 13:
        return 3
    return min(4, length - 1)


def punctuation_factor(text: str) -> float:
    """Return the pause multiplier for punctuation contained in ``text``."""
    if any(ch in SENTENCE_PUNCTUATION for ch in text):
        return SENTENCE_PAUSE_FACTOR
    if any(ch in CLAUSE_PUNCTUATION for ch in text):
        return CLAUSE_PAUSE_FACTOR
    return 1.0


def display_time_for(text: str, wpm: int) -> float:
    """Compute how long ``text`` stays on screen at ``wpm``, in seconds.

    WHY: The engine re-times only the word under the cursor on each poll,
    so this must be cheap and independent of any Word instance.

    HOW: Multiplies the per-word base interval by the length and
    punctuation factors.

    RULES:
    - wpm below 1 is treated as 1 (never divides by zero)
    - Short words are sped up at most to 0.8x of the base interval
    """
    base = 60.0 / max(1, wpm)
    length_factor = max(MIN_LENGTH_FACTOR, 1.0 + (len(text) - 5) * LENGTH_FACTOR_PER_CHAR)
    return base * length_factor * punctuation_factor(text)


@dataclass(frozen=True)
class Word:
    """One displayable word with its fixation point and timing.

    WHY: The renderer needs the word split around its ORP, and the engine
    needs to know how long the word stays on screen.

    HOW: Built in bulk by the engine from whitespace-split source text.
    The display time reflects the WPM the word was last timed at.

    RULES:
    - text: a whitespace-free token, never empty when built by the engine
    - orp_index: always < len(text) for non-empty text
    - display_time_s: float seconds at the WPM last applied
    """

    text: str
    orp_index: int
    display_time_s: float

    @classmethod
    def build(cls, text: str, wpm: int) -> Word:
        """Create a Word with ORP and display time computed for ``wpm``."""
        return cls(
            text=text,
            orp_index=calculate_orp(text),
            display_time_s=display_time_for(text, wpm),
        )

    def at_wpm(self, wpm: int) -> Word:
        """Return a copy of this word re-timed for ``wpm``."""
        return replace(self, display_time_s=display_time_for(self.text, wpm))

    def get_parts(self) -> Tuple[str, str, str]:
        """Split the word into ``(before, focus_char, after)`` for display.

        Falls back to ``(text, " ", "")`` when the ORP index is out of
        range, e.g. for an empty token.
        """
        if self.orp_index >= len(self.text):
            return self.text, " ", ""
        i = self.orp_index
        return self.text[:i], self.text[i], self.text[i + 1:]
