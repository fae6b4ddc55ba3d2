"""Reader session — host-level lifecycle around one RSVP engine at a time.

WHY: The engine paces a single text. Everything around it — noticing a
start trigger, grabbing text, resuming where the reader left off in the
same text, mapping keys to actions, persisting speed changes, and deciding
when the progress bar is visible — is host policy that both the tkinter
window and tests need without a real window.

HOW: ReaderSession owns at most one RSVPEngine. The surface calls
``tick()`` once per frame and gets back a DisplayFrame snapshot to draw;
key presses go through ``action_for_key()`` and ``handle_action()``.
Starting a session consumes the TriggerFlag and asks the TextSource for
text. Stopping discards the engine after remembering its position.

RULES:
- A trigger while a session is active is ignored (and cleared)
- Same text as the previous session → resume at the remembered index
- Different text → remembered index resets to 0
- Finishing a text forgets the remembered index and ends the session
- Speed keys rewrite config.speed.target_wpm and call on_config_change
- Progress bar shows while paused and for PROGRESS_FLASH_S after a seek
- Actions while no session is active are ignored
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from speed_reader.config import Config
from speed_reader.core.engine import RSVPEngine
from speed_reader.sources import TextSource, TriggerFlag

logger = logging.getLogger(__name__)

PROGRESS_FLASH_S = 1.0
SEEK_STEP_WORDS = 1


class KeyAction(str, enum.Enum):
    """Discrete reader actions bound to keys."""

    TOGGLE_PAUSE = "toggle_pause"
    STOP = "stop"
    RESTART = "restart"
    SPEED_UP = "speed_up"
    SPEED_DOWN = "speed_down"
    SEEK_BACK = "seek_back"
    SEEK_FORWARD = "seek_forward"


# HotkeyConfig field name -> action
_HOTKEY_ACTIONS: Dict[str, KeyAction] = {
    "pause_resume": KeyAction.TOGGLE_PAUSE,
    "quit": KeyAction.STOP,
    "restart": KeyAction.RESTART,
    "speed_up": KeyAction.SPEED_UP,
    "speed_down": KeyAction.SPEED_DOWN,
    "seek_back": KeyAction.SEEK_BACK,
    "seek_forward": KeyAction.SEEK_FORWARD,
}


@dataclass
class DisplayFrame:
    """Everything a surface needs to draw one frame.

    RULES:
    - active: False means the surface should hide itself
    - parts: (before, focus_char, after) of the word to show, or None
    - progress: fraction of words passed, in [0, 1]
    - show_progress: whether the progress bar should be drawn
    """

    active: bool
    paused: bool = False
    parts: Optional[Tuple[str, str, str]] = None
    progress: float = 0.0
    current_wpm: int = 0
    show_progress: bool = False


class ReaderSession:
    """Starts, drives, and stops reading sessions for a surface.

    WHY: Keeps host policy testable and identical across the GUI and any
    other surface.

    HOW: Wraps a Config, a TextSource, and a TriggerFlag. A fresh
    RSVPEngine is built from ``config.speed`` for every started session.
    """

    def __init__(
        self,
        config: Config,
        text_source: TextSource,
        trigger: Optional[TriggerFlag] = None,
        clock: Callable[[], float] = time.monotonic,
        on_config_change: Optional[Callable[[Config], None]] = None,
    ) -> None:
        self._config = config
        self._source = text_source
        self._trigger = trigger or TriggerFlag()
        self._clock = clock
        self._on_config_change = on_config_change

        self._engine: Optional[RSVPEngine] = None
        self._last_word: Optional[Tuple[str, str, str]] = None
        self._progress_visible_until: Optional[float] = None

        # Remember position for same text
        self._last_text: Optional[str] = None
        self._last_position = 0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def config(self) -> Config:
        return self._config

    @property
    def trigger(self) -> TriggerFlag:
        return self._trigger

    @property
    def engine(self) -> Optional[RSVPEngine]:
        return self._engine

    @property
    def is_active(self) -> bool:
        return self._engine is not None

    @property
    def last_position(self) -> int:
        return self._last_position

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_reading(self) -> bool:
        """Acquire text and start a new session.

        Returns False (and leaves the session inactive) when the source
        has no usable text.
        """
        text = self._source.try_acquire_text()
        if text is None:
            logger.info("No text to read")
            return False

        speed = self._config.speed
        engine = RSVPEngine(
            text,
            speed.start_wpm,
            speed.target_wpm,
            speed.warmup_words,
            min_wpm=speed.min_wpm,
            max_wpm=speed.max_wpm,
            clock=self._clock,
        )

        if text == self._last_text and self._last_position > 0:
            engine.seek_to(self._last_position)
            logger.info("Resuming same text at word %d", engine.current_index)
        else:
            self._last_text = text
            self._last_position = 0

        self._engine = engine
        self._last_word = None
        self._progress_visible_until = None
        logger.info("Started reading %d words at %d WPM", len(engine), engine.current_wpm)
        return True

    def stop_reading(self) -> None:
        """End the session, remembering where the reader stopped."""
        if self._engine is not None:
            # A finished text starts over next time
            engine = self._engine
            self._last_position = 0 if engine.is_finished else engine.current_index
            logger.info("Stopped reading at word %d", self._last_position)
        self._engine = None
        self._last_word = None
        self._progress_visible_until = None

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def action_for_key(self, key: str) -> Optional[KeyAction]:
        """Map a key name to its configured action, case-insensitively."""
        name = key.lower()
        hotkeys = self._config.hotkeys
        for field_name, action in _HOTKEY_ACTIONS.items():
            if name in (k.lower() for k in getattr(hotkeys, field_name)):
                return action
        return None

    def handle_action(self, action: KeyAction) -> None:
        engine = self._engine
        if engine is None:
            return

        if action == KeyAction.STOP:
            self.stop_reading()

        elif action == KeyAction.RESTART:
            engine.reset()
            self._last_position = 0
            self._last_word = None

        elif action == KeyAction.TOGGLE_PAUSE:
            engine.toggle_pause()
            if not engine.is_paused:
                self._progress_visible_until = None

        elif action in (KeyAction.SPEED_UP, KeyAction.SPEED_DOWN):
            step = self._config.speed.step_wpm
            engine.adjust_speed(step if action == KeyAction.SPEED_UP else -step)
            self._config.speed.target_wpm = engine.target_wpm
            if self._on_config_change is not None:
                self._on_config_change(self._config)

        elif action in (KeyAction.SEEK_BACK, KeyAction.SEEK_FORWARD):
            engine.seek(-SEEK_STEP_WORDS if action == KeyAction.SEEK_BACK else SEEK_STEP_WORDS)
            word = engine.current_word
            if word is not None:
                self._last_word = word.get_parts()
            self._progress_visible_until = self._clock() + PROGRESS_FLASH_S

    # ------------------------------------------------------------------
    # Per-frame polling
    # ------------------------------------------------------------------

    def tick(self) -> DisplayFrame:
        """Advance the session by one frame and describe what to draw."""
        if self._trigger.poll_and_clear() and not self.is_active:
            self.start_reading()

        engine = self._engine
        if engine is None:
            return DisplayFrame(active=False)

        if engine.is_finished:
            # Next time starts from the beginning
            self.stop_reading()
            self._last_position = 0
            return DisplayFrame(active=False)

        word = engine.update()
        if word is not None:
            self._last_word = word.get_parts()

        now = self._clock()
        flashing = self._progress_visible_until is not None and now < self._progress_visible_until

        return DisplayFrame(
            active=True,
            paused=engine.is_paused,
            parts=self._last_word,
            progress=engine.progress,
            current_wpm=engine.current_wpm,
            show_progress=engine.is_paused or flashing,
        )
