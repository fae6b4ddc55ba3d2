"""Text and trigger sources — the platform edge of the reader.

WHY: The engine only needs "a string to read" and "should a session start
now?". Where the string comes from (clipboard, file, test fixture) and what
fires the trigger (a hotkey callback, a clipboard watcher thread) are host
concerns that must stay out of the engine so it remains platform-free.

HOW: TextSource is an ABC with a single ``try_acquire_text()`` method;
concrete sources wrap pyperclip, a file path, or a fixed string.
TriggerFlag is a one-slot signal set from any thread and read-and-cleared
by the poll loop. ClipboardWatcher is a daemon thread that sets the flag
when the clipboard content changes.

RULES:
- try_acquire_text() returns None for failures and for blank text; it
  logs the reason instead of raising
- TriggerFlag never queues: several set() calls before one poll collapse
  into a single trigger
- ClipboardWatcher does not fire for the content present when it starts
- Sources never touch tkinter or the engine
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import pyperclip

logger = logging.getLogger(__name__)

DEFAULT_WATCH_INTERVAL_S = 0.5


class TriggerFlag:
    """Single-slot, overwrite-on-set, clear-on-read start signal.

    WHY: Platform callbacks (hotkeys, watcher threads) run on arbitrary
    threads, but sessions must only start from the poll loop.

    HOW: A boolean guarded by a threading.Lock. ``set()`` stores True;
    ``poll_and_clear()`` swaps it back to False and returns the old value.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending = False

    def set(self) -> None:
        with self._lock:
            self._pending = True

    def poll_and_clear(self) -> bool:
        with self._lock:
            pending = self._pending
            self._pending = False
        return pending


class TextSource(ABC):
    """Abstract provider of text to read.

    To add a new source:
    1. Subclass TextSource
    2. Implement try_acquire_text()
    3. Return None (and log why) when no usable text is available
    """

    @abstractmethod
    def try_acquire_text(self) -> Optional[str]:
        """Return the text to read, or None if nothing usable is available."""


def _usable(text: Optional[str]) -> Optional[str]:
    if text is None or not text.strip():
        return None
    return text


class StaticTextSource(TextSource):
    """Always returns the same text. Used by the CLI and tests."""

    def __init__(self, text: str) -> None:
        self._text = text

    def try_acquire_text(self) -> Optional[str]:
        return _usable(self._text)


class FileTextSource(TextSource):
    """Reads a UTF-8 text file on every acquisition."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    def try_acquire_text(self) -> Optional[str]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s: %s", self._path, e)
            return None
        if _usable(text) is None:
            logger.info("File %s contains no text", self._path)
            return None
        return text


class ClipboardTextSource(TextSource):
    """Reads the system clipboard via pyperclip.

    RULES:
    - pyperclip errors (no clipboard mechanism available) are logged as
      warnings and reported as None
    - Blank clipboard content is reported as None
    """

    def try_acquire_text(self) -> Optional[str]:
        try:
            text = pyperclip.paste()
        except pyperclip.PyperclipException as e:
            logger.warning("Clipboard unavailable: %s", e)
            return None
        if _usable(text) is None:
            logger.info("Clipboard is empty")
            return None
        return text


class ClipboardWatcher:
    """Background thread that fires a TriggerFlag on clipboard changes.

    WHY: Without a global hotkey, "copy some text" is the natural gesture
    for "read this". Watching the clipboard turns every new copy into a
    start trigger.

    HOW: A daemon thread polls pyperclip every ``interval_s`` seconds and
    compares against the last seen content. ``stop()`` sets a
    threading.Event that ends the loop.

    RULES:
    - The content present at start() is the baseline and does not fire
    - Clipboard read errors are logged at debug level and polling continues
    - Only the TriggerFlag is touched from the watcher thread
    """

    def __init__(
        self,
        trigger: TriggerFlag,
        interval_s: float = DEFAULT_WATCH_INTERVAL_S,
    ) -> None:
        self._trigger = trigger
        self._interval_s = interval_s
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._last_seen: Optional[str] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event.clear()
        self._last_seen = self._read()
        self._thread = threading.Thread(
            target=self._run,
            name="clipboard-watcher",
            daemon=True,
        )
        self._thread.start()
        logger.info("Watching clipboard every %.2fs", self._interval_s)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            # A thread that outlived the timeout keeps its slot so start()
            # cannot clear the event under it and run two loops
            if not self._thread.is_alive():
                self._thread = None

    def check_once(self) -> bool:
        """Compare the clipboard with the last seen content.

        Sets the trigger and returns True when the content changed to
        something non-blank.
        """
        current = self._read()
        if current is None or current == self._last_seen:
            return False
        self._last_seen = current
        if _usable(current) is None:
            return False
        self._trigger.set()
        return True

    def _read(self) -> Optional[str]:
        try:
            return pyperclip.paste()
        except pyperclip.PyperclipException as e:
            logger.debug("Clipboard read failed: %s", e)
            return None

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval_s):
            self.check_once()
