"""Tkinter reading window — borderless, always-on-top RSVP overlay.

WHY: Speed reading works best in a small, distraction-free strip that
appears on top of whatever the reader is doing, shows one word with its
focus letter pinned to a fixed column, and disappears when done.

HOW: A single ReaderWindow class wraps a Tk root and a ReaderSession.
While idle the window is withdrawn and polls the session every
_IDLE_POLL_MS; while reading it polls every _FRAME_MS and redraws a canvas:
the text before the focus letter right-aligned to the focus column, the
focus letter in the accent colour, the rest left-aligned after it, and a
slim progress bar when the session asks for one. Start triggers come from
a TriggerFlag, set at launch and by an optional ClipboardWatcher thread.

RULES:
- tkinter widgets are ONLY touched from the main thread
- The TriggerFlag is the ONLY channel from the watcher thread
- Key presses are mapped through ReaderSession.action_for_key()
- Losing focus after having had it ends the session (ephemeral overlay)
- Speed changes are persisted to the config file; write failures are
  logged, never raised into the event loop
"""

from __future__ import annotations

import argparse
import logging
import tkinter as tk
from pathlib import Path
from tkinter import font as tkfont
from typing import Callable, List, Optional

from speed_reader.config import LOG_LEVEL, Config, load_config, save_config
from speed_reader.session import DisplayFrame, KeyAction, ReaderSession
from speed_reader.sources import (
    ClipboardTextSource,
    ClipboardWatcher,
    FileTextSource,
    TextSource,
    TriggerFlag,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_WINDOW_TITLE = "Speed Reader"
_FRAME_MS = 16
_IDLE_POLL_MS = 100
_BAR_HEIGHT = 2
_BAR_MARGIN = 12
_BAR_TRACK_COLOR = "#282832"
_BORDER_COLOR = "#3c3c46"


class ReaderWindow:
    """Main tkinter application for the reader overlay.

    WHY: Gives the session a visible surface without leaking any tkinter
    into the session or the engine.

    HOW: Builds one canvas, binds keys, and runs a self-rescheduling
    ``.after()`` loop that calls ``session.tick()`` and draws the frame.

    RULES:
    - All drawing happens in _render()
    - The window is withdrawn whenever the session is inactive
    - Quitting the app (Ctrl+Q) stops the watcher thread first
    """

    def __init__(
        self,
        root: tk.Tk,
        session: ReaderSession,
        watcher: Optional[ClipboardWatcher] = None,
    ) -> None:
        self._root = root
        self._session = session
        self._watcher = watcher
        self._display = session.config.display

        self._window_visible = True
        self._had_focus = False

        self._build_ui()
        self._bind_keys()

        self._root.after(_IDLE_POLL_MS, self._poll)

    # ------------------------------------------------------------------
    # UI Construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        display = self._display
        self._root.title(_WINDOW_TITLE)
        self._root.geometry("{}x{}".format(display.width, display.height))
        self._root.overrideredirect(True)
        self._root.attributes("-topmost", True)
        self._root.configure(bg=display.background_color)

        self._font = tkfont.Font(
            family="Courier",
            size=-int(display.font_size * 0.7),  # negative size = pixels
            weight="normal",
        )
        self._focus_font = tkfont.Font(
            family="Courier",
            size=-int(display.font_size * 0.7),
            weight="bold",
        )

        self._canvas = tk.Canvas(
            self._root,
            width=display.width,
            height=display.height,
            bg=display.background_color,
            highlightthickness=1,
            highlightbackground=_BORDER_COLOR,
        )
        self._canvas.pack(fill=tk.BOTH, expand=True)

    def _bind_keys(self) -> None:
        self._root.bind("<KeyPress>", self._on_key)
        self._root.bind("<Control-q>", lambda _e: self.quit())
        self._root.bind("<FocusIn>", self._on_focus_in)
        self._root.bind("<FocusOut>", self._on_focus_out)

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_key(self, event: tk.Event) -> None:
        action = self._session.action_for_key(event.keysym)
        if action is None:
            return
        self._session.handle_action(action)
        if action == KeyAction.STOP:
            self._hide()

    def _on_focus_in(self, _event: tk.Event) -> None:
        self._had_focus = True

    def _on_focus_out(self, _event: tk.Event) -> None:
        # Only close when focus is *lost*, not when never gained
        if self._session.is_active and self._had_focus:
            self._session.stop_reading()
            self._hide()

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def _poll(self) -> None:
        frame = self._session.tick()

        if not frame.active:
            self._hide()
            self._root.after(_IDLE_POLL_MS, self._poll)
            return

        self._show()
        self._render(frame)
        self._root.after(_FRAME_MS, self._poll)

    def _show(self) -> None:
        if self._window_visible:
            return
        width, height = self._display.width, self._display.height
        x = (self._root.winfo_screenwidth() - width) // 2
        y = (self._root.winfo_screenheight() - height) // 2
        self._root.geometry("{}x{}+{}+{}".format(width, height, x, y))
        self._root.deiconify()
        self._root.lift()
        self._root.focus_force()
        self._had_focus = False  # wait for focus before detecting loss
        self._window_visible = True

    def _hide(self) -> None:
        if not self._window_visible:
            return
        self._root.withdraw()
        self._window_visible = False

    def _render(self, frame: DisplayFrame) -> None:
        display = self._display
        canvas = self._canvas
        canvas.delete("all")

        # winfo_* report 1 until the canvas is mapped
        width = canvas.winfo_width() if canvas.winfo_width() > 1 else display.width
        height = canvas.winfo_height() if canvas.winfo_height() > 1 else display.height
        mid_y = height // 2

        if frame.parts is not None:
            before, focus, after = frame.parts
            focus_width = self._focus_font.measure(focus or " ")
            focus_x = int(width * display.orp_position)

            canvas.create_text(
                focus_x - focus_width // 2, mid_y,
                text=before, anchor=tk.E, font=self._font, fill=display.text_color,
            )
            canvas.create_text(
                focus_x, mid_y,
                text=focus, anchor=tk.CENTER, font=self._focus_font, fill=display.focus_color,
            )
            canvas.create_text(
                focus_x + (focus_width - focus_width // 2), mid_y,
                text=after, anchor=tk.W, font=self._font, fill=display.text_color,
            )

        if frame.show_progress:
            bar_y = height - _BAR_HEIGHT - 8
            bar_width = width - 2 * _BAR_MARGIN
            canvas.create_rectangle(
                _BAR_MARGIN, bar_y, _BAR_MARGIN + bar_width, bar_y + _BAR_HEIGHT,
                fill=_BAR_TRACK_COLOR, outline="",
            )
            canvas.create_rectangle(
                _BAR_MARGIN, bar_y, _BAR_MARGIN + int(bar_width * frame.progress), bar_y + _BAR_HEIGHT,
                fill=display.focus_color, outline="",
            )

    def quit(self) -> None:
        if self._watcher is not None:
            self._watcher.stop(timeout=1.0)
        self._root.destroy()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def _persist(config_path: Optional[Path]) -> Callable[[Config], None]:
    def _save(config: Config) -> None:
        try:
            save_config(config, config_path)
        except OSError as e:
            logger.warning("Could not save config: %s", e)
    return _save


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="speed-reader-gui",
        description="Borderless RSVP reading window fed from the clipboard or a file.",
    )
    parser.add_argument("--gui", action="store_true", help=argparse.SUPPRESS)
    parser.add_argument(
        "--file",
        default=None,
        help="Read this text file instead of the clipboard.",
    )
    parser.add_argument(
        "--watch-clipboard",
        action="store_true",
        help="Start a new session whenever the clipboard changes.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a config.json file (default: user config directory).",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Launch the reader window.

    RULES:
    - Blocks until the window is closed
    - Must be called from the main thread
    - An unreadable config falls back to defaults with a warning
    - The first session starts immediately from the chosen source
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    config_path = Path(args.config) if args.config else None
    on_config_change: Optional[Callable[[Config], None]] = _persist(config_path)
    try:
        config = load_config(config_path)
    except ValueError as e:
        # Keep the broken file for the user to fix; do not overwrite it
        logger.warning("%s; using defaults", e)
        config = Config()
        on_config_change = None

    source: TextSource = FileTextSource(Path(args.file)) if args.file else ClipboardTextSource()
    trigger = TriggerFlag()
    session = ReaderSession(
        config,
        source,
        trigger=trigger,
        on_config_change=on_config_change,
    )

    watcher: Optional[ClipboardWatcher] = None
    if args.watch_clipboard and not args.file:
        watcher = ClipboardWatcher(trigger)
        watcher.start()

    trigger.set()

    root = tk.Tk()
    ReaderWindow(root, session, watcher=watcher)
    try:
        root.mainloop()
    finally:
        if watcher is not None:
            watcher.stop(timeout=1.0)


if __name__ == "__main__":
    main()
