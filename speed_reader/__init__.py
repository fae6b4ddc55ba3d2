"""Speed Reader — RSVP pacing engine with a clipboard-driven reading window.

WHY: Reading long passages one word at a time at a fixed fixation point
removes saccades and lets a reader sustain speeds well above normal page
reading. The hard part is pacing: words need natural pauses at punctuation,
longer words need longer dwell, and speed should ramp up instead of
starting at full rate.

HOW: Three layers — core (Word + RSVPEngine pacing model), host session
(trigger/text acquisition, key actions, remembered position), and
surfaces (console CLI, tkinter window). Each layer is independently
testable; the core has no platform dependencies.

RULES:
- The engine is polled; it never sleeps, spawns threads, or blocks
- All platform concerns (clipboard, hotkeys, windows) live outside core
- Configuration is loaded once at startup and passed down explicitly
"""

__version__ = "0.1.0"
