"""Core pacing model: words with ORP placement and the RSVP playback engine."""

from speed_reader.core.engine import MAX_WPM, MIN_WPM, PlaybackState, RSVPEngine
from speed_reader.core.word import Word

__all__ = ["MAX_WPM", "MIN_WPM", "PlaybackState", "RSVPEngine", "Word"]
