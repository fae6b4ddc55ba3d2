"""Shared test fixtures for the speed_reader test suite.

WHY: Pacing is time-driven. Tests must control time exactly instead of
sleeping, and must never read or write the user's real config file.

HOW: FakeClock is a callable monotonic clock that only moves when a test
advances it; it is injected into engines and sessions. The isolated_config
fixture points SPEED_READER_CONFIG at a temp file for every test.

RULES:
- scenario_text is the five-word reference passage used across modules
- Every test gets its own clock and config path (no shared mutable state)
"""

import pytest

SCENARIO_TEXT = "Hello, world. This is RSVP."
SCENARIO_WORDS = ["Hello,", "world.", "This", "is", "RSVP."]


class FakeClock:
    """Manually advanced stand-in for time.monotonic()."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scenario_text():
    return SCENARIO_TEXT


@pytest.fixture
def scenario_words():
    return list(SCENARIO_WORDS)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Route the default config path into the test's temp directory."""
    path = tmp_path / "speed-reader" / "config.json"
    monkeypatch.setenv("SPEED_READER_CONFIG", str(path))
    return path
