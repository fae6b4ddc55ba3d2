"""Unit tests for the RSVP pacing engine.

WHY: The engine is the only component with real invariants: cursor
bounds, the position-based speed ramp, pause/resume freshness, and speed
clamping. A regression here shows up as skipped words, stuck playback, or
a reader suddenly flung to 1200 WPM.

HOW: Tests drive the engine with the FakeClock fixture so every advance is
deterministic. They are organized by concern:
  - TestConstruction: tokenization, initial state, empty input
  - TestUpdate: polling, advancing, the reference scenario, finishing
  - TestRamp: warmup interpolation and completion
  - TestPauseResume: suppression and fresh display windows
  - TestSeek: relative and absolute seeks with clamping
  - TestSpeed: adjust_speed() clamping and ramp bypass
  - TestReset: rewinding to idle
  - TestState: PlaybackState transitions

RULES:
- Each test builds its own engine and clock
- Advancing a word means: move the clock past any display time, then update()
"""

import pytest

from speed_reader.core.engine import MAX_WPM, MIN_WPM, PlaybackState, RSVPEngine
from speed_reader.core.word import display_time_for

# Longer than any word's display time at the speeds used here
_PAST_ANY_WORD_S = 5.0


def _text(count):
    return " ".join("word{}".format(i) for i in range(count))


def _engine(clock, text="one two three four five", start=300, target=300, warmup=0, **kwargs):
    return RSVPEngine(text, start, target, warmup, clock=clock, **kwargs)


def _advance(engine, clock, times=1):
    """Force ``times`` word advances and return the words yielded."""
    yielded = []
    for _ in range(times):
        clock.advance(_PAST_ANY_WORD_S)
        yielded.append(engine.update())
    return yielded


# ---------------------------------------------------------------------------
# TestConstruction
# ---------------------------------------------------------------------------


class TestConstruction:
    """RSVPEngine() splits text on whitespace and starts at index 0."""

    def test_splits_on_any_whitespace(self, clock):
        engine = _engine(clock, text="  alpha\tbeta\n\ngamma  ")
        assert [w.text for w in engine.words] == ["alpha", "beta", "gamma"]

    def test_initial_state(self, clock):
        engine = _engine(clock, start=250, target=400, warmup=5)
        assert engine.current_index == 0
        assert engine.current_wpm == 250
        assert engine.target_wpm == 400
        assert engine.start_wpm == 250
        assert engine.warmup_words == 5
        assert not engine.is_paused
        assert not engine.is_finished
        assert engine.progress == 0.0

    def test_words_built_at_start_wpm(self, clock):
        engine = _engine(clock, text="hello", start=300, target=600, warmup=3)
        assert engine.words[0].display_time_s == pytest.approx(display_time_for("hello", 300))

    def test_words_built_at_clamped_start_wpm(self, clock):
        engine = _engine(clock, text="hello there", start=50, target=300, warmup=3)
        assert engine.current_wpm == MIN_WPM
        for word in engine.words:
            assert word.display_time_s == pytest.approx(display_time_for(word.text, MIN_WPM))

    def test_len_and_word_count(self, clock):
        engine = _engine(clock)
        assert len(engine) == 5
        assert engine.word_count == 5

    @pytest.mark.parametrize("text", ["", "   ", "\n\t \n"])
    def test_empty_text_is_finished(self, clock, text):
        engine = _engine(clock, text=text)
        assert engine.is_finished
        assert engine.current_word is None
        assert engine.progress == 0.0
        assert engine.update() is None
        assert engine.state == PlaybackState.FINISHED

    def test_start_wpm_below_minimum_is_clamped(self, clock):
        engine = _engine(clock, start=50, target=300)
        assert engine.current_wpm == MIN_WPM

    def test_custom_bounds(self, clock):
        engine = _engine(clock, start=300, target=300, min_wpm=200, max_wpm=500)
        engine.adjust_speed(1000)
        assert engine.current_wpm == 500
        engine.adjust_speed(-1000)
        assert engine.current_wpm == 200


# ---------------------------------------------------------------------------
# TestUpdate
# ---------------------------------------------------------------------------


class TestUpdate:
    """update() returns the current word and advances once it has expired."""

    def test_returns_current_word_before_expiry(self, clock):
        engine = _engine(clock)
        word = engine.update()
        assert word.text == "one"
        assert engine.current_index == 0

    def test_repeated_polls_without_time_do_not_advance(self, clock):
        engine = _engine(clock)
        for _ in range(10):
            engine.update()
        assert engine.current_index == 0

    def test_does_not_advance_just_before_expiry(self, clock):
        engine = _engine(clock, text="hello world")
        clock.advance(display_time_for("hello", 300) * 0.99)
        engine.update()
        assert engine.current_index == 0

    def test_advances_at_expiry_and_returns_old_word(self, clock):
        engine = _engine(clock, text="hello world")
        clock.advance(display_time_for("hello", 300))
        word = engine.update()
        assert word.text == "hello"
        assert engine.current_index == 1
        assert engine.current_word.text == "world"

    def test_new_word_gets_full_window_after_advance(self, clock):
        engine = _engine(clock, text="hello world")
        clock.advance(display_time_for("hello", 300))
        engine.update()
        clock.advance(display_time_for("world", 300) * 0.5)
        engine.update()
        assert engine.current_index == 1

    def test_scenario_yields_words_in_order(self, clock, scenario_text, scenario_words):
        engine = _engine(clock, text=scenario_text)
        yielded = _advance(engine, clock, times=5)
        assert [w.text for w in yielded] == scenario_words
        assert engine.is_finished
        assert engine.progress == 1.0

    def test_finished_update_is_idempotent(self, clock, scenario_text):
        engine = _engine(clock, text=scenario_text)
        _advance(engine, clock, times=5)
        for _ in range(3):
            clock.advance(_PAST_ANY_WORD_S)
            assert engine.update() is None
            assert engine.current_index == 5
        assert engine.current_word is None

    def test_progress_tracks_index(self, clock):
        engine = _engine(clock, text=_text(8))
        for expected_index in range(1, 9):
            _advance(engine, clock)
            assert engine.progress == pytest.approx(expected_index / 8)
            assert 0.0 <= engine.progress <= 1.0

    def test_returned_word_is_timed_at_current_wpm(self, clock):
        engine = _engine(clock, text=_text(20), start=300, target=400, warmup=10)
        _advance(engine, clock, times=5)
        word = engine.update()
        assert word.display_time_s == pytest.approx(display_time_for(word.text, engine.current_wpm))

    def test_word_order_and_count_never_change(self, clock):
        engine = _engine(clock, text=_text(6), start=300, target=600, warmup=4)
        before = [w.text for w in engine.words]
        _advance(engine, clock, times=3)
        engine.adjust_speed(100)
        _advance(engine, clock, times=3)
        assert [w.text for w in engine.words] == before


# ---------------------------------------------------------------------------
# TestRamp
# ---------------------------------------------------------------------------


class TestRamp:
    """current_wpm ramps linearly by words advanced, then holds at target."""

    def test_midpoint_of_ramp(self, clock):
        engine = _engine(clock, text=_text(20), start=300, target=400, warmup=10)
        _advance(engine, clock, times=5)
        assert engine.current_index == 5
        assert engine.current_wpm == 350

    def test_ramp_completes_at_warmup_words(self, clock):
        engine = _engine(clock, text=_text(20), start=300, target=400, warmup=10)
        _advance(engine, clock, times=10)
        assert engine.current_wpm == 400

    def test_holds_target_after_warmup(self, clock):
        engine = _engine(clock, text=_text(20), start=300, target=400, warmup=10)
        _advance(engine, clock, times=15)
        assert engine.current_wpm == 400

    def test_ramp_truncates_to_integer(self, clock):
        engine = _engine(clock, text=_text(5), start=300, target=400, warmup=3)
        assert engine.wpm_at(1) == 333
        assert engine.wpm_at(2) == 366

    def test_ramp_matches_integer_formula_at_every_position(self, clock):
        engine = _engine(clock, text=_text(120), start=100, target=200, warmup=100)
        mismatches = [
            (i, engine.wpm_at(i), 100 + (100 * i) // 100)
            for i in range(100)
            if engine.wpm_at(i) != 100 + (100 * i) // 100
        ]
        assert mismatches == []
        assert engine.wpm_at(29) == 129

    def test_decreasing_ramp_truncates_toward_start(self, clock):
        engine = _engine(clock, text=_text(5), start=400, target=300, warmup=3)
        assert engine.wpm_at(1) == 367
        assert engine.wpm_at(2) == 334

    def test_zero_warmup_uses_target_immediately(self, clock):
        engine = _engine(clock, start=300, target=500, warmup=0)
        engine.update()
        assert engine.current_wpm == 500

    def test_decreasing_ramp(self, clock):
        engine = _engine(clock, text=_text(20), start=400, target=300, warmup=10)
        assert engine.wpm_at(5) == 350
        assert engine.wpm_at(10) == 300

    def test_ramp_is_independent_of_dwell_time(self, clock):
        engine = _engine(clock, text=_text(20), start=300, target=400, warmup=10)
        _advance(engine, clock, times=2)
        clock.advance(0.001)
        engine.update()
        assert engine.current_wpm == 320
        engine.pause()
        clock.advance(600.0)
        engine.resume()
        engine.update()
        assert engine.current_wpm == 320
        assert engine.current_index == 2


# ---------------------------------------------------------------------------
# TestPauseResume
# ---------------------------------------------------------------------------


class TestPauseResume:
    """pause() suppresses advancing; resume() restarts the word's window."""

    def test_paused_update_returns_none(self, clock):
        engine = _engine(clock)
        engine.pause()
        clock.advance(_PAST_ANY_WORD_S)
        assert engine.update() is None
        assert engine.current_index == 0

    def test_pause_is_idempotent(self, clock):
        engine = _engine(clock)
        engine.pause()
        engine.pause()
        assert engine.is_paused

    def test_resume_gives_fresh_window(self, clock):
        engine = _engine(clock)
        engine.update()
        engine.pause()
        clock.advance(_PAST_ANY_WORD_S)
        engine.resume()
        word = engine.update()
        assert word.text == "one"
        assert engine.current_index == 0

    def test_toggle_pause(self, clock):
        engine = _engine(clock)
        engine.toggle_pause()
        assert engine.is_paused
        engine.toggle_pause()
        assert not engine.is_paused


# ---------------------------------------------------------------------------
# TestSeek
# ---------------------------------------------------------------------------


class TestSeek:
    """seek() and seek_to() clamp to [0, len - 1] and restart the window."""

    def test_seek_forward(self, clock):
        engine = _engine(clock)
        engine.seek(2)
        assert engine.current_index == 2
        assert engine.current_word.text == "three"

    def test_seek_before_start_clamps_to_zero(self, clock):
        engine = _engine(clock)
        engine.seek(1)
        engine.seek(-10)
        assert engine.current_index == 0

    def test_seek_past_end_clamps_to_last_word(self, clock):
        engine = _engine(clock)
        engine.seek(100)
        assert engine.current_index == 4
        assert not engine.is_finished

    def test_seek_from_finished_lands_on_last_word(self, clock):
        engine = _engine(clock)
        _advance(engine, clock, times=5)
        engine.seek(-1)
        assert engine.current_index == 4

    def test_seek_to_clamps(self, clock):
        engine = _engine(clock)
        engine.seek_to(3)
        assert engine.current_index == 3
        engine.seek_to(-5)
        assert engine.current_index == 0
        engine.seek_to(99)
        assert engine.current_index == 4

    @pytest.mark.parametrize("delta", [-3, 0, 3])
    def test_seek_on_empty_engine_stays_at_zero(self, clock, delta):
        engine = _engine(clock, text="")
        engine.seek(delta)
        assert engine.current_index == 0

    def test_every_seek_stays_in_bounds(self, clock):
        engine = _engine(clock, text=_text(7))
        for delta in (-20, -1, 0, 1, 3, 6, 20, -7):
            engine.seek(delta)
            assert 0 <= engine.current_index <= 6

    def test_seek_restarts_display_window(self, clock):
        engine = _engine(clock)
        clock.advance(_PAST_ANY_WORD_S)
        engine.seek(1)
        engine.update()
        assert engine.current_index == 1


# ---------------------------------------------------------------------------
# TestSpeed
# ---------------------------------------------------------------------------


class TestSpeed:
    """adjust_speed() clamps to [MIN_WPM, MAX_WPM] and applies at once."""

    def test_adjust_sets_target_and_current(self, clock):
        engine = _engine(clock, start=300, target=400, warmup=10)
        engine.adjust_speed(25)
        assert engine.target_wpm == 425
        assert engine.current_wpm == 425

    @pytest.mark.parametrize("delta", [10_000, 900, -900, -10_000])
    def test_adjust_is_clamped(self, clock, delta):
        engine = _engine(clock, start=300, target=400)
        engine.adjust_speed(delta)
        assert MIN_WPM <= engine.target_wpm <= MAX_WPM
        assert MIN_WPM <= engine.current_wpm <= MAX_WPM

    def test_upper_bound(self, clock):
        engine = _engine(clock)
        engine.adjust_speed(10_000)
        assert engine.current_wpm == MAX_WPM == 1200

    def test_lower_bound(self, clock):
        engine = _engine(clock)
        engine.adjust_speed(-10_000)
        assert engine.current_wpm == MIN_WPM == 100

    def test_adjust_after_warmup_persists(self, clock):
        engine = _engine(clock, text=_text(10), start=300, target=400, warmup=2)
        _advance(engine, clock, times=3)
        engine.adjust_speed(-50)
        engine.update()
        assert engine.current_wpm == 350

    def test_adjust_during_warmup_retargets_ramp(self, clock):
        engine = _engine(clock, text=_text(20), start=300, target=400, warmup=10)
        _advance(engine, clock, times=5)
        engine.adjust_speed(100)
        assert engine.current_wpm == 500
        engine.update()
        assert engine.current_wpm == 400


# ---------------------------------------------------------------------------
# TestReset
# ---------------------------------------------------------------------------


class TestReset:
    """reset() rewinds to word 0 and the start of the ramp."""

    def test_reset_rewinds(self, clock):
        engine = _engine(clock, text=_text(20), start=300, target=400, warmup=10)
        _advance(engine, clock, times=7)
        engine.reset()
        assert engine.current_index == 0
        assert engine.current_wpm == 300
        assert engine.state == PlaybackState.IDLE

    def test_reset_from_finished_is_playable(self, clock, scenario_text):
        engine = _engine(clock, text=scenario_text)
        _advance(engine, clock, times=5)
        engine.reset()
        assert not engine.is_finished
        assert engine.update().text == "Hello,"


# ---------------------------------------------------------------------------
# TestState
# ---------------------------------------------------------------------------


class TestState:
    """PlaybackState reflects idle → playing ⇄ paused → finished."""

    def test_idle_before_first_poll(self, clock):
        assert _engine(clock).state == PlaybackState.IDLE

    def test_playing_after_poll(self, clock):
        engine = _engine(clock)
        engine.update()
        assert engine.state == PlaybackState.PLAYING

    def test_paused(self, clock):
        engine = _engine(clock)
        engine.update()
        engine.pause()
        assert engine.state == PlaybackState.PAUSED

    def test_finished(self, clock):
        engine = _engine(clock, text="one")
        _advance(engine, clock)
        assert engine.state == PlaybackState.FINISHED

    def test_state_serializes_as_string(self):
        assert PlaybackState.PLAYING == "playing"
