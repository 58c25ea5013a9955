"""Tests for the RSVP playback engine."""

import pytest

from flowread.playback import CursorMoved, PlaybackEngine, StateChanged

WORDS = ["one", "two", "three", "four", "five"]


@pytest.fixture
def events():
    return []


@pytest.fixture
def engine(scheduler, events):
    eng = PlaybackEngine(WORDS, wpm=300, scheduler=scheduler)
    eng.add_listener(events.append)
    return eng


class TestPlayPause:
    def test_play_starts_timer_at_wpm_interval(self, engine, scheduler):
        engine.play()
        assert engine.is_playing
        assert len(scheduler.active) == 1
        assert scheduler.active[0].interval == pytest.approx(0.2)

    def test_tick_advances(self, engine, scheduler, events):
        engine.play()
        scheduler.fire()
        assert engine.cursor == 1
        assert CursorMoved(0, 1, True) in events

    def test_pause_cancels_timer(self, engine, scheduler):
        engine.play()
        timer = scheduler.active[0]
        engine.pause()
        assert not engine.is_playing
        assert timer.stopped
        assert scheduler.active == []

    def test_stale_tick_after_pause_is_ignored(self, engine, scheduler):
        engine.play()
        timer = scheduler.active[0]
        engine.pause()
        timer.callback()
        assert engine.cursor == 0

    def test_toggle(self, engine):
        engine.toggle()
        assert engine.is_playing
        engine.toggle()
        assert not engine.is_playing


class TestEndOfContent:
    def test_end_stop(self, engine, scheduler, events):
        engine.seek(len(WORDS) - 2)
        engine.play()
        scheduler.fire()
        assert engine.cursor == len(WORDS) - 1
        assert not engine.is_playing
        assert StateChanged(False, finished=True) in events
        assert scheduler.active == []

    def test_never_passes_last_word(self, engine, scheduler):
        engine.play()
        scheduler.fire(times=20)
        assert engine.cursor == len(WORDS) - 1
        assert engine.is_finished

    def test_play_after_finish_loops_back(self, engine):
        engine.seek(len(WORDS) - 1)
        engine.play()
        assert engine.cursor == 0
        assert engine.is_playing

    def test_empty_sequence_play_is_noop(self, scheduler):
        eng = PlaybackEngine([], scheduler=scheduler)
        eng.play()
        assert not eng.is_playing
        assert eng.cursor == 0
        assert scheduler.timers == []
        assert eng.current_word == ""


class TestSeek:
    def test_seek_clamps(self, engine):
        engine.seek(-5)
        assert engine.cursor == 0
        engine.seek(99)
        assert engine.cursor == len(WORDS) - 1

    def test_seek_while_playing_keeps_playing(self, engine, scheduler, events):
        engine.play()
        engine.seek(3)
        assert engine.is_playing
        assert CursorMoved(0, 3, False) in events
        scheduler.fire()
        assert engine.cursor == 4

    def test_step(self, engine):
        engine.step(2)
        engine.step(-1)
        assert engine.cursor == 1
        assert engine.current_word == "two"

    def test_initial_position_is_clamped(self):
        assert PlaybackEngine(WORDS, position=42).cursor == 4

    def test_seek_on_empty_sequence(self):
        eng = PlaybackEngine([])
        eng.seek(10)
        assert eng.cursor == 0


class TestSpeed:
    def test_set_speed_clamps(self, engine):
        engine.set_speed(50)
        assert engine.wpm == 100
        engine.set_speed(1000)
        assert engine.wpm == 800

    def test_speed_change_while_playing_reschedules(self, engine, scheduler):
        engine.play()
        old = scheduler.active[0]
        engine.set_speed(600)
        assert old.stopped
        assert len(scheduler.active) == 1
        assert scheduler.active[0].interval == pytest.approx(0.1)

    def test_speed_change_while_idle_has_no_timer(self, engine, scheduler):
        engine.set_speed(400)
        assert scheduler.timers == []
        engine.play()
        assert scheduler.active[0].interval == pytest.approx(0.15)


class TestClose:
    def test_close_cancels_and_ignores_commands(self, engine, scheduler):
        engine.play()
        engine.close()
        assert scheduler.active == []
        engine.play()
        assert not engine.is_playing
