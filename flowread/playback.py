"""Cadence-driven RSVP playback.

The engine owns the cursor into a token list and a cancellable repeating
timer. Anything with the shape of Textual's ``App.set_interval`` can act
as the scheduler: ``scheduler(seconds, callback)`` returning a handle
with ``stop()``.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence, Union

from flowread.text import DEFAULT_WPM, clamp_wpm, interval_ms

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def stop(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]


@dataclass(frozen=True)
class CursorMoved:
    previous: int
    cursor: int
    advanced: bool  # True only for playback ticks


@dataclass(frozen=True)
class StateChanged:
    is_playing: bool
    finished: bool = False


PlaybackEvent = Union[CursorMoved, StateChanged]


class PlaybackEngine:
    """Advances a cursor through ``words`` at ``wpm`` words per minute."""

    def __init__(
        self,
        words: Sequence[str],
        wpm: int = DEFAULT_WPM,
        position: int = 0,
        scheduler: Optional[Scheduler] = None,
    ):
        self.words = list(words)
        self.wpm = clamp_wpm(wpm)
        self.cursor = self._clamp(position)
        self.is_playing = False
        self._scheduler = scheduler
        self._timer: Optional[TimerHandle] = None
        self._listeners: list[Callable[[PlaybackEvent], None]] = []
        self._closed = False

    @property
    def last_index(self) -> int:
        return len(self.words) - 1

    @property
    def current_word(self) -> str:
        if 0 <= self.cursor < len(self.words):
            return self.words[self.cursor]
        return ""

    @property
    def interval_ms(self) -> int:
        return interval_ms(self.wpm)

    @property
    def is_finished(self) -> bool:
        return bool(self.words) and not self.is_playing and self.cursor >= self.last_index

    def add_listener(self, callback: Callable[[PlaybackEvent], None]) -> None:
        self._listeners.append(callback)

    def _emit(self, event: PlaybackEvent) -> None:
        for callback in list(self._listeners):
            callback(event)

    def _clamp(self, index: int) -> int:
        if not self.words:
            return 0
        return max(0, min(self.last_index, int(index)))

    # ------------------------------------------------------------------
    # Timer

    def _start_timer(self) -> None:
        self._cancel_timer()
        if self._scheduler is not None:
            self._timer = self._scheduler(self.interval_ms / 1000, self.tick)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None

    # ------------------------------------------------------------------
    # Commands

    def play(self) -> None:
        if self._closed or self.is_playing or not self.words:
            return
        if self.cursor >= self.last_index:
            self._move(0, advanced=False)
        self.is_playing = True
        self._start_timer()
        self._emit(StateChanged(True))

    def pause(self) -> None:
        if not self.is_playing:
            return
        self._stop()

    def toggle(self) -> None:
        if self.is_playing:
            self.pause()
        else:
            self.play()

    def tick(self) -> None:
        """Advance one word; stop on the last one."""
        if not self.is_playing:
            return
        if self.cursor >= self.last_index:
            self._stop(finished=True)
            return
        self._move(self.cursor + 1, advanced=True)
        if self.cursor >= self.last_index:
            self._stop(finished=True)

    def seek(self, index: int) -> None:
        """Jump to ``index`` (clamped); playback keeps running if it was."""
        self._move(self._clamp(index), advanced=False)

    def step(self, delta: int) -> None:
        self.seek(self.cursor + delta)

    def set_speed(self, wpm: int) -> None:
        wpm = clamp_wpm(wpm)
        if wpm == self.wpm:
            return
        self.wpm = wpm
        if self.is_playing:
            # Restart so the old period cannot fire once more.
            self._start_timer()
        logger.debug("Speed set to %d wpm (%d ms)", wpm, self.interval_ms)

    def close(self) -> None:
        """Cancel the timer for good; the engine ignores later commands."""
        if self.is_playing:
            self._stop()
        self._cancel_timer()
        self._closed = True

    def _move(self, index: int, advanced: bool) -> None:
        previous = self.cursor
        if index == previous:
            return
        self.cursor = index
        self._emit(CursorMoved(previous, index, advanced))

    def _stop(self, finished: bool = False) -> None:
        self._cancel_timer()
        self.is_playing = False
        self._emit(StateChanged(False, finished=finished))
