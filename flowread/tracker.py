"""Batches reading progress into periodic library writes."""

import logging
import time
from typing import Callable, Optional

from flowread.library import LibraryStore
from flowread.playback import (
    CursorMoved,
    PlaybackEngine,
    PlaybackEvent,
    Scheduler,
    StateChanged,
    TimerHandle,
)

logger = logging.getLogger(__name__)

FLUSH_INTERVAL = 5.0


class ProgressTracker:
    """Collects words read and reading time for one open book.

    Cursor movement only touches in-memory counters. ``flush`` writes the
    latest cursor, the words advanced since the last flush, elapsed
    reading time and a completed book (at most once) to the library.
    """

    def __init__(
        self,
        library: LibraryStore,
        book_id: str,
        position: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.library = library
        self.book_id = book_id
        self.cursor = position
        self.pending_words = 0
        self._flushed_cursor = position
        self._clock = clock
        self._reading_since: Optional[float] = None
        self._pending_seconds = 0.0
        self._finished = False
        self._completion_recorded = False
        self._timer: Optional[TimerHandle] = None

    def attach(self, engine: PlaybackEngine) -> None:
        engine.add_listener(self.on_playback_event)

    def on_playback_event(self, event: PlaybackEvent) -> None:
        if isinstance(event, CursorMoved):
            if event.advanced and event.cursor > event.previous:
                self.pending_words += event.cursor - event.previous
            self.cursor = event.cursor
        elif isinstance(event, StateChanged):
            if event.is_playing:
                self.resume_clock()
            else:
                self.pause_clock()
            if event.finished:
                self._finished = True

    def move_to(self, position: int, *, count: bool = True) -> None:
        """Record a position from the scroll reader; only forward moves count."""
        if count and position > self.cursor:
            self.pending_words += position - self.cursor
        self.cursor = position

    def mark_finished(self) -> None:
        self._finished = True

    # ------------------------------------------------------------------
    # Reading time

    def resume_clock(self) -> None:
        if self._reading_since is None:
            self._reading_since = self._clock()

    def pause_clock(self) -> None:
        self._collect_time()
        self._reading_since = None

    def _collect_time(self) -> None:
        if self._reading_since is not None:
            now = self._clock()
            self._pending_seconds += max(0.0, now - self._reading_since)
            self._reading_since = now

    # ------------------------------------------------------------------
    # Flushing

    def start(self, scheduler: Scheduler) -> None:
        self._cancel_timer()
        self._timer = scheduler(FLUSH_INTERVAL, self.flush)

    def flush(self) -> bool:
        """Write pending progress to the library. Returns True if anything was written."""
        self._collect_time()
        seconds = int(self._pending_seconds)
        complete = self._finished and not self._completion_recorded
        moved = self.cursor != self._flushed_cursor
        if not (self.pending_words or moved or seconds or complete):
            return False

        self.library.update_progress(self.book_id, self.cursor)
        self._flushed_cursor = self.cursor
        if self.pending_words:
            self.library.increment_words_read(self.pending_words)
            self.pending_words = 0
        if seconds:
            self.library.add_reading_time(seconds)
            self._pending_seconds -= seconds
        if complete:
            self.library.increment_books_completed()
            self._completion_recorded = True
            logger.info("Finished book %s", self.book_id)
        logger.debug("Flushed progress for %s at %d", self.book_id, self.cursor)
        return True

    def stop(self) -> None:
        """Cancel the periodic flush and write everything still pending."""
        self._cancel_timer()
        self.pause_clock()
        self.flush()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
