"""The library: books, settings and stats, kept in memory and persisted.

Every mutation runs its read-modify-write under one lock against the
latest committed state, then hands the serialized slot to the writer.
With an executor the write happens in the background; a single-worker
executor applies writes in commit order.
"""

import json
import logging
import threading
import time
from concurrent.futures import Executor
from dataclasses import asdict, replace
from typing import Callable, Optional

from flowread.config import LIBRARY_KEY, SETTINGS_KEY, STATS_KEY
from flowread.models import (
    DEFAULT_SETTINGS,
    DEFAULT_STATS,
    Book,
    Settings,
    Stats,
    merge_settings,
    merge_stats,
)
from flowread.storage import KeyValueStore

logger = logging.getLogger(__name__)

Listener = Callable[[str], None]


class LibraryStore:
    """Single owner of the book collection, settings and stats."""

    def __init__(
        self,
        store: KeyValueStore,
        executor: Optional[Executor] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._store = store
        self._executor = executor
        self._clock = clock
        self._lock = threading.RLock()
        self._books: tuple[Book, ...] = ()
        self._settings = DEFAULT_SETTINGS
        self._stats = DEFAULT_STATS
        self._loading = True
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Read access

    @property
    def books(self) -> tuple[Book, ...]:
        return self._books

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def stats(self) -> Stats:
        return self._stats

    @property
    def is_loading(self) -> bool:
        return self._loading

    def get_book(self, book_id: str) -> Optional[Book]:
        return next((b for b in self._books if b.id == book_id), None)

    def recent_books(self) -> list[Book]:
        """Books ordered newest first by the time they were added."""
        return sorted(self._books, key=lambda b: b.added_at or 0, reverse=True)

    def add_listener(self, callback: Listener) -> None:
        """Call ``callback(slot_key)`` after each committed change."""
        self._listeners.append(callback)

    # ------------------------------------------------------------------
    # Loading

    def load(self) -> None:
        """Read all three slots, falling back to defaults for bad data."""
        raw_books = self._read_slot(LIBRARY_KEY)
        raw_settings = self._read_slot(SETTINGS_KEY)
        raw_stats = self._read_slot(STATS_KEY)

        books: list[Book] = []
        if isinstance(raw_books, list):
            seen = set()
            for record in raw_books:
                try:
                    book = Book.from_dict(record)
                except (TypeError, ValueError) as e:
                    logger.warning("Skipping unreadable book record: %s", e)
                    continue
                if book.id in seen:
                    logger.warning("Skipping duplicate book %s", book.id)
                    continue
                seen.add(book.id)
                books.append(book)
        elif raw_books is not None:
            logger.warning("Library slot is not a list; starting empty")

        settings = DEFAULT_SETTINGS
        if isinstance(raw_settings, dict):
            settings = merge_settings(DEFAULT_SETTINGS, raw_settings)
        elif raw_settings is not None:
            logger.warning("Settings slot is not an object; using defaults")

        stats = DEFAULT_STATS
        if isinstance(raw_stats, dict):
            stats = merge_stats(DEFAULT_STATS, raw_stats)
        elif raw_stats is not None:
            logger.warning("Stats slot is not an object; using defaults")

        with self._lock:
            self._books = tuple(books)
            self._settings = settings
            self._stats = stats
            self._loading = False
        logger.info("Loaded library with %d books", len(books))

    def _read_slot(self, key: str):
        try:
            raw = self._store.get(key)
        except Exception:
            logger.exception("Failed to read %s", key)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Corrupt data in %s (%s); using defaults", key, e)
            return None

    # ------------------------------------------------------------------
    # Books

    def add_book(self, book: Book) -> bool:
        """Add ``book`` unless one with the same id exists. First write wins."""
        with self._lock:
            if any(b.id == book.id for b in self._books):
                logger.debug("Book %s already in library", book.id)
                return False
            if book.content is not None:
                book = book.with_content(book.content)
            book = replace(book, added_at=self._clock())
            self._commit_books(self._books + (book,))
        logger.info("Added book %s (%s)", book.id, book.title)
        self._notify(LIBRARY_KEY)
        return True

    def remove_book(self, book_id: str) -> bool:
        with self._lock:
            remaining = tuple(b for b in self._books if b.id != book_id)
            if len(remaining) == len(self._books):
                return False
            self._commit_books(remaining)
        logger.info("Removed book %s", book_id)
        self._notify(LIBRARY_KEY)
        return True

    def update_progress(self, book_id: str, position: int) -> bool:
        if isinstance(position, bool) or not isinstance(position, int):
            logger.warning("Ignoring non-integer position %r for %s", position, book_id)
            return False
        return self._update_book(book_id, lambda b: b.with_position(position))

    def update_content(self, book_id: str, content: str) -> bool:
        if not isinstance(content, str):
            logger.warning("Ignoring non-text content for %s", book_id)
            return False
        return self._update_book(book_id, lambda b: b.with_content(content))

    def _update_book(self, book_id: str, change: Callable[[Book], Book]) -> bool:
        with self._lock:
            for i, book in enumerate(self._books):
                if book.id == book_id:
                    updated = self._books[:i] + (change(book),) + self._books[i + 1:]
                    self._commit_books(updated)
                    break
            else:
                logger.debug("No book %s in library", book_id)
                return False
        self._notify(LIBRARY_KEY)
        return True

    def _commit_books(self, books: tuple[Book, ...]) -> None:
        payload = json.dumps([b.to_dict() for b in books])
        self._books = books
        self._write(LIBRARY_KEY, payload)

    # ------------------------------------------------------------------
    # Settings and stats

    def update_settings(self, **changes) -> Settings:
        with self._lock:
            self._settings = merge_settings(self._settings, changes)
            self._write(SETTINGS_KEY, json.dumps(asdict(self._settings)))
            settings = self._settings
        self._notify(SETTINGS_KEY)
        return settings

    def update_stats(self, **changes) -> Stats:
        return self._change_stats(lambda s: merge_stats(s, changes))

    def increment_words_read(self, count: int) -> Stats:
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            logger.warning("Ignoring invalid words-read increment %r", count)
            return self._stats
        return self._change_stats(
            lambda s: replace(s, total_words_read=s.total_words_read + count)
        )

    def add_reading_time(self, seconds: int) -> Stats:
        if isinstance(seconds, bool) or not isinstance(seconds, int) or seconds < 0:
            logger.warning("Ignoring invalid reading time %r", seconds)
            return self._stats
        return self._change_stats(
            lambda s: replace(s, total_reading_time=s.total_reading_time + seconds)
        )

    def increment_books_completed(self) -> Stats:
        return self._change_stats(lambda s: replace(s, books_completed=s.books_completed + 1))

    def reset_stats(self) -> Stats:
        return self._change_stats(lambda s: DEFAULT_STATS)

    def _change_stats(self, change: Callable[[Stats], Stats]) -> Stats:
        with self._lock:
            self._stats = change(self._stats)
            self._write(STATS_KEY, json.dumps(asdict(self._stats)))
            stats = self._stats
        self._notify(STATS_KEY)
        return stats

    # ------------------------------------------------------------------
    # Persistence

    def _write(self, key: str, payload: str) -> None:
        # Called with the lock held so submissions follow commit order.
        if self._executor is None:
            self._write_slot(key, payload)
        else:
            self._executor.submit(self._write_slot, key, payload)

    def _write_slot(self, key: str, payload: str) -> None:
        try:
            self._store.set(key, payload)
        except Exception:
            # Memory already holds the new state; the next change rewrites the slot.
            logger.exception("Failed to save %s", key)

    def _notify(self, key: str) -> None:
        for callback in list(self._listeners):
            callback(key)

    def close(self) -> None:
        """Wait for queued writes to land."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
