"""Data types persisted by the library: books, settings and stats."""

import logging
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Optional

from flowread.text import DEFAULT_WPM, clamp_wpm, tokenize

logger = logging.getLogger(__name__)

FONT_SIZES = ("small", "medium", "large")
THEMES = ("system", "light", "dark")
READING_MODES = ("rsvp", "normal")


@dataclass(frozen=True)
class Book:
    id: str
    title: str
    author: str = "Unknown Author"
    cover_url: Optional[str] = None
    description: str = ""
    publish_year: Optional[int] = None
    page_count: Optional[int] = None
    subjects: tuple[str, ...] = ()
    # Reading state
    content: Optional[str] = None
    total_words: Optional[int] = None
    current_position: Optional[int] = None
    added_at: Optional[float] = None

    @property
    def has_content(self) -> bool:
        return self.content is not None

    def with_content(self, content: str) -> "Book":
        """Copy with new content, a fresh word count and a position kept in range."""
        total = len(tokenize(content))
        return replace(
            self,
            content=content,
            total_words=total,
            current_position=_clamp_position(self.current_position, total),
        )

    def with_position(self, position: int) -> "Book":
        return replace(self, current_position=_clamp_position(position, self.total_words))

    def to_dict(self) -> dict:
        data = asdict(self)
        data["subjects"] = list(self.subjects)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Book":
        """Build a book from stored JSON, dropping unknown keys.

        Raises ValueError when the record has no usable id.
        """
        if not isinstance(data, dict):
            raise ValueError("book record is not an object")
        book_id = data.get("id")
        if not isinstance(book_id, str) or not book_id:
            raise ValueError("book record has no id")

        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        values["title"] = str(values.get("title") or "Untitled")
        values["author"] = str(values.get("author") or "Unknown Author")
        values["description"] = str(values.get("description") or "")
        if not isinstance(values.get("cover_url"), str):
            values["cover_url"] = None
        subjects = values.get("subjects")
        values["subjects"] = tuple(str(s) for s in subjects) if isinstance(subjects, (list, tuple)) else ()
        for key in ("publish_year", "page_count", "current_position"):
            if not isinstance(values.get(key), int) or isinstance(values.get(key), bool):
                values[key] = None
        if not isinstance(values.get("added_at"), (int, float)):
            values["added_at"] = None

        book = cls(**values)
        content = book.content if isinstance(book.content, str) else None
        if content is None:
            return replace(book, content=None, total_words=None)
        # Word counts are always derived from the content, never trusted.
        return book.with_content(content)


def _clamp_position(position: Optional[int], total: Optional[int]) -> Optional[int]:
    if position is None:
        return None
    position = max(0, int(position))
    if total is None:
        return position
    if total <= 0:
        return None
    return min(position, total - 1)


@dataclass(frozen=True)
class Settings:
    words_per_minute: int = DEFAULT_WPM
    font_size: str = "medium"
    theme: str = "system"
    reading_mode: str = "rsvp"


@dataclass(frozen=True)
class Stats:
    total_words_read: int = 0
    books_completed: int = 0
    total_reading_time: int = 0  # seconds


DEFAULT_SETTINGS = Settings()
DEFAULT_STATS = Stats()

_CHOICES = {
    "font_size": FONT_SIZES,
    "theme": THEMES,
    "reading_mode": READING_MODES,
}


def _valid_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _settings_value(name: str, value: Any) -> Any:
    """Validated settings value, or None when it must be ignored."""
    if name == "words_per_minute":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return clamp_wpm(value)
    if value in _CHOICES[name]:
        return value
    return None


def merge_settings(current: Settings, changes: dict) -> Settings:
    """Merge ``changes`` over ``current`` field by field.

    Unknown keys and invalid values are ignored so a bad partial update
    never corrupts stored settings.
    """
    merged = {}
    for name, value in changes.items():
        if name not in _CHOICES and name != "words_per_minute":
            logger.warning("Ignoring unknown setting %r", name)
            continue
        checked = _settings_value(name, value)
        if checked is None:
            logger.warning("Ignoring invalid value %r for setting %r", value, name)
            continue
        merged[name] = checked
    return replace(current, **merged)


def merge_stats(current: Stats, changes: dict) -> Stats:
    known = {f.name for f in fields(Stats)}
    merged = {}
    for name, value in changes.items():
        if name not in known:
            logger.warning("Ignoring unknown stat %r", name)
        elif not _valid_count(value):
            logger.warning("Ignoring invalid value %r for stat %r", value, name)
        else:
            merged[name] = value
    return replace(current, **merged)
