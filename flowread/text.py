"""Text helpers shared by the RSVP and scroll readers."""

import math
import re

MIN_WPM = 100
MAX_WPM = 800
DEFAULT_WPM = 300

WORDS_PER_PAGE = 250

_WHITESPACE = re.compile(r"\s+")
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


def tokenize(content: str) -> list[str]:
    """Split text into words for RSVP display.

    Runs of whitespace (newlines included) separate words and empty
    strings are dropped, so ``len(tokenize(content))`` is the word
    count every other component uses.
    """
    if not content:
        return []
    return [w for w in _WHITESPACE.split(content) if w]


def split_paragraphs(content: str) -> list[str]:
    """Split text on blank lines for the scroll reader."""
    if not content:
        return []
    paragraphs = (p.strip() for p in _PARAGRAPH_BREAK.split(content))
    return [p for p in paragraphs if p]


def orp_index(word: str) -> int:
    """Index of the Optimal Recognition Point, about a third into the word."""
    length = len(word)
    if length <= 1:
        return 0
    return length // 3


def split_at_orp(word: str) -> tuple[str, str, str]:
    """Return (before, focus letter, after) around the fixation point."""
    idx = orp_index(word)
    return word[:idx], word[idx:idx + 1], word[idx + 1:]


def clamp_wpm(wpm: int) -> int:
    return max(MIN_WPM, min(MAX_WPM, int(wpm)))


def interval_ms(wpm: int) -> int:
    """Milliseconds each word stays on screen at ``wpm``."""
    return round(60000 / wpm)


def progress(current: int, total: int) -> float:
    """Reading progress in percent; 0 for empty books."""
    if total <= 0:
        return 0
    return current / total * 100


def page_count(total_words: int) -> int:
    if total_words <= 0:
        return 0
    return math.ceil(total_words / WORDS_PER_PAGE)


def page_of(index: int) -> int:
    """1-based page holding the word at ``index``."""
    return max(0, index) // WORDS_PER_PAGE + 1


def page_anchor(page: int) -> int:
    """First word index of a 1-based page."""
    return (max(1, page) - 1) * WORDS_PER_PAGE


def format_reading_time(seconds: int) -> str:
    seconds = int(seconds)
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m"
    return f"{seconds // 3600}h {(seconds % 3600) // 60}m"
