"""Tests for tokenizing, fixation points and reading arithmetic."""

import pytest

from flowread.text import (
    clamp_wpm,
    format_reading_time,
    interval_ms,
    orp_index,
    page_anchor,
    page_count,
    page_of,
    progress,
    split_at_orp,
    split_paragraphs,
    tokenize,
)


class TestTokenize:
    def test_simple_sentence(self):
        words = tokenize("Hello world this is a test")
        assert len(words) == 6
        assert words[0] == "Hello"
        assert words[-1] == "test"

    def test_multiple_spaces(self):
        assert len(tokenize("Hello    world   test")) == 3

    def test_newlines(self):
        assert len(tokenize("Hello\nworld\ntest")) == 3

    def test_whitespace_runs_do_not_matter(self):
        assert tokenize("  a \t b\n\n\nc  ") == tokenize("a b c")

    def test_empty(self):
        assert tokenize("") == []
        assert tokenize("   \n\t ") == []


class TestParagraphs:
    def test_split_on_blank_lines(self):
        text = "First line\nstill first.\n\nSecond.\n\n\n  \nThird."
        assert split_paragraphs(text) == ["First line\nstill first.", "Second.", "Third."]

    def test_empty(self):
        assert split_paragraphs("\n\n") == []


class TestOrp:
    @pytest.mark.parametrize(
        "word, expected",
        [
            ("a", 0),
            ("at", 0),
            ("the", 1),
            ("word", 1),
            ("hello", 1),
            ("reading", 2),
            ("beautiful", 3),
            ("presentation", 4),
            ("understanding", 4),
        ],
    )
    def test_orp_index(self, word, expected):
        assert orp_index(word) == expected

    def test_split_at_orp(self):
        assert split_at_orp("reading") == ("re", "a", "ding")
        assert split_at_orp("a") == ("", "a", "")


class TestSpeed:
    @pytest.mark.parametrize(
        "wpm, expected",
        [(300, 200), (200, 300), (400, 150), (500, 120), (600, 100)],
    )
    def test_interval(self, wpm, expected):
        assert interval_ms(wpm) == expected

    @pytest.mark.parametrize(
        "wpm, expected",
        [(50, 100), (100, 100), (300, 300), (800, 800), (1000, 800)],
    )
    def test_clamp(self, wpm, expected):
        assert clamp_wpm(wpm) == expected


class TestProgress:
    def test_progress(self):
        assert progress(0, 100) == 0
        assert progress(25, 100) == 25
        assert progress(50, 100) == 50
        assert progress(100, 100) == 100

    def test_zero_total(self):
        assert progress(0, 0) == 0
        assert progress(42, 0) == 0


class TestPages:
    def test_page_count(self):
        assert page_count(0) == 0
        assert page_count(1) == 1
        assert page_count(250) == 1
        assert page_count(251) == 2

    def test_page_of(self):
        assert page_of(0) == 1
        assert page_of(249) == 1
        assert page_of(250) == 2

    def test_page_anchor(self):
        assert page_anchor(1) == 0
        assert page_anchor(3) == 500


class TestReadingTime:
    @pytest.mark.parametrize(
        "seconds, expected",
        [(30, "30s"), (60, "1m"), (120, "2m"), (3600, "1h 0m"), (3660, "1h 1m"), (7200, "2h 0m")],
    )
    def test_format(self, seconds, expected):
        assert format_reading_time(seconds) == expected
