"""Tests for data models."""

import pytest

from flowread.models import (
    DEFAULT_SETTINGS,
    DEFAULT_STATS,
    Book,
    Settings,
    Stats,
    merge_settings,
    merge_stats,
)


class TestBook:
    def test_defaults(self):
        book = Book(id="abc", title="Test")
        assert book.author == "Unknown Author"
        assert book.content is None
        assert book.total_words is None
        assert not book.has_content

    def test_with_content(self):
        book = Book(id="abc", title="Test").with_content("a  b\nc")
        assert book.total_words == 3
        assert book.has_content

    def test_with_position_without_content(self):
        assert Book(id="abc", title="T").with_position(7).current_position == 7

    def test_position_dropped_for_empty_content(self):
        book = Book(id="abc", title="T", current_position=3).with_content("   ")
        assert book.total_words == 0
        assert book.current_position is None

    def test_to_dict_from_dict(self):
        book = Book(id="abc", title="T", subjects=("Fiction", "Sea")).with_content("x y")
        data = book.to_dict()
        assert data["subjects"] == ["Fiction", "Sea"]
        assert Book.from_dict(data) == book

    def test_from_dict_drops_unknown_and_bad_fields(self):
        book = Book.from_dict({
            "id": "abc",
            "title": None,
            "publish_year": "1851",
            "shelf": "top",
            "total_words": 12,
        })
        assert book.title == "Untitled"
        assert book.publish_year is None
        assert book.total_words is None

    def test_from_dict_requires_id(self):
        with pytest.raises(ValueError):
            Book.from_dict({"title": "No id"})


class TestSettingsMerge:
    def test_defaults(self):
        assert DEFAULT_SETTINGS == Settings(300, "medium", "system", "rsvp")

    def test_merge_keeps_other_fields(self):
        merged = merge_settings(DEFAULT_SETTINGS, {"theme": "light"})
        assert merged.theme == "light"
        assert merged.words_per_minute == 300

    def test_rejects_bad_values(self):
        merged = merge_settings(DEFAULT_SETTINGS, {"words_per_minute": "fast", "font_size": 3})
        assert merged == DEFAULT_SETTINGS

    def test_clamps_speed(self):
        assert merge_settings(DEFAULT_SETTINGS, {"words_per_minute": 20}).words_per_minute == 100


class TestStatsMerge:
    def test_defaults(self):
        assert DEFAULT_STATS == Stats(0, 0, 0)

    def test_merge(self):
        merged = merge_stats(DEFAULT_STATS, {"books_completed": 4, "streak": 9})
        assert merged.books_completed == 4
        assert merged.total_words_read == 0

    def test_rejects_negative_and_bool(self):
        assert merge_stats(DEFAULT_STATS, {"total_words_read": -1, "books_completed": True}) == DEFAULT_STATS
