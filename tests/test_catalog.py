"""Tests for the Open Library / Gutenberg client, using a fake session."""

import requests

from flowread.catalog import (
    GUTENDEX_URL,
    OpenLibraryClient,
    clean_gutenberg_text,
    cover_url,
    merge_details,
    sample_content,
)
from flowread.models import Book


class FakeResponse:
    def __init__(self, payload=None, text="", status=200):
        self.payload = payload
        self.text = text
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self.payload is None:
            raise ValueError("no json")
        return self.payload


class FakeSession:
    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params))
        route = self.routes.get(url)
        if isinstance(route, Exception):
            raise route
        if route is None:
            return FakeResponse(status=404)
        return route


GUTENBERG_TEXT = (
    "The Project Gutenberg eBook header\r\n"
    "*** START OF THE PROJECT GUTENBERG EBOOK MOBY DICK ***\r\n"
    "CHAPTER 1\r\n\r\n\r\n\r\nCall me Ishmael.\r\n"
    "*** END OF THE PROJECT GUTENBERG EBOOK MOBY DICK ***\r\nlicense"
)


def test_cover_url():
    assert cover_url(12345, "M") == "https://covers.openlibrary.org/b/id/12345-M.jpg"
    assert cover_url(12345, "L") == "https://covers.openlibrary.org/b/id/12345-L.jpg"
    assert cover_url(None) is None


def test_clean_gutenberg_text():
    assert clean_gutenberg_text(GUTENBERG_TEXT) == "CHAPTER 1\n\nCall me Ishmael."


def test_clean_text_without_markers():
    assert clean_gutenberg_text("  plain\n\n\n\ntext  ") == "plain\n\ntext"


def test_sample_content_mentions_title():
    assert '"Moby Dick"' in sample_content("Moby Dick")


class TestSearch:
    def test_search_maps_results(self):
        session = FakeSession({
            "https://openlibrary.org/search.json": FakeResponse({
                "docs": [{
                    "key": "/works/OL102749W",
                    "title": "Moby Dick",
                    "author_name": ["Herman Melville"],
                    "cover_i": 7,
                    "first_publish_year": 1851,
                    "subject": ["a", "b", "c", "d", "e", "f"],
                }]
            })
        })
        books = OpenLibraryClient(session).search("moby")
        assert len(books) == 1
        book = books[0]
        assert book.id == "OL102749W"
        assert book.author == "Herman Melville"
        assert book.cover_url.endswith("/7-M.jpg")
        assert book.publish_year == 1851
        assert len(book.subjects) == 5
        assert session.calls[0][1]["q"] == "moby"

    def test_search_failure_returns_empty(self):
        session = FakeSession({
            "https://openlibrary.org/search.json": requests.ConnectionError("offline"),
        })
        assert OpenLibraryClient(session).search("moby") == []

    def test_details_description_object(self):
        session = FakeSession({
            "https://openlibrary.org/works/OL1W.json": FakeResponse({
                "title": "T",
                "description": {"value": "A whale."},
                "covers": [3],
            })
        })
        book = OpenLibraryClient(session).details("OL1W")
        assert book.description == "A whale."
        assert book.cover_url.endswith("/3-L.jpg")

    def test_details_missing(self):
        assert OpenLibraryClient(FakeSession({})).details("OL1W") is None


class TestFetchContent:
    def test_downloads_plain_text(self):
        session = FakeSession({
            GUTENDEX_URL: FakeResponse({
                "results": [{"formats": {"text/plain": "https://example.org/moby.txt"}}]
            }),
            "https://example.org/moby.txt": FakeResponse(text=GUTENBERG_TEXT),
        })
        content = OpenLibraryClient(session).fetch_content("OL1W", "Moby Dick")
        assert content == "CHAPTER 1\n\nCall me Ishmael."

    def test_no_match(self):
        session = FakeSession({GUTENDEX_URL: FakeResponse({"results": []})})
        assert OpenLibraryClient(session).fetch_content("OL1W", "Nothing") is None

    def test_no_plain_text_format(self):
        session = FakeSession({
            GUTENDEX_URL: FakeResponse({"results": [{"formats": {"text/html": "x"}}]})
        })
        assert OpenLibraryClient(session).fetch_content("OL1W", "Moby Dick") is None

    def test_network_error(self):
        session = FakeSession({GUTENDEX_URL: requests.Timeout("slow")})
        assert OpenLibraryClient(session).fetch_content("OL1W", "Moby Dick") is None

    def test_download_error(self):
        session = FakeSession({
            GUTENDEX_URL: FakeResponse({
                "results": [{"formats": {"text/plain": "https://example.org/moby.txt"}}]
            }),
        })
        assert OpenLibraryClient(session).fetch_content("OL1W", "Moby Dick") is None


class TestMergeDetails:
    def test_work_record_fills_missing_fields(self):
        found = Book(id="OL1W", title="Moby Dick", author="Herman Melville", publish_year=1851)
        details = Book(
            id="OL1W",
            title="Moby-Dick",
            cover_url="https://covers.openlibrary.org/b/id/3-L.jpg",
            description="A whale.",
            subjects=("Whaling",),
        )
        merged = merge_details(found, details)
        assert merged.title == "Moby Dick"
        assert merged.author == "Herman Melville"
        assert merged.publish_year == 1851
        assert merged.description == "A whale."
        assert merged.subjects == ("Whaling",)
        assert merged.cover_url.endswith("3-L.jpg")

    def test_empty_details_keep_search_fields(self):
        found = Book(id="OL1W", title="T", subjects=("Sea",), cover_url="c.jpg")
        assert merge_details(found, Book(id="OL1W", title="T")) == found
        assert merge_details(found, None) is found
