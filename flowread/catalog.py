"""Open Library search and Project Gutenberg text downloads."""

import logging
import random
from dataclasses import replace
from typing import Optional

import requests

from flowread.models import Book

logger = logging.getLogger(__name__)

BASE_URL = "https://openlibrary.org"
COVERS_URL = "https://covers.openlibrary.org/b/id"
GUTENDEX_URL = "https://gutendex.com/books/"

SEARCH_FIELDS = "key,title,author_name,cover_i,first_publish_year,number_of_pages_median,subject"
TEXT_FORMATS = (
    "text/plain; charset=utf-8",
    "text/plain",
    "text/plain; charset=us-ascii",
)
TRENDING_QUERIES = ("classic literature", "bestseller", "fiction")

GUTENBERG_START_MARKERS = (
    "*** START OF THE PROJECT GUTENBERG",
    "*** START OF THIS PROJECT GUTENBERG",
    "*END*THE SMALL PRINT",
)
GUTENBERG_END_MARKERS = (
    "*** END OF THE PROJECT GUTENBERG",
    "*** END OF THIS PROJECT GUTENBERG",
    "End of the Project Gutenberg",
    "End of Project Gutenberg",
)


class CatalogError(Exception):
    """A catalog request failed or returned something unusable."""


def cover_url(cover_id: Optional[int], size: str = "M") -> Optional[str]:
    if not cover_id:
        return None
    return f"{COVERS_URL}/{cover_id}-{size}.jpg"


def clean_gutenberg_text(text: str) -> str:
    """Strip the Project Gutenberg license header and footer."""
    for marker in GUTENBERG_START_MARKERS:
        idx = text.find(marker)
        if idx != -1:
            end_of_line = text.find("\n", idx)
            text = text[end_of_line + 1:] if end_of_line != -1 else ""
            break

    for marker in GUTENBERG_END_MARKERS:
        idx = text.find(marker)
        if idx != -1:
            text = text[:idx]
            break

    text = text.replace("\r\n", "\n")
    while "\n\n\n" in text:
        text = text.replace("\n\n\n", "\n\n")
    return text.strip()


def sample_content(title: str) -> str:
    """Placeholder text used when a book's content cannot be downloaded."""
    return f"""Welcome to FlowRead!

This is a sample text for "{title}". The full content could not be loaded from Project Gutenberg.

RSVP (Rapid Serial Visual Presentation) is a speed reading technique that displays words one at a time in quick succession. This method helps readers focus on each word without the need for eye movement across a page.

Benefits of RSVP reading include:

Increased reading speed by eliminating saccadic eye movements. Better focus and concentration on the text. Reduced subvocalization which can slow down reading. Improved comprehension through focused attention.

To get the most out of RSVP reading, start with a comfortable speed and gradually increase it as you become more comfortable. Most people can read at 300 to 500 words per minute with practice.

Practice regularly and you will see improvement over time. Happy reading!"""


def merge_details(book: Book, details: Optional[Book]) -> Book:
    """Fill a search result with the richer fields of its work record."""
    if details is None:
        return book
    return replace(
        book,
        description=details.description or book.description,
        subjects=details.subjects or book.subjects,
        cover_url=details.cover_url or book.cover_url,
    )


def _book_from_search(doc: dict) -> Book:
    authors = doc.get("author_name") or []
    return Book(
        id=str(doc.get("key", "")).replace("/works/", ""),
        title=doc.get("title") or "Untitled",
        author=authors[0] if authors else "Unknown Author",
        cover_url=cover_url(doc.get("cover_i"), "M"),
        publish_year=doc.get("first_publish_year"),
        page_count=doc.get("number_of_pages_median"),
        subjects=tuple((doc.get("subject") or [])[:5]),
    )


class OpenLibraryClient:
    """Catalog and content provider backed by Open Library and gutendex."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = 10.0):
        self.session = session or requests.Session()
        self.timeout = timeout

    def _get(self, url: str, params: Optional[dict] = None) -> requests.Response:
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise CatalogError(f"GET {url} failed: {e}") from e
        return response

    def _get_json(self, url: str, params: Optional[dict] = None) -> dict:
        response = self._get(url, params)
        try:
            data = response.json()
        except ValueError as e:
            raise CatalogError(f"GET {url} returned invalid JSON") from e
        if not isinstance(data, dict):
            raise CatalogError(f"GET {url} returned unexpected JSON")
        return data

    def search(self, query: str, limit: int = 20) -> list[Book]:
        """Search Open Library; an empty list on any failure."""
        params = {"q": query, "limit": limit, "fields": SEARCH_FIELDS}
        try:
            data = self._get_json(f"{BASE_URL}/search.json", params)
        except CatalogError as e:
            logger.error("Search error: %s", e)
            return []
        books = [_book_from_search(doc) for doc in data.get("docs") or [] if doc.get("key")]
        logger.info("Search %r returned %d books", query, len(books))
        return books

    def trending(self) -> list[Book]:
        return self.search(random.choice(TRENDING_QUERIES), limit=10)

    def details(self, work_id: str) -> Optional[Book]:
        try:
            work = self._get_json(f"{BASE_URL}/works/{work_id}.json")
        except CatalogError as e:
            logger.error("Book details error: %s", e)
            return None

        description = work.get("description") or ""
        if isinstance(description, dict):
            description = description.get("value", "")
        covers = work.get("covers") or []
        return Book(
            id=work_id,
            title=work.get("title") or "Untitled",
            cover_url=cover_url(covers[0], "L") if covers else None,
            description=str(description),
            subjects=tuple((work.get("subjects") or [])[:5]),
        )

    def fetch_content(self, book_id: str, title: str) -> Optional[str]:
        """Plain text of the first Gutenberg match for ``title``, or None."""
        try:
            results = self._get_json(GUTENDEX_URL, {"search": title}).get("results") or []
            if not results:
                logger.info("No Gutenberg match for %s (%r)", book_id, title)
                return None
            formats = results[0].get("formats") or {}
            text_url = next((formats[f] for f in TEXT_FORMATS if formats.get(f)), None)
            if text_url is None:
                logger.info("No plain-text edition for %s (%r)", book_id, title)
                return None
            text = self._get(text_url).text
        except CatalogError as e:
            logger.error("Fetch content error for %s: %s", book_id, e)
            return None
        return clean_gutenberg_text(text)
