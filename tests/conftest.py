import pytest

from flowread.library import LibraryStore
from flowread.models import Book
from flowread.storage import MemoryStore


class FakeTimer:
    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.stopped = False

    def stop(self):
        self.stopped = True


class FakeScheduler:
    """Records timers instead of running them; tests fire them by hand."""

    def __init__(self):
        self.timers = []

    def __call__(self, interval, callback):
        timer = FakeTimer(interval, callback)
        self.timers.append(timer)
        return timer

    @property
    def active(self):
        return [t for t in self.timers if not t.stopped]

    def fire(self, times=1):
        for _ in range(times):
            for timer in self.active:
                timer.callback()


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def library(memory_store, clock):
    lib = LibraryStore(memory_store, clock=clock)
    lib.load()
    return lib


@pytest.fixture
def book_text():
    return "CHAPTER 1\n\nSome text here.\n\nCHAPTER 2\n\nMore text."


@pytest.fixture
def sample_book(book_text):
    return Book(id="OL1W", title="Sample", author="Ann Author", content=book_text)
