#!/usr/bin/env python3
"""
FlowRead - terminal RSVP speed reader with a scroll reader and book library.

Hotkeys:
    Space       - Start/Pause reading
    Up/k        - Increase WPM by 50
    Down/j      - Decrease WPM by 50
    Left/h      - Go back 1 word
    Right/l     - Go forward 1 word
    [ / ]       - Go back / forward 10 words
    PgUp/PgDn   - Go to the previous / next page
    Home/End    - Go to the start / end
    c           - Jump to a chapter
    m           - Switch to the scroll reader
    o           - Open library
    s           - Discover books online
    i           - Import a text file
    ,           - Settings and stats
    q/Escape    - Quit
"""

import argparse
import hashlib
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from rich.markup import escape
from rich.text import Text
from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Center, Container, Horizontal, VerticalScroll
from textual.reactive import reactive
from textual.screen import ModalScreen, Screen
from textual.widgets import (
    Button,
    DirectoryTree,
    Footer,
    Header,
    Input,
    Label,
    ListItem,
    ListView,
    ProgressBar,
    Static,
)

from flowread import config
from flowread.catalog import OpenLibraryClient, merge_details, sample_content
from flowread.landmarks import Landmark, detect_landmarks, landmark_at
from flowread.library import LibraryStore
from flowread.models import FONT_SIZES, READING_MODES, THEMES, Book
from flowread.playback import PlaybackEngine, PlaybackEvent, StateChanged
from flowread.storage import JsonFileStore
from flowread.text import (
    format_reading_time,
    page_anchor,
    page_count,
    page_of,
    progress,
    split_at_orp,
    split_paragraphs,
    tokenize,
)
from flowread.tracker import ProgressTracker

logger = logging.getLogger(__name__)

SPEED_STEP = 50
SCROLL_SAMPLE_INTERVAL = 1.0
HELP_TEXT = __doc__.strip()

TEXTUAL_THEMES = {"light": "textual-light", "dark": "textual-dark"}


def _next_choice(choices: tuple[str, ...], current: str) -> str:
    idx = choices.index(current) if current in choices else -1
    return choices[(idx + 1) % len(choices)]


class WordDisplay(Static):
    """The current word with its fixation letter highlighted."""

    word = reactive("")
    font_size = reactive("medium")

    def render(self) -> Text:
        if not self.word:
            return Text("Ready", style="dim italic", justify="center")

        before, focus, after = split_at_orp(self.word)
        style = "white" if self.font_size == "small" else "bold white"
        # Terminals have one font size; "large" spreads the letters instead.
        spacer = " " if self.font_size == "large" else ""

        text = Text(justify="center")
        text.append(spacer.join(before) + (spacer if before else ""), style=style)
        text.append(focus, style="bold red")
        text.append((spacer if after else "") + spacer.join(after), style=style)
        return text


class StatsPanel(Static):
    """WPM, position, page, chapter and play state."""

    wpm = reactive(300)
    word_index = reactive(0)
    total_words = reactive(0)
    is_playing = reactive(False)
    chapter = reactive("")

    def render(self) -> Text:
        pct = progress(self.word_index, self.total_words)
        text = Text()
        text.append(f"WPM: {self.wpm}  |  ", style="cyan")
        if self.total_words:
            text.append(f"Word: {self.word_index + 1}/{self.total_words}  |  ", style="blue")
            text.append(
                f"Page: {page_of(self.word_index)}/{page_count(self.total_words)}  |  ",
                style="blue",
            )
        text.append(f"{pct:.1f}%  |  ", style="magenta")
        if self.chapter:
            text.append(f"{self.chapter}  |  ", style="dim")
        if self.is_playing:
            text.append("Playing", style="green bold")
        else:
            text.append("Paused", style="yellow")
        return text


class HelpScreen(ModalScreen):
    BINDINGS = [
        Binding("escape", "dismiss", "Close"),
        Binding("q", "dismiss", "Close"),
    ]

    def compose(self) -> ComposeResult:
        yield Container(Static(HELP_TEXT, id="help-content", markup=False), id="help-dialog")

    def on_click(self, event):
        self.dismiss()


class FilePickerScreen(ModalScreen[Optional[str]]):
    """Pick a plain text file to import."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, start_path: str = "."):
        super().__init__()
        self.start_path = start_path

    def compose(self) -> ComposeResult:
        yield Container(
            Static("[bold]Select a text file to import[/]", classes="dialog-title"),
            Input(placeholder="Or paste/type file path here...", id="path-input"),
            DirectoryTree(self.start_path, id="file-tree"),
            Horizontal(
                Button("Import", variant="primary", id="import-btn"),
                Button("Cancel", variant="default", id="cancel-btn"),
                classes="dialog-buttons",
            ),
            classes="dialog",
        )

    @on(DirectoryTree.FileSelected)
    def on_file_selected(self, event: DirectoryTree.FileSelected):
        self.query_one("#path-input", Input).value = str(event.path)

    @on(Input.Submitted, "#path-input")
    @on(Button.Pressed, "#import-btn")
    def on_import(self):
        path = self.query_one("#path-input", Input).value.strip()
        if path:
            self.dismiss(path)
        else:
            self.notify("Please select or enter a file path", severity="warning")

    @on(Button.Pressed, "#cancel-btn")
    def action_cancel(self):
        self.dismiss(None)


class LibraryScreen(ModalScreen[Optional[str]]):
    """Books newest first; open or delete."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("d", "delete", "Delete"),
    ]

    def __init__(self, library: LibraryStore, current_book: Optional[str] = None):
        super().__init__()
        self.library = library
        self.current_book = current_book
        self.books: list[Book] = []

    def compose(self) -> ComposeResult:
        yield Container(
            Static("[bold cyan]Library[/]", classes="dialog-title"),
            ListView(id="book-list"),
            Horizontal(
                Button("Open", variant="primary", id="open-btn"),
                Button("Delete", variant="error", id="delete-btn"),
                Button("Cancel", variant="default", id="cancel-btn"),
                classes="dialog-buttons",
            ),
            classes="dialog",
        )

    def on_mount(self):
        self._refresh_list()

    def _refresh_list(self):
        list_view = self.query_one("#book-list", ListView)
        list_view.clear()
        self.books = self.library.recent_books()

        if not self.books:
            list_view.append(ListItem(Label("[dim]No books yet. Press 's' to discover or 'i' to import.[/]")))
            return

        items = []
        for book in self.books:
            marker = "[green]>[/] " if book.id == self.current_book else "  "
            if book.total_words is None:
                status = "no content"
            else:
                pct = progress(book.current_position or 0, book.total_words)
                status = f"{pct:.0f}% - {book.total_words} words"
            label = f"{marker}[bold]{escape(book.title)}[/] [dim]{escape(book.author)} ({status})[/]"
            items.append(ListItem(Label(label)))
        list_view.extend(items)

    def _selected_book(self) -> Optional[Book]:
        index = self.query_one("#book-list", ListView).index
        if index is not None and 0 <= index < len(self.books):
            return self.books[index]
        return None

    @on(ListView.Selected)
    @on(Button.Pressed, "#open-btn")
    def on_open(self, event=None):
        book = self._selected_book()
        if book:
            self.dismiss(book.id)

    @on(Button.Pressed, "#delete-btn")
    def action_delete(self):
        book = self._selected_book()
        if book and self.library.remove_book(book.id):
            self.notify(f"Deleted: {escape(book.title)}")
            self._refresh_list()

    @on(Button.Pressed, "#cancel-btn")
    def action_cancel(self):
        self.dismiss(None)


class DiscoverScreen(ModalScreen[Optional[Book]]):
    """Search the online catalog and pick a book to add."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, catalog: OpenLibraryClient):
        super().__init__()
        self.catalog = catalog
        self.results: list[Book] = []

    def compose(self) -> ComposeResult:
        yield Container(
            Static("[bold cyan]Discover[/]", classes="dialog-title"),
            Input(placeholder="Search by title or author...", id="search-input"),
            ListView(id="result-list"),
            Horizontal(
                Button("Add", variant="primary", id="add-btn"),
                Button("Cancel", variant="default", id="cancel-btn"),
                classes="dialog-buttons",
            ),
            classes="dialog",
        )

    def on_mount(self):
        self._search(None)

    @on(Input.Submitted, "#search-input")
    def on_search(self, event: Input.Submitted):
        query = event.value.strip()
        if query:
            self._search(query)

    @work(thread=True, exclusive=True, group="search")
    def _search(self, query: Optional[str]):
        books = self.catalog.search(query) if query else self.catalog.trending()
        self.app.call_from_thread(self._show_results, books)

    def _show_results(self, books: list[Book]):
        self.results = books
        list_view = self.query_one("#result-list", ListView)
        list_view.clear()
        if not books:
            list_view.append(ListItem(Label("[dim]No results[/]")))
            return
        list_view.extend(
            ListItem(Label(f"[bold]{escape(b.title)}[/] [dim]{escape(b.author)}{f' ({b.publish_year})' if b.publish_year else ''}[/]"))
            for b in books
        )

    @on(ListView.Selected)
    @on(Button.Pressed, "#add-btn")
    def on_add(self, event=None):
        index = self.query_one("#result-list", ListView).index
        if index is not None and 0 <= index < len(self.results):
            self.dismiss(self.results[index])

    @on(Button.Pressed, "#cancel-btn")
    def action_cancel(self):
        self.dismiss(None)


class BookDetailScreen(ModalScreen[Optional[Book]]):
    """Details of a catalog book before it is added to the library."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("a", "add", "Add"),
    ]

    def __init__(self, catalog: OpenLibraryClient, book: Book):
        super().__init__()
        self.catalog = catalog
        self.book = book

    def compose(self) -> ComposeResult:
        yield Container(
            Static(f"[bold cyan]{escape(self.book.title)}[/]", classes="dialog-title"),
            Static(id="detail-body"),
            Horizontal(
                Button("Add to library", variant="primary", id="add-btn"),
                Button("Cancel", variant="default", id="cancel-btn"),
                classes="dialog-buttons",
            ),
            classes="dialog",
        )

    def on_mount(self):
        self._show_details()
        self._load_details()

    @work(thread=True, exclusive=True, group="details")
    def _load_details(self):
        details = self.catalog.details(self.book.id)
        self.app.call_from_thread(self._details_ready, details)

    def _details_ready(self, details: Optional[Book]):
        self.book = merge_details(self.book, details)
        self._show_details()

    def _show_details(self):
        book = self.book
        lines = [f"[bold]{escape(book.author)}[/]"]
        facts = []
        if book.publish_year:
            facts.append(f"Published {book.publish_year}")
        if book.page_count:
            facts.append(f"{book.page_count} pages")
        if facts:
            lines.append(f"[dim]{'  |  '.join(facts)}[/]")
        if book.subjects:
            lines.append(f"[dim]{escape(', '.join(book.subjects))}[/]")
        lines.append("")
        lines.append(escape(book.description) if book.description else "[dim]No description available.[/]")
        self.query_one("#detail-body", Static).update("\n".join(lines))

    @on(Button.Pressed, "#add-btn")
    def action_add(self):
        self.dismiss(self.book)

    @on(Button.Pressed, "#cancel-btn")
    def action_cancel(self):
        self.dismiss(None)


class ChapterScreen(ModalScreen[Optional[int]]):
    """Landmarks of the open book; returns the chosen token offset."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, landmarks: list[Landmark], cursor: int):
        super().__init__()
        self.landmarks = landmarks
        self.cursor = cursor

    def compose(self) -> ComposeResult:
        current = landmark_at(self.landmarks, self.cursor)
        items = [
            ListItem(Label(f"{'[green]>[/] ' if lm == current else '  '}{escape(lm.title)} [dim](word {lm.anchor + 1})[/]"))
            for lm in self.landmarks
        ]
        yield Container(
            Static("[bold cyan]Chapters[/]", classes="dialog-title"),
            ListView(*items, id="chapter-list"),
            classes="dialog",
        )

    @on(ListView.Selected)
    def on_select(self, event: ListView.Selected):
        index = event.list_view.index
        if index is not None:
            self.dismiss(self.landmarks[index].anchor)

    def action_cancel(self):
        self.dismiss(None)


class SettingsScreen(ModalScreen):
    """Reading settings and lifetime stats."""

    BINDINGS = [
        Binding("escape", "dismiss", "Close"),
        Binding("plus,equals_sign", "speed(1)", "Speed +50"),
        Binding("minus", "speed(-1)", "Speed -50"),
        Binding("f", "cycle('font_size')", "Font size"),
        Binding("t", "cycle('theme')", "Theme"),
        Binding("m", "cycle('reading_mode')", "Mode"),
        Binding("r", "reset_stats", "Reset stats"),
    ]

    CHOICES = {"font_size": FONT_SIZES, "theme": THEMES, "reading_mode": READING_MODES}

    def __init__(self, library: LibraryStore):
        super().__init__()
        self.library = library

    def compose(self) -> ComposeResult:
        yield Container(
            Static("[bold cyan]Settings[/]", classes="dialog-title"),
            Static(id="settings-body"),
            classes="dialog",
        )

    def on_mount(self):
        self._refresh()

    def _refresh(self):
        s = self.library.settings
        st = self.library.stats
        body = (
            f"[bold]Reading speed[/]   {s.words_per_minute} wpm   [dim](+/-)[/]\n"
            f"[bold]Font size[/]       {s.font_size}   [dim](f)[/]\n"
            f"[bold]Theme[/]           {s.theme}   [dim](t)[/]\n"
            f"[bold]Reading mode[/]    {s.reading_mode}   [dim](m)[/]\n\n"
            f"[bold]Words read[/]      {st.total_words_read:,}\n"
            f"[bold]Books completed[/] {st.books_completed}\n"
            f"[bold]Reading time[/]    {format_reading_time(st.total_reading_time)}\n\n"
            "[dim]r resets stats, Escape closes[/]"
        )
        self.query_one("#settings-body", Static).update(body)

    def action_speed(self, direction: int):
        wpm = self.library.settings.words_per_minute + direction * SPEED_STEP
        self.library.update_settings(words_per_minute=wpm)
        self._refresh()

    def action_cycle(self, name: str):
        current = getattr(self.library.settings, name)
        self.library.update_settings(**{name: _next_choice(self.CHOICES[name], current)})
        self._refresh()

    def action_reset_stats(self):
        self.library.reset_stats()
        self.notify("Stats reset")
        self._refresh()


class ScrollReaderScreen(Screen):
    """Conventional scrolling reader sharing the RSVP session's tracker."""

    BINDINGS = [
        Binding("escape", "close", "RSVP mode"),
        Binding("m", "close", "RSVP mode", show=False),
    ]

    def __init__(self, book: Book, tracker: ProgressTracker, total_words: int):
        super().__init__()
        self.book = book
        self.tracker = tracker
        self.total_words = total_words
        self._restored = False

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(f"[bold]{escape(self.book.title)}[/]", id="scroll-title")
        yield VerticalScroll(
            *(Static(p, classes="paragraph", markup=False) for p in split_paragraphs(self.book.content or "")),
            id="scroll-body",
        )
        yield Static(id="page-info")
        yield Footer()

    def on_mount(self):
        self.call_after_refresh(self._restore_position)
        self.tracker.resume_clock()
        self.set_interval(SCROLL_SAMPLE_INTERVAL, self._sample_position)

    def on_unmount(self):
        self.tracker.pause_clock()

    def _restore_position(self):
        body = self.query_one("#scroll-body", VerticalScroll)
        self._update_page_info(self.tracker.cursor)
        if not body.size.height:
            # Not laid out yet.
            return
        self._restored = True
        if not body.max_scroll_y:
            return
        y = self.tracker.cursor / max(1, self.total_words) * body.max_scroll_y
        body.scroll_to(y=y, animate=False)

    def _fits_on_screen(self) -> bool:
        body = self.query_one("#scroll-body", VerticalScroll)
        return self._restored and not body.max_scroll_y

    def _estimated_position(self) -> int:
        body = self.query_one("#scroll-body", VerticalScroll)
        if not self.total_words or not body.max_scroll_y:
            return self.tracker.cursor
        fraction = min(1.0, body.scroll_y / body.max_scroll_y)
        return min(self.total_words - 1, int(fraction * self.total_words))

    def _sample_position(self):
        if not self._restored:
            self._restore_position()
            return
        position = self._estimated_position()
        if position != self.tracker.cursor:
            self.tracker.move_to(position)
            if position >= self.total_words - 1:
                self.tracker.mark_finished()
        self._update_page_info(position)

    def _update_page_info(self, position: int):
        self.query_one("#page-info", Static).update(
            f"Page {page_of(position)} / {page_count(self.total_words)}  |  "
            f"{progress(position, self.total_words):.0f}%"
        )

    def action_close(self):
        self._sample_position()
        if self.total_words and self._fits_on_screen():
            # The whole text was visible, so it counts as read.
            self.tracker.move_to(self.total_words - 1)
            self.tracker.mark_finished()
        self.dismiss()


class FlowReadApp(App):
    """Main RSVP reader application."""

    CSS = """
    #title-bar {
        dock: top;
        height: 3;
        background: $primary-darken-2;
        content-align: center middle;
    }

    #book-title {
        text-align: center;
        padding: 1;
    }

    #word-container {
        height: 1fr;
        align: center middle;
        background: $surface-darken-1;
    }

    WordDisplay {
        width: 100%;
        height: 5;
        content-align: center middle;
        background: $surface-darken-2;
        border: solid $primary;
        padding: 1 2;
    }

    #stats-container {
        dock: bottom;
        height: 3;
        background: $primary-darken-3;
    }

    StatsPanel {
        width: 100%;
        text-align: center;
        padding: 1;
    }

    #progress-bar {
        dock: bottom;
        height: 1;
        margin: 0 1;
    }

    ModalScreen {
        align: center middle;
    }

    .dialog, #help-dialog {
        width: 76;
        height: auto;
        max-height: 80%;
        background: $surface;
        border: thick $primary;
        padding: 1 2;
    }

    .dialog-title {
        text-align: center;
        padding: 1;
    }

    .dialog ListView, #file-tree {
        height: 15;
        border: solid $primary-darken-2;
        margin: 1 0;
    }

    .dialog-buttons {
        align: center middle;
        height: auto;
        padding: 1 0;
    }

    .dialog-buttons Button {
        margin: 0 1;
    }

    #scroll-title, #page-info {
        text-align: center;
        height: 1;
    }

    #scroll-body {
        padding: 0 4;
    }

    .paragraph {
        margin-bottom: 1;
    }
    """

    BINDINGS = [
        Binding("space", "toggle_play", "Play/Pause", show=True),
        Binding("up,k", "speed(1)", "Speed +50"),
        Binding("down,j", "speed(-1)", "Speed -50"),
        Binding("left,h", "step(-1)", "Prev Word"),
        Binding("right,l", "step(1)", "Next Word"),
        Binding("left_square_bracket,b", "step(-10)", "Back 10", show=False),
        Binding("right_square_bracket,w", "step(10)", "Forward 10", show=False),
        Binding("pageup", "page(-1)", "Prev Page", show=False),
        Binding("pagedown", "page(1)", "Next Page", show=False),
        Binding("home", "go_start", "Start", show=False),
        Binding("end", "go_end", "End", show=False),
        Binding("c", "chapters", "Chapters"),
        Binding("m", "scroll_mode", "Scroll mode"),
        Binding("o", "open_library", "Library", show=True),
        Binding("s", "discover", "Discover", show=True),
        Binding("i", "import_file", "Import"),
        Binding("comma", "settings", "Settings"),
        Binding("question_mark", "show_help", "Help", show=True),
        Binding("q,escape", "quit", "Quit", show=True),
    ]

    TITLE = "FlowRead"

    def __init__(self, library: LibraryStore, catalog: Optional[OpenLibraryClient] = None):
        super().__init__()
        self.library = library
        self.catalog = catalog or OpenLibraryClient()
        self.engine: Optional[PlaybackEngine] = None
        self.tracker: Optional[ProgressTracker] = None
        self.landmarks: list[Landmark] = []
        self.current_book: Optional[Book] = None
        self._system_theme: Optional[str] = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(Static("", id="book-title"), id="title-bar")
        yield Container(Center(WordDisplay(id="word-display")), id="word-container")
        yield ProgressBar(total=100, show_eta=False, id="progress-bar")
        yield Container(StatsPanel(id="stats-panel"), id="stats-container")
        yield Footer()

    def on_mount(self):
        if self.library.is_loading:
            self.library.load()
        self.library.add_listener(self._on_library_changed)
        self._system_theme = self.theme
        self._apply_settings()
        self._show_welcome()

    def on_unmount(self):
        self._close_session()
        self.library.close()

    # ------------------------------------------------------------------
    # Session

    def _show_welcome(self):
        self.query_one("#word-display", WordDisplay).word = ""
        self.query_one("#book-title", Static).update(
            "[dim]Press [bold]o[/] for your library, [bold]s[/] to discover books or [bold]i[/] to import a file[/]"
        )
        self._update_stats()

    def open_book(self, book_id: str) -> bool:
        """Start a reading session for ``book_id``."""
        book = self.library.get_book(book_id)
        if book is None or book.content is None:
            self.notify("Book content not available", severity="error")
            return False

        words = tokenize(book.content)
        if not words:
            self.notify("Book is empty", severity="warning")
            return False

        self._close_session()
        self.current_book = book
        self.landmarks = detect_landmarks(book.content)
        self.engine = PlaybackEngine(
            words,
            wpm=self.library.settings.words_per_minute,
            position=book.current_position or 0,
            scheduler=self.set_interval,
        )
        self.tracker = ProgressTracker(self.library, book.id, self.engine.cursor)
        self.tracker.attach(self.engine)
        self.engine.add_listener(self._on_playback_event)
        self.tracker.start(self.set_interval)
        logger.info("Opened %s at word %d of %d", book.id, self.engine.cursor, len(words))

        self.query_one("#book-title", Static).update(f"[bold]{escape(book.title)}[/] [dim]{escape(book.author)}[/]")
        self._update_word_display()
        self._update_stats()

        if self.library.settings.reading_mode == "normal":
            self.action_scroll_mode()
        return True

    def _close_session(self):
        """Flush progress and stop all timers of the open book."""
        engine, tracker = self.engine, self.tracker
        self.engine = None
        self.tracker = None
        self.current_book = None
        self.landmarks = []
        if engine is not None:
            engine.close()
        if tracker is not None:
            tracker.stop()

    def _on_playback_event(self, event: PlaybackEvent):
        if self.engine is None:
            return
        self._update_word_display()
        self._update_stats()
        if isinstance(event, StateChanged) and event.finished:
            self.notify("Finished reading!")

    def _on_library_changed(self, key: str):
        if key == config.SETTINGS_KEY:
            self._apply_settings()
        elif key == config.LIBRARY_KEY and self.current_book is not None:
            if self.library.get_book(self.current_book.id) is None:
                self._close_session()
                self._show_welcome()

    def _apply_settings(self):
        settings = self.library.settings
        theme = TEXTUAL_THEMES.get(settings.theme, self._system_theme)
        if theme:
            self.theme = theme
        self.query_one("#word-display", WordDisplay).font_size = settings.font_size
        if self.engine is not None:
            self.engine.set_speed(settings.words_per_minute)
        self._update_stats()

    def _update_word_display(self):
        word_display = self.query_one("#word-display", WordDisplay)
        word_display.word = self.engine.current_word if self.engine else ""

    def _update_stats(self):
        stats = self.query_one("#stats-panel", StatsPanel)
        progress_bar = self.query_one("#progress-bar", ProgressBar)
        if self.engine is None:
            stats.wpm = self.library.settings.words_per_minute
            stats.word_index = 0
            stats.total_words = 0
            stats.is_playing = False
            stats.chapter = ""
            progress_bar.update(progress=0)
            return

        stats.wpm = self.engine.wpm
        stats.word_index = self.engine.cursor
        stats.total_words = len(self.engine.words)
        stats.is_playing = self.engine.is_playing
        landmark = landmark_at(self.landmarks, self.engine.cursor)
        stats.chapter = landmark.title if landmark else ""
        progress_bar.update(progress=progress(self.engine.cursor, len(self.engine.words)))

    # ------------------------------------------------------------------
    # Actions

    def action_toggle_play(self):
        if self.engine is None:
            self.notify("No book loaded. Press 'o' to open your library.", severity="warning")
            return
        self.engine.toggle()

    def action_speed(self, direction: int):
        wpm = self.library.settings.words_per_minute + direction * SPEED_STEP
        settings = self.library.update_settings(words_per_minute=wpm)
        self.notify(f"Speed: {settings.words_per_minute} WPM")

    def action_step(self, delta: int):
        if self.engine is not None:
            self.engine.step(delta)

    def action_page(self, delta: int):
        if self.engine is not None:
            self.engine.seek(page_anchor(page_of(self.engine.cursor) + delta))

    def action_go_start(self):
        if self.engine is not None:
            self.engine.pause()
            self.engine.seek(0)

    def action_go_end(self):
        if self.engine is not None:
            self.engine.pause()
            self.engine.seek(self.engine.last_index)

    def action_chapters(self):
        if self.engine is None:
            return

        def jump(anchor: Optional[int]):
            if anchor is not None and self.engine is not None:
                self.engine.seek(anchor)

        self.push_screen(ChapterScreen(self.landmarks, self.engine.cursor), jump)

    def action_scroll_mode(self):
        if self.engine is None or self.current_book is None or self.tracker is None:
            return
        self.engine.pause()

        def back_to_rsvp(_result=None):
            if self.engine is not None and self.tracker is not None:
                self.engine.seek(self.tracker.cursor)

        self.push_screen(
            ScrollReaderScreen(self.current_book, self.tracker, len(self.engine.words)),
            back_to_rsvp,
        )

    def action_open_library(self):
        if self.engine is not None:
            self.engine.pause()

        def opened(book_id: Optional[str]):
            if book_id:
                self.open_book(book_id)

        current = self.current_book.id if self.current_book else None
        self.push_screen(LibraryScreen(self.library, current), opened)

    def action_discover(self):
        if self.engine is not None:
            self.engine.pause()
        self.push_screen(DiscoverScreen(self.catalog), self.show_details)

    def show_details(self, book: Optional[Book]):
        if book is not None:
            self.push_screen(BookDetailScreen(self.catalog, book), self.add_from_catalog)

    def add_from_catalog(self, book: Optional[Book]):
        if book is None:
            return
        existing = self.library.get_book(book.id)
        if existing is not None and existing.content is not None:
            self.open_book(book.id)
            return
        self.library.add_book(book)
        self.notify(f"Downloading: {escape(book.title)}")
        self._download_content(book.id, book.title)

    @work(thread=True, group="download")
    def _download_content(self, book_id: str, title: str):
        content = self.catalog.fetch_content(book_id, title)
        self.call_from_thread(self._content_ready, book_id, title, content)

    def _content_ready(self, book_id: str, title: str, content: Optional[str]):
        if content is None:
            self.notify("Full text unavailable; loaded a sample instead", severity="warning")
            content = sample_content(title)
        if self.library.update_content(book_id, content):
            self.open_book(book_id)

    def action_import_file(self):
        if self.engine is not None:
            self.engine.pause()

        def picked(path: Optional[str]):
            if path:
                self.import_file(path)

        self.push_screen(FilePickerScreen(str(Path.home())), picked)

    def import_file(self, file_path: str) -> bool:
        """Add a local text file to the library and open it."""
        path = Path(file_path).expanduser().resolve()
        if not path.is_file():
            self.notify(f"File not found: {escape(str(path))}", severity="error")
            return False

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self.notify(f"Error reading file: {escape(str(e))}", severity="error")
            return False

        if not tokenize(content):
            self.notify("File is empty", severity="warning")
            return False

        book_id = "local-" + hashlib.sha256(str(path).encode()).hexdigest()[:12]
        book = Book(id=book_id, title=path.stem, author="Local file", content=content)
        if self.library.add_book(book):
            self.notify(f"Imported: {escape(path.stem)} ({len(tokenize(content))} words)")
        else:
            self.notify(f"{escape(path.stem)} is already in your library")
        return self.open_book(book_id)

    def action_settings(self):
        if self.engine is not None:
            self.engine.pause()
        self.push_screen(SettingsScreen(self.library))

    def action_show_help(self):
        self.push_screen(HelpScreen())


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="RSVP speed reader for the terminal")
    parser.add_argument(
        "--home", type=Path, default=config.CONFIG_DIR, metavar="DIR",
        help=f"Directory for library, settings and logs (default: {config.CONFIG_DIR})",
    )
    parser.add_argument(
        "--log-level", default=config.DEFAULT_LOG_LEVEL,
        help="Logging level (default: %(default)s)",
    )
    return parser.parse_args(argv)


def main(argv=None):
    """Entry point."""
    args = parse_args(argv)
    config.setup_logging(args.log_level, args.home)

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="flowread-store")
    library = LibraryStore(JsonFileStore(args.home), executor=executor)
    library.load()

    app = FlowReadApp(library)
    app.run()


if __name__ == "__main__":
    main()
