"""
Dashboard shell for the library layout.
"""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, DataTable, Input, RichLog, Select, Static

from bookshelf.storage.models import ReadingStatus

BOOK_COLUMNS = ("ID", "Title", "Author", "ISBN", "Genre", "Year", "Pages", "Status", "Rating")


class DashboardShell(Container):
    """Main dashboard: action row, search filters, book table and side panes."""

    def compose(self) -> ComposeResult:
        with Horizontal(id="actions"):
            yield Button("Add (a)", id="add", classes="-primary")
            yield Button("Edit (e)", id="edit")
            yield Button("Delete (d)", id="delete")
            yield Button("Refresh (r)", id="refresh")
            yield Button("Stats (s)", id="stats")
            yield Button("Logout (l)", id="logout")
            yield Static("user: none", id="user-text")
        with Horizontal(id="filters"):
            yield Input(placeholder="Search title, author or ISBN (/)", id="search-input")
            yield Select([], prompt="All genres", id="genre-filter")
            yield Select(
                [(label, label) for label in ReadingStatus.options()],
                prompt="All statuses",
                id="status-filter",
            )
        with Horizontal(id="panes"):
            with Vertical(id="library-pane"):
                yield Static("Library", classes="label")
                table = DataTable(id="book-table", cursor_type="row", zebra_stripes=True)
                table.add_columns(*BOOK_COLUMNS)
                yield table
            with Vertical(id="side-pane"):
                yield Static("Book", classes="label")
                yield Static("No book selected.", id="book-detail")
                yield Static("Statistics", classes="label")
                yield Static("Press s to load statistics.", id="stats-text")
                yield Static("Log", classes="label")
                yield RichLog(id="log-view", wrap=True, highlight=True)
