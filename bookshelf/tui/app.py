"""
Textual TUI App
===============
Terminal library browser: login, book table, search filters, add/edit
forms and reading statistics.
"""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from textual.app import App, ComposeResult
from textual.widgets import (
    Button,
    DataTable,
    Footer,
    Header,
    Input,
    RichLog,
    Select,
    Static,
)

from bookshelf.app import AppConfig, AppController
from bookshelf.app.events import AppEvent, EventType, SessionState
from bookshelf.concurrency import TaskResult
from bookshelf.storage.models import Book, BookFilters, LibraryStatistics, StorageResult, User
from bookshelf.tui.screens.book_form import BookFormModal, ConfirmDeleteModal
from bookshelf.tui.screens.dashboard import DashboardShell
from bookshelf.tui.screens.login import LoginRequest, LoginScreen
from bookshelf.tui.styles import APP_CSS


@dataclass
class LaunchOptions:
    db_path: Optional[Path] = None
    username: str = ""


class BookshelfTUI(App):
    """Brutalist terminal dashboard for the book catalog."""

    CSS = APP_CSS

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("a", "add_book", "Add"),
        ("e", "edit_book", "Edit"),
        ("d", "delete_book", "Delete"),
        ("r", "refresh", "Refresh"),
        ("s", "show_stats", "Stats"),
        ("l", "logout", "Logout"),
        ("slash", "focus_search", "Search"),
    ]

    def __init__(self, options: Optional[LaunchOptions] = None, controller: Optional[AppController] = None):
        super().__init__()
        self.options = options or LaunchOptions()
        self.controller = controller or AppController(AppConfig.from_env(db_path=self.options.db_path))
        self.controller.on_event = self._on_controller_event
        self._messages: deque[str] = deque(maxlen=500)
        self._ui_thread: Optional[int] = None

        self._books: list[Book] = []
        self._genres: list[str] = []

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield DashboardShell(id="root")
        yield Footer()

    def on_mount(self) -> None:
        self._ui_thread = threading.get_ident()
        self._log("ready")
        self._show_login(self.options.username)

    # ==================== Helpers ====================

    def _log(self, message: str) -> None:
        self._messages.append(message)
        log = self.query_one("#log-view", RichLog)
        log.write(message)

    def _dispatch(
        self,
        label: str,
        func: Callable,
        *args,
        on_done: Optional[Callable] = None,
        on_error: Optional[Callable[[str], None]] = None,
    ) -> None:
        """Run a controller call on the storage worker and handle the result on the UI thread."""
        def callback(outcome: TaskResult) -> None:
            if not self.is_running:
                return
            # Worker thread -> marshal onto UI thread.
            self.call_from_thread(self._finish_task, outcome, on_done, on_error)

        self.controller.submit(label, func, *args, callback=callback)

    def _finish_task(self, outcome: TaskResult, on_done, on_error) -> None:
        if not outcome.succeeded:
            message = f"{outcome.task_id} failed: {outcome.error}"
        elif isinstance(outcome.result, StorageResult) and not outcome.result:
            message = outcome.result.message
        else:
            if on_done is not None:
                value = outcome.result
                on_done(value.value if isinstance(value, StorageResult) else value)
            return

        self._log(f"[error] {message}")
        if on_error is not None:
            on_error(message)
        else:
            self.notify(message, severity="error")

    def _on_controller_event(self, event: AppEvent) -> None:
        if self._ui_thread is None or threading.get_ident() == self._ui_thread:
            self._emit_event(event)
        elif self.is_running:
            self.call_from_thread(self._emit_event, event)

    def _emit_event(self, event: AppEvent) -> None:
        if self._ui_thread is None:
            return
        if event.event_type == EventType.LOG:
            self._log(f"[{event.level}] {event.message}")
        elif event.event_type == EventType.STATE:
            if event.state in (SessionState.LOGGED_IN, SessionState.LOGGED_OUT):
                self._log(f"[state] {event.subject}: {event.state.value}")
            elif event.state == SessionState.FAILED:
                self._log(f"[state] {event.subject} failed {event.message}")

    def _selected_book(self) -> Optional[Book]:
        table = self.query_one("#book-table", DataTable)
        index = table.cursor_row
        if index is None or index < 0 or index >= len(self._books):
            return None
        return self._books[index]

    def _current_filters(self) -> BookFilters:
        term = self.query_one("#search-input", Input).value.strip()
        genre = self.query_one("#genre-filter", Select).value
        status = self.query_one("#status-filter", Select).value
        return BookFilters(
            search_term=term or None,
            genre=genre if isinstance(genre, str) else None,
            status=status if isinstance(status, str) else None,
        )

    # ==================== Session ====================

    def _show_login(self, username: str = "", error: str = "") -> None:
        self.push_screen(LoginScreen(username=username, error=error), self._on_login_request)

    def _on_login_request(self, request: Optional[LoginRequest]) -> None:
        if request is None:
            self.exit()
            return

        def retry(message: str) -> None:
            self._show_login(request.username, message)

        def login() -> None:
            self._dispatch(
                "login", self.controller.login, request.username, request.password,
                on_done=self._on_logged_in, on_error=retry,
            )

        if request.register:
            self._dispatch(
                "register", self.controller.register, request.username, request.password,
                on_done=lambda _user: login(), on_error=retry,
            )
        else:
            login()

    def _on_logged_in(self, user: User) -> None:
        self.query_one("#user-text", Static).update(f"user: {user.username}")
        self.action_refresh()

    def action_logout(self) -> None:
        if not self.controller.is_logged_in:
            return
        username = self.controller.current_user.username
        self._dispatch("logout", self.controller.logout, on_done=lambda _: self._on_logged_out(username))

    def _on_logged_out(self, username: str) -> None:
        self._books = []
        self.query_one("#book-table", DataTable).clear()
        self.query_one("#book-detail", Static).update("No book selected.")
        self.query_one("#stats-text", Static).update("Press s to load statistics.")
        self.query_one("#user-text", Static).update("user: none")
        self._show_login(username)

    # ==================== Library ====================

    def action_refresh(self) -> None:
        if not self.controller.is_logged_in:
            return
        filters = self._current_filters()
        if filters.is_empty():
            self._dispatch("list", self.controller.list_books, on_done=self._populate_table)
        else:
            self._dispatch("filter", self.controller.filter_books, filters, on_done=self._populate_table)
        self._dispatch("genres", self.controller.genres, on_done=self._populate_genres)

    def _populate_table(self, books: list[Book]) -> None:
        table = self.query_one("#book-table", DataTable)
        table.clear()
        self._books = list(books)

        for book in self._books:
            table.add_row(
                str(book.id),
                book.title,
                book.author,
                book.isbn or "",
                book.genre,
                str(book.publication_year),
                str(book.pages),
                book.status_label,
                f"{book.rating:.1f}",
            )

        self._show_detail(0 if self._books else -1)
        self._log(f"library refreshed: {len(self._books)} book(s)")

    def _populate_genres(self, genres: list[str]) -> None:
        if genres == self._genres:
            return
        self._genres = list(genres)
        select = self.query_one("#genre-filter", Select)
        previous = select.value
        select.set_options([(genre, genre) for genre in self._genres])
        if isinstance(previous, str) and previous in self._genres:
            select.value = previous

    def _show_detail(self, index: int) -> None:
        detail = self.query_one("#book-detail", Static)
        if index < 0 or index >= len(self._books):
            detail.update("No book selected.")
            return

        book = self._books[index]
        detail.update(
            f"title: {book.title}\n"
            f"author: {book.author}\n"
            f"isbn: {book.isbn or '-'}\n"
            f"genre: {book.genre or '-'}\n"
            f"status: {book.status_label}\n"
            f"rating: {book.rating_stars()} {book.rating:.1f}\n"
            f"{book.short_description()}"
        )

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        self._show_detail(event.cursor_row)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "search-input":
            self.action_refresh()

    def on_select_changed(self, event: Select.Changed) -> None:
        if event.select.id in ("genre-filter", "status-filter"):
            self.action_refresh()

    def action_focus_search(self) -> None:
        self.query_one("#search-input", Input).focus()

    # ==================== Book Actions ====================

    def action_add_book(self) -> None:
        if not self.controller.is_logged_in:
            return
        self.push_screen(BookFormModal(), self._on_book_form)

    def action_edit_book(self) -> None:
        book = self._selected_book()
        if book is None:
            self._log("no book selected")
            return
        self.push_screen(BookFormModal(book), self._on_book_form)

    def _on_book_form(self, book: Optional[Book]) -> None:
        if book is None:
            self._log("form cancelled")
            return
        if book.id is None:
            self._dispatch("add", self.controller.add_book, book, on_done=lambda _: self.action_refresh())
        else:
            self._dispatch("edit", self.controller.edit_book, book, on_done=lambda _: self.action_refresh())

    def action_delete_book(self) -> None:
        book = self._selected_book()
        if book is None:
            self._log("no book selected")
            return

        def confirmed(answer: Optional[bool]) -> None:
            if answer:
                self._dispatch(
                    "delete", self.controller.delete_book, book.id,
                    on_done=lambda _: self.action_refresh(),
                )

        self.push_screen(ConfirmDeleteModal(book), confirmed)

    def action_show_stats(self) -> None:
        if not self.controller.is_logged_in:
            return
        self._dispatch("stats", self.controller.statistics, on_done=self._show_stats)

    def _show_stats(self, stats: LibraryStatistics) -> None:
        self.query_one("#stats-text", Static).update(stats.report())

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "add":
            self.action_add_book()
        elif event.button.id == "edit":
            self.action_edit_book()
        elif event.button.id == "delete":
            self.action_delete_book()
        elif event.button.id == "refresh":
            self.action_refresh()
        elif event.button.id == "stats":
            self.action_show_stats()
        elif event.button.id == "logout":
            self.action_logout()

    def on_unmount(self) -> None:
        self.controller.shutdown(wait=False)
