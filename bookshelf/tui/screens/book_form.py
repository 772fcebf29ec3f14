"""
Add/edit book modal and delete confirmation.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from textual.app import ComposeResult
from textual.containers import Container, Horizontal, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Select, Static

from bookshelf.storage.models import GENRE_OPTIONS, Book, ReadingStatus
from bookshelf.storage.validation import validate_book
from bookshelf.tui.styles import BOOK_FORM_CSS
from bookshelf.tui.theme import BLACK, CHARCOAL_GRAY, CORAL_PINK, OFF_WHITE


class BookFormModal(ModalScreen[Optional[Book]]):
    """
    Form for a new book or an edit of an existing one.

    Dismisses with a validated Book (a copy when editing) or None when
    cancelled. Duplicate ISBNs are only detected by the controller.
    """

    BINDINGS = [
        ("ctrl+s", "submit", "Save"),
        ("escape", "cancel_modal", "Cancel"),
    ]

    CSS = BOOK_FORM_CSS

    def __init__(self, book: Optional[Book] = None) -> None:
        super().__init__()
        self.initial = book

    @property
    def editing(self) -> bool:
        return self.initial is not None

    def _genre_select(self) -> Select:
        genre = self.initial.genre if self.initial else ""
        options = [(name, name) for name in GENRE_OPTIONS]
        if genre and genre not in GENRE_OPTIONS:
            options.insert(0, (genre, genre))
        kwargs = {"value": genre} if genre else {}
        return Select(options, prompt="Genre", id="genre-select", classes="field", **kwargs)

    def compose(self) -> ComposeResult:
        book = self.initial or Book()
        title = f"Edit Book [{book.id}]" if self.editing else "Add Book"

        with Container(id="form-root"):
            with VerticalScroll(id="form-content"):
                yield Static(title, id="form-title")
                yield Input(value=book.title, placeholder="Title", id="title-input", classes="field")
                yield Input(value=book.author, placeholder="Author", id="author-input", classes="field")
                yield Input(value=book.isbn or "", placeholder="ISBN (10 or 13 digits)", id="isbn-input",
                            classes="field")
                yield self._genre_select()
                yield Input(
                    value=str(book.publication_year) if book.publication_year else "",
                    placeholder="Publication year",
                    type="integer",
                    id="year-input",
                    classes="field",
                )
                yield Input(
                    value=str(book.pages) if book.pages else "",
                    placeholder="Pages",
                    type="integer",
                    id="pages-input",
                    classes="field",
                )
                yield Input(
                    value=f"{book.rating:.1f}",
                    placeholder="Rating (0.0 - 5.0)",
                    type="number",
                    id="rating-input",
                    classes="field",
                )
                yield Select(
                    [(label, label) for label in ReadingStatus.options()],
                    value=book.status_label,
                    allow_blank=False,
                    prompt="Status",
                    id="status-select",
                    classes="field",
                )
                yield Input(value=book.description, placeholder="Description", id="description-input",
                            classes="field")
                yield Static("Ctrl+S=save, Esc=cancel", classes="field-label")
                yield Static("", id="form-error")
            with Horizontal(id="form-actions"):
                yield Button("Save", id="save", classes="-primary")
                yield Button("Cancel", id="cancel")

    def on_mount(self) -> None:
        self.query_one("#title-input", Input).focus()

    def _set_error(self, message: str) -> None:
        self.query_one("#form-error", Static).update(message)

    def _value(self, widget_id: str) -> str:
        return self.query_one(widget_id, Input).value.strip()

    @staticmethod
    def _parse_number(raw: str, kind: type, label: str) -> tuple[Optional[float], Optional[str]]:
        if not raw:
            return kind(0), None
        try:
            return kind(raw), None
        except ValueError:
            return None, f"{label} must be a number."

    def collect(self) -> tuple[Optional[Book], list[str]]:
        """Build a book from the form; returns (book, problems)."""
        problems = []
        year, problem = self._parse_number(self._value("#year-input"), int, "Publication year")
        if problem:
            problems.append(problem)
        pages, problem = self._parse_number(self._value("#pages-input"), int, "Pages")
        if problem:
            problems.append(problem)
        rating, problem = self._parse_number(self._value("#rating-input"), float, "Rating")
        if problem:
            problems.append(problem)
        if problems:
            return None, problems

        genre = self.query_one("#genre-select", Select).value
        book = replace(self.initial) if self.editing else Book()
        book.apply(
            title=self._value("#title-input"),
            author=self._value("#author-input"),
            isbn=self._value("#isbn-input") or None,
            genre=genre if isinstance(genre, str) else "",
            publication_year=year,
            pages=pages,
            rating=rating,
            status=str(self.query_one("#status-select", Select).value),
            description=self._value("#description-input"),
        )
        return book, validate_book(book)

    def _submit_form(self) -> None:
        book, problems = self.collect()
        if problems:
            self._set_error("\n".join(problems))
            return
        self.dismiss(book)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
            return
        if event.button.id == "save":
            self._submit_form()

    def action_submit(self) -> None:
        self._submit_form()

    def action_cancel_modal(self) -> None:
        self.dismiss(None)


class ConfirmDeleteModal(ModalScreen[bool]):
    """Yes/no confirmation before a book is deleted."""

    BINDINGS = [
        ("y", "confirm", "Delete"),
        ("n", "cancel_modal", "Keep"),
        ("escape", "cancel_modal", "Keep"),
    ]

    CSS = f"""
    ConfirmDeleteModal {{
        align: center middle;
        background: {BLACK};
    }}
    #confirm-root {{
        width: 60;
        height: auto;
        border: heavy {CORAL_PINK};
        background: {CHARCOAL_GRAY};
        padding: 1 2;
    }}
    #confirm-text {{
        color: {OFF_WHITE};
        margin-bottom: 1;
    }}
    """

    def __init__(self, book: Book) -> None:
        super().__init__()
        self.book = book

    def compose(self) -> ComposeResult:
        with Container(id="confirm-root"):
            yield Static(f"Delete '{self.book.title}' by {self.book.author}?", id="confirm-text")
            with Horizontal():
                yield Button("Delete (y)", id="confirm", classes="-primary")
                yield Button("Keep (n)", id="keep")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "confirm")

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel_modal(self) -> None:
        self.dismiss(False)
