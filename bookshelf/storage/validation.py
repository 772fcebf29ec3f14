"""
Book Validation
===============
Pure predicates over a Book. They are advisory: the controller runs them
before handing a book to the repository, which only relies on the
database constraints.
"""

import re
from datetime import date
from typing import Optional

from bookshelf.storage.models import Book, ReadingStatus


_NON_ISBN_CHARS = re.compile(r"[^0-9X]")


def normalize_isbn(raw: Optional[str]) -> str:
    """Strip everything except digits and the check character X (either case)."""
    if raw is None:
        return ""
    return _NON_ISBN_CHARS.sub("", raw.upper())


def is_valid_title(book: Book) -> bool:
    return book.title is not None and bool(book.title.strip())


def is_valid_author(book: Book) -> bool:
    return book.author is not None and bool(book.author.strip())


def is_valid_isbn(book: Book) -> bool:
    """ISBN is optional; when present it must reduce to 10 or 13 characters."""
    if book.isbn is None or not book.isbn.strip():
        return True
    return len(normalize_isbn(book.isbn)) in (10, 13)


def is_valid_year(book: Book) -> bool:
    year = book.publication_year
    return year is not None and 0 < year <= date.today().year


def is_valid_pages(book: Book) -> bool:
    return book.pages is not None and book.pages > 0


def is_valid_rating(book: Book) -> bool:
    return book.rating is not None and 0.0 <= book.rating <= 5.0


def is_valid_status(book: Book) -> bool:
    if isinstance(book.status, ReadingStatus):
        return True
    return book.status in ReadingStatus.options()


_RULES = [
    (is_valid_title, "Title is required."),
    (is_valid_author, "Author is required."),
    (is_valid_isbn, "ISBN must contain 10 or 13 digits (X allowed)."),
    (is_valid_year, "Publication year must be between 1 and the current year."),
    (is_valid_pages, "Pages must be greater than zero."),
    (is_valid_rating, "Rating must be between 0.0 and 5.0."),
    (is_valid_status, "Status must be one of: " + ", ".join(ReadingStatus.options()) + "."),
]


def is_valid(book: Book) -> bool:
    return all(rule(book) for rule, _ in _RULES)


def validate_book(book: Book) -> list[str]:
    """
    Collect a message for every failed rule.

    Returns:
        Messages in rule order; empty when the book is valid
    """
    return [message for rule, message in _RULES if not rule(book)]
