"""
Error Handling Module
=====================
Custom exceptions and error codes for the Bookshelf catalog.

Repository operations do not raise these for expected conditions; they are
carried inside a StorageResult so callers can tell "not found" apart from
"duplicate ISBN" apart from "storage unavailable".
"""

import sqlite3
from enum import Enum
from dataclasses import dataclass
from typing import Optional


class ErrorCode(Enum):
    """Error codes for the bookshelf catalog."""
    # Storage errors (E100-E199)
    E100 = "Storage unavailable"
    E101 = "Record not found"
    E102 = "Duplicate ISBN"
    E103 = "Duplicate username"
    E104 = "Constraint violated"

    # Validation errors (E200-E299)
    E200 = "Invalid book data"
    E201 = "Invalid argument"

    # Authentication errors (E300-E399)
    E300 = "Invalid credentials"


@dataclass(eq=False)
class BookshelfError(Exception):
    """Base exception for the Bookshelf catalog with error codes."""
    code: ErrorCode
    message: str
    details: Optional[str] = None

    def __str__(self) -> str:
        base = f"[{self.code.name}] {self.code.value}: {self.message}"
        if self.details:
            base += f" ({self.details})"
        return base

    @property
    def retryable(self) -> bool:
        """Whether retrying the same call may succeed."""
        return self.code is ErrorCode.E100


class StorageUnavailableError(BookshelfError):
    """The database could not be reached or failed unexpectedly."""
    def __init__(self, message: str, details: str = None):
        super().__init__(
            code=ErrorCode.E100,
            message=message,
            details=details or "Check the database path and retry"
        )


class RecordNotFoundError(BookshelfError):
    """Lookup target does not exist."""
    def __init__(self, entity: str, key):
        super().__init__(
            code=ErrorCode.E101,
            message=f"{entity} {key} not found"
        )


class DuplicateIsbnError(BookshelfError):
    """Another book of the same owner already uses this ISBN."""
    def __init__(self, isbn: str):
        super().__init__(
            code=ErrorCode.E102,
            message=f"ISBN already exists: {isbn}"
        )


class DuplicateUsernameError(BookshelfError):
    """Username is already registered."""
    def __init__(self, username: str):
        super().__init__(
            code=ErrorCode.E103,
            message=f"Username already registered: {username}"
        )


class ConstraintViolationError(BookshelfError):
    """The store rejected a row for a reason other than uniqueness."""
    def __init__(self, message: str, details: str = None):
        super().__init__(
            code=ErrorCode.E104,
            message=message,
            details=details
        )


class BookValidationError(BookshelfError):
    """Book failed one or more validation rules."""
    def __init__(self, problems: list[str]):
        super().__init__(
            code=ErrorCode.E200,
            message="; ".join(problems) if problems else "Book is not valid"
        )
        self.problems = list(problems)


class InvalidArgumentError(BookshelfError):
    """A repository argument is out of range."""
    def __init__(self, message: str):
        super().__init__(
            code=ErrorCode.E201,
            message=message
        )


class InvalidCredentialsError(BookshelfError):
    """Username unknown or password mismatch."""
    def __init__(self, username: str):
        super().__init__(
            code=ErrorCode.E300,
            message=f"Unknown username or wrong password for '{username}'"
        )


# ===========================================
# Utility Functions
# ===========================================

def is_unique_violation(error: sqlite3.Error) -> bool:
    """
    Check whether a driver error is a UNIQUE constraint failure.

    Uses the extended result code where the interpreter exposes it and
    falls back to the driver message otherwise.

    Args:
        error: Error raised by sqlite3

    Returns:
        True for uniqueness/primary-key violations
    """
    if not isinstance(error, sqlite3.IntegrityError):
        return False

    errorname = getattr(error, "sqlite_errorname", None)
    if errorname:
        return errorname in ("SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY")

    return "UNIQUE constraint failed" in str(error)


def translate_integrity_error(error: sqlite3.IntegrityError, isbn: str = None) -> BookshelfError:
    """
    Map an IntegrityError raised while writing a book to a typed error.

    Args:
        error: The driver error
        isbn: ISBN that was being written, for the message

    Returns:
        DuplicateIsbnError for uniqueness failures, ConstraintViolationError otherwise
    """
    if is_unique_violation(error):
        return DuplicateIsbnError(isbn or "")
    return ConstraintViolationError("Book rejected by the database", details=str(error))
