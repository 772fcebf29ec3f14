"""
Error Handling Tests
====================
Tests for error codes, messages and driver error translation.
"""

import sqlite3

import pytest

from bookshelf.errors import (
    BookValidationError,
    BookshelfError,
    ConstraintViolationError,
    DuplicateIsbnError,
    DuplicateUsernameError,
    ErrorCode,
    InvalidArgumentError,
    InvalidCredentialsError,
    RecordNotFoundError,
    StorageUnavailableError,
    is_unique_violation,
    translate_integrity_error,
)


def _integrity_error(sql: str) -> sqlite3.IntegrityError:
    """Provoke a real IntegrityError from an in-memory database."""
    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE t (a TEXT UNIQUE, b TEXT NOT NULL)")
    conn.execute("INSERT INTO t VALUES ('x', 'y')")
    try:
        conn.execute(sql)
    except sqlite3.IntegrityError as e:
        return e
    finally:
        conn.close()
    raise AssertionError("statement did not fail")


@pytest.mark.parametrize("error,code", [
    (StorageUnavailableError("down"), ErrorCode.E100),
    (RecordNotFoundError("Book", 1), ErrorCode.E101),
    (DuplicateIsbnError("123"), ErrorCode.E102),
    (DuplicateUsernameError("reader"), ErrorCode.E103),
    (ConstraintViolationError("bad"), ErrorCode.E104),
    (BookValidationError(["Title is required."]), ErrorCode.E200),
    (InvalidArgumentError("limit"), ErrorCode.E201),
    (InvalidCredentialsError("reader"), ErrorCode.E300),
])
def test_error_codes(error, code):
    assert isinstance(error, BookshelfError)
    assert error.code is code
    assert str(error).startswith(f"[{code.name}] {code.value}: ")


def test_only_storage_unavailable_is_retryable():
    assert StorageUnavailableError("down").retryable
    assert not RecordNotFoundError("Book", 1).retryable


def test_storage_unavailable_has_default_hint():
    assert "(Check the database path and retry)" in str(StorageUnavailableError("down"))


def test_validation_error_keeps_problems():
    error = BookValidationError(["Title is required.", "Author is required."])
    assert error.problems == ["Title is required.", "Author is required."]
    assert "Title is required.; Author is required." in str(error)


def test_errors_can_be_raised_and_caught():
    with pytest.raises(BookshelfError) as info:
        raise DuplicateIsbnError("978-0132350884")
    assert "978-0132350884" in info.value.message


def test_unique_violation_detection():
    unique = _integrity_error("INSERT INTO t VALUES ('x', 'z')")
    not_null = _integrity_error("INSERT INTO t VALUES ('q', NULL)")
    assert is_unique_violation(unique)
    assert not is_unique_violation(not_null)
    assert not is_unique_violation(sqlite3.OperationalError("locked"))


def test_translate_integrity_error():
    unique = _integrity_error("INSERT INTO t VALUES ('x', 'z')")
    not_null = _integrity_error("INSERT INTO t VALUES ('q', NULL)")

    duplicate = translate_integrity_error(unique, "123")
    assert isinstance(duplicate, DuplicateIsbnError)
    assert "123" in duplicate.message

    other = translate_integrity_error(not_null)
    assert isinstance(other, ConstraintViolationError)
    assert "NOT NULL" in other.details
