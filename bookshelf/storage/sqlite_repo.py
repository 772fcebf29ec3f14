"""
SQLite Repository Implementation
================================
Concrete implementation of IBookRepository using SQLite.
Runs every call as a short unit of work on the shared DatabaseGateway.
"""

import logging
import re
import sqlite3
from datetime import datetime
from typing import Callable, Optional, TypeVar

from bookshelf.errors import (
    BookshelfError,
    InvalidArgumentError,
    RecordNotFoundError,
    StorageUnavailableError,
    translate_integrity_error,
)
from bookshelf.storage.database import DatabaseGateway
from bookshelf.storage.models import (
    DEFAULT_OWNER_ID,
    Book,
    BookFilters,
    LibraryStatistics,
    ReadingStatus,
    StorageResult,
)
from bookshelf.storage.repository import IBookRepository
from bookshelf.storage.validation import normalize_isbn

logger = logging.getLogger(__name__)

T = TypeVar("T")

TOP_GENRES_LIMIT = 5

_BOOK_COLUMNS = (
    "title, author, isbn, genre, publication_year, pages, "
    "description, rating, status, date_added, date_updated, user_id"
)


# Titles sort case-insensitively; id keeps equal titles stable
_TITLE_ORDER = "title COLLATE NOCASE, id"

_ISBN_TERM = re.compile(r"[0-9Xx\s-]+")


def text_match(term: str) -> tuple[str, list]:
    """
    WHERE fragment for a case-insensitive substring match on title, author and ISBN.

    Uses the casefold() function registered by DatabaseGateway, so non-ASCII
    letters compare without case and the term is matched literally. A term
    that looks like an ISBN is also compared in its stored, normalized form.
    """
    isbn_term = term
    if _ISBN_TERM.fullmatch(term):
        isbn_term = normalize_isbn(term) or term
    clause = (
        " AND (INSTR(casefold(title), casefold(?)) > 0"
        " OR INSTR(casefold(author), casefold(?)) > 0"
        " OR INSTR(casefold(isbn), casefold(?)) > 0)"
    )
    return clause, [term, term, isbn_term]


def _clean_isbn(isbn: Optional[str]) -> Optional[str]:
    """
    Normalize an ISBN for storage and comparison.

    Blank ISBNs are stored as NULL so any number of books may omit one;
    separators are dropped so "978-0132350884" and "9780132350884" collide.
    """
    if isbn is None or not isbn.strip():
        return None
    return normalize_isbn(isbn) or isbn.strip()


def _parse_status(status) -> ReadingStatus:
    try:
        return ReadingStatus.parse(status)
    except ValueError as e:
        raise InvalidArgumentError(str(e)) from e


class SQLiteBookRepository(IBookRepository):
    """
    SQLite implementation of the book repository interface.

    A repository bound to an owner_id scopes every read, write, count and
    aggregate to that owner's rows. An unbound repository sees every row and
    creates books in the shared library (DEFAULT_OWNER_ID).
    """

    def __init__(self, gateway: DatabaseGateway, owner_id: Optional[int] = None):
        """
        Initialize SQLite repository.

        Args:
            gateway: Shared database gateway
            owner_id: Restrict every operation to this owner's books
        """
        self.gateway = gateway
        self.owner_id = owner_id

    def for_owner(self, owner_id: Optional[int]) -> "SQLiteBookRepository":
        """Repository on the same gateway bound to another owner."""
        return SQLiteBookRepository(self.gateway, owner_id=owner_id)

    # ==================== Helpers ====================

    def _run(self, action: str, work: Callable[[sqlite3.Connection], T], isbn: str = None) -> StorageResult[T]:
        """
        Execute work inside a unit of work and wrap the outcome.

        Args:
            action: Description used in log messages
            work: Callable receiving the connection and returning the value
            isbn: ISBN being written, for duplicate messages

        Returns:
            Success with the returned value, or failure with a typed error
        """
        try:
            with self.gateway.unit_of_work() as conn:
                return StorageResult.success(work(conn))
        except (RecordNotFoundError, InvalidArgumentError) as e:
            logger.warning("%s: %s", action, e)
            return StorageResult.failure(e)
        except sqlite3.IntegrityError as e:
            error = translate_integrity_error(e, isbn)
            logger.warning("%s rejected: %s", action, error)
            return StorageResult.failure(error)
        except sqlite3.Error as e:
            logger.error("%s failed: %s", action, e, exc_info=True)
            return StorageResult.failure(StorageUnavailableError(f"{action} failed", details=str(e)))
        except BookshelfError as e:
            logger.error("%s failed: %s", action, e)
            return StorageResult.failure(e)

    def _scope(self) -> tuple[str, list]:
        """SQL fragment (starting with AND) restricting rows to the bound owner."""
        if self.owner_id is None:
            return "", []
        return " AND user_id = ?", [self.owner_id]

    def _select(self, conn: sqlite3.Connection, where: str, params: list, order: str,
                limit: Optional[int] = None, offset: Optional[int] = None) -> list[Book]:
        scope, scope_params = self._scope()
        query = f"SELECT * FROM books WHERE 1=1{where}{scope} ORDER BY {order}"
        params = list(params) + scope_params
        if limit is not None:
            query += " LIMIT ? OFFSET ?"
            params.extend([limit, offset or 0])
        rows = conn.execute(query, params).fetchall()
        return [self._row_to_book(row) for row in rows]

    def _fetch(self, conn: sqlite3.Connection, book_id: int) -> Book:
        scope, scope_params = self._scope()
        row = conn.execute(
            f"SELECT * FROM books WHERE id = ?{scope}",
            [book_id, *scope_params]
        ).fetchone()
        if row is None:
            raise RecordNotFoundError("Book", book_id)
        return self._row_to_book(row)

    def _row_to_book(self, row: sqlite3.Row) -> Book:
        """Convert database row to Book dataclass."""
        return Book(
            id=row["id"],
            title=row["title"],
            author=row["author"],
            isbn=row["isbn"],
            genre=row["genre"] or "",
            publication_year=row["publication_year"] or 0,
            pages=row["pages"] or 0,
            description=row["description"] or "",
            rating=row["rating"] if row["rating"] is not None else 0.0,
            status=ReadingStatus(row["status"]),
            owner_id=row["user_id"],
            date_added=datetime.fromisoformat(row["date_added"]),
            date_updated=datetime.fromisoformat(row["date_updated"]),
        )

    @staticmethod
    def _check_limit(limit: int) -> None:
        if limit is None or limit <= 0:
            raise InvalidArgumentError(f"Limit must be positive, got {limit}")

    # ==================== Book Operations ====================

    def create_book(self, book: Book, owner_id: Optional[int] = None) -> StorageResult[Book]:
        """Insert a book and back-fill its id and owner."""
        if owner_id is None:
            owner_id = self.owner_id if self.owner_id is not None else DEFAULT_OWNER_ID
        isbn = _clean_isbn(book.isbn)

        def work(conn):
            cursor = conn.execute(
                f"INSERT INTO books ({_BOOK_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    book.title, book.author, isbn, book.genre, book.publication_year,
                    book.pages, book.description, book.rating, book.status_label,
                    book.date_added.isoformat(), book.date_updated.isoformat(), owner_id,
                )
            )
            return cursor.lastrowid

        result = self._run("Create book", work, isbn=isbn)
        if not result:
            return result

        book.id = result.value
        book.owner_id = owner_id
        book.isbn = isbn
        logger.info("Created book %d: %s", book.id, book.title)
        return StorageResult.success(book)

    def get_book(self, book_id: int) -> StorageResult[Book]:
        """Get a book by ID."""
        return self._run(f"Get book {book_id}", lambda conn: self._fetch(conn, book_id))

    def update_book(self, book: Book) -> StorageResult[Book]:
        """Overwrite mutable fields by id and refresh date_updated."""
        if book.id is None:
            return StorageResult.failure(InvalidArgumentError("Book has no id; create it first"))

        isbn = _clean_isbn(book.isbn)
        updated_at = max(datetime.now(), book.date_added)
        scope, scope_params = self._scope()

        def work(conn):
            cursor = conn.execute(
                f"""
                UPDATE books
                SET title = ?, author = ?, isbn = ?, genre = ?, publication_year = ?,
                    pages = ?, description = ?, rating = ?, status = ?, date_updated = ?
                WHERE id = ?{scope}
                """,
                (
                    book.title, book.author, isbn, book.genre, book.publication_year,
                    book.pages, book.description, book.rating, book.status_label,
                    updated_at.isoformat(), book.id, *scope_params,
                )
            )
            if cursor.rowcount == 0:
                raise RecordNotFoundError("Book", book.id)

        result = self._run(f"Update book {book.id}", work, isbn=isbn)
        if not result:
            return result

        book.isbn = isbn
        book.date_updated = updated_at
        return StorageResult.success(book)

    def _update_column(self, book_id: int, column: str, value) -> StorageResult[Book]:
        scope, scope_params = self._scope()

        def work(conn):
            current = self._fetch(conn, book_id)
            updated_at = max(datetime.now(), current.date_added)
            conn.execute(
                f"UPDATE books SET {column} = ?, date_updated = ? WHERE id = ?{scope}",
                [value, updated_at.isoformat(), book_id, *scope_params]
            )
            return self._fetch(conn, book_id)

        return self._run(f"Update {column} of book {book_id}", work)

    def update_rating(self, book_id: int, rating: float) -> StorageResult[Book]:
        """Set only the rating; values outside 0.0 to 5.0 are rejected."""
        if rating is None or not 0.0 <= rating <= 5.0:
            error = InvalidArgumentError(f"Rating must be between 0.0 and 5.0, got {rating}")
            logger.warning("Update rating of book %s: %s", book_id, error)
            return StorageResult.failure(error)
        return self._update_column(book_id, "rating", float(rating))

    def update_status(self, book_id: int, status: ReadingStatus | str) -> StorageResult[Book]:
        """Set only the reading status."""
        try:
            parsed = _parse_status(status)
        except InvalidArgumentError as e:
            logger.warning("Update status of book %s: %s", book_id, e)
            return StorageResult.failure(e)
        return self._update_column(book_id, "status", parsed.value)

    def delete_book(self, book_id: int) -> StorageResult[None]:
        """Delete a book."""
        scope, scope_params = self._scope()

        def work(conn):
            cursor = conn.execute(
                f"DELETE FROM books WHERE id = ?{scope}",
                [book_id, *scope_params]
            )
            if cursor.rowcount == 0:
                raise RecordNotFoundError("Book", book_id)
            logger.info("Deleted book %d", book_id)

        return self._run(f"Delete book {book_id}", work)

    # ==================== Queries ====================

    def list_all(self, owner_id: Optional[int] = None) -> StorageResult[list[Book]]:
        """List books, newest first."""
        repo = self if owner_id is None else self.for_owner(owner_id)
        return repo._run(
            "List books",
            lambda conn: repo._select(conn, "", [], "date_added DESC, id DESC")
        )

    def search(self, term: str) -> StorageResult[list[Book]]:
        """Search title, author and ISBN for a substring."""
        where, params = text_match(term or "")
        return self._run(
            "Search books",
            lambda conn: self._select(conn, where, params, _TITLE_ORDER)
        )

    def list_by_status(self, status: ReadingStatus | str) -> StorageResult[list[Book]]:
        """List books with the given status, by title."""
        return self._run(
            "List books by status",
            lambda conn: self._select(conn, " AND status = ?", [_parse_status(status).value], _TITLE_ORDER)
        )

    def list_by_genre(self, genre: str) -> StorageResult[list[Book]]:
        """List books in the given genre, by title."""
        return self._run(
            "List books by genre",
            lambda conn: self._select(conn, " AND genre = ?", [genre], _TITLE_ORDER)
        )

    def search_with_filters(
        self,
        term: Optional[str] = None,
        genre: Optional[str] = None,
        status: Optional[ReadingStatus | str] = None,
        min_rating: Optional[float] = None,
        filters: Optional[BookFilters] = None,
    ) -> StorageResult[list[Book]]:
        """Search with every supplied filter combined."""
        if filters is not None:
            term, genre, status, min_rating = (
                filters.search_term, filters.genre, filters.status, filters.min_rating
            )

        def work(conn):
            where = ""
            params = []

            if term and term.strip():
                clause, clause_params = text_match(term.strip())
                where += clause
                params.extend(clause_params)

            if genre and genre.strip():
                where += " AND genre = ?"
                params.append(genre.strip())

            if status:
                where += " AND status = ?"
                params.append(_parse_status(status).value)

            if min_rating is not None:
                where += " AND rating >= ?"
                params.append(min_rating)

            return self._select(conn, where, params, _TITLE_ORDER)

        return self._run("Search books with filters", work)

    def paginate(self, offset: int, limit: int) -> StorageResult[list[Book]]:
        """One page of books, newest first."""
        def work(conn):
            if offset is None or offset < 0:
                raise InvalidArgumentError(f"Offset must not be negative, got {offset}")
            self._check_limit(limit)
            return self._select(conn, "", [], "date_added DESC, id DESC", limit=limit, offset=offset)

        return self._run("Paginate books", work)

    def top_rated(self, limit: int) -> StorageResult[list[Book]]:
        """Highest rated books."""
        def work(conn):
            self._check_limit(limit)
            return self._select(conn, " AND rating > 0", [], "rating DESC, title COLLATE NOCASE ASC, id", limit=limit)

        return self._run("Top rated books", work)

    def recently_added(self, limit: int) -> StorageResult[list[Book]]:
        """Most recently added books."""
        def work(conn):
            self._check_limit(limit)
            return self._select(conn, "", [], "date_added DESC, id DESC", limit=limit)

        return self._run("Recently added books", work)

    # ==================== Aggregates ====================

    def _scalar(self, conn: sqlite3.Connection, select: str, where: str = "", params: list = ()):
        scope, scope_params = self._scope()
        return conn.execute(
            f"SELECT {select} FROM books WHERE 1=1{where}{scope}",
            [*params, *scope_params]
        ).fetchone()[0]

    def count(self) -> StorageResult[int]:
        return self._run("Count books", lambda conn: self._scalar(conn, "COUNT(*)"))

    def count_by_status(self, status: ReadingStatus | str) -> StorageResult[int]:
        return self._run(
            "Count books by status",
            lambda conn: self._scalar(conn, "COUNT(*)", " AND status = ?", [_parse_status(status).value])
        )

    def _distinct(self, column: str) -> StorageResult[list[str]]:
        scope, scope_params = self._scope()

        def work(conn):
            rows = conn.execute(
                f"""
                SELECT DISTINCT {column} FROM books
                WHERE {column} IS NOT NULL AND TRIM({column}) != ''{scope}
                ORDER BY {column} COLLATE NOCASE
                """,
                scope_params
            ).fetchall()
            return [row[0] for row in rows]

        return self._run(f"Distinct {column}", work)

    def distinct_genres(self) -> StorageResult[list[str]]:
        """Sorted, non-blank genres in use."""
        return self._distinct("genre")

    def distinct_authors(self) -> StorageResult[list[str]]:
        """Sorted, non-blank authors in use."""
        return self._distinct("author")

    def is_isbn_taken(self, isbn: Optional[str]) -> StorageResult[bool]:
        """Whether any visible book uses this ISBN."""
        cleaned = _clean_isbn(isbn)
        if cleaned is None:
            return StorageResult.success(False)
        return self._run(
            "Check ISBN",
            lambda conn: self._scalar(conn, "COUNT(*)", " AND isbn = ?", [cleaned]) > 0
        )

    def is_isbn_taken_by_other(self, isbn: Optional[str], exclude_id: int) -> StorageResult[bool]:
        """Whether a book other than exclude_id uses this ISBN."""
        cleaned = _clean_isbn(isbn)
        if cleaned is None:
            return StorageResult.success(False)
        return self._run(
            "Check ISBN",
            lambda conn: self._scalar(
                conn, "COUNT(*)", " AND isbn = ? AND id != ?", [cleaned, exclude_id]
            ) > 0
        )

    def statistics_summary(self) -> StorageResult[LibraryStatistics]:
        """Aggregate statistics; an empty library reports zeros and no average."""
        scope, scope_params = self._scope()

        def work(conn):
            row = conn.execute(
                f"""
                SELECT COUNT(*) AS total,
                       AVG(CASE WHEN rating > 0 THEN rating END) AS avg_rating,
                       COALESCE(SUM(pages), 0) AS total_pages
                FROM books WHERE 1=1{scope}
                """,
                scope_params
            ).fetchone()

            status_rows = conn.execute(
                f"SELECT status, COUNT(*) FROM books WHERE 1=1{scope} GROUP BY status",
                scope_params
            ).fetchall()

            genre_rows = conn.execute(
                f"""
                SELECT genre, COUNT(*) AS count FROM books
                WHERE genre IS NOT NULL AND TRIM(genre) != ''{scope}
                GROUP BY genre
                ORDER BY count DESC, genre ASC
                LIMIT ?
                """,
                [*scope_params, TOP_GENRES_LIMIT]
            ).fetchall()

            return LibraryStatistics(
                total_books=row["total"],
                by_status={ReadingStatus(status): count for status, count in status_rows},
                average_rating=row["avg_rating"],
                total_pages=row["total_pages"],
                top_genres=[(genre, count) for genre, count in genre_rows],
            )

        return self._run("Statistics summary", work)
