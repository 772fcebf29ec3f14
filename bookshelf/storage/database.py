"""
SQLite Database Gateway
=======================
Owns the shared connection and the schema lifecycle for the book catalog.
"""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional

from bookshelf.errors import StorageUnavailableError
from bookshelf.storage.models import DEFAULT_OWNER_ID, ReadingStatus
from bookshelf.storage.validation import normalize_isbn

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"


def _casefold(value):
    """SQL casefold(): Unicode-aware lowering for case-insensitive matching."""
    return value.casefold() if isinstance(value, str) else value


SCHEMA = """
    CREATE TABLE IF NOT EXISTS books (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        author TEXT NOT NULL,
        isbn TEXT,
        genre TEXT,
        publication_year INTEGER,
        pages INTEGER,
        description TEXT,
        rating REAL DEFAULT 0.0 CHECK(rating >= 0.0 AND rating <= 5.0),
        status TEXT CHECK(status IN ('Want to Read', 'Reading', 'Read')) DEFAULT 'Want to Read',
        date_added TIMESTAMP NOT NULL,
        date_updated TIMESTAMP NOT NULL,
        user_id INTEGER NOT NULL DEFAULT 0,
        UNIQUE (user_id, isbn)
    );

    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        username TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        created_at TIMESTAMP NOT NULL
    );

    CREATE INDEX IF NOT EXISTS idx_books_title ON books(title);
    CREATE INDEX IF NOT EXISTS idx_books_author ON books(author);
    CREATE INDEX IF NOT EXISTS idx_books_genre ON books(genre);
    CREATE INDEX IF NOT EXISTS idx_books_status ON books(status);
    CREATE INDEX IF NOT EXISTS idx_books_rating ON books(rating);
    CREATE INDEX IF NOT EXISTS idx_books_user_id ON books(user_id);
"""

# (title, author, isbn, genre, year, pages, description, rating, status)
SAMPLE_BOOKS = [
    (
        "Clean Code", "Robert C. Martin", "978-0132350884", "Programming", 2008, 464,
        "A handbook of agile software craftsmanship that teaches you how to write better code.",
        4.5, ReadingStatus.READ,
    ),
    (
        "Effective Java", "Joshua Bloch", "978-0134685991", "Programming", 2017, 416,
        "The definitive guide to Java platform best practices from the creator of the "
        "Java Collections Framework.",
        4.8, ReadingStatus.READING,
    ),
    (
        "The Pragmatic Programmer", "David Thomas & Andrew Hunt", "978-0135957059", "Programming", 2019, 352,
        "Your journey to mastery in software development.",
        0.0, ReadingStatus.WANT_TO_READ,
    ),
    (
        "Design Patterns", "Gang of Four", "978-0201633610", "Programming", 1994, 395,
        "Elements of reusable object-oriented software design patterns.",
        4.3, ReadingStatus.WANT_TO_READ,
    ),
    (
        "Java: The Complete Reference", "Herbert Schildt", "978-1260440232", "Programming", 2020, 1248,
        "Comprehensive guide to Java programming language.",
        4.2, ReadingStatus.READING,
    ),
]


class DatabaseGateway:
    """
    SQLite gateway for the book catalog.

    Holds one connection shared by every repository built on it. Access is
    serialised with a re-entrant lock so the connection can be used from a
    background worker thread.

    Tables:
        - books: Book records, scoped by user_id
        - users: Account credentials (bcrypt hashes)
    """

    def __init__(self, db_path: Path | str = "data/bookshelf.db", seed_sample_data: bool = True):
        """
        Initialize the gateway and make sure the schema exists.

        Args:
            db_path: Path to SQLite database file, or ":memory:"
            seed_sample_data: Insert sample books when the books table is empty
        """
        self.in_memory = str(db_path) == MEMORY_DATABASE
        self.db_path = MEMORY_DATABASE if self.in_memory else Path(db_path)
        self.seed_sample_data = seed_sample_data
        self._connection: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

        if not self.in_memory:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.ensure_schema()

    # ==================== Connection ====================

    def _open(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        except sqlite3.Error as e:
            logger.error("Could not open database %s: %s", self.db_path, e)
            raise StorageUnavailableError(f"Could not open database {self.db_path}", details=str(e)) from e
        conn.row_factory = sqlite3.Row
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        logger.info("Connected to SQLite database: %s", self.db_path)
        return conn

    @staticmethod
    def _is_open(conn: Optional[sqlite3.Connection]) -> bool:
        if conn is None:
            return False
        try:
            conn.execute("SELECT 1")
            return True
        except sqlite3.ProgrammingError:
            return False

    def get_connection(self) -> sqlite3.Connection:
        """
        Get the shared connection, reconnecting if it was closed.

        Raises:
            StorageUnavailableError: If the database cannot be opened
        """
        with self._lock:
            if self._is_open(self._connection):
                return self._connection
            if self._connection is not None:
                logger.warning("Database connection was closed; reconnecting")
            self._connection = self._open()
            if self.in_memory:
                # A fresh in-memory database starts without tables
                self._create_schema(self._connection)
            return self._connection

    @contextmanager
    def unit_of_work(self):
        """Context manager yielding the connection; commits or rolls back."""
        with self._lock:
            conn = self.get_connection()
            try:
                yield conn
                conn.commit()
            except Exception:
                conn.rollback()
                raise

    def close(self) -> None:
        """Close the shared connection."""
        with self._lock:
            if self._connection is not None:
                try:
                    self._connection.close()
                    logger.info("Database connection closed")
                except sqlite3.Error as e:
                    logger.error("Error closing database connection: %s", e)
                self._connection = None

    # ==================== Schema ====================

    def ensure_schema(self) -> None:
        """Create tables and indexes if missing, then seed if configured."""
        try:
            with self.unit_of_work() as conn:
                self._create_schema(conn)
        except sqlite3.Error as e:
            logger.error("Database initialization failed: %s", e)
            raise StorageUnavailableError("Database initialization failed", details=str(e)) from e

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.executescript(SCHEMA)
        if self.seed_sample_data:
            self._insert_sample_data(conn)

    def _insert_sample_data(self, conn: sqlite3.Connection) -> None:
        """Insert sample books only when the books table is empty."""
        count = conn.execute("SELECT COUNT(*) FROM books").fetchone()[0]
        if count:
            return

        now = datetime.now().isoformat()
        conn.executemany(
            """
            INSERT INTO books (title, author, isbn, genre, publication_year, pages,
                               description, rating, status, date_added, date_updated, user_id)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (*row[:2], normalize_isbn(row[2]), *row[3:8], row[8].value, now, now, DEFAULT_OWNER_ID)
                for row in SAMPLE_BOOKS
            ]
        )
        logger.info("Inserted %d sample books", len(SAMPLE_BOOKS))

    # ==================== Diagnostics ====================

    def database_info(self) -> str:
        return f"SQLite Database: {self.db_path}"

    def test_connection(self) -> bool:
        """Run a trivial query against the books table."""
        try:
            with self.unit_of_work() as conn:
                count = conn.execute("SELECT COUNT(*) FROM books").fetchone()[0]
            logger.info("Connection test successful, %d books", count)
            return True
        except (sqlite3.Error, StorageUnavailableError) as e:
            logger.error("Connection test failed: %s", e)
            return False
