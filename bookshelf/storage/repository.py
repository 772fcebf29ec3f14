"""
Repository Pattern Interface
============================
Abstract base classes for book and user storage operations.
Enables swapping storage backends (SQLite, in-memory fakes for tests, etc.)

Every operation returns a StorageResult instead of raising for expected
conditions such as a missing record or a duplicate ISBN.
"""

from abc import ABC, abstractmethod
from typing import Optional

from bookshelf.storage.models import (
    Book,
    BookFilters,
    LibraryStatistics,
    ReadingStatus,
    StorageResult,
    User,
)


class IBookRepository(ABC):
    """
    Abstract repository interface for book storage.

    Implementations:
        - SQLiteBookRepository: Local SQLite storage
    """

    # ==================== Book Operations ====================

    @abstractmethod
    def create_book(self, book: Book, owner_id: Optional[int] = None) -> StorageResult[Book]:
        """
        Create a new book record.

        Args:
            book: Book to persist; id and owner_id are back-filled
            owner_id: Owner for the new row (defaults to the bound owner)

        Returns:
            The stored book, or DuplicateIsbnError on an ISBN clash
        """

    @abstractmethod
    def get_book(self, book_id: int) -> StorageResult[Book]:
        """
        Get a book by ID.

        Returns:
            The book, or RecordNotFoundError
        """

    @abstractmethod
    def update_book(self, book: Book) -> StorageResult[Book]:
        """
        Overwrite every mutable field of an existing book.

        Args:
            book: Book carrying the id to update

        Returns:
            The book with date_updated refreshed
        """

    @abstractmethod
    def update_rating(self, book_id: int, rating: float) -> StorageResult[Book]:
        """Set only the rating (0.0 to 5.0)."""

    @abstractmethod
    def update_status(self, book_id: int, status: ReadingStatus | str) -> StorageResult[Book]:
        """Set only the reading status."""

    @abstractmethod
    def delete_book(self, book_id: int) -> StorageResult[None]:
        """
        Delete a book.

        Returns:
            Falsy result with RecordNotFoundError when nothing was deleted
        """

    # ==================== Queries ====================

    @abstractmethod
    def list_all(self, owner_id: Optional[int] = None) -> StorageResult[list[Book]]:
        """List books, newest first."""

    @abstractmethod
    def search(self, term: str) -> StorageResult[list[Book]]:
        """
        Case-insensitive substring search over title, author and ISBN.

        Args:
            term: Text to look for; LIKE wildcards are matched literally

        Returns:
            Matching books ordered by title
        """

    @abstractmethod
    def list_by_status(self, status: ReadingStatus | str) -> StorageResult[list[Book]]:
        pass

    @abstractmethod
    def list_by_genre(self, genre: str) -> StorageResult[list[Book]]:
        pass

    @abstractmethod
    def search_with_filters(
        self,
        term: Optional[str] = None,
        genre: Optional[str] = None,
        status: Optional[ReadingStatus | str] = None,
        min_rating: Optional[float] = None,
        filters: Optional[BookFilters] = None,
    ) -> StorageResult[list[Book]]:
        """
        Combine the given filters with AND; blank or None filters are skipped.

        Args:
            term: Substring over title/author/ISBN
            genre: Exact genre
            status: Exact reading status
            min_rating: Inclusive lower bound on rating
            filters: BookFilters used in place of the keyword arguments

        Returns:
            Matching books ordered by title
        """

    @abstractmethod
    def paginate(self, offset: int, limit: int) -> StorageResult[list[Book]]:
        """One page of books, newest first."""

    @abstractmethod
    def top_rated(self, limit: int) -> StorageResult[list[Book]]:
        """Rated books (rating > 0) by rating descending, then title."""

    @abstractmethod
    def recently_added(self, limit: int) -> StorageResult[list[Book]]:
        pass

    # ==================== Aggregates ====================

    @abstractmethod
    def count(self) -> StorageResult[int]:
        pass

    @abstractmethod
    def count_by_status(self, status: ReadingStatus | str) -> StorageResult[int]:
        pass

    @abstractmethod
    def distinct_genres(self) -> StorageResult[list[str]]:
        """Sorted, non-blank genres in use."""

    @abstractmethod
    def distinct_authors(self) -> StorageResult[list[str]]:
        """Sorted, non-blank authors in use."""

    @abstractmethod
    def is_isbn_taken(self, isbn: Optional[str]) -> StorageResult[bool]:
        """Whether any visible book uses this ISBN; blank is never taken."""

    @abstractmethod
    def is_isbn_taken_by_other(self, isbn: Optional[str], exclude_id: int) -> StorageResult[bool]:
        """Whether a book other than exclude_id uses this ISBN."""

    @abstractmethod
    def statistics_summary(self) -> StorageResult[LibraryStatistics]:
        """Totals, per-status counts, average rating, pages and top genres."""


class IUserRepository(ABC):
    """
    Abstract repository interface for user accounts.

    Implementations:
        - SQLiteUserRepository: Local SQLite storage with bcrypt hashes
    """

    @abstractmethod
    def register(self, user: User) -> StorageResult[User]:
        """
        Store a new account.

        Args:
            user: Username and clear-text password; id is back-filled

        Returns:
            The stored user, or DuplicateUsernameError
        """

    @abstractmethod
    def login(self, username: str, password: str) -> StorageResult[User]:
        """
        Check credentials.

        Returns:
            The user on success, InvalidCredentialsError otherwise
        """

    @abstractmethod
    def get_by_username(self, username: str) -> StorageResult[User]:
        pass

    @abstractmethod
    def is_username_taken(self, username: str) -> StorageResult[bool]:
        pass
