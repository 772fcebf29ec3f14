"""
Application Controller
======================
Central controller for the bookshelf catalog.

Keeps session handling and book validation out of the presentation layers
so the CLI and TUI share one code path:
- Testability without a terminal
- Clear separation of concerns
- Easier UI framework changes
"""

import logging
import math
from concurrent.futures import Future
from dataclasses import replace
from typing import Callable, Optional

from bookshelf.app.config import AppConfig
from bookshelf.app.events import (
    AppEvent,
    SessionState,
    make_log_event,
    make_state_event,
)
from bookshelf.concurrency import StorageDispatcher, TaskResult
from bookshelf.errors import (
    BookValidationError,
    DuplicateIsbnError,
    InvalidArgumentError,
)
from bookshelf.storage.database import DatabaseGateway
from bookshelf.storage.models import (
    DEFAULT_OWNER_ID,
    Book,
    BookFilters,
    LibraryStatistics,
    ReadingStatus,
    StorageResult,
    User,
)
from bookshelf.storage.repository import IBookRepository, IUserRepository
from bookshelf.storage.sqlite_repo import SQLiteBookRepository
from bookshelf.storage.user_repo import SQLiteUserRepository
from bookshelf.storage.validation import validate_book

logger = logging.getLogger(__name__)


class AppController:
    """
    Central controller for the bookshelf application.

    Responsibilities:
        - Session management (register, login, logout)
        - Validated add/edit flows
        - Library queries scoped to the current session
        - Background dispatch for interactive surfaces

    Without a logged-in user the controller works on the shared library
    (DEFAULT_OWNER_ID); after login every call is scoped to that user.

    Example:
        controller = AppController(AppConfig.from_env())
        controller.login("reader", "secret")
        result = controller.add_book(Book(title="Dune", author="Frank Herbert", ...))
        if not result:
            print(result.message)
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        gateway: Optional[DatabaseGateway] = None,
        users: Optional[IUserRepository] = None,
        dispatcher: Optional[StorageDispatcher] = None,
        on_event: Optional[Callable[[AppEvent], None]] = None,
    ):
        """
        Initialize the application controller.

        Args:
            config: Application configuration
            gateway: Database gateway (created from config if None)
            users: User repository (SQLite on the gateway if None)
            dispatcher: Background dispatcher (created on first submit if None)
            on_event: Receives log and state events
        """
        self.config = config or AppConfig()
        self.gateway = gateway or DatabaseGateway(
            self.config.db_path,
            seed_sample_data=self.config.seed_sample_data,
        )
        self.users = users or SQLiteUserRepository(self.gateway)
        self._dispatcher = dispatcher
        self.on_event = on_event

        self._current_user: Optional[User] = None
        self._books: IBookRepository = SQLiteBookRepository(self.gateway, owner_id=DEFAULT_OWNER_ID)

    # ==================== Events ====================

    def _emit(self, event: AppEvent) -> None:
        if self.on_event is not None:
            self.on_event(event)

    def _log(self, message: str, level: str = "info") -> None:
        logger.log(getattr(logging, level.upper(), logging.INFO), message)
        self._emit(make_log_event(message, level))

    # ==================== Session ====================

    @property
    def current_user(self) -> Optional[User]:
        return self._current_user

    @property
    def is_logged_in(self) -> bool:
        return self._current_user is not None

    @property
    def books(self) -> IBookRepository:
        """Book repository scoped to the current session."""
        return self._books

    def register(self, username: str, password: str) -> StorageResult[User]:
        """
        Create an account.

        Args:
            username: Unique user name
            password: Clear-text password (hashed before storage)

        Returns:
            The registered user, or the failure from the repository
        """
        result = self.users.register(User(username=username, password=password))
        if result:
            self._log(f"Registered user '{result.value.username}'")
        return result

    def login(self, username: str, password: str) -> StorageResult[User]:
        """
        Log in and scope the library to the user.

        Returns:
            The logged-in user, or InvalidCredentialsError
        """
        result = self.users.login(username, password)
        if not result:
            self._log(f"Login failed for '{username}'", "warning")
            return result

        user = result.value
        self._current_user = user
        self._books = SQLiteBookRepository(self.gateway, owner_id=user.id)
        self._emit(make_state_event(SessionState.LOGGED_IN, user.username))
        self._log(f"Logged in as '{user.username}'")
        return result

    def logout(self) -> None:
        """Forget the current user and return to the shared library."""
        if self._current_user is None:
            return
        username = self._current_user.username
        self._current_user = None
        self._books = SQLiteBookRepository(self.gateway, owner_id=DEFAULT_OWNER_ID)
        self._emit(make_state_event(SessionState.LOGGED_OUT, username))
        self._log(f"Logged out '{username}'")

    # ==================== Book Management ====================

    def _check_book(self, book: Book) -> Optional[StorageResult]:
        problems = validate_book(book)
        if problems:
            error = BookValidationError(problems)
            logger.warning("Book rejected: %s", error)
            return StorageResult.failure(error)
        return None

    def add_book(self, book: Book) -> StorageResult[Book]:
        """
        Validate and store a new book.

        Returns:
            The stored book, BookValidationError, or DuplicateIsbnError
        """
        rejected = self._check_book(book)
        if rejected is not None:
            return rejected

        taken = self._books.is_isbn_taken(book.isbn)
        if not taken:
            return taken
        if taken.value:
            return StorageResult.failure(DuplicateIsbnError(book.isbn))

        result = self._books.create_book(book)
        if result:
            self._log(f"Added '{book.title}' (id {book.id})")
        return result

    def edit_book(self, book: Book) -> StorageResult[Book]:
        """
        Validate and overwrite an existing book.

        Returns:
            The updated book, or the validation/storage failure
        """
        if book.id is None:
            return StorageResult.failure(InvalidArgumentError("Book has no id; add it first"))

        rejected = self._check_book(book)
        if rejected is not None:
            return rejected

        taken = self._books.is_isbn_taken_by_other(book.isbn, book.id)
        if not taken:
            return taken
        if taken.value:
            return StorageResult.failure(DuplicateIsbnError(book.isbn))

        result = self._books.update_book(book)
        if result:
            self._log(f"Updated '{book.title}' (id {book.id})")
        return result

    def update_fields(self, book_id: int, **changes) -> StorageResult[Book]:
        """
        Load a book, apply field changes and save it through edit_book.

        Raises:
            AttributeError: If a key is not a mutable book field
        """
        current = self._books.get_book(book_id)
        if not current:
            return current
        book = replace(current.value)
        book.apply(**changes)
        return self.edit_book(book)

    def delete_book(self, book_id: int) -> StorageResult[None]:
        result = self._books.delete_book(book_id)
        if result:
            self._log(f"Deleted book {book_id}")
        return result

    def get_book(self, book_id: int) -> StorageResult[Book]:
        return self._books.get_book(book_id)

    def rate_book(self, book_id: int, rating: float) -> StorageResult[Book]:
        return self._books.update_rating(book_id, rating)

    def set_status(self, book_id: int, status: ReadingStatus | str) -> StorageResult[Book]:
        return self._books.update_status(book_id, status)

    # ==================== Library Queries ====================

    def list_books(self, page: Optional[int] = None) -> StorageResult[list[Book]]:
        """
        List books newest first.

        Args:
            page: 1-based page of config.page_size books; None lists everything
        """
        if page is None:
            return self._books.list_all()
        if page < 1:
            return StorageResult.failure(InvalidArgumentError(f"Page must be 1 or greater, got {page}"))
        size = self.config.page_size
        return self._books.paginate((page - 1) * size, size)

    def page_count(self) -> StorageResult[int]:
        total = self._books.count()
        if not total:
            return total
        return StorageResult.success(max(1, math.ceil(total.value / self.config.page_size)))

    def search(self, term: str) -> StorageResult[list[Book]]:
        return self._books.search(term)

    def filter_books(self, filters: BookFilters) -> StorageResult[list[Book]]:
        return self._books.search_with_filters(filters=filters)

    def statistics(self) -> StorageResult[LibraryStatistics]:
        return self._books.statistics_summary()

    def genres(self) -> StorageResult[list[str]]:
        return self._books.distinct_genres()

    def authors(self) -> StorageResult[list[str]]:
        return self._books.distinct_authors()

    def top_rated(self, limit: Optional[int] = None) -> StorageResult[list[Book]]:
        return self._books.top_rated(limit or self.config.default_limit)

    def recently_added(self, limit: Optional[int] = None) -> StorageResult[list[Book]]:
        return self._books.recently_added(limit or self.config.default_limit)

    # ==================== Background Work ====================

    @property
    def dispatcher(self) -> StorageDispatcher:
        if self._dispatcher is None:
            self._dispatcher = StorageDispatcher()
        return self._dispatcher

    def submit(
        self,
        label: str,
        func: Callable,
        *args,
        callback: Optional[Callable[[TaskResult], None]] = None,
        **kwargs
    ) -> Future:
        """
        Run a controller call on the storage worker thread.

        Args:
            label: Task label for messages and events
            func: Bound controller method or other storage call
            callback: Receives the TaskResult on the worker thread

        Returns:
            Future resolving to func's return value
        """
        self._emit(make_state_event(SessionState.RUNNING, label))

        def finished(outcome: TaskResult) -> None:
            state = SessionState.COMPLETED if outcome.succeeded else SessionState.FAILED
            self._emit(make_state_event(state, label, str(outcome.error or "")))
            if callback is not None:
                callback(outcome)

        return self.dispatcher.submit(label, func, *args, callback=finished, **kwargs)

    def shutdown(self, wait: bool = True) -> None:
        """
        Stop background work and close the database.

        Args:
            wait: Block until the running background call finishes
        """
        if self._dispatcher is not None:
            self._dispatcher.shutdown(wait=wait)
        self.gateway.close()
