"""
Storage Module
==============
SQLite persistence for the book catalog.

Repository Pattern:
    - IBookRepository / IUserRepository: Abstract interfaces for storage
    - SQLiteBookRepository / SQLiteUserRepository: Concrete SQLite implementations
    - DatabaseGateway: Shared connection and schema lifecycle
"""

from .database import DatabaseGateway
from .repository import IBookRepository, IUserRepository
from .sqlite_repo import SQLiteBookRepository
from .user_repo import SQLiteUserRepository
from .models import (
    DEFAULT_OWNER_ID,
    GENRE_OPTIONS,
    Book,
    BookFilters,
    LibraryStatistics,
    ReadingStatus,
    StorageResult,
    User,
)

__all__ = [
    "DatabaseGateway",
    # Repository Pattern
    "IBookRepository",
    "IUserRepository",
    "SQLiteBookRepository",
    "SQLiteUserRepository",
    # Models
    "DEFAULT_OWNER_ID",
    "GENRE_OPTIONS",
    "Book",
    "BookFilters",
    "LibraryStatistics",
    "ReadingStatus",
    "StorageResult",
    "User",
]
