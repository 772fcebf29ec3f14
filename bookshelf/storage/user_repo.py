"""
SQLite User Repository
======================
Account registration and login against the users table.
"""

import logging
import sqlite3
from datetime import datetime
from typing import Optional

from bookshelf.errors import (
    DuplicateUsernameError,
    InvalidArgumentError,
    InvalidCredentialsError,
    RecordNotFoundError,
    StorageUnavailableError,
    is_unique_violation,
    translate_integrity_error,
)
from bookshelf.storage.database import DatabaseGateway
from bookshelf.storage.models import StorageResult, User
from bookshelf.storage.passwords import hash_password, verify_password
from bookshelf.storage.repository import IUserRepository

logger = logging.getLogger(__name__)


class SQLiteUserRepository(IUserRepository):
    """SQLite implementation of the user repository; stores bcrypt hashes only."""

    def __init__(self, gateway: DatabaseGateway):
        self.gateway = gateway

    def _row_to_user(self, row: sqlite3.Row) -> User:
        created_at = None
        if row["created_at"]:
            created_at = datetime.fromisoformat(row["created_at"])
        return User(username=row["username"], id=row["id"], created_at=created_at)

    def _find(self, username: str) -> Optional[sqlite3.Row]:
        with self.gateway.unit_of_work() as conn:
            return conn.execute(
                "SELECT * FROM users WHERE username = ?",
                (username,)
            ).fetchone()

    def register(self, user: User) -> StorageResult[User]:
        """Hash the password and insert the account."""
        username = (user.username or "").strip()
        if not username or not user.password:
            error = InvalidArgumentError("Username and password are required")
            logger.warning("Register rejected: %s", error)
            return StorageResult.failure(error)

        created_at = datetime.now()
        try:
            password_hash = hash_password(user.password)
            with self.gateway.unit_of_work() as conn:
                cursor = conn.execute(
                    "INSERT INTO users (username, password_hash, created_at) VALUES (?, ?, ?)",
                    (username, password_hash, created_at.isoformat())
                )
                user_id = cursor.lastrowid
        except sqlite3.IntegrityError as e:
            error = DuplicateUsernameError(username) if is_unique_violation(e) else translate_integrity_error(e)
            logger.warning("Register rejected: %s", error)
            return StorageResult.failure(error)
        except sqlite3.Error as e:
            logger.error("Register failed: %s", e, exc_info=True)
            return StorageResult.failure(StorageUnavailableError("Register failed", details=str(e)))
        except StorageUnavailableError as e:
            logger.error("Register failed: %s", e)
            return StorageResult.failure(e)

        user.username = username
        user.id = user_id
        user.created_at = created_at
        logger.info("Registered user %d: %s", user_id, username)
        return StorageResult.success(user)

    def login(self, username: str, password: str) -> StorageResult[User]:
        """Verify credentials with bcrypt."""
        username = (username or "").strip()
        try:
            row = self._find(username)
        except sqlite3.Error as e:
            logger.error("Login failed: %s", e, exc_info=True)
            return StorageResult.failure(StorageUnavailableError("Login failed", details=str(e)))
        except StorageUnavailableError as e:
            logger.error("Login failed: %s", e)
            return StorageResult.failure(e)

        if row is None or not password or not verify_password(password, row["password_hash"]):
            error = InvalidCredentialsError(username)
            logger.warning("Login rejected for '%s'", username)
            return StorageResult.failure(error)

        logger.info("User '%s' logged in", username)
        return StorageResult.success(self._row_to_user(row))

    def get_by_username(self, username: str) -> StorageResult[User]:
        try:
            row = self._find((username or "").strip())
        except sqlite3.Error as e:
            logger.error("User lookup failed: %s", e, exc_info=True)
            return StorageResult.failure(StorageUnavailableError("User lookup failed", details=str(e)))
        except StorageUnavailableError as e:
            return StorageResult.failure(e)

        if row is None:
            return StorageResult.failure(RecordNotFoundError("User", username))
        return StorageResult.success(self._row_to_user(row))

    def is_username_taken(self, username: str) -> StorageResult[bool]:
        result = self.get_by_username(username)
        if result:
            return StorageResult.success(True)
        if isinstance(result.error, RecordNotFoundError):
            return StorageResult.success(False)
        return StorageResult.failure(result.error)
