"""
Database Gateway Tests
======================
Tests for schema creation, sample data seeding, reconnects and
transaction handling.
"""

import sqlite3

import pytest

from bookshelf.errors import StorageUnavailableError
from bookshelf.storage.database import SAMPLE_BOOKS, DatabaseGateway
from bookshelf.storage.models import DEFAULT_OWNER_ID


def _count(gateway: DatabaseGateway, table: str = "books") -> int:
    with gateway.unit_of_work() as conn:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


class TestSchema:
    """Tests for schema and seeding."""

    def test_creates_tables(self, gateway):
        with gateway.unit_of_work() as conn:
            names = {
                row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
            }
        assert {"books", "users"} <= names

    def test_creates_parent_directory(self, tmp_path):
        gateway = DatabaseGateway(tmp_path / "nested" / "dir" / "books.db", seed_sample_data=False)
        assert (tmp_path / "nested" / "dir" / "books.db").exists()
        gateway.close()

    def test_empty_gateway_has_no_books(self, gateway):
        assert _count(gateway) == 0

    def test_seeds_sample_books_into_shared_library(self, seeded_gateway):
        assert _count(seeded_gateway) == len(SAMPLE_BOOKS) == 5
        with seeded_gateway.unit_of_work() as conn:
            owners = {row[0] for row in conn.execute("SELECT DISTINCT user_id FROM books")}
        assert owners == {DEFAULT_OWNER_ID}

    def test_seeding_happens_once(self, tmp_path):
        path = tmp_path / "books.db"
        first = DatabaseGateway(path)
        first.ensure_schema()
        first.close()

        second = DatabaseGateway(path)
        assert _count(second) == 5
        second.close()

    def test_no_seed_into_non_empty_table(self, tmp_path):
        path = tmp_path / "books.db"
        gateway = DatabaseGateway(path, seed_sample_data=False)
        with gateway.unit_of_work() as conn:
            conn.execute(
                "INSERT INTO books (title, author, date_added, date_updated) "
                "VALUES ('Dune', 'Frank Herbert', '2020-01-01T00:00:00', '2020-01-01T00:00:00')"
            )
        gateway.close()

        reopened = DatabaseGateway(path, seed_sample_data=True)
        assert _count(reopened) == 1
        reopened.close()

    def test_directory_path_is_unavailable(self, tmp_path):
        target = tmp_path / "a_directory"
        target.mkdir()
        with pytest.raises(StorageUnavailableError):
            DatabaseGateway(target)


class TestConnection:
    """Tests for the shared connection lifecycle."""

    def test_connection_is_shared(self, gateway):
        assert gateway.get_connection() is gateway.get_connection()

    def test_reconnects_after_close(self, seeded_gateway):
        seeded_gateway.close()
        assert _count(seeded_gateway) == 5

    def test_reconnects_after_external_close(self, seeded_gateway):
        seeded_gateway.get_connection().close()
        assert _count(seeded_gateway) == 5

    def test_close_twice_is_safe(self, gateway):
        gateway.close()
        gateway.close()

    def test_in_memory_database(self):
        gateway = DatabaseGateway(":memory:")
        assert gateway.in_memory
        assert _count(gateway) == 5
        gateway.close()
        # A new in-memory database is re-created with its schema
        assert _count(gateway) == 5
        gateway.close()

    def test_test_connection(self, gateway):
        assert gateway.test_connection()

    def test_database_info(self, gateway):
        assert gateway.database_info().startswith("SQLite Database: ")
        assert "test_bookshelf.db" in gateway.database_info()


class TestUnitOfWork:
    """Tests for commit and rollback."""

    def test_commits_on_success(self, gateway):
        with gateway.unit_of_work() as conn:
            conn.execute(
                "INSERT INTO users (username, password_hash, created_at) VALUES ('a', 'h', '2020-01-01')"
            )
        assert _count(gateway, "users") == 1

    def test_rolls_back_on_error(self, gateway):
        with pytest.raises(RuntimeError):
            with gateway.unit_of_work() as conn:
                conn.execute(
                    "INSERT INTO users (username, password_hash, created_at) VALUES ('a', 'h', '2020-01-01')"
                )
                raise RuntimeError("boom")
        assert _count(gateway, "users") == 0

    def test_rating_check_constraint(self, gateway):
        with pytest.raises(sqlite3.IntegrityError):
            with gateway.unit_of_work() as conn:
                conn.execute(
                    "INSERT INTO books (title, author, rating, date_added, date_updated) "
                    "VALUES ('t', 'a', 9.0, '2020-01-01', '2020-01-01')"
                )
