import pytest
from datetime import datetime
from pathlib import Path
import sys

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from bookshelf.storage.database import DatabaseGateway
from bookshelf.storage.models import Book, ReadingStatus
from bookshelf.storage.sqlite_repo import SQLiteBookRepository
from bookshelf.storage.user_repo import SQLiteUserRepository


@pytest.fixture
def gateway(tmp_path):
    """Gateway on an empty temporary database."""
    gw = DatabaseGateway(tmp_path / "test_bookshelf.db", seed_sample_data=False)
    yield gw
    gw.close()


@pytest.fixture
def seeded_gateway(tmp_path):
    """Gateway on a temporary database holding the five sample books."""
    gw = DatabaseGateway(tmp_path / "seeded_bookshelf.db", seed_sample_data=True)
    yield gw
    gw.close()


@pytest.fixture
def repo(gateway):
    return SQLiteBookRepository(gateway)


@pytest.fixture
def seeded_repo(seeded_gateway):
    return SQLiteBookRepository(seeded_gateway)


@pytest.fixture
def users(gateway):
    return SQLiteUserRepository(gateway)


@pytest.fixture
def make_book():
    """Factory for valid books; keyword arguments override the defaults."""
    def _make(**overrides) -> Book:
        values = dict(
            title="Refactoring",
            author="Martin Fowler",
            isbn="978-0134757599",
            genre="Programming",
            publication_year=2018,
            pages=448,
            description="Improving the design of existing code.",
            rating=4.0,
            status=ReadingStatus.READ,
            date_added=datetime(2024, 1, 1, 12, 0, 0),
        )
        values.update(overrides)
        return Book(**values)
    return _make
