"""
Storage Models
==============
Dataclasses for the book catalog entities and repository results.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Generic, Optional, TypeVar
from enum import Enum

from bookshelf.errors import BookshelfError, ErrorCode


# Owner of the shared local library (seed rows, unbound repositories)
DEFAULT_OWNER_ID = 0

GENRE_OPTIONS = [
    "Fiction", "Non-Fiction", "Mystery", "Romance", "Science Fiction",
    "Fantasy", "Biography", "History", "Programming", "Business",
    "Self-Help", "Health", "Travel", "Cooking", "Art", "Other",
]


class ReadingStatus(str, Enum):
    """Reading status values, stored by display label."""
    WANT_TO_READ = "Want to Read"
    READING = "Reading"
    READ = "Read"

    @classmethod
    def parse(cls, value) -> "ReadingStatus":
        """
        Resolve a status from a member, its label, or its name.

        Accepts "Want to Read", "WANT_TO_READ" and "want-to-read" alike.

        Raises:
            ValueError: If the value names no status
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            raw = value.strip()
            for member in cls:
                if raw == member.value:
                    return member
            key = raw.upper().replace("-", "_").replace(" ", "_")
            if key in cls.__members__:
                return cls.__members__[key]
        raise ValueError(f"Unknown reading status: {value!r}")

    @classmethod
    def options(cls) -> list[str]:
        return [member.value for member in cls]


def _now() -> datetime:
    return datetime.now()


@dataclass
class Book:
    """
    Book record.

    A plain data holder: assigning attributes directly does not touch
    date_updated. Use apply() or set_rating() for tracked mutation; the
    repository touches on every update it writes.
    """
    title: str = ""
    author: str = ""
    isbn: Optional[str] = None
    genre: str = ""
    publication_year: int = 0
    pages: int = 0
    description: str = ""
    rating: float = 0.0
    status: ReadingStatus = ReadingStatus.WANT_TO_READ
    id: Optional[int] = None
    owner_id: Optional[int] = None
    date_added: datetime = field(default_factory=_now)
    date_updated: Optional[datetime] = None

    MUTABLE_FIELDS = frozenset({
        "title", "author", "isbn", "genre", "publication_year",
        "pages", "description", "rating", "status",
    })

    def __post_init__(self):
        if self.date_updated is None:
            self.date_updated = self.date_added
        # Unknown labels stay as given so validation can report them
        if isinstance(self.status, str) and not isinstance(self.status, ReadingStatus):
            try:
                self.status = ReadingStatus.parse(self.status)
            except ValueError:
                pass

    def touch(self) -> None:
        """Refresh date_updated, never moving it before date_added."""
        self.date_updated = max(_now(), self.date_added)

    def apply(self, **changes) -> None:
        """
        Set mutable fields and touch once.

        Raises:
            AttributeError: If a key is not a mutable book field
        """
        unknown = set(changes) - self.MUTABLE_FIELDS
        if unknown:
            raise AttributeError(f"Not a mutable book field: {', '.join(sorted(unknown))}")
        if "status" in changes:
            try:
                changes["status"] = ReadingStatus.parse(changes["status"])
            except ValueError:
                pass
        for name, value in changes.items():
            setattr(self, name, value)
        if changes:
            self.touch()

    def set_rating(self, rating: float) -> bool:
        """
        Assign a rating within [0.0, 5.0].

        Returns:
            False (leaving rating and date_updated as they were) when out of range
        """
        if rating is None or not 0.0 <= rating <= 5.0:
            return False
        self.rating = float(rating)
        self.touch()
        return True

    @property
    def status_label(self) -> str:
        return self.status.value if isinstance(self.status, ReadingStatus) else str(self.status)

    def rating_stars(self) -> str:
        """Five-character star bar: one filled star per whole point, the fraction is dropped."""
        full = int(self.rating)
        return "★" * full + "☆" * (5 - full)

    def short_description(self, width: int = 100) -> str:
        if not self.description or not self.description.strip():
            return "No description available"
        if len(self.description) > width:
            return self.description[:width - 3] + "..."
        return self.description

    def same_content(self, other: "Book") -> bool:
        """Compare every field except identity and timestamps."""
        skip = {"id", "owner_id", "date_added", "date_updated"}
        return all(
            getattr(self, f.name) == getattr(other, f.name)
            for f in fields(self)
            if f.name not in skip
        )

    def __str__(self) -> str:
        return f"{self.title} by {self.author} ({self.publication_year}) - {self.status_label}"


@dataclass
class User:
    """Account credentials; the password never leaves memory in clear text."""
    username: str
    password: str = field(default="", repr=False)
    id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass
class BookFilters:
    """Filters for combined book searches; None or blank means "not applied"."""
    search_term: Optional[str] = None
    genre: Optional[str] = None
    status: Optional[ReadingStatus] = None
    min_rating: Optional[float] = None

    def is_empty(self) -> bool:
        return not any([
            self.search_term and self.search_term.strip(),
            self.genre and self.genre.strip(),
            self.status,
            self.min_rating is not None,
        ])


@dataclass
class LibraryStatistics:
    """Aggregate view of a library."""
    total_books: int = 0
    by_status: dict[ReadingStatus, int] = field(default_factory=dict)
    average_rating: Optional[float] = None
    total_pages: int = 0
    top_genres: list[tuple[str, int]] = field(default_factory=list)

    def count_for(self, status: ReadingStatus) -> int:
        return self.by_status.get(status, 0)

    def report(self) -> str:
        """Render the statistics for direct display."""
        average = f"{self.average_rating:.1f}/5.0" if self.average_rating is not None else "n/a"
        lines = [
            "Reading Statistics:",
            f"Total Books: {self.total_books}",
            f"Read: {self.count_for(ReadingStatus.READ)}",
            f"Currently Reading: {self.count_for(ReadingStatus.READING)}",
            f"Want to Read: {self.count_for(ReadingStatus.WANT_TO_READ)}",
            f"Average Rating: {average}",
            f"Total Pages: {self.total_pages:,}",
            "",
            "Top Genres:",
        ]
        if self.top_genres:
            lines.extend(f"- {genre}: {count} books" for genre, count in self.top_genres)
        else:
            lines.append("- none")
        return "\n".join(lines)


T = TypeVar("T")


@dataclass
class StorageResult(Generic[T]):
    """
    Outcome of a repository operation.

    Truthy on success. On failure `error` holds the typed BookshelfError
    that was not raised.
    """
    ok: bool
    value: Optional[T] = None
    error: Optional[BookshelfError] = None

    @classmethod
    def success(cls, value: T = None) -> "StorageResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: BookshelfError) -> "StorageResult[T]":
        return cls(ok=False, error=error)

    def __bool__(self) -> bool:
        return self.ok

    @property
    def error_code(self) -> Optional[ErrorCode]:
        return self.error.code if self.error else None

    @property
    def message(self) -> str:
        return str(self.error) if self.error else ""

    def unwrap(self) -> T:
        """Return the value, raising the carried error on failure."""
        if not self.ok:
            raise self.error
        return self.value

    def value_or(self, default: T) -> T:
        return self.value if self.ok else default
