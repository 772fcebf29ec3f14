"""
Storage Model Tests
===================
Tests for Book mutation helpers, ReadingStatus parsing, filters,
statistics rendering and StorageResult.
"""

from datetime import datetime, timedelta

import pytest

from bookshelf.errors import ErrorCode, RecordNotFoundError
from bookshelf.storage.models import (
    Book,
    BookFilters,
    LibraryStatistics,
    ReadingStatus,
    StorageResult,
    User,
)


class TestReadingStatus:
    """Tests for status parsing."""

    @pytest.mark.parametrize("raw", [
        ReadingStatus.WANT_TO_READ,
        "Want to Read",
        "WANT_TO_READ",
        "want-to-read",
        "  want to read ",
    ])
    def test_parse_accepts_label_name_and_slug(self, raw):
        assert ReadingStatus.parse(raw) is ReadingStatus.WANT_TO_READ

    def test_parse_rejects_unknown(self):
        with pytest.raises(ValueError):
            ReadingStatus.parse("Finished")
        with pytest.raises(ValueError):
            ReadingStatus.parse(3)

    def test_options_are_display_labels(self):
        assert ReadingStatus.options() == ["Want to Read", "Reading", "Read"]


class TestBook:
    """Tests for Book defaults and tracked mutation."""

    def test_defaults(self):
        book = Book()
        assert book.id is None
        assert book.isbn is None
        assert book.rating == 0.0
        assert book.status is ReadingStatus.WANT_TO_READ
        assert book.date_updated == book.date_added

    def test_status_label_string_is_coerced(self):
        assert Book(status="Read").status is ReadingStatus.READ

    def test_apply_sets_fields_and_touches(self):
        added = datetime(2020, 1, 1)
        book = Book(title="Old", date_added=added)
        book.apply(title="New", status="reading")
        assert book.title == "New"
        assert book.status is ReadingStatus.READING
        assert book.date_updated > added

    def test_apply_rejects_identity_fields(self):
        book = Book()
        with pytest.raises(AttributeError):
            book.apply(id=5)
        assert book.id is None

    def test_apply_without_changes_does_not_touch(self):
        added = datetime(2020, 1, 1)
        book = Book(date_added=added)
        book.apply()
        assert book.date_updated == added

    def test_touch_never_precedes_date_added(self):
        future = datetime.now() + timedelta(days=30)
        book = Book(date_added=future)
        book.touch()
        assert book.date_updated == future

    def test_set_rating(self):
        book = Book()
        assert book.set_rating(4)
        assert book.rating == 4.0
        assert isinstance(book.rating, float)
        assert not book.set_rating(6.0)
        assert not book.set_rating(None)
        assert book.rating == 4.0

    def test_rating_stars(self):
        assert Book(rating=0.0).rating_stars() == "☆☆☆☆☆"
        assert Book(rating=3.7).rating_stars() == "★★★☆☆"
        assert Book(rating=4.99).rating_stars() == "★★★★☆"
        assert Book(rating=5.0).rating_stars() == "★★★★★"

    def test_short_description(self):
        assert Book().short_description() == "No description available"
        assert Book(description="   ").short_description() == "No description available"
        assert Book(description="Short").short_description() == "Short"
        long_text = "x" * 150
        short = Book(description=long_text).short_description()
        assert len(short) == 100
        assert short.endswith("...")

    def test_same_content_ignores_identity_and_timestamps(self):
        first = Book(title="Dune", author="Frank Herbert", id=1, date_added=datetime(2020, 1, 1))
        second = Book(title="Dune", author="Frank Herbert", id=2)
        assert first.same_content(second)
        second.rating = 1.0
        assert not first.same_content(second)

    def test_str(self):
        book = Book(title="Dune", author="Frank Herbert", publication_year=1965, status=ReadingStatus.READ)
        assert str(book) == "Dune by Frank Herbert (1965) - Read"


class TestUser:
    def test_password_not_in_repr(self):
        assert "hunter2" not in repr(User(username="reader", password="hunter2"))


class TestBookFilters:
    """Tests for the emptiness check."""

    def test_blank_filters_are_empty(self):
        assert BookFilters().is_empty()
        assert BookFilters(search_term="  ", genre="").is_empty()

    @pytest.mark.parametrize("filters", [
        BookFilters(search_term="java"),
        BookFilters(genre="Programming"),
        BookFilters(status=ReadingStatus.READ),
        BookFilters(min_rating=0.0),
    ])
    def test_any_filter_makes_non_empty(self, filters):
        assert not filters.is_empty()


class TestLibraryStatistics:
    """Tests for the statistics report."""

    def test_empty_report(self):
        report = LibraryStatistics().report()
        assert "Total Books: 0" in report
        assert "Average Rating: n/a" in report
        assert report.endswith("Top Genres:\n- none")

    def test_report_with_values(self):
        stats = LibraryStatistics(
            total_books=3,
            by_status={ReadingStatus.READ: 2, ReadingStatus.READING: 1},
            average_rating=4.5,
            total_pages=1500,
            top_genres=[("Programming", 2), ("Fiction", 1)],
        )
        assert stats.count_for(ReadingStatus.WANT_TO_READ) == 0
        report = stats.report()
        assert "Read: 2" in report
        assert "Currently Reading: 1" in report
        assert "Average Rating: 4.5/5.0" in report
        assert "Total Pages: 1,500" in report
        assert "- Programming: 2 books" in report


class TestStorageResult:
    """Tests for the result wrapper."""

    def test_success_is_truthy(self):
        result = StorageResult.success(3)
        assert result
        assert result.value == 3
        assert result.error_code is None
        assert result.message == ""
        assert result.unwrap() == 3
        assert result.value_or(7) == 3

    def test_success_with_false_value_is_truthy(self):
        assert StorageResult.success(False)

    def test_failure_is_falsy_and_carries_error(self):
        result = StorageResult.failure(RecordNotFoundError("Book", 9))
        assert not result
        assert result.value is None
        assert result.error_code is ErrorCode.E101
        assert "Book 9 not found" in result.message
        assert result.value_or(7) == 7
        with pytest.raises(RecordNotFoundError):
            result.unwrap()
