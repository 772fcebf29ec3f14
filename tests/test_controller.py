"""
Application Controller Tests
============================
Tests for sessions, validated add/edit flows, scoped queries and
background submission.
"""

import threading

import pytest

from bookshelf.app import AppConfig, AppController
from bookshelf.app.events import EventType, SessionState
from bookshelf.errors import ErrorCode
from bookshelf.storage.models import Book, BookFilters, ReadingStatus


@pytest.fixture
def events():
    return []


@pytest.fixture
def controller(tmp_path, events):
    config = AppConfig(data_dir=tmp_path, db_path=tmp_path / "controller.db", page_size=2)
    ctrl = AppController(config, on_event=events.append)
    yield ctrl
    ctrl.shutdown()


@pytest.fixture
def reader(controller):
    """Registered and logged-in user."""
    controller.register("reader", "secret")
    return controller.login("reader", "secret").value


class TestSession:
    """Tests for register, login and logout."""

    def test_starts_on_shared_library(self, controller):
        assert not controller.is_logged_in
        assert controller.current_user is None
        assert controller.books.count().value == 5

    def test_login_scopes_library(self, controller, reader):
        assert controller.is_logged_in
        assert controller.current_user.username == "reader"
        assert controller.books.owner_id == reader.id
        assert controller.list_books().value == []

    def test_logout_returns_to_shared_library(self, controller, reader):
        controller.logout()
        assert not controller.is_logged_in
        assert controller.books.count().value == 5

    def test_logout_when_logged_out_is_noop(self, controller, events):
        controller.logout()
        assert events == []

    def test_failed_login(self, controller):
        result = controller.login("nobody", "secret")
        assert result.error_code is ErrorCode.E300
        assert not controller.is_logged_in

    def test_duplicate_registration(self, controller):
        assert controller.register("reader", "secret")
        assert controller.register("reader", "secret").error_code is ErrorCode.E103

    def test_session_events(self, controller, events):
        controller.register("reader", "secret")
        controller.login("reader", "secret")
        controller.logout()
        states = [e.state for e in events if e.event_type == EventType.STATE]
        assert states == [SessionState.LOGGED_IN, SessionState.LOGGED_OUT]
        logs = [e.message for e in events if e.event_type == EventType.LOG]
        assert "Registered user 'reader'" in logs
        assert "Logged in as 'reader'" in logs


class TestBookFlows:
    """Tests for validated add and edit."""

    def test_add_book(self, controller, reader, make_book):
        result = controller.add_book(make_book())
        assert result
        assert result.value.owner_id == reader.id
        assert controller.books.count().value == 1

    def test_add_invalid_book(self, controller, reader):
        result = controller.add_book(Book(title="", author="Someone"))
        assert result.error_code is ErrorCode.E200
        assert "Title is required." in result.error.problems
        assert controller.books.count().value == 0

    def test_add_duplicate_isbn(self, controller, reader, make_book):
        controller.add_book(make_book())
        result = controller.add_book(make_book(title="Copy"))
        assert result.error_code is ErrorCode.E102

    def test_isbn_duplicates_are_per_user(self, controller, reader):
        # Clean Code's ISBN is already used in the shared library
        book = Book(title="Clean Code", author="Robert C. Martin", isbn="978-0132350884",
                    publication_year=2008, pages=464)
        assert controller.add_book(book)

    def test_edit_book(self, controller, reader, make_book):
        book = controller.add_book(make_book()).value
        book.title = "Refactoring (2nd ed.)"
        assert controller.edit_book(book)
        assert controller.get_book(book.id).value.title == "Refactoring (2nd ed.)"

    def test_edit_keeps_own_isbn(self, controller, reader, make_book):
        book = controller.add_book(make_book()).value
        book.pages = 500
        assert controller.edit_book(book)

    def test_edit_to_taken_isbn(self, controller, reader, make_book):
        controller.add_book(make_book(isbn="0132350884"))
        other = controller.add_book(make_book(isbn="0201633612")).value
        other.isbn = "0132350884"
        assert controller.edit_book(other).error_code is ErrorCode.E102

    def test_edit_without_id(self, controller, reader, make_book):
        assert controller.edit_book(make_book()).error_code is ErrorCode.E201

    def test_edit_invalid(self, controller, reader, make_book):
        book = controller.add_book(make_book()).value
        book.pages = 0
        assert controller.edit_book(book).error_code is ErrorCode.E200

    def test_update_fields(self, controller, reader, make_book):
        book = controller.add_book(make_book()).value
        result = controller.update_fields(book.id, rating=2.0, status="Reading")
        assert result
        stored = controller.get_book(book.id).value
        assert stored.rating == 2.0
        assert stored.status is ReadingStatus.READING

    def test_update_fields_missing_book(self, controller, reader):
        assert controller.update_fields(99, rating=2.0).error_code is ErrorCode.E101

    def test_rate_and_status(self, controller, reader, make_book):
        book = controller.add_book(make_book()).value
        assert controller.rate_book(book.id, 3.5).value.rating == 3.5
        assert controller.rate_book(book.id, 7).error_code is ErrorCode.E201
        assert controller.set_status(book.id, "want to read").value.status is ReadingStatus.WANT_TO_READ

    def test_delete(self, controller, reader, make_book):
        book = controller.add_book(make_book()).value
        assert controller.delete_book(book.id)
        assert controller.delete_book(book.id).error_code is ErrorCode.E101

    def test_cannot_touch_shared_books_after_login(self, controller, reader):
        assert controller.delete_book(1).error_code is ErrorCode.E101


class TestQueries:
    """Tests for listings on the shared sample library (page_size=2)."""

    def test_paged_listing(self, controller):
        assert controller.page_count().value == 3
        assert len(controller.list_books(page=1).value) == 2
        assert len(controller.list_books(page=3).value) == 1
        assert controller.list_books(page=4).value == []
        assert controller.list_books(page=0).error_code is ErrorCode.E201

    def test_page_count_of_empty_library(self, controller, reader):
        assert controller.page_count().value == 1

    def test_search_and_filter(self, controller):
        assert [b.title for b in controller.search("pragmatic").value] == ["The Pragmatic Programmer"]
        filtered = controller.filter_books(BookFilters(status=ReadingStatus.READ))
        assert [b.title for b in filtered.value] == ["Clean Code"]

    def test_reports(self, controller):
        assert controller.statistics().value.total_books == 5
        assert controller.genres().value == ["Programming"]
        assert "Gang of Four" in controller.authors().value
        assert len(controller.top_rated().value) == 4
        assert len(controller.top_rated(1).value) == 1
        assert len(controller.recently_added().value) == 5


class TestBackgroundWork:
    """Tests for controller.submit."""

    def test_submit_runs_on_worker(self, controller, events):
        done = threading.Event()
        outcomes = []

        def callback(outcome):
            outcomes.append(outcome)
            done.set()

        future = controller.submit("count", controller.books.count, callback=callback)
        assert future.result(timeout=5).value == 5
        assert done.wait(timeout=5)
        assert outcomes[0].succeeded

        states = [e.state for e in events if e.event_type == EventType.STATE]
        assert states == [SessionState.RUNNING, SessionState.COMPLETED]

    def test_submit_failure_emits_failed(self, controller, events):
        def boom():
            raise RuntimeError("broken")

        future = controller.submit("boom", boom)
        with pytest.raises(RuntimeError):
            future.result(timeout=5)

        failed = [e for e in events if e.event_type == EventType.STATE and e.state == SessionState.FAILED]
        assert failed[0].subject == "boom"
        assert "broken" in failed[0].message

    def test_shutdown_closes_dispatcher(self, tmp_path):
        ctrl = AppController(AppConfig(data_dir=tmp_path, db_path=tmp_path / "x.db"))
        ctrl.submit("noop", lambda: None).result(timeout=5)
        ctrl.shutdown()
        assert ctrl.dispatcher.closed
