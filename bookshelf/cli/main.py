"""
Bookshelf CLI
=============
Terminal-first command surface for the book catalog.
"""

from __future__ import annotations

import argparse
import getpass
import os
import sys
from typing import Callable, Mapping, Optional, TextIO

from bookshelf.app.config import AppConfig
from bookshelf.app.controller import AppController
from bookshelf.app.log import configure_logging
from bookshelf.errors import BookshelfError, BookValidationError
from bookshelf.storage.models import GENRE_OPTIONS, Book, BookFilters, ReadingStatus, StorageResult


def build_parser() -> argparse.ArgumentParser:
    """Create the root CLI parser."""
    parser = argparse.ArgumentParser(prog="bookshelf", description="Bookshelf catalog CLI")
    parser.add_argument("--db", help="SQLite database path (default: data/bookshelf.db)")
    parser.add_argument("--user", help="Username (or BOOKSHELF_USER)")
    parser.add_argument("--password", help="Password (or BOOKSHELF_PASSWORD)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # accounts
    register_parser = subparsers.add_parser("register", help="Create an account")
    register_parser.add_argument("username", help="New username")
    register_parser.set_defaults(handler=handle_register, needs_login=False)

    login_parser = subparsers.add_parser("login", help="Check --user/--password credentials")
    login_parser.set_defaults(handler=handle_login)

    # books
    list_parser = subparsers.add_parser("list", help="List books, newest first")
    list_parser.add_argument("--page", type=int, help="Show one page instead of everything")
    list_parser.set_defaults(handler=handle_list)

    show_parser = subparsers.add_parser("show", help="Show one book")
    show_parser.add_argument("book_id", type=int)
    show_parser.set_defaults(handler=handle_show)

    add_parser = subparsers.add_parser("add", help="Add a book")
    _add_book_arguments(add_parser)
    add_parser.set_defaults(handler=handle_add)

    edit_parser = subparsers.add_parser("edit", help="Change fields of a book")
    edit_parser.add_argument("book_id", type=int)
    _add_book_arguments(edit_parser)
    edit_parser.set_defaults(handler=handle_edit)

    delete_parser = subparsers.add_parser("delete", help="Delete a book")
    delete_parser.add_argument("book_id", type=int)
    delete_parser.set_defaults(handler=handle_delete)

    search_parser = subparsers.add_parser("search", help="Search title, author and ISBN")
    search_parser.add_argument("term")
    search_parser.set_defaults(handler=handle_search)

    filter_parser = subparsers.add_parser("filter", help="Combine search filters")
    filter_parser.add_argument("--term", help="Text in title, author or ISBN")
    filter_parser.add_argument("--genre", help="Exact genre")
    filter_parser.add_argument("--status", help=f"One of: {', '.join(ReadingStatus.options())}")
    filter_parser.add_argument("--min-rating", type=float, help="Minimum rating (inclusive)")
    filter_parser.set_defaults(handler=handle_filter)

    rate_parser = subparsers.add_parser("rate", help="Set the rating of a book")
    rate_parser.add_argument("book_id", type=int)
    rate_parser.add_argument("rating", type=float)
    rate_parser.set_defaults(handler=handle_rate)

    status_parser = subparsers.add_parser("status", help="Set the reading status of a book")
    status_parser.add_argument("book_id", type=int)
    status_parser.add_argument("status")
    status_parser.set_defaults(handler=handle_status)

    # reports
    stats_parser = subparsers.add_parser("stats", help="Reading statistics")
    stats_parser.set_defaults(handler=handle_stats)

    genres_parser = subparsers.add_parser("genres", help="Genres in use")
    genres_parser.set_defaults(handler=handle_genres)

    authors_parser = subparsers.add_parser("authors", help="Authors in use")
    authors_parser.set_defaults(handler=handle_authors)

    top_parser = subparsers.add_parser("top", help="Top rated books")
    top_parser.add_argument("--limit", type=int, help="Number of books (default: 5)")
    top_parser.set_defaults(handler=handle_top)

    recent_parser = subparsers.add_parser("recent", help="Recently added books")
    recent_parser.add_argument("--limit", type=int, help="Number of books (default: 5)")
    recent_parser.set_defaults(handler=handle_recent)

    return parser


def _add_book_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--title")
    parser.add_argument("--author")
    parser.add_argument("--isbn")
    parser.add_argument("--genre", help=f"Suggested: {', '.join(GENRE_OPTIONS)}")
    parser.add_argument("--year", type=int, dest="publication_year")
    parser.add_argument("--pages", type=int)
    parser.add_argument("--description")
    parser.add_argument("--rating", type=float)
    parser.add_argument("--status", help=f"One of: {', '.join(ReadingStatus.options())}")


_BOOK_FIELDS = (
    "title", "author", "isbn", "genre", "publication_year",
    "pages", "description", "rating", "status",
)


def _book_changes(args: argparse.Namespace) -> dict:
    return {name: getattr(args, name) for name in _BOOK_FIELDS if getattr(args, name) is not None}


def _print(msg: str, out: TextIO) -> None:
    out.write(msg + "\n")
    out.flush()


def _fail(result: StorageResult, out: TextIO) -> int:
    if isinstance(result.error, BookValidationError):
        _print("error: book is not valid", out)
        for problem in result.error.problems:
            _print(f"  - {problem}", out)
    else:
        _print(f"error: {result.message}", out)
    return 1


def _format_book(book: Book) -> str:
    return (
        f"- [{book.id}] {book.title} by {book.author} ({book.publication_year}) "
        f"| {book.status_label} | {book.rating_stars()} {book.rating:.1f}"
    )


def _print_books(result: StorageResult, out: TextIO, empty: str = "no books found") -> int:
    if not result:
        return _fail(result, out)
    if not result.value:
        _print(empty, out)
        return 0
    for book in result.value:
        _print(_format_book(book), out)
    return 0


def _print_names(result: StorageResult, out: TextIO) -> int:
    if not result:
        return _fail(result, out)
    if not result.value:
        _print("none", out)
    for name in result.value:
        _print(f"- {name}", out)
    return 0


# ==================== Accounts ====================

def handle_register(args: argparse.Namespace, controller: AppController, out: TextIO) -> int:
    """Create an account from USERNAME and --password (prompted if missing)."""
    password = args.password or getpass.getpass("Password: ")
    result = controller.register(args.username, password)
    if not result:
        return _fail(result, out)
    _print(f"registered {result.value.username} (id {result.value.id})", out)
    return 0


def handle_login(args: argparse.Namespace, controller: AppController, out: TextIO) -> int:
    """Verify credentials; main() has already logged in when --user is set."""
    if not controller.is_logged_in:
        _print("error: --user and --password are required", out)
        return 1
    count = controller.books.count()
    _print(f"logged in as {controller.current_user.username} ({count.value_or(0)} books)", out)
    return 0


# ==================== Books ====================

def handle_list(args: argparse.Namespace, controller: AppController, out: TextIO) -> int:
    """List books, optionally one page at a time."""
    result = controller.list_books(page=args.page)
    if result and args.page is not None:
        pages = controller.page_count()
        if not pages:
            return _fail(pages, out)
        _print(f"page {args.page}/{pages.value}", out)
    return _print_books(result, out)


def handle_show(args: argparse.Namespace, controller: AppController, out: TextIO) -> int:
    """Print every field of one book."""
    result = controller.get_book(args.book_id)
    if not result:
        return _fail(result, out)

    book = result.value
    _print(f"[{book.id}] {book.title}", out)
    _print(f"author: {book.author}", out)
    _print(f"isbn: {book.isbn or '-'}", out)
    _print(f"genre: {book.genre or '-'}", out)
    _print(f"year: {book.publication_year}", out)
    _print(f"pages: {book.pages}", out)
    _print(f"status: {book.status_label}", out)
    _print(f"rating: {book.rating_stars()} {book.rating:.1f}", out)
    _print(f"added: {book.date_added:%Y-%m-%d %H:%M}", out)
    _print(f"updated: {book.date_updated:%Y-%m-%d %H:%M}", out)
    _print(f"description: {book.short_description()}", out)
    return 0


def handle_add(args: argparse.Namespace, controller: AppController, out: TextIO) -> int:
    """Validate and add a book."""
    book = Book()
    book.apply(**_book_changes(args))
    result = controller.add_book(book)
    if not result:
        return _fail(result, out)
    _print(f"added [{book.id}] {book.title}", out)
    return 0


def handle_edit(args: argparse.Namespace, controller: AppController, out: TextIO) -> int:
    """Change the given fields of a book."""
    changes = _book_changes(args)
    if not changes:
        _print("error: nothing to change", out)
        return 1
    result = controller.update_fields(args.book_id, **changes)
    if not result:
        return _fail(result, out)
    _print(f"updated [{result.value.id}] {result.value.title}", out)
    return 0


def handle_delete(args: argparse.Namespace, controller: AppController, out: TextIO) -> int:
    result = controller.delete_book(args.book_id)
    if not result:
        return _fail(result, out)
    _print(f"deleted book {args.book_id}", out)
    return 0


def handle_search(args: argparse.Namespace, controller: AppController, out: TextIO) -> int:
    return _print_books(controller.search(args.term), out)


def handle_filter(args: argparse.Namespace, controller: AppController, out: TextIO) -> int:
    filters = BookFilters(
        search_term=args.term,
        genre=args.genre,
        status=args.status,
        min_rating=args.min_rating,
    )
    return _print_books(controller.filter_books(filters), out)


def handle_rate(args: argparse.Namespace, controller: AppController, out: TextIO) -> int:
    result = controller.rate_book(args.book_id, args.rating)
    if not result:
        return _fail(result, out)
    _print(f"rated [{result.value.id}] {result.value.title}: {result.value.rating:.1f}", out)
    return 0


def handle_status(args: argparse.Namespace, controller: AppController, out: TextIO) -> int:
    result = controller.set_status(args.book_id, args.status)
    if not result:
        return _fail(result, out)
    _print(f"[{result.value.id}] {result.value.title}: {result.value.status_label}", out)
    return 0


# ==================== Reports ====================

def handle_stats(args: argparse.Namespace, controller: AppController, out: TextIO) -> int:
    result = controller.statistics()
    if not result:
        return _fail(result, out)
    _print(result.value.report(), out)
    return 0


def handle_genres(args: argparse.Namespace, controller: AppController, out: TextIO) -> int:
    return _print_names(controller.genres(), out)


def handle_authors(args: argparse.Namespace, controller: AppController, out: TextIO) -> int:
    return _print_names(controller.authors(), out)


def handle_top(args: argparse.Namespace, controller: AppController, out: TextIO) -> int:
    return _print_books(controller.top_rated(args.limit), out, empty="no rated books")


def handle_recent(args: argparse.Namespace, controller: AppController, out: TextIO) -> int:
    return _print_books(controller.recently_added(args.limit), out)


def main(
    argv: Optional[list[str]] = None,
    controller_factory: Callable[[AppConfig], AppController] = AppController,
    out: TextIO = sys.stdout,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """
    CLI entrypoint.

    Args:
        argv: Optional argv override for testing.
        controller_factory: Dependency-injection hook for tests.
        out: Output stream.
        environ: Environment override for testing.

    Returns:
        Process exit code.
    """
    env = os.environ if environ is None else environ
    parser = build_parser()
    args = parser.parse_args(argv)

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help(file=out)
        return 2

    config = AppConfig.from_env(env, db_path=args.db)
    try:
        controller = controller_factory(config)
    except BookshelfError as e:
        _print(f"error: {e}", out)
        return 1

    args.user = args.user or env.get("BOOKSHELF_USER")
    args.password = args.password or env.get("BOOKSHELF_PASSWORD")

    try:
        if args.user and getattr(args, "needs_login", True):
            login = controller.login(args.user, args.password or "")
            if not login:
                return _fail(login, out)
        return int(handler(args, controller, out))
    finally:
        controller.shutdown()


def cli() -> int:
    """Console-script entrypoint: configure logging from the environment, then run."""
    config = AppConfig.from_env()
    configure_logging(config.log_level, config.log_file)
    return main()


if __name__ == "__main__":
    raise SystemExit(cli())
