#!/usr/bin/env python3
"""
Bookshelf TUI launcher.

Usage:
    python bookshelf_tui.py
    python bookshelf_tui.py --db data/bookshelf.db --user reader
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bookshelf-tui", description="Bookshelf Textual TUI")
    parser.add_argument("--db", type=Path, help="SQLite database path (default: data/bookshelf.db)")
    parser.add_argument("--user", default="", help="Username to pre-fill on the login screen")
    parser.add_argument("--log-file", type=Path, default=Path("data/bookshelf-tui.log"),
                        help="Log file (default: data/bookshelf-tui.log)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        from bookshelf.tui.app import BookshelfTUI, LaunchOptions
    except ImportError:
        print("error: Textual is not installed. Run `pip install textual`.", file=sys.stderr)
        return 1

    from bookshelf.app import AppConfig, configure_logging
    from bookshelf.errors import BookshelfError

    config = AppConfig.from_env()
    configure_logging(config.log_level, config.log_file or args.log_file)

    options = LaunchOptions(
        db_path=args.db.resolve() if args.db else None,
        username=args.user,
    )
    try:
        app = BookshelfTUI(options=options)
    except BookshelfError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    app.run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
