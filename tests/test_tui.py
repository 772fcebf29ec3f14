"""
Test TUI Launcher Module
========================
Script-style tests for the terminal TUI launcher.
"""

import io
import os
import sys
import tempfile
import types
from pathlib import Path
from unittest.mock import patch

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import bookshelf_tui
from bookshelf.errors import StorageUnavailableError


def test_tui() -> bool:
    print("\n" + "=" * 50)
    print("TUI TEST SUITE")
    print("=" * 50 + "\n")

    # Test parser defaults
    parser = bookshelf_tui.build_parser()
    args = parser.parse_args([])
    assert args.db is None
    assert args.user == ""
    assert args.log_file == Path("data/bookshelf-tui.log")
    print("✓ parser default args")

    # Test parser custom args
    args = parser.parse_args(["--db", "books.db", "--user", "reader", "--log-file", "tui.log"])
    assert args.db == Path("books.db")
    assert args.user == "reader"
    assert args.log_file == Path("tui.log")
    print("✓ parser custom args")

    # Test missing textual dependency path
    stderr = io.StringIO()
    original_import = __import__

    def fake_import(name, globals=None, locals=None, fromlist=(), level=0):  # noqa: A002
        if name == "bookshelf.tui.app":
            raise ImportError("missing textual")
        return original_import(name, globals, locals, fromlist, level)

    with patch("builtins.__import__", side_effect=fake_import):
        with patch("sys.stderr", stderr):
            code = bookshelf_tui.main([])
    assert code == 1
    assert "Textual is not installed" in stderr.getvalue()
    print("✓ import error handling")

    # Test successful run path with fake app module
    fake_module = types.ModuleType("bookshelf.tui.app")
    state = {"ran": False, "options": None, "logging": None}

    class LaunchOptions:
        def __init__(self, db_path=None, username=""):
            self.db_path = db_path
            self.username = username

    class BookshelfTUI:
        def __init__(self, options):
            state["options"] = options

        def run(self):
            state["ran"] = True

    def fake_configure_logging(level, log_file=None):
        state["logging"] = (level, log_file)

    fake_module.LaunchOptions = LaunchOptions
    fake_module.BookshelfTUI = BookshelfTUI

    with tempfile.TemporaryDirectory() as tmp:
        db = Path(tmp) / "library.db"
        env = {"BOOKSHELF_DATA_DIR": tmp, "BOOKSHELF_LOG_LEVEL": "info"}

        with patch.dict(sys.modules, {"bookshelf.tui.app": fake_module}), \
                patch.dict(os.environ, env), \
                patch("bookshelf.app.configure_logging", fake_configure_logging):
            code = bookshelf_tui.main(["--db", str(db), "--user", "reader", "--log-file", str(Path(tmp) / "t.log")])

    assert code == 0
    assert state["ran"] is True
    assert state["options"].db_path == db.resolve()
    assert state["options"].username == "reader"
    assert state["logging"][0] == "INFO"
    assert state["logging"][1].name == "t.log"
    print("✓ launcher runs app with options")

    # Test database that cannot be opened
    class UnopenableTUI:
        def __init__(self, options):
            raise StorageUnavailableError("Could not open database", details="unable to open database file")

        def run(self):
            state["ran_unopenable"] = True

    broken_module = types.ModuleType("bookshelf.tui.app")
    broken_module.LaunchOptions = LaunchOptions
    broken_module.BookshelfTUI = UnopenableTUI
    stderr = io.StringIO()

    with tempfile.TemporaryDirectory() as tmp:
        env = {"BOOKSHELF_DATA_DIR": tmp}
        with patch.dict(sys.modules, {"bookshelf.tui.app": broken_module}), \
                patch.dict(os.environ, env), \
                patch("bookshelf.app.configure_logging", fake_configure_logging), \
                patch("sys.stderr", stderr):
            code = bookshelf_tui.main(["--db", tmp])

    assert code == 1
    assert "error: [E100]" in stderr.getvalue()
    assert "ran_unopenable" not in state
    print("✓ unopenable database exits with an error message")

    print("\n" + "=" * 50)
    print("ALL TUI TESTS PASSED ✓")
    print("=" * 50 + "\n")
    return True


if __name__ == "__main__":
    success = test_tui()
    sys.exit(0 if success else 1)
