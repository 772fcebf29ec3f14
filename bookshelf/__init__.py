"""
Bookshelf
=========
Personal book catalog backed by SQLite, with a CLI and a Textual TUI.
"""

__version__ = "1.0.0"
