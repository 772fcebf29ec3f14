"""
TUI screens package.
"""

from bookshelf.tui.screens.book_form import BookFormModal, ConfirmDeleteModal
from bookshelf.tui.screens.dashboard import DashboardShell
from bookshelf.tui.screens.login import LoginRequest, LoginScreen

__all__ = ["BookFormModal", "ConfirmDeleteModal", "DashboardShell", "LoginRequest", "LoginScreen"]
