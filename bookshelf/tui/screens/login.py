"""
Login screen shown before the library opens.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from textual.app import ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Static

from bookshelf.tui.theme import BLACK, CHARCOAL_GRAY, CORAL_PINK, OFF_WHITE, ORANGE


@dataclass
class LoginRequest:
    username: str
    password: str
    register: bool = False


class LoginScreen(ModalScreen[Optional[LoginRequest]]):
    """Credential entry: log in, register a new account, or quit."""

    BINDINGS = [
        ("enter", "submit", "Login"),
        ("escape", "quit_app", "Quit"),
    ]

    CSS = f"""
    LoginScreen {{
        align: center middle;
        background: {BLACK};
    }}
    #login-root {{
        width: 64;
        height: auto;
        border: heavy {ORANGE};
        background: {CHARCOAL_GRAY};
        padding: 1 3;
    }}
    #login-title {{
        color: {OFF_WHITE};
        text-style: bold;
        margin-bottom: 1;
    }}
    #login-subtitle {{
        color: {ORANGE};
        margin-bottom: 1;
    }}
    Input {{
        margin-bottom: 1;
    }}
    #login-error {{
        color: {CORAL_PINK};
        height: auto;
        margin-bottom: 1;
    }}
    Button {{
        margin-right: 1;
        background: {BLACK};
        color: {OFF_WHITE};
        border: solid {ORANGE};
    }}
    Button.-primary {{
        background: {ORANGE};
        color: {BLACK};
        text-style: bold;
    }}
    """

    def __init__(self, username: str = "", error: str = "") -> None:
        super().__init__()
        self.initial_username = username
        self.initial_error = error

    def compose(self) -> ComposeResult:
        with Container(id="login-root"):
            with Vertical():
                yield Static("BOOKSHELF", id="login-title")
                yield Static("Log in to open your library", id="login-subtitle")
                yield Input(value=self.initial_username, placeholder="Username", id="username-input")
                yield Input(placeholder="Password", password=True, id="password-input")
                yield Static(self.initial_error, id="login-error")
                with Horizontal():
                    yield Button("Login", id="login", classes="-primary")
                    yield Button("Register", id="register")
                    yield Button("Quit", id="quit")

    def on_mount(self) -> None:
        target = "#password-input" if self.initial_username else "#username-input"
        self.query_one(target, Input).focus()

    def _set_error(self, message: str) -> None:
        self.query_one("#login-error", Static).update(message)

    def _submit(self, register: bool) -> None:
        username = self.query_one("#username-input", Input).value.strip()
        password = self.query_one("#password-input", Input).value
        if not username or not password:
            self._set_error("Username and password are required.")
            return
        self.dismiss(LoginRequest(username=username, password=password, register=register))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "username-input":
            self.query_one("#password-input", Input).focus()
            return
        self._submit(register=False)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "login":
            self._submit(register=False)
        elif event.button.id == "register":
            self._submit(register=True)
        elif event.button.id == "quit":
            self.dismiss(None)

    def action_submit(self) -> None:
        self._submit(register=False)

    def action_quit_app(self) -> None:
        self.dismiss(None)
