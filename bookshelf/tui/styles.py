"""
Centralized Textual CSS for the terminal UI.
"""

from bookshelf.tui.theme import (
    BLACK,
    CHARCOAL_GRAY,
    CORAL_PINK,
    DARK_GRAY,
    OFF_WHITE,
    ORANGE,
    TEAL_GREEN,
)


APP_CSS = """
Screen {
    background: %(BLACK)s;
    color: %(OFF_WHITE)s;
}
#root {
    height: 1fr;
    layout: vertical;
    background: %(DARK_GRAY)s;
}
#actions {
    height: auto;
    border: heavy %(ORANGE)s;
    margin: 1 1 0 1;
    padding: 0 1;
    background: %(CHARCOAL_GRAY)s;
}
#filters {
    height: auto;
    margin: 0 1;
}
#search-input {
    width: 1fr;
}
#genre-filter, #status-filter {
    width: 28;
}
#panes {
    height: 1fr;
    margin: 0 1 1 1;
}
#library-pane, #side-pane {
    border: solid %(ORANGE)s;
    background: %(CHARCOAL_GRAY)s;
    padding: 0 1;
}
#library-pane {
    width: 1fr;
    margin-right: 1;
}
#side-pane {
    width: 48;
}
#book-table {
    height: 1fr;
}
#book-detail {
    height: auto;
    margin-bottom: 1;
}
#stats-text {
    color: %(TEAL_GREEN)s;
    height: auto;
    margin-bottom: 1;
}
#log-view {
    height: 1fr;
}
#user-text {
    color: %(TEAL_GREEN)s;
}
.label {
    color: %(ORANGE)s;
    text-style: bold;
}
Button {
    background: %(BLACK)s;
    color: %(OFF_WHITE)s;
    border: solid %(ORANGE)s;
    margin-right: 1;
}
Button.-primary {
    color: %(BLACK)s;
    background: %(ORANGE)s;
}
Button#delete, Button#logout {
    border: solid %(CORAL_PINK)s;
    color: %(CORAL_PINK)s;
}
""" % {
    "BLACK": BLACK,
    "DARK_GRAY": DARK_GRAY,
    "CHARCOAL_GRAY": CHARCOAL_GRAY,
    "ORANGE": ORANGE,
    "TEAL_GREEN": TEAL_GREEN,
    "CORAL_PINK": CORAL_PINK,
    "OFF_WHITE": OFF_WHITE,
}


BOOK_FORM_CSS = """
BookFormModal {
    align: center middle;
    background: %(BLACK)s;
}
#form-root {
    width: 90;
    height: 95%%;
    border: heavy %(ORANGE)s;
    background: %(CHARCOAL_GRAY)s;
    padding: 1 2;
    layout: vertical;
}
#form-content {
    height: 1fr;
    overflow-y: auto;
}
#form-title {
    color: %(ORANGE)s;
    text-style: bold;
    margin-bottom: 1;
}
.field {
    margin-bottom: 1;
}
.field-label {
    color: %(OFF_WHITE)s;
}
#form-error {
    color: %(CORAL_PINK)s;
    margin-top: 1;
    height: auto;
}
#form-actions {
    dock: bottom;
    margin-top: 1;
    height: auto;
}
Button {
    margin-right: 1;
    color: %(OFF_WHITE)s;
    border: solid %(ORANGE)s;
    background: %(BLACK)s;
}
Button.-primary {
    color: %(BLACK)s;
    background: %(ORANGE)s;
}
""" % {
    "BLACK": BLACK,
    "CHARCOAL_GRAY": CHARCOAL_GRAY,
    "CORAL_PINK": CORAL_PINK,
    "OFF_WHITE": OFF_WHITE,
    "ORANGE": ORANGE,
}
