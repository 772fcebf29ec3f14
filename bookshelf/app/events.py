"""
Application Event Contracts
===========================
Typed events for log/state updates across CLI and TUI surfaces.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Union


class EventType(str, Enum):
    """High-level event categories."""

    LOG = "log"
    STATE = "state"


class SessionState(str, Enum):
    """Session and background task states."""

    LOGGED_IN = "logged_in"
    LOGGED_OUT = "logged_out"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class LogEvent:
    """Log message emitted from the controller."""

    event_type: EventType
    timestamp: str
    level: str
    message: str


@dataclass(frozen=True)
class StateEvent:
    """State transition for the session or a background task."""

    event_type: EventType
    timestamp: str
    state: SessionState
    subject: str
    message: str = ""


AppEvent = Union[LogEvent, StateEvent]


def make_log_event(message: str, level: str = "info") -> LogEvent:
    """Create a normalized log event."""
    return LogEvent(
        event_type=EventType.LOG,
        timestamp=_now_iso(),
        level=level.lower(),
        message=message,
    )


def make_state_event(state: SessionState, subject: str, message: str = "") -> StateEvent:
    """Create a normalized state event."""
    return StateEvent(
        event_type=EventType.STATE,
        timestamp=_now_iso(),
        state=state,
        subject=subject,
        message=message,
    )
