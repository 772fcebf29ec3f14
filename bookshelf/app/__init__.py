"""
Application Module
==================
Core application controller and business logic.

Key Components:
    - AppController: Session handling and validated book flows
    - AppConfig: Application configuration
    - configure_logging: Root logger setup for the launchers
"""

from .config import AppConfig
from .controller import AppController
from .log import configure_logging
from .events import (
    AppEvent,
    EventType,
    LogEvent,
    SessionState,
    StateEvent,
)

__all__ = [
    "AppConfig",
    "AppController",
    "configure_logging",
    "AppEvent",
    "EventType",
    "LogEvent",
    "SessionState",
    "StateEvent",
]
