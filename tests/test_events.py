"""
Test App Events Module
======================
Unit tests for typed app event contracts.
"""

import sys
from dataclasses import FrozenInstanceError
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from bookshelf.app.events import (
    EventType,
    SessionState,
    make_log_event,
    make_state_event,
)


def test_events() -> bool:
    print("\n" + "=" * 50)
    print("APP EVENTS TEST SUITE")
    print("=" * 50 + "\n")

    # Log event level normalization
    log = make_log_event("library opened", "INFO")
    assert log.event_type == EventType.LOG
    assert log.level == "info"
    assert log.message == "library opened"
    print("✓ log event normalization")

    # State event creation
    state = make_state_event(SessionState.LOGGED_IN, "reader", "welcome")
    assert state.event_type == EventType.STATE
    assert state.state == SessionState.LOGGED_IN
    assert state.subject == "reader"
    assert state.message == "welcome"
    assert state.timestamp.endswith("+00:00")
    print("✓ state event creation")

    # Events are immutable
    try:
        state.subject = "someone else"
    except FrozenInstanceError:
        print("✓ events are frozen")
    else:
        raise AssertionError("state event should be frozen")

    print("\n" + "=" * 50)
    print("ALL APP EVENT TESTS PASSED ✓")
    print("=" * 50 + "\n")
    return True


if __name__ == "__main__":
    success = test_events()
    sys.exit(0 if success else 1)
