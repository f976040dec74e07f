"""Pytest configuration and shared fixtures."""

from dataclasses import dataclass, field
from typing import Any

import pytest

from progress_indicator.registry import SessionRegistry
from progress_indicator.types import SessionConfig, SessionUpdate


@pytest.fixture(autouse=True)
def reset_logging_state():
    """Reset logging state before each test."""
    from progress_indicator.logging import reset_logging

    reset_logging()
    yield
    reset_logging()


@dataclass
class RecordedHandle:
    """Handle returned by RecordingRenderer."""

    session_id: str
    config: SessionConfig
    updates: list[SessionUpdate] = field(default_factory=list)
    spinner_calls: int = 0
    destroyed: bool = False


class RecordingRenderer:
    """Renderer that records every call for assertions."""

    def __init__(self):
        self.handles: list[RecordedHandle] = []
        self.calls: list[tuple[str, Any]] = []
        self.cancel_handler = None

    def set_cancel_handler(self, handler):
        self.cancel_handler = handler

    def materialize(self, session_id, config):
        handle = RecordedHandle(session_id=session_id, config=config)
        self.handles.append(handle)
        self.calls.append(("materialize", session_id))
        return handle

    def apply_update(self, handle, update):
        handle.updates.append(update)
        self.calls.append(("apply_update", handle.session_id))

    def apply_spinner_mode(self, handle):
        handle.spinner_calls += 1
        self.calls.append(("apply_spinner_mode", handle.session_id))

    def destroy(self, handle):
        handle.destroyed = True
        self.calls.append(("destroy", handle.session_id))

    def live(self, session_id: str) -> list[RecordedHandle]:
        """Handles for a session id that have not been destroyed."""
        return [
            h for h in self.handles if h.session_id == session_id and not h.destroyed
        ]

    def trigger_cancel(self, session_id: str) -> None:
        """Simulate the user pressing cancel."""
        self.cancel_handler(session_id)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def renderer():
    """Recording renderer."""
    return RecordingRenderer()


@pytest.fixture
def clock():
    """Fake clock for elapsed time."""
    return FakeClock()


@pytest.fixture
def registry(renderer, clock):
    """SessionRegistry wired to the recording renderer."""
    registry = SessionRegistry(renderer, clock=clock)
    yield registry
    registry.dispose()
