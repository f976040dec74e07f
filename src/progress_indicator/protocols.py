"""Protocols for progress-indicator collaborators."""

from typing import Any, Callable, Protocol

from progress_indicator.types import SessionConfig, SessionUpdate

# Called by a renderer with the session id when the user activates the
# cancel affordance.
CancelHandler = Callable[[str], None]


class ClockProtocol(Protocol):
    """Protocol for a monotonic clock returning seconds (DI for testing)."""

    def __call__(self) -> float:
        ...


class RendererProtocol(Protocol):
    """Protocol for the visual side of a progress session.

    The registry calls these synchronously on every lifecycle transition.
    Implementations decide what a "handle" is (element state, widget,
    terminal line); the registry only stores and passes it back.
    """

    def materialize(self, session_id: str, config: SessionConfig) -> Any:
        """Create the visual representation for a session.

        Args:
            session_id: Registry key of the session.
            config: Normalized display options.

        Returns:
            Opaque handle passed back to the other methods.
        """
        ...

    def apply_update(self, handle: Any, update: SessionUpdate) -> None:
        """Apply a normalized patch. Fields that are None are unchanged."""
        ...

    def apply_spinner_mode(self, handle: Any) -> None:
        """Switch to indeterminate display and hide the percentage."""
        ...

    def destroy(self, handle: Any) -> None:
        """Remove the visual representation."""
        ...

    def set_cancel_handler(self, handler: CancelHandler | None) -> None:
        """Register the callback fired when the user asks to cancel."""
        ...
