"""Registry and state machine for progress sessions."""

import asyncio
import inspect
import logging
import secrets
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Optional, TypeVar, Union

from progress_indicator.protocols import ClockProtocol, RendererProtocol
from progress_indicator.types import (
    Session,
    SessionConfig,
    SessionUpdate,
    clamp_progress,
    is_duration_value,
    is_progress_value,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_NOTIFICATION_DURATION_MS = 3000


class SessionRegistry:
    """Owns every active progress session and its rendered representation.

    Callers only reference sessions by id. Operations on ids that are not
    active are no-ops, and malformed options fall back to defaults, so a
    progress indicator never becomes a failure source for its caller.

    Usage:
        registry = SessionRegistry(renderer)

        registry.show("scan", title="Scanning", phases=["find", "read"])
        registry.update("scan", progress=40, phase=1, show_elapsed=True)
        registry.hide("scan")

        result = await registry.track_operation(load_songs(), title="Loading")

        registry.dispose()
    """

    def __init__(
        self,
        renderer: RendererProtocol,
        defaults: Optional[SessionConfig] = None,
        notification_duration_ms: int = DEFAULT_NOTIFICATION_DURATION_MS,
        clock: ClockProtocol = time.monotonic,
    ):
        """Initialize SessionRegistry.

        Args:
            renderer: Renderer that materializes sessions.
            defaults: Default session options (class defaults if None).
            notification_duration_ms: Default display time for notifications.
            clock: Monotonic clock in seconds, used for elapsed time.
        """
        self._renderer = renderer
        self._defaults = defaults or SessionConfig()
        if not is_duration_value(notification_duration_ms):
            notification_duration_ms = DEFAULT_NOTIFICATION_DURATION_MS
        self._notification_duration_ms = notification_duration_ms
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._generation = 0

        self._renderer.set_cancel_handler(self.handle_cancel)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def show(self, session_id: str, **options: Any) -> str:
        """Create a session, replacing any active session with the same id.

        Args:
            session_id: Registry key.
            **options: Session options, see SessionConfig.

        Returns:
            The session id.
        """
        self.hide(session_id)

        config = SessionConfig.from_options(options, self._defaults)
        self._generation += 1
        session = Session.create(
            session_id, config, self._clock(), self._generation
        )
        session.handle = self._renderer.materialize(session_id, config)
        self._sessions[session_id] = session

        logger.debug(
            "Session shown: id=%s, title=%r, determinate=%s, phases=%d",
            session_id,
            config.title,
            config.show_progress,
            len(session.phases),
        )
        return session_id

    def update(
        self,
        session_id: str,
        *,
        message: Optional[str] = None,
        details: Optional[str] = None,
        progress: Optional[float] = None,
        phase: Optional[int] = None,
        show_elapsed: bool = False,
    ) -> None:
        """Apply a partial update to an active session.

        Args:
            session_id: Session to update. Unknown ids are ignored.
            message: New message line.
            details: New details line.
            progress: Percentage, clamped to [0, 100]. Leaves spinner mode.
            phase: Index of the active phase. Out-of-range values are ignored.
            show_elapsed: Replace details with the elapsed time.
        """
        session = self._sessions.get(session_id)
        if session is None:
            return

        new_message = None
        if message is not None:
            new_message = session.message = str(message)

        new_details = None
        if show_elapsed:
            seconds = session.elapsed_seconds(self._clock())
            new_details = session.details = f"Elapsed: {seconds}s"
        elif details is not None:
            new_details = session.details = str(details)

        new_progress = None
        if progress is not None:
            if is_progress_value(progress):
                new_progress = session.current_progress = clamp_progress(progress)
                session.indeterminate = False
            else:
                logger.debug("Ignoring invalid progress for %s: %r", session_id, progress)

        new_phase = None
        statuses = None
        if phase is not None and session.phases:
            if self._is_valid_phase(session, phase):
                new_phase = session.current_phase = phase
                statuses = session.phase_statuses()
            else:
                logger.debug(
                    "Ignoring phase %r for %s (%d phases)",
                    phase,
                    session_id,
                    len(session.phases),
                )

        update = SessionUpdate(
            message=new_message,
            details=new_details,
            progress=new_progress,
            phase=new_phase,
            phase_statuses=statuses,
        )
        if not update.is_empty:
            self._renderer.apply_update(session.handle, update)

    def set_indeterminate(self, session_id: str) -> None:
        """Switch an active session to spinner mode.

        The current progress is kept but not shown until the next
        progress update.
        """
        session = self._sessions.get(session_id)
        if session is None:
            return

        session.indeterminate = True
        self._renderer.apply_spinner_mode(session.handle)

    def hide(self, session_id: str) -> None:
        """Destroy a session and its representation. Idempotent."""
        timer = self._timers.pop(session_id, None)
        if timer is not None:
            timer.cancel()

        session = self._sessions.pop(session_id, None)
        if session is None:
            return

        self._renderer.destroy(session.handle)
        logger.debug("Session hidden: id=%s", session_id)

    def hide_all(self) -> None:
        """Hide every session active at the time of the call."""
        for session_id in list(self._sessions):
            self.hide(session_id)

    def is_active(self, session_id: str) -> bool:
        return session_id in self._sessions

    def get_active_ids(self) -> list[str]:
        """Active session ids in creation order."""
        return list(self._sessions)

    def get(self, session_id: str) -> Optional[Session]:
        """Get the session state by id, or None if not active."""
        return self._sessions.get(session_id)

    def dispose(self) -> None:
        """Hide all sessions and detach from the renderer."""
        self.hide_all()
        self._renderer.set_cancel_handler(None)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    def handle_cancel(self, session_id: str) -> None:
        """React to the user activating a session's cancel affordance.

        Fires the session's on_cancel callback, then hides the session.
        Cancellation is advisory: the tracked work itself is untouched.
        """
        session = self._sessions.get(session_id)
        if session is None or not session.cancellable:
            return

        callback = session.config.on_cancel
        try:
            if callback is not None:
                result = callback()
                if inspect.isawaitable(result):
                    self._schedule_callback(session_id, result)
        except Exception:
            logger.exception("on_cancel callback failed for session %s", session_id)
        finally:
            self.hide(session_id)

        logger.info("Session cancelled: id=%s", session_id)

    def _schedule_callback(self, session_id: str, awaitable: Awaitable[Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(
                "No running loop for async on_cancel of session %s", session_id
            )
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return

        async def _run() -> None:
            try:
                await awaitable
            except Exception:
                logger.exception(
                    "on_cancel callback failed for session %s", session_id
                )

        loop.create_task(_run())

    # ------------------------------------------------------------------
    # Convenience wrappers
    # ------------------------------------------------------------------

    def show_notification(
        self, message: str, duration_ms: Optional[int] = None
    ) -> str:
        """Show a compact, non-cancellable session that hides itself.

        Must be called from a running event loop.

        Args:
            message: Text to show.
            duration_ms: Display time (registry default if None).

        Returns:
            Generated session id.
        """
        loop = asyncio.get_running_loop()
        if duration_ms is None:
            duration_ms = self._notification_duration_ms
        elif not is_duration_value(duration_ms):
            logger.debug(
                "Invalid notification duration %r, using %dms",
                duration_ms,
                self._notification_duration_ms,
            )
            duration_ms = self._notification_duration_ms

        session_id = self._new_id("notification")
        self.show(
            session_id,
            title="",
            message=message,
            show_progress=False,
            compact=True,
            cancellable=False,
        )

        generation = self._sessions[session_id].generation
        self._timers[session_id] = loop.call_later(
            max(0, duration_ms) / 1000,
            self._expire,
            session_id,
            generation,
        )
        return session_id

    def _expire(self, session_id: str, generation: int) -> None:
        session = self._sessions.get(session_id)
        if session is None or session.generation != generation:
            # Hidden early or replaced by a newer session with the same id
            return
        self.hide(session_id)

    async def track_operation(
        self,
        operation: Union[Awaitable[T], Callable[[], Awaitable[T]]],
        **options: Any,
    ) -> T:
        """Show an indeterminate session while an operation runs.

        The session is hidden before the result is returned or the
        operation's exception is re-raised unchanged.

        Args:
            operation: Awaitable, or a callable returning one.
            **options: Session options; show_progress is always False.

        Returns:
            The operation's result.
        """
        async with self.tracking(**options):
            awaitable = operation() if callable(operation) else operation
            return await awaitable

    @asynccontextmanager
    async def tracking(self, **options: Any) -> AsyncIterator[str]:
        """Async context manager keeping a session visible for its body.

        Yields the generated session id. Exceptions are never suppressed.
        """
        options = {**options, "show_progress": False}
        session_id = self.show(self._new_id("operation"), **options)
        try:
            yield session_id
        finally:
            self.hide(session_id)

    def _new_id(self, prefix: str) -> str:
        while True:
            session_id = f"{prefix}-{secrets.token_hex(4)}"
            if session_id not in self._sessions:
                return session_id

    @staticmethod
    def _is_valid_phase(session: Session, phase: Any) -> bool:
        if isinstance(phase, bool) or not isinstance(phase, int):
            return False
        return 0 <= phase < len(session.phases)
