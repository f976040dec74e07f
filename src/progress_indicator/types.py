"""Session data types for the progress registry."""

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Processing..."
DEFAULT_MESSAGE = "Please wait..."


class PhaseStatus(Enum):
    """Display status of a single phase step."""

    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


def clamp_progress(value: float) -> float:
    """Clamp a progress value into [0, 100]."""
    return min(100.0, max(0.0, float(value)))


def is_progress_value(value: Any) -> bool:
    """Check that a value can be used as a progress percentage."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def is_duration_value(value: Any) -> bool:
    """Check that a value can be used as a finite duration."""
    return is_progress_value(value) and math.isfinite(value)


def _normalize_phases(value: Any) -> Optional[tuple[str, ...]]:
    if value is None or isinstance(value, (str, bytes)):
        return None
    if not isinstance(value, Sequence):
        return None
    phases = tuple(str(phase) for phase in value)
    return phases or None


@dataclass(frozen=True)
class SessionConfig:
    """Display options for one session.

    Built by ``from_options`` so that callers never get an error for
    malformed options; anything unusable falls back to the default.
    """

    title: str = DEFAULT_TITLE
    message: str = DEFAULT_MESSAGE
    show_progress: bool = True
    show_percentage: bool = True
    cancellable: bool = False
    compact: bool = False
    phases: Optional[tuple[str, ...]] = None
    on_cancel: Optional[Callable[[], Any]] = None

    @classmethod
    def from_options(
        cls,
        options: Optional[Mapping[str, Any]] = None,
        defaults: Optional["SessionConfig"] = None,
    ) -> "SessionConfig":
        """Normalize a mapping of options into a SessionConfig.

        Args:
            options: Caller-supplied options. Unknown keys are ignored.
            defaults: Base values. Uses the class defaults if None.

        Returns:
            New SessionConfig.
        """
        base = defaults or cls()
        options = options if isinstance(options, Mapping) else {}

        known = {f.name for f in fields(cls)}
        for key in options:
            if key not in known:
                logger.debug("Ignoring unknown session option: %s", key)

        def pick(name: str, expected: type) -> Any:
            value = options.get(name)
            if isinstance(value, expected):
                return value
            if value is not None:
                logger.debug(
                    "Invalid value for session option %s: %r", name, value
                )
            return getattr(base, name)

        on_cancel = options.get("on_cancel")
        if not callable(on_cancel):
            on_cancel = base.on_cancel

        phases = base.phases
        if "phases" in options:
            phases = _normalize_phases(options["phases"])

        return cls(
            title=pick("title", str),
            message=pick("message", str),
            show_progress=pick("show_progress", bool),
            show_percentage=pick("show_percentage", bool),
            cancellable=pick("cancellable", bool),
            compact=pick("compact", bool),
            phases=phases,
            on_cancel=on_cancel,
        )


@dataclass(frozen=True)
class SessionUpdate:
    """Normalized patch handed to the renderer. None means unchanged."""

    message: Optional[str] = None
    details: Optional[str] = None
    progress: Optional[float] = None
    phase: Optional[int] = None
    phase_statuses: Optional[tuple[PhaseStatus, ...]] = None

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))


@dataclass
class Session:
    """State of one visible progress indicator."""

    id: str
    config: SessionConfig
    start_time: float
    generation: int
    handle: Any = None
    title: str = ""
    message: str = ""
    details: str = ""
    current_progress: float = 0.0
    indeterminate: bool = False
    current_phase: Optional[int] = None

    @classmethod
    def create(
        cls, session_id: str, config: SessionConfig, start_time: float, generation: int
    ) -> "Session":
        """Create a session in its initial state for the given config."""
        return cls(
            id=session_id,
            config=config,
            start_time=start_time,
            generation=generation,
            title=config.title,
            message=config.message,
            indeterminate=not config.show_progress,
        )

    @property
    def phases(self) -> tuple[str, ...]:
        return self.config.phases or ()

    @property
    def show_progress(self) -> bool:
        return self.config.show_progress

    @property
    def show_percentage(self) -> bool:
        return self.config.show_percentage

    @property
    def cancellable(self) -> bool:
        return self.config.cancellable

    @property
    def compact(self) -> bool:
        return self.config.compact

    def elapsed_seconds(self, now: float) -> int:
        """Whole seconds since the session was created."""
        return max(0, math.floor(now - self.start_time))

    def phase_statuses(self) -> tuple[PhaseStatus, ...]:
        """Status of each phase relative to the current phase."""
        statuses = []
        for index in range(len(self.phases)):
            if self.current_phase is None or index > self.current_phase:
                statuses.append(PhaseStatus.PENDING)
            elif index == self.current_phase:
                statuses.append(PhaseStatus.ACTIVE)
            else:
                statuses.append(PhaseStatus.COMPLETED)
        return tuple(statuses)
