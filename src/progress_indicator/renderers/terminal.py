"""Terminal renderer that prints a status line per session change."""

import itertools
from dataclasses import dataclass, field
from typing import IO, Optional

import click

from progress_indicator.errors import UnknownHandleError
from progress_indicator.protocols import CancelHandler
from progress_indicator.types import PhaseStatus, SessionConfig, SessionUpdate


SPINNER_FRAMES = "|/-\\"

PHASE_MARKERS = {
    PhaseStatus.COMPLETED: "✓",
    PhaseStatus.ACTIVE: "▶",
    PhaseStatus.PENDING: "·",
}


@dataclass
class TerminalLine:
    """Display state of one session on the terminal."""

    session_id: str
    config: SessionConfig
    message: str
    details: str = ""
    progress: float = 0.0
    indeterminate: bool = False
    phase_statuses: list[PhaseStatus] = field(default_factory=list)
    frames: itertools.cycle = field(
        default_factory=lambda: itertools.cycle(SPINNER_FRAMES), repr=False
    )


class TerminalRenderer:
    """Renderer that writes one line per session event.

    Line format:
        [scan] Scanning - Reading files [########------------] 40%
        [scan]   ✓ find  ▶ read  · tag
        [scan]   Elapsed: 3s

    Terminals have no clickable cancel button; the host calls
    interrupt() (the CLI wires it to Ctrl+C).
    """

    def __init__(
        self,
        file: Optional[IO[str]] = None,
        bar_width: int = 20,
        color: Optional[bool] = None,
    ):
        """Initialize TerminalRenderer.

        Args:
            file: Output stream (stdout if None).
            bar_width: Number of cells in the progress bar.
            color: Force color on/off; None lets click decide.
        """
        self._file = file
        self._bar_width = max(1, bar_width)
        self._color = color
        self._lines: dict[str, TerminalLine] = {}
        self._cancel_handler: CancelHandler | None = None

    def set_cancel_handler(self, handler: CancelHandler | None) -> None:
        self._cancel_handler = handler

    def materialize(self, session_id: str, config: SessionConfig) -> TerminalLine:
        line = TerminalLine(
            session_id=session_id,
            config=config,
            message=config.message,
            indeterminate=not config.show_progress,
            phase_statuses=[PhaseStatus.PENDING] * len(config.phases or ()),
        )
        self._lines[session_id] = line
        self._draw(line)
        if line.phase_statuses:
            self._draw_phases(line)
        return line

    def apply_update(self, handle: TerminalLine, update: SessionUpdate) -> None:
        line = self._require(handle)

        if update.message is not None:
            line.message = update.message
        if update.progress is not None:
            line.progress = update.progress
            line.indeterminate = False
        if update.phase_statuses is not None:
            line.phase_statuses = list(update.phase_statuses)
        if update.details is not None:
            line.details = update.details

        if update.message is not None or update.progress is not None:
            self._draw(line)
        if update.phase_statuses is not None:
            self._draw_phases(line)
        if update.details:
            self._echo(line, "  " + click.style(line.details, dim=True))

    def apply_spinner_mode(self, handle: TerminalLine) -> None:
        line = self._require(handle)
        line.indeterminate = True
        self._draw(line)

    def destroy(self, handle: TerminalLine) -> None:
        line = self._require(handle)
        del self._lines[line.session_id]
        self._echo(line, click.style("done", fg="green"))

    def interrupt(self, session_id: str) -> bool:
        """Report a cancel request for a session.

        Returns:
            True if the session is cancellable and a handler is set.
        """
        line = self._lines.get(session_id)
        if line is None or not line.config.cancellable:
            return False
        if self._cancel_handler is None:
            return False
        self._cancel_handler(session_id)
        return True

    def cancellable_ids(self) -> list[str]:
        """Ids of shown sessions that offer cancellation."""
        return [sid for sid, line in self._lines.items() if line.config.cancellable]

    def format_line(self, line: TerminalLine) -> str:
        """Format the main status line for a session (without the id prefix)."""
        head = line.message
        if line.config.title:
            head = f"{click.style(line.config.title, bold=True)} - {line.message}"

        if line.indeterminate or not line.config.show_progress:
            return f"{head} {next(line.frames)}"

        filled = round(self._bar_width * line.progress / 100)
        bar = "#" * filled + "-" * (self._bar_width - filled)
        text = f"{head} [{bar}]"
        if line.config.show_percentage:
            text += f" {round(line.progress)}%"
        return text

    def _draw(self, line: TerminalLine) -> None:
        self._echo(line, self.format_line(line))

    def _draw_phases(self, line: TerminalLine) -> None:
        steps = [
            f"{PHASE_MARKERS[status]} {label}"
            for label, status in zip(line.config.phases or (), line.phase_statuses)
        ]
        self._echo(line, "  " + "  ".join(steps))

    def _echo(self, line: TerminalLine, text: str) -> None:
        prefix = click.style(f"[{line.session_id}]", fg="cyan")
        click.echo(f"{prefix} {text}", file=self._file, color=self._color)

    def _require(self, handle: TerminalLine) -> TerminalLine:
        line = self._lines.get(getattr(handle, "session_id", None))
        if line is not handle:
            raise UnknownHandleError(f"Unknown terminal handle: {handle!r}")
        return line
