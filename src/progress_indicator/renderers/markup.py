"""HTML markup renderer.

Keeps per-session element state and renders it to an HTML fragment with
the same structure and class names the desktop UI styles:

    <div class="progress-overlay" id="progress-{id}">
      <div class="progress-container">
        <div class="progress-title">...</div>
        <div class="progress-message">...</div>
        <div class="progress-phase-indicator">
          <div class="phase-step completed" data-phase="0">...</div>
        </div>
        <div class="progress-bar-container">
          <div class="progress-bar" style="width: 40%"></div>
        </div>
        <div class="progress-percentage">40%</div>
        <div class="progress-details">...</div>
        <button class="progress-cancel-btn">Cancel</button>
      </div>
    </div>

Compact sessions use the ``progress-compact`` wrapper and no container
class. Sessions created without a progress bar get a spinner instead.
"""

import html
from dataclasses import dataclass, field
from typing import Optional

from progress_indicator.errors import UnknownHandleError
from progress_indicator.protocols import CancelHandler
from progress_indicator.types import PhaseStatus, SessionConfig, SessionUpdate


@dataclass
class MarkupElement:
    """Mutable display state of one rendered session."""

    session_id: str
    config: SessionConfig
    message: str
    details: str = ""
    bar_width: float = 0.0
    percentage_text: Optional[str] = None
    indeterminate: bool = False
    phase_statuses: list[PhaseStatus] = field(default_factory=list)


class MarkupRenderer:
    """Renderer producing HTML fragments for each active session.

    Handles are MarkupElement instances. The host pushes render() output
    into its page and calls click_cancel() when the cancel button is
    pressed.
    """

    def __init__(self):
        self._elements: dict[str, MarkupElement] = {}
        self._cancel_handler: CancelHandler | None = None

    def set_cancel_handler(self, handler: CancelHandler | None) -> None:
        self._cancel_handler = handler

    def materialize(self, session_id: str, config: SessionConfig) -> MarkupElement:
        element = MarkupElement(
            session_id=session_id,
            config=config,
            message=config.message,
            percentage_text="0%" if config.show_progress and config.show_percentage else None,
            phase_statuses=[PhaseStatus.PENDING] * len(config.phases or ()),
        )
        self._elements[session_id] = element
        return element

    def apply_update(self, handle: MarkupElement, update: SessionUpdate) -> None:
        element = self._require(handle)

        if update.message is not None:
            element.message = update.message
        if update.details is not None:
            element.details = update.details
        if update.progress is not None and element.config.show_progress:
            element.bar_width = update.progress
            element.indeterminate = False
            if element.config.show_percentage:
                element.percentage_text = f"{round(update.progress)}%"
        if update.phase_statuses is not None:
            element.phase_statuses = list(update.phase_statuses)

    def apply_spinner_mode(self, handle: MarkupElement) -> None:
        element = self._require(handle)
        element.indeterminate = True
        if element.percentage_text is not None:
            element.percentage_text = ""

    def destroy(self, handle: MarkupElement) -> None:
        element = self._require(handle)
        del self._elements[element.session_id]

    def click_cancel(self, session_id: str) -> bool:
        """Simulate activation of a session's cancel button.

        Returns:
            True if the session shows a cancel button and a handler is set.
        """
        element = self._elements.get(session_id)
        if element is None or not element.config.cancellable:
            return False
        if self._cancel_handler is None:
            return False
        self._cancel_handler(session_id)
        return True

    def render(self, session_id: str) -> Optional[str]:
        """Render one session to HTML, or None if it is not shown."""
        element = self._elements.get(session_id)
        if element is None:
            return None
        return self._render_element(element)

    def render_all(self) -> str:
        """Render every shown session, in creation order."""
        return "\n".join(
            self._render_element(element) for element in self._elements.values()
        )

    @property
    def element_count(self) -> int:
        return len(self._elements)

    def _require(self, handle: MarkupElement) -> MarkupElement:
        element = self._elements.get(getattr(handle, "session_id", None))
        if element is not handle:
            raise UnknownHandleError(f"Unknown markup handle: {handle!r}")
        return element

    def _render_element(self, element: MarkupElement) -> str:
        config = element.config
        esc = html.escape

        parts = [
            f'<div class="progress-title">{esc(config.title)}</div>',
            f'<div class="progress-message">{esc(element.message)}</div>',
        ]

        if config.phases:
            steps = []
            for index, (label, status) in enumerate(
                zip(config.phases, element.phase_statuses)
            ):
                classes = "phase-step"
                if status is not PhaseStatus.PENDING:
                    classes += f" {status.value}"
                steps.append(
                    f'<div class="{classes}" data-phase="{index}">{esc(label)}</div>'
                )
            parts.append(
                '<div class="progress-phase-indicator">' + "".join(steps) + "</div>"
            )

        if config.show_progress:
            bar_classes = "progress-bar"
            if element.indeterminate:
                bar_classes += " indeterminate"
            parts.append(
                '<div class="progress-bar-container">'
                f'<div class="{bar_classes}" style="width: {element.bar_width:g}%"></div>'
                "</div>"
            )
            if element.percentage_text is not None:
                parts.append(
                    f'<div class="progress-percentage">{element.percentage_text}</div>'
                )
        else:
            parts.append('<div class="progress-spinner"></div>')

        parts.append(f'<div class="progress-details">{esc(element.details)}</div>')

        if config.cancellable:
            parts.append('<button class="progress-cancel-btn">Cancel</button>')

        wrapper = "progress-compact" if config.compact else "progress-overlay"
        inner = "".join(parts)
        if not config.compact:
            inner = f'<div class="progress-container">{inner}</div>'
        return (
            f'<div class="{wrapper}" id="progress-{esc(element.session_id)}">'
            f"{inner}</div>"
        )
