"""Factory for creating the configured renderer and registry."""

import logging
from typing import IO, Optional

from progress_indicator.config import RENDERERS, Config
from progress_indicator.errors import ConfigError
from progress_indicator.protocols import RendererProtocol
from progress_indicator.registry import SessionRegistry
from progress_indicator.renderers import MarkupRenderer, TerminalRenderer

logger = logging.getLogger(__name__)


def create_renderer(config: Config, file: Optional[IO[str]] = None) -> RendererProtocol:
    """Create the renderer named by the configuration.

    Args:
        config: Application configuration.
        file: Output stream for the terminal renderer.

    Returns:
        Renderer instance.

    Raises:
        ConfigError: If the renderer name is unknown.
    """
    name = str(config.renderer).lower()
    if name == "terminal":
        return TerminalRenderer(
            file=file,
            bar_width=config.terminal.bar_width,
            color=None if config.terminal.color else False,
        )
    if name == "markup":
        return MarkupRenderer()
    raise ConfigError(
        f"Unknown renderer {config.renderer!r} (expected one of: {', '.join(RENDERERS)})"
    )


def create_registry(
    config: Config, renderer: Optional[RendererProtocol] = None
) -> SessionRegistry:
    """Create a SessionRegistry wired to a renderer and config defaults.

    Args:
        config: Application configuration.
        renderer: Renderer to use (built from config if None).

    Returns:
        New SessionRegistry. Call dispose() when done.
    """
    renderer = renderer or create_renderer(config)
    registry = SessionRegistry(
        renderer,
        defaults=config.defaults.to_session_config(),
        notification_duration_ms=config.notifications.duration_ms,
    )
    logger.debug(
        "SessionRegistry created: renderer=%s, notification_duration=%dms",
        type(renderer).__name__,
        config.notifications.duration_ms,
    )
    return registry
