"""Configuration management for progress-indicator."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import yaml

from progress_indicator.types import (
    DEFAULT_MESSAGE,
    DEFAULT_TITLE,
    SessionConfig,
    is_duration_value,
)


RENDERERS = ("terminal", "markup")


@dataclass
class NotificationsConfig:
    """Timed notification configuration."""

    duration_ms: int = 3000


@dataclass
class SessionDefaultsConfig:
    """Default options for new sessions."""

    title: str = DEFAULT_TITLE
    message: str = DEFAULT_MESSAGE
    show_progress: bool = True
    show_percentage: bool = True
    cancellable: bool = False
    compact: bool = False

    def to_session_config(self) -> SessionConfig:
        """Build the registry's default SessionConfig."""
        return SessionConfig.from_options(
            {
                "title": self.title,
                "message": self.message,
                "show_progress": self.show_progress,
                "show_percentage": self.show_percentage,
                "cancellable": self.cancellable,
                "compact": self.compact,
            }
        )


@dataclass
class TerminalConfig:
    """Terminal renderer configuration."""

    bar_width: int = 20
    color: bool = True  # False strips ANSI styling


@dataclass
class Config:
    """Application configuration."""

    log_level: str = "INFO"
    log_file: str | None = None
    renderer: str = "terminal"
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)
    defaults: SessionDefaultsConfig = field(default_factory=SessionDefaultsConfig)
    terminal: TerminalConfig = field(default_factory=TerminalConfig)


def get_config_path(custom_path: Path | None = None) -> Path:
    """Get the configuration file path.

    Args:
        custom_path: Override path. If None, returns default.

    Returns:
        Path to config file.
    """
    if custom_path is not None:
        return custom_path
    return Path.home() / ".config" / "progress-indicator" / "config.yaml"


def _default_file_reader(path: Path) -> dict[str, Any] | None:
    """Default file reader that loads YAML from disk."""
    if not path.exists():
        return None
    try:
        content = path.read_text()
        if not content.strip():
            return None
        return yaml.safe_load(content)
    except yaml.YAMLError:
        return None


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    """Get a nested config section, ignoring values that are not mappings."""
    section = data.get(name)
    return section if isinstance(section, dict) else {}


def _duration_ms(value: Any) -> int:
    """Coerce a duration to whole milliseconds, falling back to the default."""
    if not is_duration_value(value) or value < 0:
        return NotificationsConfig.duration_ms
    return int(value)


def _bar_width(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return TerminalConfig.bar_width
    return value


def load_config(
    path: Path | None = None,
    file_reader: Callable[[Path], dict[str, Any] | None] | None = None,
) -> Config:
    """Load configuration from file.

    Args:
        path: Path to config file. If None, uses default path.
        file_reader: Injectable file reader for testing.

    Returns:
        Config object with values from file or defaults.
    """
    config_path = get_config_path(path)
    reader = file_reader or _default_file_reader

    data = reader(config_path)

    if not isinstance(data, dict):
        return Config()

    notifications_data = _section(data, "notifications")
    notifications_config = NotificationsConfig(
        duration_ms=_duration_ms(notifications_data.get("duration_ms")),
    )

    defaults_data = _section(data, "defaults")
    defaults_config = SessionDefaultsConfig(
        title=defaults_data.get("title", SessionDefaultsConfig.title),
        message=defaults_data.get("message", SessionDefaultsConfig.message),
        show_progress=defaults_data.get(
            "show_progress", SessionDefaultsConfig.show_progress
        ),
        show_percentage=defaults_data.get(
            "show_percentage", SessionDefaultsConfig.show_percentage
        ),
        cancellable=defaults_data.get(
            "cancellable", SessionDefaultsConfig.cancellable
        ),
        compact=defaults_data.get("compact", SessionDefaultsConfig.compact),
    )

    terminal_data = _section(data, "terminal")
    terminal_config = TerminalConfig(
        bar_width=_bar_width(terminal_data.get("bar_width")),
        color=terminal_data.get("color", TerminalConfig.color),
    )

    return Config(
        log_level=data.get("log_level", Config.log_level),
        log_file=data.get("log_file", Config.log_file),
        renderer=data.get("renderer", Config.renderer),
        notifications=notifications_config,
        defaults=defaults_config,
        terminal=terminal_config,
    )
