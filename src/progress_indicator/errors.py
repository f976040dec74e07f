"""Base exceptions for progress-indicator."""


class ProgressIndicatorError(Exception):
    """Base exception for all progress-indicator errors."""

    pass


class ConfigError(ProgressIndicatorError):
    """Configuration value could not be used."""

    pass


class RendererError(ProgressIndicatorError):
    """Renderer operation failed."""

    pass


class UnknownHandleError(RendererError):
    """Renderer was given a handle it does not own (never created or destroyed)."""

    pass
