"""Progress session registry with pluggable renderers."""

from progress_indicator.registry import SessionRegistry
from progress_indicator.types import PhaseStatus, Session, SessionConfig, SessionUpdate

__version__ = "0.1.0"

__all__ = [
    "PhaseStatus",
    "Session",
    "SessionConfig",
    "SessionRegistry",
    "SessionUpdate",
    "__version__",
]
