"""Renderer adapters for the session registry."""

from .markup import MarkupElement, MarkupRenderer
from .terminal import TerminalLine, TerminalRenderer

__all__ = [
    "MarkupElement",
    "MarkupRenderer",
    "TerminalLine",
    "TerminalRenderer",
]
