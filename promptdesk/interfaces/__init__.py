"""Abstract base classes for pluggable UI strategies."""

from promptdesk.interfaces.clipboard import BaseClipboard, ClipboardError

__all__ = [
    "BaseClipboard",
    "ClipboardError",
]
