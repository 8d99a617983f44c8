"""Concrete strategy implementations."""

from promptdesk.strategies.clipboard import FallbackClipboard, InMemoryClipboard

__all__ = [
    "FallbackClipboard",
    "InMemoryClipboard",
]
