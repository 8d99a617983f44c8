"""Concrete clipboard strategies."""

import logging

from promptdesk.interfaces.clipboard import BaseClipboard, ClipboardError

logger = logging.getLogger(__name__)


class InMemoryClipboard(BaseClipboard):
    """Clipboard that keeps the copied text in memory.

    Used headless and in tests. Set ``available=False`` to simulate an
    environment without this mechanism, or ``failing=True`` for one that is
    present but refuses the copy.
    """

    def __init__(self, available: bool = True, failing: bool = False):
        self.available = available
        self.failing = failing
        self.text: str | None = None

    @property
    def is_available(self) -> bool:
        return self.available

    def copy(self, text: str) -> bool:
        if not self.available:
            raise ClipboardError("In-memory clipboard is disabled")
        if self.failing:
            raise ClipboardError("In-memory clipboard refused the copy")
        self.text = text
        return True


class FallbackClipboard(BaseClipboard):
    """Use the primary mechanism, falling back when it is unavailable or fails.

    The copy fails only if neither mechanism managed it.
    """

    def __init__(self, primary: BaseClipboard, fallback: BaseClipboard):
        self.primary = primary
        self.fallback = fallback

    @property
    def is_available(self) -> bool:
        return self.primary.is_available or self.fallback.is_available

    def copy(self, text: str) -> bool:
        if self.primary.is_available:
            try:
                return self.primary.copy(text)
            except ClipboardError as e:
                logger.warning(f"{type(self.primary).__name__} failed: {e}")
        if not self.fallback.is_available:
            raise ClipboardError("No clipboard mechanism available")
        logger.info(f"Copying with {type(self.fallback).__name__}")
        return self.fallback.copy(text)
