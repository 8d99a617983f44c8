"""Clipboard interfaces.

Defines the abstract clipboard used by the generate view to copy the
rendered prompt. Browser mechanisms only learn whether the copy worked
after the page has run it, so ``copy`` may hand the outcome back later
through ``GenerateView.finish_copy``.
"""

from abc import ABC, abstractmethod


class BaseClipboard(ABC):
    """Abstract base class for clipboard strategies."""

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Return True if this mechanism can be used in the current environment."""

    @abstractmethod
    def copy(self, text: str) -> bool:
        """Place ``text`` on the clipboard.

        Args:
            text: The exact text to copy.

        Returns:
            True if the copy is confirmed, False if it was dispatched and the
            outcome will be reported later.

        Raises:
            ClipboardError: If the copy did not happen.
        """


class ClipboardError(Exception):
    """Exception raised when copying to the clipboard fails."""

    pass
