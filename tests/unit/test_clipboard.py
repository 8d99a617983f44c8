"""Unit tests for clipboard strategies."""

import pytest

from promptdesk.interfaces.clipboard import ClipboardError
from promptdesk.strategies.clipboard import FallbackClipboard, InMemoryClipboard


class TestFallbackClipboard:
    """Test suite for FallbackClipboard."""

    def test_uses_primary_when_available(self):
        """Test that an available primary is preferred."""
        primary, fallback = InMemoryClipboard(), InMemoryClipboard()

        FallbackClipboard(primary, fallback).copy("hello")

        assert primary.text == "hello"
        assert fallback.text is None

    def test_uses_fallback_when_primary_unavailable(self):
        """Test that the fallback runs when the primary cannot be used."""
        primary, fallback = InMemoryClipboard(available=False), InMemoryClipboard()

        FallbackClipboard(primary, fallback).copy("hello")

        assert fallback.text == "hello"

    def test_nothing_available(self):
        """Test that copying fails when no mechanism is available."""
        clipboard = FallbackClipboard(InMemoryClipboard(available=False), InMemoryClipboard(available=False))

        assert clipboard.is_available is False
        with pytest.raises(ClipboardError):
            clipboard.copy("hello")

    def test_disabled_in_memory_raises(self):
        """Test that a disabled in-memory clipboard refuses to copy."""
        with pytest.raises(ClipboardError):
            InMemoryClipboard(available=False).copy("hello")

    def test_failing_primary_falls_back(self):
        """Test that a primary that refuses the copy is retried through the fallback."""
        primary, fallback = InMemoryClipboard(failing=True), InMemoryClipboard()

        assert FallbackClipboard(primary, fallback).copy("hello") is True

        assert primary.text is None
        assert fallback.text == "hello"

    def test_both_failing_raises(self):
        """Test that the copy fails when primary and fallback both refuse."""
        clipboard = FallbackClipboard(InMemoryClipboard(failing=True), InMemoryClipboard(failing=True))

        with pytest.raises(ClipboardError):
            clipboard.copy("hello")

    def test_failing_primary_without_fallback_raises(self):
        """Test that a failing primary with no usable fallback is reported."""
        clipboard = FallbackClipboard(InMemoryClipboard(failing=True), InMemoryClipboard(available=False))

        with pytest.raises(ClipboardError, match="No clipboard mechanism available"):
            clipboard.copy("hello")
