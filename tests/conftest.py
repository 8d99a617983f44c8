"""Shared fixtures for PromptDesk tests."""

from unittest.mock import Mock

import pytest

from promptdesk.api.client import TemplateAPIClient


@pytest.fixture
def client():
    """Mock API client with the real client's interface."""
    return Mock(spec=TemplateAPIClient)


@pytest.fixture
def alerts():
    """Collects alert messages raised by state objects."""
    return []
