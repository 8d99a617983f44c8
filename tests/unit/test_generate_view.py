"""Unit tests for the generate view state machine."""

from unittest.mock import Mock

import pytest

from promptdesk.api.errors import APIConnectionError, APIStatusError
from promptdesk.api.schemas import GenerateRequest, GenerateResponse, PaginatedTemplates
from promptdesk.interfaces.clipboard import BaseClipboard
from promptdesk.state.generate import (
    COPY_FAILED_MESSAGE,
    DELETE_FAILED_MESSAGE,
    GENERATE_FAILED_MESSAGE,
    GenerateView,
    ViewMode,
)
from promptdesk.strategies.clipboard import FallbackClipboard, InMemoryClipboard
from tests.factories import build_template, build_variable


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def clipboard():
    return InMemoryClipboard()


@pytest.fixture
def view(client, alerts, clipboard, clock):
    client.list_public_templates.return_value = PaginatedTemplates()
    return GenerateView(client, clipboard=clipboard, on_alert=alerts.append, clock=clock)


@pytest.fixture
def topic_template():
    return build_template(id="tpl-1", variables=[build_variable("topic", required=True).model_dump()])


# =============================================================================
# Transition Tests
# =============================================================================


class TestTransitions:
    """Test suite for view mode transitions."""

    def test_starts_browsing(self, view):
        """Test the initial state."""
        assert view.mode is ViewMode.BROWSING
        assert view.selected is None
        assert view.values == {}
        assert view.result == ""

    def test_select_runs_extraction_fallback(self, view, client):
        """Test that selecting a template without variables extracts them."""
        client.extract_variables.return_value = ["topic"]
        template = build_template(variables=[], content="Summarize {{topic}}")

        view.select_template(template)

        assert view.mode is ViewMode.CONFIGURING
        assert len(view.selected.variables) == 1
        assert view.values == {"topic": ""}

    def test_select_via_selector(self, view, topic_template):
        """Test that the selector callback is wired to selection."""
        view.selector.select(topic_template)

        assert view.mode is ViewMode.CONFIGURING
        assert view.selected == topic_template

    def test_select_clears_previous_result(self, view, client, topic_template):
        """Test that changing the selection resets values and result."""
        view.select_template(topic_template)
        view.set_value("topic", "AI")
        view.result = "old"

        other = build_template(id="tpl-2", variables=[build_variable("tone").model_dump()])
        view.select_template(other)

        assert view.values == {"tone": ""}
        assert view.result == ""

    def test_back_to_list(self, view, topic_template):
        """Test that returning to the list fully resets."""
        view.select_template(topic_template)
        view.set_value("topic", "AI")
        view.result = "Write about AI"

        view.back_to_list()

        assert view.mode is ViewMode.BROWSING
        assert view.selected is None
        assert view.values == {}
        assert view.result == ""

    def test_cancel_from_browsing(self, view):
        """Test that cancelling a create returns to browsing."""
        view.open_create()
        assert view.mode is ViewMode.EDITING
        assert view.editor is not None and view.editor.is_new

        view.cancel_edit()

        assert view.mode is ViewMode.BROWSING
        assert view.editor is None

    def test_cancel_from_configuring_keeps_state(self, view, topic_template):
        """Test that cancelling an edit leaves selection, values and result alone."""
        view.select_template(topic_template)
        view.set_value("topic", "AI")
        view.result = "Write about AI"

        view.open_edit()
        assert view.editor.template == topic_template
        view.cancel_edit()

        assert view.mode is ViewMode.CONFIGURING
        assert view.selected == topic_template
        assert view.values == {"topic": "AI"}
        assert view.result == "Write about AI"

    def test_edit_from_list_does_not_select(self, view, topic_template):
        """Test that the list edit action opens the editor without selecting."""
        view.selector.edit(topic_template)

        assert view.mode is ViewMode.EDITING
        assert view.selected is None
        view.cancel_edit()
        assert view.mode is ViewMode.BROWSING

    def test_open_edit_without_selection_is_noop(self, view):
        """Test that editing needs a template."""
        view.open_edit()

        assert view.mode is ViewMode.BROWSING

    def test_save_moves_to_configuring(self, view, client, topic_template):
        """Test that a successful save selects the saved template."""
        saved = build_template(id="new-1", name="Saved", variables=[
            build_variable("tone", default_value="Formal").model_dump(),
        ])
        client.create_template.return_value = saved
        view.select_template(topic_template)
        view.selector.ensure_loaded()
        view.result = "old result"

        view.open_create()
        view.editor.name = "Saved"
        view.editor.content = "Use a {{tone}} tone"
        view.editor.save()

        assert view.mode is ViewMode.CONFIGURING
        assert view.editor is None
        assert view.selected == saved
        assert view.values == {"tone": "Formal"}
        assert view.result == ""
        assert view.selector.loaded is False


# =============================================================================
# Generation Tests
# =============================================================================


class TestGenerate:
    """Test suite for prompt generation."""

    def test_requires_selection(self, view, client):
        """Test that generation without a template does nothing."""
        assert view.generate() is None
        client.generate.assert_not_called()

    def test_success(self, view, client, topic_template):
        """Test that the backend result is stored verbatim."""
        client.generate.return_value = GenerateResponse(result="Write about AI\n  verbatim", prompt="")
        view.select_template(topic_template)
        view.set_value("topic", "AI")

        assert view.generate() == "Write about AI\n  verbatim"

        client.generate.assert_called_once_with(GenerateRequest(template_id="tpl-1", variables={"topic": "AI"}))
        assert view.result == "Write about AI\n  verbatim"
        assert view.mode is ViewMode.CONFIGURING
        assert view.generating is False

    def test_failure_keeps_previous_result(self, view, client, alerts, topic_template):
        """Test that a failed generation alerts and keeps the prior result."""
        view.select_template(topic_template)
        view.result = "previous"
        client.generate.side_effect = APIConnectionError("down")

        assert view.generate() is None

        assert view.result == "previous"
        assert alerts == [GENERATE_FAILED_MESSAGE]
        assert view.generating is False


# =============================================================================
# Copy Tests
# =============================================================================


class TestCopy:
    """Test suite for copying the result."""

    def test_end_to_end(self, view, client, clipboard, clock, topic_template):
        """Test select, fill, generate, copy, and the indicator timing out."""
        client.generate.return_value = GenerateResponse(result="Write an essay about AI")

        view.select_template(topic_template)
        view.set_value("topic", "AI")
        view.generate()

        assert view.copy_result() is True
        assert clipboard.text == "Write an essay about AI"
        assert view.copied is True

        clock.advance(1.9)
        assert view.copied is True
        clock.advance(0.2)
        assert view.copied is False

    def test_fallback_clipboard(self, client, alerts, clock, topic_template):
        """Test that the fallback mechanism is used when the primary is unavailable."""
        primary = InMemoryClipboard(available=False)
        fallback = InMemoryClipboard()
        view = GenerateView(
            client,
            clipboard=FallbackClipboard(primary, fallback),
            on_alert=alerts.append,
            clock=clock,
        )
        view.result = "text"

        assert view.copy_result() is True
        assert primary.text is None
        assert fallback.text == "text"

    def test_failing_primary_uses_fallback(self, client, alerts, clock):
        """Test that a primary that raises is retried through the fallback."""
        fallback = InMemoryClipboard()
        view = GenerateView(
            client,
            clipboard=FallbackClipboard(InMemoryClipboard(failing=True), fallback),
            on_alert=alerts.append,
            clock=clock,
        )
        view.result = "text"

        assert view.copy_result() is True
        assert fallback.text == "text"
        assert view.copied is True
        assert view.copy_error is None

    def test_failure_shows_message(self, client, alerts, clock):
        """Test that a copy failure shows the message and no indicator."""
        view = GenerateView(
            client,
            clipboard=FallbackClipboard(InMemoryClipboard(failing=True), InMemoryClipboard(failing=True)),
            on_alert=alerts.append,
            clock=clock,
        )
        view.result = "text"

        assert view.copy_result() is False
        assert view.copy_error == COPY_FAILED_MESSAGE
        assert view.copied is False
        assert view.copying is False

    def test_no_clipboard(self, client):
        """Test that a missing clipboard is reported as a copy failure."""
        view = GenerateView(client)

        assert view.copy_result() is False
        assert view.copy_error == COPY_FAILED_MESSAGE

    def test_dispatched_copy_waits_for_outcome(self, client, clock):
        """Test that an unconfirmed copy shows no indicator until it succeeds."""
        clipboard = Mock(spec=BaseClipboard)
        clipboard.copy.return_value = False
        view = GenerateView(client, clipboard=clipboard, clock=clock)
        view.result = "text"

        assert view.copy_result() is True
        assert view.copying is True
        assert view.copied is False

        view.finish_copy(True)

        assert view.copying is False
        assert view.copied is True

    def test_dispatched_copy_failure(self, client, clock):
        """Test that a copy reported as failed by the page shows the message."""
        clipboard = Mock(spec=BaseClipboard)
        clipboard.copy.return_value = False
        view = GenerateView(client, clipboard=clipboard, clock=clock)
        view.result = "text"
        view.copy_result()

        view.finish_copy(False, "NotAllowedError: Write permission denied.")

        assert view.copying is False
        assert view.copied is False
        assert view.copy_error == COPY_FAILED_MESSAGE

    def test_next_copy_clears_message(self, view, clipboard):
        """Test that a later successful copy clears an earlier failure."""
        view.result = "text"
        view.finish_copy(False, "denied")

        assert view.copy_result() is True
        assert view.copy_error is None
        assert clipboard.text == "text"


# =============================================================================
# Delete Tests
# =============================================================================


class TestDelete:
    """Test suite for deleting the selected template."""

    def test_delete_returns_to_list(self, view, client, topic_template):
        """Test that deletion resets to browsing and refreshes the catalog."""
        view.select_template(topic_template)
        view.selector.ensure_loaded()

        assert view.delete_selected() is True

        client.delete_template.assert_called_once_with("tpl-1")
        assert view.mode is ViewMode.BROWSING
        assert view.selected is None
        assert view.selector.loaded is False

    def test_delete_failure(self, view, client, alerts, topic_template):
        """Test that a failed delete keeps the selection."""
        client.delete_template.side_effect = APIStatusError(404)
        view.select_template(topic_template)

        assert view.delete_selected() is False

        assert alerts == [DELETE_FAILED_MESSAGE]
        assert view.mode is ViewMode.CONFIGURING
        assert view.selected == topic_template
