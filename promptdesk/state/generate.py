"""Generate view: the top-level flow from selection to a copied prompt.

The view is always in exactly one ``ViewMode``:

- ``BROWSING``: no template selected, the catalog is shown.
- ``CONFIGURING``: a template is selected and its variables are being filled.
- ``EDITING``: the editor is open; it remembers which mode to return to.
"""

import enum
import logging
import time
from collections.abc import Callable

from promptdesk.api.client import TemplateAPIClient
from promptdesk.api.errors import APIError
from promptdesk.api.schemas import GenerateRequest, Template
from promptdesk.interfaces.clipboard import BaseClipboard, ClipboardError
from promptdesk.state.editor import TemplateEditor
from promptdesk.state.form import VariableForm, resolve_template_variables
from promptdesk.state.selector import TemplateSelector

logger = logging.getLogger(__name__)

GENERATE_FAILED_MESSAGE = "Generation failed, please retry"
COPY_FAILED_MESSAGE = "Copy failed, please copy manually"
DELETE_FAILED_MESSAGE = "Failed to delete template, please retry"


class ViewMode(str, enum.Enum):
    BROWSING = "browsing"
    CONFIGURING = "configuring"
    EDITING = "editing"


class GenerateView:
    """Orchestrates the selector, the variable form, the editor and generation."""

    def __init__(
        self,
        client: TemplateAPIClient,
        clipboard: BaseClipboard | None = None,
        on_alert: Callable[[str], None] | None = None,
        category: str | None = None,
        page_size: int = 20,
        copied_seconds: float = 2.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.clipboard = clipboard
        self.on_alert = on_alert
        self.copied_seconds = copied_seconds
        self.clock = clock

        self.mode = ViewMode.BROWSING
        self.selected: Template | None = None
        self.form = VariableForm()
        self.result = ""
        self.generating = False
        self.editor: TemplateEditor | None = None
        self._return_mode = ViewMode.BROWSING
        self._copied_until: float | None = None
        self.copying = False
        self.copy_error: str | None = None

        self.selector = TemplateSelector(
            client,
            on_select=self.select_template,
            on_edit=self.open_edit,
            category=category,
            page_size=page_size,
        )

    def _alert(self, message: str) -> None:
        if self.on_alert is not None:
            self.on_alert(message)

    @property
    def values(self) -> dict[str, str]:
        return self.form.values

    def set_value(self, name: str, value: str) -> None:
        self.form.set_value(name, value)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def select_template(self, template: Template) -> None:
        """Select a template and seed its form (BROWSING -> CONFIGURING)."""
        template = resolve_template_variables(self.client, template)
        self.selected = template
        self.form.seed(template)
        self.result = ""
        self._reset_copy()
        self.mode = ViewMode.CONFIGURING

    def back_to_list(self) -> None:
        """Drop the selection and return to the catalog."""
        self.selected = None
        self.form.clear()
        self.result = ""
        self._reset_copy()
        self.mode = ViewMode.BROWSING

    def _open_editor(self, template: Template | None) -> None:
        if self.mode is not ViewMode.EDITING:
            self._return_mode = self.mode
        self.editor = TemplateEditor(
            self.client,
            template=template,
            on_saved=self.handle_saved,
            on_alert=self.on_alert,
        )
        self.mode = ViewMode.EDITING

    def open_create(self) -> None:
        self._open_editor(None)

    def open_edit(self, template: Template | None = None) -> None:
        """Edit ``template``, or the current selection when none is given."""
        template = template or self.selected
        if template is None:
            return
        self._open_editor(template)

    def cancel_edit(self) -> None:
        """Close the editor and restore the previous mode unchanged."""
        self.editor = None
        self.mode = self._return_mode

    def handle_saved(self, template: Template) -> None:
        """Adopt a saved template as the selection (EDITING -> CONFIGURING)."""
        self.editor = None
        self.selected = template
        self.form.seed(template)
        self.result = ""
        self._reset_copy()
        self.mode = ViewMode.CONFIGURING
        self.selector.invalidate()

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def generate(self) -> str | None:
        """Render the selected template with the current values.

        Returns:
            The result text, or None if nothing is selected or the call failed.
        """
        if self.selected is None:
            return None

        self.generating = True
        try:
            response = self.client.generate(
                GenerateRequest(template_id=self.selected.id, variables=dict(self.form.values))
            )
        except APIError as e:
            logger.error(f"Failed to generate: {e}")
            self._alert(GENERATE_FAILED_MESSAGE)
            return None
        finally:
            self.generating = False

        self.result = response.result
        self._reset_copy()
        return self.result

    def _reset_copy(self) -> None:
        self._copied_until = None
        self.copying = False
        self.copy_error = None

    def copy_result(self) -> bool:
        """Copy the result text.

        A confirmed copy starts the copied indicator. A dispatched copy sets
        ``copying`` until its outcome arrives through ``finish_copy``.

        Returns:
            False if the copy failed outright.
        """
        self._reset_copy()
        try:
            if self.clipboard is None:
                raise ClipboardError("No clipboard configured")
            confirmed = self.clipboard.copy(self.result)
        except ClipboardError as e:
            self.finish_copy(False, str(e))
            return False

        if confirmed:
            self.finish_copy(True)
        else:
            self.copying = True
        return True

    def finish_copy(self, success: bool, error: str = "") -> None:
        """Record the outcome of a copy.

        Failures show ``COPY_FAILED_MESSAGE`` beside the result until the
        next copy, selection or generation.
        """
        self.copying = False
        if success:
            self.copy_error = None
            self._copied_until = self.clock() + self.copied_seconds
            return
        logger.error(f"Failed to copy: {error or 'unknown error'}")
        self.copy_error = COPY_FAILED_MESSAGE
        self._copied_until = None

    @property
    def copied(self) -> bool:
        """True while the copied indicator should be shown."""
        return self._copied_until is not None and self.clock() < self._copied_until

    def delete_selected(self) -> bool:
        """Delete the selected template and return to the catalog."""
        if self.selected is None:
            return False

        try:
            self.client.delete_template(self.selected.id)
        except APIError as e:
            logger.error(f"Failed to delete template {self.selected.id}: {e}")
            self._alert(DELETE_FAILED_MESSAGE)
            return False

        logger.info(f"Deleted template {self.selected.id}")
        self.back_to_list()
        self.selector.invalidate()
        return True
