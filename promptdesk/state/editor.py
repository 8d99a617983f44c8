"""Template editor state.

Holds a draft copy of a template, its variable schema, and the
client-side validation that runs before anything is sent to the backend.
"""

import logging
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from promptdesk.api.client import TemplateAPIClient
from promptdesk.api.errors import APIError
from promptdesk.api.schemas import (
    CreateTemplateRequest,
    Template,
    TemplateVariable,
    UpdateTemplateRequest,
    is_valid_variable_name,
)

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Please fill in the template name and content"
EXTRACT_FAILED_MESSAGE = "Failed to extract variables, please check the template content"
SAVE_FAILED_MESSAGE = "Failed to save template, please retry"


class EditorValidationError(Exception):
    """Raised when a draft cannot be saved. Never involves a network call.

    Attributes:
        invalid_names: Offending variable names, if the failure was a name check.
    """

    def __init__(self, message: str, invalid_names: list[str] | None = None):
        super().__init__(message)
        self.invalid_names = invalid_names or []


@dataclass
class VariableDraft:
    """Editable variable row. ``uid`` keys the row's widgets, not the backend."""

    name: str = ""
    display_name: str = ""
    description: str = ""
    default_value: str = ""
    required: bool = True
    sort_order: int = 0
    id: str | None = None
    uid: str = field(default_factory=lambda: uuid.uuid4().hex)

    @classmethod
    def from_variable(cls, variable: TemplateVariable) -> "VariableDraft":
        return cls(
            name=variable.name,
            display_name=variable.display_name,
            description=variable.description,
            default_value=variable.default_value,
            required=variable.required,
            sort_order=variable.sort_order,
            id=variable.id,
        )


def sanitize_variables(drafts: Iterable[VariableDraft]) -> list[TemplateVariable]:
    """Drop unnamed drafts, trim names and labels, and renumber sort order.

    An empty display label falls back to the variable name.
    """
    named = [draft for draft in drafts if draft.name.strip()]
    variables = []
    for index, draft in enumerate(named):
        name = draft.name.strip()
        variables.append(
            TemplateVariable(
                id=draft.id,
                name=name,
                display_name=(draft.display_name or "").strip() or name,
                description=draft.description or "",
                default_value=draft.default_value or "",
                required=draft.required if draft.required is not None else True,
                sort_order=index,
            )
        )
    return variables


def invalid_variable_names(variables: Iterable[TemplateVariable]) -> list[str]:
    """Names that do not match ``^[a-zA-Z_][a-zA-Z0-9_]*$``, in order."""
    return [variable.name for variable in variables if not is_valid_variable_name(variable.name)]


def merge_extracted(names: list[str], drafts: list[VariableDraft]) -> list[VariableDraft]:
    """Replace drafts with extracted names, keeping metadata of same-named drafts."""
    existing = {draft.name: draft for draft in drafts}
    merged = []
    for index, name in enumerate(names):
        current = existing.get(name)
        if current is None:
            merged.append(VariableDraft(name=name, display_name=name, sort_order=index))
            continue
        merged.append(
            VariableDraft(
                name=name,
                display_name=current.display_name or name,
                description=current.description or "",
                default_value=current.default_value or "",
                required=current.required if current.required is not None else True,
                sort_order=index,
                id=current.id,
                uid=current.uid,
            )
        )
    return merged


class TemplateEditor:
    """Create/edit form for a single template."""

    def __init__(
        self,
        client: TemplateAPIClient,
        template: Template | None = None,
        on_saved: Callable[[Template], None] | None = None,
        on_alert: Callable[[str], None] | None = None,
    ):
        self.client = client
        self.on_saved = on_saved
        self.on_alert = on_alert
        self.session_id = uuid.uuid4().hex
        self.saving = False
        self.extracting = False
        self.load(template)

    def load(self, template: Template | None) -> None:
        """Initialize every field from ``template``, or empty for a new one."""
        self.template = template
        self.name = template.name if template else ""
        self.description = template.description if template else ""
        self.category = template.category if template else ""
        self.is_public = bool(template.is_public) if template else False
        self.content = template.content if template else ""
        self.variables: list[VariableDraft] = (
            [VariableDraft.from_variable(v) for v in template.variables] if template else []
        )

    @property
    def is_new(self) -> bool:
        return self.template is None

    def _alert(self, message: str) -> None:
        if self.on_alert is not None:
            self.on_alert(message)

    # -------------------------------------------------------------------------
    # Variable drafts
    # -------------------------------------------------------------------------

    def add_variable(self) -> VariableDraft:
        draft = VariableDraft()
        self.variables = [*self.variables, draft]
        return draft

    def remove_variable(self, index: int) -> None:
        self.variables = [draft for i, draft in enumerate(self.variables) if i != index]

    def update_variable(self, index: int, **changes) -> None:
        """Patch one draft's fields by position."""
        current = self.variables[index]
        for key, value in changes.items():
            if key == "uid" or not hasattr(current, key):
                raise AttributeError(f"VariableDraft has no editable field {key!r}")
            setattr(current, key, value)

    def extract_variables(self) -> None:
        """Rebuild the drafts from the placeholders found in the content."""
        if not self.content.strip():
            return

        self.extracting = True
        try:
            names = self.client.extract_variables(self.content)
            self.variables = merge_extracted(names, self.variables)
        except APIError as e:
            logger.error(f"Failed to extract variables: {e}")
            self._alert(EXTRACT_FAILED_MESSAGE)
        finally:
            self.extracting = False

    # -------------------------------------------------------------------------
    # Validation and save
    # -------------------------------------------------------------------------

    def validate(self) -> CreateTemplateRequest:
        """Build the save payload or raise EditorValidationError.

        Checks run in order: required fields, then variable sanitization,
        then variable name format.
        """
        if not self.name.strip() or not self.content.strip():
            raise EditorValidationError(MISSING_FIELDS_MESSAGE)

        variables = sanitize_variables(self.variables)

        invalid = invalid_variable_names(variables)
        if invalid:
            names = ", ".join(name or "(empty)" for name in invalid)
            raise EditorValidationError(
                f"Invalid variable names: {names}. Variable names may only contain "
                "letters, digits and underscores, and cannot start with a digit.",
                invalid_names=invalid,
            )

        return CreateTemplateRequest(
            name=self.name.strip(),
            description=self.description.strip(),
            content=self.content,
            variables=variables,
            category=self.category.strip(),
            is_public=self.is_public,
        )

    def save(self) -> Template | None:
        """Validate and persist the draft.

        Returns:
            The saved template, or None if validation or the request failed.
        """
        try:
            payload = self.validate()
        except EditorValidationError as e:
            logger.info(f"Template save blocked: {e}")
            self._alert(str(e))
            return None

        self.saving = True
        try:
            if self.template is not None:
                saved = self.client.update_template(
                    self.template.id,
                    UpdateTemplateRequest(**payload.model_dump()),
                )
            else:
                saved = self.client.create_template(payload)
        except APIError as e:
            logger.error(f"Failed to save template: {e}")
            self._alert(SAVE_FAILED_MESSAGE)
            return None
        finally:
            self.saving = False

        logger.info(f"Saved template {saved.id} ({'created' if self.is_new else 'updated'})")
        if self.on_saved is not None:
            self.on_saved(saved)
        return saved
