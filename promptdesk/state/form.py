"""Variable form state for the generate view.

Keeps the name -> value mapping consistent with the selected template.
"""

import logging

from promptdesk.api.client import TemplateAPIClient
from promptdesk.api.errors import APIError
from promptdesk.api.schemas import Template, TemplateVariable

logger = logging.getLogger(__name__)

SELECT_OPTIONS: dict[str, list[str]] = {
    "tone": ["Formal", "Friendly", "Concise", "Professional"],
    "type": ["News", "Technical", "Popular science", "Commentary"],
    "length": ["Short", "Medium", "Detailed"],
}
MULTILINE_VARIABLES = {"content", "code"}


def placeholder_variables(names: list[str]) -> list[TemplateVariable]:
    """Build required variable descriptors for bare extracted names."""
    return [
        TemplateVariable(name=name, display_name=name, required=True, sort_order=index)
        for index, name in enumerate(names)
    ]


def resolve_template_variables(client: TemplateAPIClient, template: Template) -> Template:
    """Fill in a template's variables from its content when it has none.

    The variable list is replaced only if extraction finds at least one
    name. Extraction failures are logged and the template is returned as is.

    Args:
        client: API client used for extraction.
        template: The template being selected.

    Returns:
        The template, possibly with placeholder variables.
    """
    if template.variables:
        return template

    try:
        names = client.extract_variables(template.content)
    except APIError as e:
        logger.error(f"Failed to extract variables for template {template.id}: {e}")
        return template

    if not names:
        return template

    logger.info(f"Extracted {len(names)} variables for template {template.id}")
    return template.model_copy(update={"variables": placeholder_variables(names)})


def build_initial_values(template: Template) -> dict[str, str]:
    """Seed form values from each variable's default (empty string if none)."""
    return {variable.name: variable.default_value or "" for variable in template.variables}


def sorted_variables(template: Template) -> list[TemplateVariable]:
    """Variables in display order."""
    return sorted(template.variables, key=lambda v: v.sort_order)


def input_kind(variable: TemplateVariable) -> str:
    """Widget used to edit a variable: 'select', 'textarea' or 'text'."""
    if variable.name in SELECT_OPTIONS:
        return "select"
    if variable.name in MULTILINE_VARIABLES:
        return "textarea"
    return "text"


class VariableForm:
    """Current values of the variable inputs for one template."""

    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        # Bumped on every reset so UI widgets keyed on it start fresh
        self.revision = 0

    def seed(self, template: Template) -> None:
        """Replace all values with the template's defaults."""
        self.values = build_initial_values(template)
        self.revision += 1

    def set_value(self, name: str, value: str) -> None:
        """Update one field, leaving every other value as it was."""
        self.values = {**self.values, name: value}

    def clear(self) -> None:
        self.values = {}
        self.revision += 1

    def display_value(self, variable: TemplateVariable) -> str:
        """Value shown in the input: the current value, else the default."""
        return self.values.get(variable.name) or variable.default_value or ""

    def missing_required(self, template: Template) -> list[str]:
        """Names of required variables that are still blank."""
        return [
            variable.name
            for variable in sorted_variables(template)
            if variable.required and not self.values.get(variable.name, "").strip()
        ]
