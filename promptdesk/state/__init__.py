"""View state for the selector, variable form, editor and generate flow."""

from promptdesk.state.editor import EditorValidationError, TemplateEditor, VariableDraft
from promptdesk.state.form import VariableForm, resolve_template_variables
from promptdesk.state.generate import GenerateView, ViewMode
from promptdesk.state.selector import SelectorState, TemplateSelector

__all__ = [
    "EditorValidationError",
    "TemplateEditor",
    "VariableDraft",
    "VariableForm",
    "resolve_template_variables",
    "GenerateView",
    "ViewMode",
    "SelectorState",
    "TemplateSelector",
]
