"""Backend API client, schemas and payload normalization."""

from promptdesk.api.client import TemplateAPIClient
from promptdesk.api.errors import APIConnectionError, APIError, APIStatusError
from promptdesk.api.normalize import normalize_template, normalize_template_list, normalize_variables
from promptdesk.api.schemas import (
    VARIABLE_NAME_PATTERN,
    CreateTemplateRequest,
    GenerateRequest,
    GenerateResponse,
    PaginatedTemplates,
    Template,
    TemplateVariable,
    UpdateTemplateRequest,
    is_valid_variable_name,
)

__all__ = [
    "TemplateAPIClient",
    "APIError",
    "APIConnectionError",
    "APIStatusError",
    "normalize_template",
    "normalize_template_list",
    "normalize_variables",
    "VARIABLE_NAME_PATTERN",
    "CreateTemplateRequest",
    "GenerateRequest",
    "GenerateResponse",
    "PaginatedTemplates",
    "Template",
    "TemplateVariable",
    "UpdateTemplateRequest",
    "is_valid_variable_name",
]
