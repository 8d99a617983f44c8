"""API request and response schemas.

Pydantic v2 models for the prompt template backend. Response models
ignore unknown keys so backend additions do not break the UI.
"""

import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing_extensions import TypedDict

VARIABLE_NAME_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def is_valid_variable_name(name: str) -> bool:
    """Return True if ``name`` is usable as a template placeholder name."""
    return bool(VARIABLE_NAME_PATTERN.match(name))


# =============================================================================
# Wire Types
# =============================================================================


class RawTemplate(TypedDict, total=False):
    """Template payload as the backend sends it, before normalization.

    ``variables`` may be a list, a JSON-encoded string, null or absent.
    """

    id: str
    user_id: str
    name: str
    description: str
    content: str
    variables: Any
    category: str
    is_public: bool
    usage_count: int
    created_at: str
    updated_at: str


# =============================================================================
# Template Schemas
# =============================================================================


class TemplateVariable(BaseModel):
    """A named placeholder within a template."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    name: str
    display_name: str = ""
    description: str = ""
    default_value: str = ""
    required: bool = True
    sort_order: int = 0

    @field_validator("display_name", "description", "default_value", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def label(self) -> str:
        """Display label, falling back to the variable name."""
        return self.display_name or self.name


class Template(BaseModel):
    """Canonical template record. ``variables`` is always a list."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str = ""
    name: str
    description: str = ""
    content: str = ""
    variables: list[TemplateVariable] = Field(default_factory=list)
    category: str = ""
    is_public: bool = False
    usage_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("description", "content", "category", "user_id", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def stringify_id(cls, v: Any) -> Any:
        return str(v) if v is not None and not isinstance(v, str) else v


class PaginatedTemplates(BaseModel):
    """A page of templates from a list endpoint."""

    data: list[Template] = Field(default_factory=list)
    page: int = 1
    page_size: int = 20
    total: int = 0


class CreateTemplateRequest(BaseModel):
    """Request body for creating a template."""

    name: str
    description: str = ""
    content: str
    variables: list[TemplateVariable] = Field(default_factory=list)
    category: str = ""
    is_public: bool = False


class UpdateTemplateRequest(BaseModel):
    """Partial request body for updating a template. Unset fields are not sent."""

    name: str | None = None
    description: str | None = None
    content: str | None = None
    variables: list[TemplateVariable] | None = None
    category: str | None = None
    is_public: bool | None = None


# =============================================================================
# Generation Schemas
# =============================================================================


class GenerateRequest(BaseModel):
    """Request body for rendering a template with variable values."""

    template_id: str
    variables: dict[str, str] = Field(default_factory=dict)


class GenerateResponse(BaseModel):
    """Rendered prompt returned by the backend."""

    model_config = ConfigDict(extra="ignore")

    result: str
    prompt: str = ""


class ExtractVariablesResponse(BaseModel):
    """Variable names the backend found in template content."""

    variables: list[str] = Field(default_factory=list)

    @field_validator("variables", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v
