"""Template catalog selector state.

Fetches the public catalog and filters it client-side as the user types.
"""

import enum
import logging
from collections.abc import Callable

from promptdesk.api.client import TemplateAPIClient
from promptdesk.api.errors import APIError
from promptdesk.api.schemas import Template

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Failed to load templates, please retry"
NO_MATCH_MESSAGE = "No templates match your search"
EMPTY_MESSAGE = "No templates yet"


class SelectorState(str, enum.Enum):
    """Exclusive render states of the template list."""

    LOADING = "loading"
    ERROR = "error"
    EMPTY = "empty"
    NO_MATCH = "no_match"
    READY = "ready"


def matches_query(template: Template, query: str) -> bool:
    """Case-insensitive substring match over name and description."""
    needle = query.lower()
    return needle in template.name.lower() or needle in (template.description or "").lower()


class TemplateSelector:
    """Public template list with search, selection and edit callbacks."""

    def __init__(
        self,
        client: TemplateAPIClient,
        on_select: Callable[[Template], None] | None = None,
        on_edit: Callable[[Template], None] | None = None,
        category: str | None = None,
        page_size: int = 20,
    ):
        self.client = client
        self.on_select = on_select
        self.on_edit = on_edit
        self.category = category or None
        self.page_size = page_size

        self.templates: list[Template] = []
        self.total = 0
        self.query = ""
        self.loading = False
        self.loaded = False
        self.error: str | None = None

    def load(self) -> None:
        """Fetch the catalog for the current category, replacing the previous set."""
        self.loading = True
        self.error = None
        try:
            page = self.client.list_public_templates(self.category, page=1, page_size=self.page_size)
            self.templates = page.data
            self.total = page.total
            self.loaded = True
            logger.info(f"Loaded {len(page.data)} templates (category={self.category!r})")
        except APIError as e:
            logger.error(f"Failed to load templates: {e}")
            self.error = LOAD_ERROR_MESSAGE
            self.loaded = True
        finally:
            self.loading = False

    def ensure_loaded(self) -> None:
        """Load on first use."""
        if not self.loaded:
            self.load()

    def refresh(self) -> None:
        """Reload the catalog (retry action, or after a save or delete)."""
        self.load()

    def invalidate(self) -> None:
        """Mark the catalog stale so the next ``ensure_loaded`` refetches."""
        self.loaded = False

    def set_category(self, category: str | None) -> None:
        """Scope the catalog to a category, refetching if it changed."""
        category = (category or "").strip() or None
        if category != self.category:
            self.category = category
            self.load()

    def set_query(self, query: str) -> None:
        self.query = query

    def filtered(self) -> list[Template]:
        """Templates matching the current query, computed from the full fetched set."""
        if not self.query:
            return list(self.templates)
        return [template for template in self.templates if matches_query(template, self.query)]

    def render_state(self) -> SelectorState:
        if self.loading:
            return SelectorState.LOADING
        if self.error:
            return SelectorState.ERROR
        if not self.filtered():
            return SelectorState.NO_MATCH if self.query else SelectorState.EMPTY
        return SelectorState.READY

    def empty_message(self) -> str:
        return NO_MATCH_MESSAGE if self.query else EMPTY_MESSAGE

    @property
    def can_edit(self) -> bool:
        """Whether cards should show an edit control."""
        return self.on_edit is not None

    def select(self, template: Template) -> None:
        if self.on_select is not None:
            self.on_select(template)

    def edit(self, template: Template) -> None:
        """Open a template for editing. Never triggers selection."""
        if self.on_edit is not None:
            self.on_edit(template)
