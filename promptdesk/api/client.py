"""HTTP client for the prompt template backend.

Every response that carries templates passes through the normalization
boundary in ``promptdesk.api.normalize``. Failures are logged and raised as
``APIError`` subclasses; the caller decides how to recover.
"""

import logging
from collections.abc import Callable
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError

from promptdesk.api.errors import APIConnectionError, APIError, APIStatusError
from promptdesk.api.normalize import normalize_template, normalize_template_list
from promptdesk.api.schemas import (
    CreateTemplateRequest,
    ExtractVariablesResponse,
    GenerateRequest,
    GenerateResponse,
    PaginatedTemplates,
    Template,
    UpdateTemplateRequest,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _error_message(response: httpx.Response) -> str:
    """Pull the backend's error detail out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip()
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or "")
    return ""


class TemplateAPIClient:
    """API client for the template, generation and extraction endpoints."""

    def __init__(self, base_url: str, http_client: httpx.Client | None = None):
        """Initialize the API client.

        Args:
            base_url: Base URL of the API, including the ``/api`` prefix.
            http_client: Optional preconfigured httpx client (tests inject one
                with a mock transport).
        """
        self.base_url = base_url.rstrip("/")
        self.headers = {
            "Content-Type": "application/json",
        }
        self._http = http_client or httpx.Client(base_url=self.base_url, headers=self.headers)

    def __enter__(self) -> "TemplateAPIClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self._http.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            APIConnectionError: If the request never got a response.
            APIStatusError: If the backend answered with a non-2xx status.
            APIError: If a success response carried an unreadable body.
        """
        try:
            response = self._http.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"{method} {path} failed: {e.response.status_code} - {e.response.text}")
            raise APIStatusError(e.response.status_code, _error_message(e.response)) from e
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} error: {e}")
            raise APIConnectionError(str(e) or type(e).__name__) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"{method} {path} returned invalid JSON: {response.text[:200]}")
            raise APIError(f"Invalid JSON from {path}") from e

    def _parse(self, path: str, parser: Callable[[Any], T], body: Any) -> T:
        """Turn a decoded success body into models.

        Raises:
            APIError: If the body does not have the expected shape.
        """
        try:
            return parser(body)
        except (ValidationError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"{path} returned an unexpected body: {e}")
            raise APIError(f"Unexpected response from {path}") from e

    def health_check(self) -> bool:
        """Check if the API is healthy.

        Returns:
            True if API is healthy, False otherwise.
        """
        try:
            response = self._http.get("/health")
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    def _list(self, path: str, category: str | None, page: int, page_size: int) -> PaginatedTemplates:
        params: dict[str, Any] = {"page": page, "page_size": page_size}
        if category:
            params["category"] = category

        body = self._request("GET", path, params=params) or {}
        return self._parse(
            path,
            lambda payload: PaginatedTemplates(
                data=normalize_template_list(payload.get("data")),
                page=payload.get("page") or page,
                page_size=payload.get("page_size") or page_size,
                total=payload.get("total") or 0,
            ),
            body,
        )

    def list_templates(
        self,
        category: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> PaginatedTemplates:
        """List templates visible to the current user.

        Args:
            category: Optional category filter. Empty means all categories.
            page: One-based page number.
            page_size: Results per page.

        Returns:
            A page of normalized templates.
        """
        return self._list("/templates", category, page, page_size)

    def list_public_templates(
        self,
        category: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> PaginatedTemplates:
        """List the public template catalog. Same arguments as ``list_templates``."""
        return self._list("/templates/public", category, page, page_size)

    def get_template(self, template_id: str) -> Template:
        """Fetch a single template by ID."""
        path = f"/templates/{template_id}"
        return self._parse(path, normalize_template, self._request("GET", path))

    def create_template(self, request: CreateTemplateRequest) -> Template:
        """Create a template and return the stored record."""
        body = self._request("POST", "/templates", json=request.model_dump(exclude_none=True))
        return self._parse("/templates", normalize_template, body)

    def update_template(
        self,
        template_id: str,
        request: UpdateTemplateRequest | CreateTemplateRequest,
    ) -> Template:
        """Update a template. Fields left as None are not sent."""
        path = f"/templates/{template_id}"
        body = self._request("PUT", path, json=request.model_dump(exclude_none=True))
        return self._parse(path, normalize_template, body)

    def delete_template(self, template_id: str) -> None:
        """Delete a template."""
        self._request("DELETE", f"/templates/{template_id}")

    def generate(self, request: GenerateRequest) -> GenerateResponse:
        """Render a template with the given variable values."""
        body = self._request("POST", "/generate", json=request.model_dump())
        return self._parse("/generate", GenerateResponse.model_validate, body)

    def extract_variables(self, content: str) -> list[str]:
        """Ask the backend which placeholder names appear in ``content``.

        Returns:
            Variable names in the order the backend reports them.
        """
        path = "/generate/extract-variables"
        body = self._request("POST", path, json={"content": content})
        return self._parse(path, ExtractVariablesResponse.model_validate, body or {}).variables
