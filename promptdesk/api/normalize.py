"""Coercion of loosely-typed backend payloads into canonical templates.

The backend has stored ``variables`` both as a JSON array and as a
JSON-encoded string, and older rows carry entries with nulls or wrongly
typed fields. Everything past this module can assume a list of
``TemplateVariable``.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from promptdesk.api.schemas import RawTemplate, Template, TemplateVariable

logger = logging.getLogger(__name__)


def normalize_variables(raw: Any) -> list[TemplateVariable]:
    """Coerce a raw ``variables`` value into a list of variables.

    Args:
        raw: A list, a JSON-encoded list, or anything else.

    Returns:
        The valid variable entries. Malformed input yields an empty list and
        entries that do not validate are dropped.
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.debug("Discarding undecodable variables payload: %r", raw[:80])
            return []

    if not isinstance(raw, list):
        if raw is not None:
            logger.debug("Discarding variables payload of type %s", type(raw).__name__)
        return []

    variables = []
    for item in raw:
        if not isinstance(item, Mapping):
            logger.debug("Dropping malformed variable entry: %r", item)
            continue
        try:
            variables.append(TemplateVariable.model_validate(dict(item)))
        except ValidationError as e:
            logger.warning(f"Dropping invalid variable entry {item!r}: {e.error_count()} error(s)")
    return variables


def normalize_template(raw: RawTemplate | Mapping[str, Any]) -> Template:
    """Build a canonical Template from a raw backend payload.

    Raises:
        pydantic.ValidationError: If the template itself (not its variables)
            is malformed, e.g. has no ``id`` or ``name``.
    """
    payload = dict(raw)
    payload["variables"] = normalize_variables(payload.get("variables"))
    return Template.model_validate(payload)


def normalize_template_list(raws: Iterable[RawTemplate | Mapping[str, Any]] | None) -> list[Template]:
    """Normalize every template in a list payload. ``None`` yields an empty list."""
    return [normalize_template(raw) for raw in raws or []]
