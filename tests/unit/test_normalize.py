"""Unit tests for payload normalization."""

import json

import pytest
from pydantic import ValidationError

from promptdesk.api.normalize import normalize_template, normalize_template_list, normalize_variables
from promptdesk.api.schemas import Template, TemplateVariable


RAW_VARIABLES = [
    {"name": "topic", "display_name": "Topic", "required": True, "sort_order": 0},
    {"name": "tone", "display_name": "Tone", "default_value": "Formal", "required": False, "sort_order": 1},
]


def raw_template(**overrides):
    data = {
        "id": "tpl-1",
        "user_id": "user-1",
        "name": "Essay Helper",
        "description": "Helps draft essays",
        "content": "Write about {{topic}} in a {{tone}} tone",
        "category": "writing",
        "is_public": True,
        "usage_count": 7,
        "created_at": "2024-05-01T10:00:00Z",
        "updated_at": "2024-05-02T10:00:00Z",
    }
    data.update(overrides)
    return data


# =============================================================================
# normalize_variables Tests
# =============================================================================


class TestNormalizeVariables:
    """Test suite for the variables coercion function."""

    def test_array_is_kept(self):
        """Test that an array payload yields the same entries."""
        assert normalize_variables(RAW_VARIABLES) == [TemplateVariable(**v) for v in RAW_VARIABLES]

    def test_json_string_is_decoded(self):
        """Test that a JSON-encoded array is decoded."""
        assert normalize_variables(json.dumps(RAW_VARIABLES)) == normalize_variables(RAW_VARIABLES)

    def test_malformed_string_yields_empty(self):
        """Test that undecodable text degrades to an empty list."""
        assert normalize_variables("[{not json") == []

    def test_json_non_array_yields_empty(self):
        """Test that a JSON string holding an object is rejected."""
        assert normalize_variables('{"name": "topic"}') == []

    @pytest.mark.parametrize("raw", [None, 42, {"name": "topic"}, True])
    def test_other_types_yield_empty(self, raw):
        """Test that absent or non-list payloads become an empty list."""
        assert normalize_variables(raw) == []

    def test_entries_without_name_are_dropped(self):
        """Test that entries that are not variable objects are skipped."""
        raw = [{"name": "topic"}, "tone", {"display_name": "No name"}, None]
        assert normalize_variables(raw) == [TemplateVariable(name="topic")]

    @pytest.mark.parametrize("entry", [
        {"name": "topic", "required": None},
        {"name": "topic", "default_value": 5},
        {"name": "topic", "sort_order": "first"},
        {"name": 7},
    ])
    def test_wrongly_typed_entries_are_dropped(self, entry):
        """Test that entries with badly typed fields are dropped without raising."""
        assert normalize_variables([entry, {"name": "tone"}]) == [TemplateVariable(name="tone")]

    def test_wrongly_typed_string_payload(self):
        """Test that a legacy string payload with a bad entry keeps the good ones."""
        raw = json.dumps([{"name": "topic", "required": None, "default_value": 5}, {"name": "tone"}])

        assert [v.name for v in normalize_variables(raw)] == ["tone"]


# =============================================================================
# normalize_template Tests
# =============================================================================


class TestNormalizeTemplate:
    """Test suite for template normalization."""

    def test_array_variables(self):
        """Test that structured variables become TemplateVariable models."""
        template = normalize_template(raw_template(variables=RAW_VARIABLES))

        assert isinstance(template, Template)
        assert [v.name for v in template.variables] == ["topic", "tone"]
        assert template.variables[1].default_value == "Formal"
        assert template.variables[1].required is False

    def test_string_variables(self):
        """Test that legacy string-encoded variables are decoded."""
        template = normalize_template(raw_template(variables=json.dumps(RAW_VARIABLES)))

        assert [v.name for v in template.variables] == ["topic", "tone"]

    def test_malformed_variables_recovered(self):
        """Test that a malformed payload does not raise and yields no variables."""
        template = normalize_template(raw_template(variables="oops"))

        assert template.variables == []

    def test_absent_variables(self):
        """Test that a missing variables key yields an empty list."""
        template = normalize_template(raw_template())

        assert template.variables == []

    def test_null_fields_default(self):
        """Test that null optional strings become empty strings."""
        template = normalize_template(raw_template(description=None, category=None, variables=None))

        assert template.description == ""
        assert template.category == ""
        assert template.variables == []

    def test_unknown_variable_keys_ignored(self):
        """Test that backend-only keys on variables are ignored."""
        template = normalize_template(
            raw_template(variables=[{"name": "topic", "template_id": "tpl-1", "created_at": "2024-05-01T10:00:00Z"}])
        )

        assert template.variables == [TemplateVariable(name="topic")]

    def test_timestamps_parsed(self):
        """Test that RFC 3339 timestamps are parsed."""
        template = normalize_template(raw_template())

        assert template.created_at is not None
        assert template.created_at.year == 2024

    def test_list_none(self):
        """Test that a null list payload normalizes to no templates."""
        assert normalize_template_list(None) == []

    def test_list_mixed(self):
        """Test that each template in a list is normalized on its own."""
        templates = normalize_template_list([
            raw_template(id="a", variables=RAW_VARIABLES),
            raw_template(id="b", variables=json.dumps(RAW_VARIABLES)),
            raw_template(id="c", variables="bad"),
        ])

        assert [len(t.variables) for t in templates] == [2, 2, 0]

    def test_wrongly_typed_variables_do_not_fail_template(self):
        """Test that a template with a bad variable entry still normalizes."""
        template = normalize_template(
            raw_template(variables='[{"name": "topic", "required": null, "default_value": 5}]')
        )

        assert template.id == "tpl-1"
        assert template.variables == []

    def test_template_without_id_raises(self):
        """Test that a structurally broken template is not silently accepted."""
        raw = raw_template()
        del raw["id"]

        with pytest.raises(ValidationError):
            normalize_template(raw)
