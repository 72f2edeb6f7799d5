"""Tests for tool definitions, samples and plugin config schemas."""

from __future__ import annotations

import pytest
from pydantic import TypeAdapter, ValidationError

from guichat.core.errors import InvalidToolDefinitionError
from guichat.protocol.schema import (
    BooleanFieldSchema,
    ConfigFieldSchema,
    MultiSelectFieldSchema,
    NumberFieldSchema,
    PluginConfigSchema,
    SelectFieldSchema,
    SelectOption,
    StringFieldSchema,
    ToolDefinition,
    ToolSample,
)

# ── ToolDefinition ───────────────────────────────────────────────


class TestToolDefinition:
    def test_default_parameters(self) -> None:
        td = ToolDefinition(name="bump", description="Increment")
        assert td.type == "function"
        assert td.parameters == {"type": "object", "properties": {}, "required": []}

    def test_to_openai(self) -> None:
        params = {
            "type": "object",
            "properties": {"location": {"type": "string"}},
            "required": ["location"],
        }
        td = ToolDefinition(name="showMap", description="Map", parameters=params)
        assert td.to_openai() == {
            "type": "function",
            "name": "showMap",
            "description": "Map",
            "parameters": params,
        }

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(InvalidToolDefinitionError, match="name"):
            ToolDefinition(name="", description="x")

    def test_non_object_parameters_rejected(self) -> None:
        with pytest.raises(InvalidToolDefinitionError, match="object"):
            ToolDefinition(name="t", description="x", parameters={"type": "array"})

    def test_properties_must_be_mapping(self) -> None:
        with pytest.raises(InvalidToolDefinitionError, match="properties"):
            ToolDefinition(
                name="t",
                description="x",
                parameters={"type": "object", "properties": ["a"]},
            )

    def test_property_must_be_mapping(self) -> None:
        with pytest.raises(InvalidToolDefinitionError, match="'a'"):
            ToolDefinition(
                name="t",
                description="x",
                parameters={"type": "object", "properties": {"a": "string"}},
            )

    def test_required_must_be_strings(self) -> None:
        with pytest.raises(InvalidToolDefinitionError, match="required"):
            ToolDefinition(
                name="t",
                description="x",
                parameters={"type": "object", "properties": {}, "required": [1]},
            )

    def test_required_must_name_declared_property(self) -> None:
        with pytest.raises(InvalidToolDefinitionError, match="query"):
            ToolDefinition(
                name="t",
                description="x",
                parameters={
                    "type": "object",
                    "properties": {"q": {"type": "string"}},
                    "required": ["query"],
                },
            )

    def test_missing_properties_and_required_allowed(self) -> None:
        td = ToolDefinition(name="t", description="x", parameters={"type": "object"})
        assert td.parameters == {"type": "object"}

    def test_none_parameters_become_empty_schema(self) -> None:
        td = ToolDefinition(name="t", description="x", parameters=None)
        assert td.parameters == {"type": "object", "properties": {}, "required": []}
        assert td.to_openai()["parameters"] == td.parameters

    @pytest.mark.parametrize("parameters", ["object", ["type", "object"], 3])
    def test_non_mapping_parameters_rejected(self, parameters: object) -> None:
        with pytest.raises(InvalidToolDefinitionError, match="must be a mapping"):
            ToolDefinition(name="t", description="x", parameters=parameters)  # type: ignore[arg-type]


class TestToolSample:
    def test_defaults(self) -> None:
        sample = ToolSample(name="Empty")
        assert sample.args == {}


# ── Config field schemas ─────────────────────────────────────────


class TestConfigFieldSchemas:
    def test_string_aliases(self) -> None:
        field = StringFieldSchema.model_validate(
            {"type": "string", "label": "Name", "minLength": 1, "maxLength": 20}
        )
        assert field.min_length == 1
        assert field.max_length == 20

    def test_discriminated_union(self) -> None:
        adapter = TypeAdapter(ConfigFieldSchema)
        assert isinstance(
            adapter.validate_python({"type": "number", "label": "N", "max": 5}),
            NumberFieldSchema,
        )
        assert isinstance(
            adapter.validate_python({"type": "boolean", "label": "B"}),
            BooleanFieldSchema,
        )
        multi = adapter.validate_python(
            {
                "type": "multiselect",
                "label": "Tags",
                "options": [{"value": "a", "label": "A"}],
                "maxItems": 2,
            }
        )
        assert isinstance(multi, MultiSelectFieldSchema)
        assert multi.max_items == 2

    def test_unknown_type_rejected(self) -> None:
        adapter = TypeAdapter(ConfigFieldSchema)
        with pytest.raises(ValidationError):
            adapter.validate_python({"type": "color", "label": "C"})

    def test_select_requires_options(self) -> None:
        with pytest.raises(ValidationError):
            SelectFieldSchema.model_validate({"type": "select", "label": "S"})


class TestPluginConfigSchema:
    def test_alias_and_field_names(self) -> None:
        by_alias = PluginConfigSchema.model_validate(
            {
                "key": "quiz.difficulty",
                "defaultValue": "easy",
                "schema": {
                    "type": "select",
                    "label": "Difficulty",
                    "options": [{"value": "easy", "label": "Easy"}],
                },
            }
        )
        by_name = PluginConfigSchema(
            key="quiz.difficulty",
            default_value="easy",
            schema_=SelectFieldSchema(
                label="Difficulty", options=[SelectOption(value="easy", label="Easy")]
            ),
        )
        assert by_alias == by_name
        assert isinstance(by_alias.schema_, SelectFieldSchema)

    def test_dump_by_alias(self) -> None:
        schema = PluginConfigSchema(
            key="map.zoom",
            default_value=3,
            schema_=NumberFieldSchema(label="Zoom"),
        )
        dumped = schema.model_dump(by_alias=True, exclude_none=True)
        assert dumped["defaultValue"] == 3
        assert dumped["schema"]["type"] == "number"

    def test_frozen(self) -> None:
        schema = PluginConfigSchema(
            key="k", default_value=True, schema_=BooleanFieldSchema(label="On")
        )
        with pytest.raises(ValidationError):
            schema.key = "other"  # type: ignore[misc]
