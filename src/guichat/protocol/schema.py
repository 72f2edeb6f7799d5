"""Tool definitions and plugin settings schemas.

``ToolDefinition`` advertises a plugin to the LLM in OpenAI-compatible
function-calling form. Only the structural shape of ``parameters`` is
checked; JSON Schema semantics are left to the model provider.

The ``*FieldSchema`` models describe user-editable plugin settings for a
generic settings UI. The engine exposes them but never validates values
against their bounds.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from guichat.core.errors import InvalidToolDefinitionError

# JSON Schema property: {"type": ..., "description": ..., "enum": [...], ...}
JsonSchemaProperty = dict[str, Any]

ConfigValue = str | int | float | bool | list[str]


def _empty_parameters() -> dict[str, Any]:
    return {"type": "object", "properties": {}, "required": []}


def _check_parameters(name: str, parameters: Mapping[str, Any]) -> None:
    """Raise InvalidToolDefinitionError if *parameters* is not object-shaped."""
    if parameters.get("type") != "object":
        msg = f"{name}: parameters.type must be 'object'"
        raise InvalidToolDefinitionError(msg)

    properties = parameters.get("properties", {})
    if not isinstance(properties, Mapping):
        msg = f"{name}: parameters.properties must be a mapping"
        raise InvalidToolDefinitionError(msg)
    for prop_name, prop in properties.items():
        if not isinstance(prop, Mapping):
            msg = f"{name}: property {prop_name!r} must be a mapping"
            raise InvalidToolDefinitionError(msg)

    required = parameters.get("required", [])
    if not isinstance(required, list) or not all(
        isinstance(r, str) for r in required
    ):
        msg = f"{name}: parameters.required must be a list of strings"
        raise InvalidToolDefinitionError(msg)
    missing = [r for r in required if r not in properties]
    if missing:
        msg = f"{name}: required names undeclared properties: {', '.join(missing)}"
        raise InvalidToolDefinitionError(msg)


@dataclass(frozen=True, slots=True)
class ToolDefinition:
    """Schema definition for a tool, suitable for passing to providers."""

    name: str
    description: str
    parameters: dict[str, Any] | None = field(default_factory=_empty_parameters)
    type: Literal["function"] = "function"

    def __post_init__(self) -> None:
        if not self.name:
            msg = "Tool definition requires a name"
            raise InvalidToolDefinitionError(msg)
        params = self.parameters
        if params is None:
            params = _empty_parameters()
            object.__setattr__(self, "parameters", params)
        elif not isinstance(params, Mapping):
            msg = f"{self.name}: parameters must be a mapping"
            raise InvalidToolDefinitionError(msg)
        _check_parameters(self.name, params)

    def to_openai(self) -> dict[str, Any]:
        """Render in OpenAI function-calling format."""
        return {
            "type": self.type,
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }


@dataclass(frozen=True, slots=True)
class ToolSample:
    """Named sample arguments for trying a tool without the LLM."""

    name: str
    args: dict[str, Any] = field(default_factory=dict)


# ── Plugin config schema ──────────────────────────────────────


class _BaseField(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    label: str
    description: str | None = None
    required: bool = False


class StringFieldSchema(_BaseField):
    type: Literal["string"] = "string"
    placeholder: str | None = None
    min_length: int | None = Field(default=None, alias="minLength")
    max_length: int | None = Field(default=None, alias="maxLength")
    pattern: str | None = None


class NumberFieldSchema(_BaseField):
    type: Literal["number"] = "number"
    min: float | None = None
    max: float | None = None
    step: float | None = None


class BooleanFieldSchema(_BaseField):
    type: Literal["boolean"] = "boolean"


class SelectOption(BaseModel):
    """One choice in a select or multiselect field."""

    model_config = ConfigDict(frozen=True)

    value: str
    label: str
    description: str | None = None
    disabled: bool = False


class SelectFieldSchema(_BaseField):
    type: Literal["select"] = "select"
    options: list[SelectOption]


class MultiSelectFieldSchema(_BaseField):
    type: Literal["multiselect"] = "multiselect"
    options: list[SelectOption]
    min_items: int | None = Field(default=None, alias="minItems")
    max_items: int | None = Field(default=None, alias="maxItems")


ConfigFieldSchema = Annotated[
    StringFieldSchema
    | NumberFieldSchema
    | BooleanFieldSchema
    | SelectFieldSchema
    | MultiSelectFieldSchema,
    Field(discriminator="type"),
]


class PluginConfigSchema(BaseModel):
    """A single user-editable plugin setting and its default."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key: str
    default_value: ConfigValue = Field(alias="defaultValue")
    schema_: ConfigFieldSchema = Field(alias="schema")
