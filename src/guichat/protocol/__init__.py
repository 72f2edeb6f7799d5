"""GUI chat protocol types: definitions, plugins, results, input handlers."""

from guichat.protocol.context import ToolContext, ToolContextApp
from guichat.protocol.inputs import (
    AudioInputHandler,
    CameraInputHandler,
    ClipboardImageInputHandler,
    FileInputHandler,
    InputEvent,
    InputHandler,
    InputKind,
    TextInputHandler,
    UrlInputHandler,
)
from guichat.protocol.plugin import BackendType, ToolPlugin, always_enabled
from guichat.protocol.results import (
    LlmResponse,
    Placeholder,
    ToolResult,
    ToolResultComplete,
    llm_response_for,
)
from guichat.protocol.schema import (
    BooleanFieldSchema,
    ConfigFieldSchema,
    ConfigValue,
    JsonSchemaProperty,
    MultiSelectFieldSchema,
    NumberFieldSchema,
    PluginConfigSchema,
    SelectFieldSchema,
    SelectOption,
    StringFieldSchema,
    ToolDefinition,
    ToolSample,
)

__all__ = [
    "AudioInputHandler",
    "BackendType",
    "BooleanFieldSchema",
    "CameraInputHandler",
    "ClipboardImageInputHandler",
    "ConfigFieldSchema",
    "ConfigValue",
    "FileInputHandler",
    "InputEvent",
    "InputHandler",
    "InputKind",
    "JsonSchemaProperty",
    "LlmResponse",
    "MultiSelectFieldSchema",
    "NumberFieldSchema",
    "Placeholder",
    "PluginConfigSchema",
    "SelectFieldSchema",
    "SelectOption",
    "StringFieldSchema",
    "TextInputHandler",
    "ToolContext",
    "ToolContextApp",
    "ToolDefinition",
    "ToolPlugin",
    "ToolResult",
    "ToolResultComplete",
    "ToolSample",
    "UrlInputHandler",
    "always_enabled",
    "llm_response_for",
]
