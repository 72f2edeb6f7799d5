"""Core errors shared by every guichat module."""

from guichat.core.errors import (
    CapabilityNotFoundError,
    ConfigError,
    DuplicateToolNameError,
    GuiChatError,
    ImmutableFieldError,
    InvalidResultError,
    InvalidToolDefinitionError,
    InvalidUpdateError,
    InvocationStateError,
    NoHandlerForInputError,
    PluginExecutionError,
    RegistryError,
    RoleError,
    RoleNotFoundError,
    StoreError,
    UnknownResultError,
    UnknownToolError,
)

__all__ = [
    "CapabilityNotFoundError",
    "ConfigError",
    "DuplicateToolNameError",
    "GuiChatError",
    "ImmutableFieldError",
    "InvalidResultError",
    "InvalidToolDefinitionError",
    "InvalidUpdateError",
    "InvocationStateError",
    "NoHandlerForInputError",
    "PluginExecutionError",
    "RegistryError",
    "RoleError",
    "RoleNotFoundError",
    "StoreError",
    "UnknownResultError",
    "UnknownToolError",
]
