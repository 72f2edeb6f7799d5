"""Exception hierarchy for guichat.

Every module imports from here. The hierarchy is:

    GuiChatError
    ├── RegistryError
    │   ├── DuplicateToolNameError(tool_name)
    │   ├── UnknownToolError(tool_name)
    │   └── InvalidToolDefinitionError
    ├── StoreError
    │   ├── UnknownResultError(uuid)
    │   ├── ImmutableFieldError(field_name)
    │   └── InvalidUpdateError
    ├── RoleError
    │   └── RoleNotFoundError(role_id)
    ├── NoHandlerForInputError(kind)
    ├── InvalidResultError(tool_name)
    ├── PluginExecutionError(tool_name, cause)
    ├── InvocationStateError
    ├── CapabilityNotFoundError(name)
    └── ConfigError
"""

from __future__ import annotations


class GuiChatError(Exception):
    """Base exception for all guichat errors."""


# ─── Registry Errors ──────────────────────────────────────────


class RegistryError(GuiChatError):
    """Base for tool registry misconfiguration."""


class DuplicateToolNameError(RegistryError):
    """A plugin with the same tool name is already registered."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Tool already registered: {tool_name}")


class UnknownToolError(RegistryError):
    """No plugin with this tool name is available."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Tool not found: {tool_name}")


class InvalidToolDefinitionError(RegistryError):
    """Tool definition parameters are not structurally valid."""


# ─── Store Errors ─────────────────────────────────────────────


class StoreError(GuiChatError):
    """Base for result store errors."""


class UnknownResultError(StoreError):
    """No stored result carries this uuid."""

    def __init__(self, uuid: str) -> None:
        self.uuid = uuid
        super().__init__(f"Result not found: {uuid}")


class ImmutableFieldError(StoreError):
    """An update tried to change an engine-assigned identifier."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f"Field cannot be updated: {field_name}")


class InvalidUpdateError(StoreError):
    """An update names fields that a result does not have."""


# ─── Role Errors ──────────────────────────────────────────────


class RoleError(GuiChatError):
    """Base for role configuration errors."""


class RoleNotFoundError(RoleError):
    """Requested role identifier is not registered."""

    def __init__(self, role_id: str) -> None:
        self.role_id = role_id
        super().__init__(f"Role not found: {role_id}")


# ─── Execution Errors ─────────────────────────────────────────


class NoHandlerForInputError(GuiChatError):
    """No active input handler accepts this input event."""

    def __init__(self, kind: str, detail: str = "") -> None:
        self.kind = kind
        msg = f"No handler for {kind} input"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class InvalidResultError(GuiChatError):
    """A plugin returned a result without a usable message."""

    def __init__(self, tool_name: str, reason: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Invalid result from {tool_name}: {reason}")


class PluginExecutionError(GuiChatError):
    """A plugin raised while executing or handling input."""

    def __init__(self, tool_name: str, cause: BaseException) -> None:
        self.tool_name = tool_name
        self.cause = cause
        super().__init__(f"The tool {tool_name} failed: {cause}")


class InvocationStateError(GuiChatError):
    """Illegal transition in a tool invocation's lifecycle."""


class CapabilityNotFoundError(GuiChatError):
    """The host did not provide the requested capability."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Capability not provided by host: {name}")


# ─── Configuration Errors ─────────────────────────────────────


class ConfigError(GuiChatError):
    """Invalid configuration."""
