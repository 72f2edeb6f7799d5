"""Tool registry: name-indexed plugins for one role.

Provides registration, lookup, and the list of tool definitions to
advertise to the LLM. Enablement is evaluated on every call so that
availability can change mid-conversation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from guichat.core.errors import DuplicateToolNameError, UnknownToolError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from guichat.protocol.plugin import BackendType, ToolPlugin
    from guichat.protocol.schema import ToolDefinition


class ToolRegistry:
    """Registry of plugins, in registration order.

    Args:
        available_backends: Backends the host provides. Plugins that
            declare a backend outside this set are never advertised.
            ``None`` means every backend is available.
    """

    def __init__(
        self,
        plugins: Iterable[ToolPlugin] = (),
        *,
        available_backends: frozenset[BackendType] | None = None,
    ) -> None:
        self._plugins: dict[str, ToolPlugin] = {}
        self._available_backends = available_backends
        for plugin in plugins:
            self.register(plugin)

    def register(self, plugin: ToolPlugin) -> None:
        """Register a plugin.

        Raises:
            DuplicateToolNameError: If a plugin with the same tool name
                is already registered.
        """
        name = plugin.name
        if name in self._plugins:
            raise DuplicateToolNameError(name)
        self._plugins[name] = plugin

    def lookup(self, name: str) -> ToolPlugin:
        """Get a plugin by tool name.

        Raises:
            UnknownToolError: If the tool is not registered.
        """
        plugin = self._plugins.get(name)
        if plugin is None:
            raise UnknownToolError(name)
        return plugin

    def active_plugins(self, start_response: Any = None) -> list[ToolPlugin]:
        """Plugins currently enabled, in registration order."""
        return [
            p
            for p in self._plugins.values()
            if p.enabled_for(start_response, self._available_backends)
        ]

    def active_definitions(self, start_response: Any = None) -> list[ToolDefinition]:
        """Tool definitions to advertise to the LLM right now."""
        return [p.tool_definition for p in self.active_plugins(start_response)]

    def plugins(self) -> list[ToolPlugin]:
        """All registered plugins, enabled or not."""
        return list(self._plugins.values())

    def names(self) -> list[str]:
        return list(self._plugins.keys())

    def __len__(self) -> int:
        return len(self._plugins)

    def __contains__(self, name: str) -> bool:
        return name in self._plugins
