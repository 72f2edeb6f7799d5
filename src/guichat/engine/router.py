"""Input handler router: match raw inputs to a plugin's handler."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from guichat.core.errors import NoHandlerForInputError

if TYPE_CHECKING:
    from guichat.engine.roles import RoleManager
    from guichat.protocol.inputs import InputEvent, InputHandler
    from guichat.protocol.plugin import ToolPlugin

logger = logging.getLogger(__name__)

_PREVIEW_LEN = 80


@dataclass(frozen=True, slots=True)
class HandlerMatch:
    """The handler chosen for an event and the plugin that owns it."""

    plugin: ToolPlugin
    handler: InputHandler

    @property
    def tool_name(self) -> str:
        return self.plugin.name


class InputRouter:
    """First-match routing over the active role's enabled plugins."""

    def __init__(self, roles: RoleManager) -> None:
        self._roles = roles

    def route(self, event: InputEvent, start_response: Any = None) -> HandlerMatch:
        """Pick the handler for *event*.

        Plugins are scanned in registration order and each plugin's
        handlers in declaration order; the first match wins.

        Raises:
            NoHandlerForInputError: If nothing matches. The event is
                dropped.
        """
        for plugin in self._roles.active_plugins(start_response):
            for handler in plugin.input_handlers:
                if handler.matches(event):
                    logger.debug(
                        "Routed %s input to %s", event.kind.value, plugin.name
                    )
                    return HandlerMatch(plugin=plugin, handler=handler)

        preview = event.payload[:_PREVIEW_LEN]
        logger.warning("Dropping %s input, no handler: %r", event.kind.value, preview)
        raise NoHandlerForInputError(event.kind.value, preview)

    def accepts(self, event: InputEvent, start_response: Any = None) -> bool:
        """Whether some active handler would take *event*."""
        return any(
            handler.matches(event)
            for plugin in self._roles.active_plugins(start_response)
            for handler in plugin.input_handlers
        )
