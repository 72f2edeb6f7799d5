"""Tool plugin definition.

A plugin is data: a tool definition, an async ``execute``, display
messages, an enablement predicate, and optional input handlers, system
prompt fragment, backend requirements, settings and samples. Plugins
are registered once when a role is composed and never change after.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from guichat.protocol.context import ToolContext
    from guichat.protocol.inputs import InputHandler
    from guichat.protocol.results import ToolResult
    from guichat.protocol.schema import (
        PluginConfigSchema,
        ToolDefinition,
        ToolSample,
    )

    ExecuteFn = Callable[[ToolContext, dict[str, Any]], Awaitable[ToolResult]]


class BackendType(enum.Enum):
    """Backend capabilities a plugin may depend on."""

    TEXT_LLM = "text_llm"
    IMAGE_GEN = "image_gen"
    AUDIO = "audio"
    SEARCH = "search"
    BROWSE = "browse"
    MAP = "map"
    MULMOCAST = "mulmocast"


def always_enabled(start_response: Any = None) -> bool:
    return True


@dataclass(frozen=True, slots=True, kw_only=True)
class ToolPlugin:
    """A registered capability the LLM can call."""

    tool_definition: ToolDefinition
    execute: ExecuteFn
    generating_message: str
    is_enabled: Callable[[Any], bool] = always_enabled
    waiting_message: str | None = None
    upload_message: str | None = None
    delay_after_execution: float = 0.0
    system_prompt: str | None = None
    input_handlers: tuple[InputHandler, ...] = ()
    config_schema: PluginConfigSchema | None = None
    samples: tuple[ToolSample, ...] = ()
    backends: tuple[BackendType, ...] = ()

    @property
    def name(self) -> str:
        return self.tool_definition.name

    def enabled_for(
        self,
        start_response: Any = None,
        available_backends: frozenset[BackendType] | None = None,
    ) -> bool:
        """Whether the plugin should be offered right now.

        ``available_backends`` of ``None`` means the host provides all.
        """
        if available_backends is not None and not set(self.backends).issubset(
            available_backends
        ):
            return False
        return bool(self.is_enabled(start_response))
