"""Chat session: one engine instance per conversation.

Wires the store, event bus, role manager, router and coordinator
together and exposes the operations a host application needs. Nothing
here is module-level state; create as many sessions as you like.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from guichat.config.schema import GuiChatConfig
from guichat.core.errors import ConfigError
from guichat.engine.coordinator import ExecutionCoordinator, ToolCall
from guichat.engine.events import EventBus
from guichat.engine.roles import RoleManager
from guichat.engine.router import InputRouter
from guichat.engine.store import ResultStore
from guichat.protocol.context import ToolContextApp
from guichat.protocol.plugin import BackendType

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from guichat.engine.coordinator import InvocationOutcome
    from guichat.engine.events import UiEvent
    from guichat.engine.roles import Role
    from guichat.protocol.inputs import InputEvent
    from guichat.protocol.results import ToolResultComplete
    from guichat.protocol.schema import PluginConfigSchema

logger = logging.getLogger(__name__)


def _available_backends(names: list[str]) -> frozenset[BackendType] | None:
    """Parse configured backend names; an empty list means all."""
    if not names:
        return None
    try:
        return frozenset(BackendType(n) for n in names)
    except ValueError as e:
        valid = ", ".join(b.value for b in BackendType)
        msg = f"Unknown backend in {names} (valid: {valid})"
        raise ConfigError(msg) from e


class ChatSession:
    """Engine for a single conversation.

    Args:
        roles: Roles the user or LLM may switch between.
        config: Loaded configuration; defaults if omitted.
        app: Host capabilities. Plugin config defaults from every
            role's plugins are seeded into it, then
            ``config.plugins.values`` on top.
    """

    def __init__(
        self,
        roles: Iterable[Role] = (),
        *,
        config: GuiChatConfig | None = None,
        app: ToolContextApp | None = None,
    ) -> None:
        self.config = config or GuiChatConfig()
        self.bus = EventBus()
        self.store = ResultStore(self.bus)
        self.roles = RoleManager(
            roles,
            available_backends=_available_backends(self.config.backends.available),
        )
        self.router = InputRouter(self.roles)
        self.app = app or ToolContextApp()

        self.app.seed_defaults(self._all_config_schemas())
        for key, value in self.config.plugins.values.items():
            self.app.set_config(key, value)

        self.coordinator = ExecutionCoordinator(
            self.store,
            self.roles,
            self.router,
            bus=self.bus,
            app=self.app,
            config=self.config.engine,
        )

    # ── Roles and advertisement ───────────────────────────────

    def activate_role(self, role_id: str) -> Role:
        """Switch roles. Stored results are left untouched."""
        return self.roles.activate(role_id)

    def tool_definitions(self, start_response: Any = None) -> list[dict[str, Any]]:
        """Definitions to send to the LLM, OpenAI function-calling form."""
        return [d.to_openai() for d in self.roles.active_definitions(start_response)]

    def system_prompt(self, start_response: Any = None) -> str:
        return self.roles.system_prompt(start_response)

    def settings_schemas(self) -> list[PluginConfigSchema]:
        """Config schemas of the active role's plugins, for a settings UI."""
        return [
            p.config_schema
            for p in self.roles.active_plugins()
            if p.config_schema is not None
        ]

    # ── Invocation ────────────────────────────────────────────

    async def call_tool(self, call: ToolCall) -> InvocationOutcome:
        return await self.coordinator.call_tool(call)

    async def handle_input(
        self,
        event: InputEvent,
        start_response: Any = None,
        *,
        chain_id: str | None = None,
        target_uuid: str | None = None,
    ) -> InvocationOutcome:
        return await self.coordinator.handle_input(
            event, start_response, chain_id=chain_id, target_uuid=target_uuid
        )

    async def run_sample(self, tool_name: str, index: int = 0) -> InvocationOutcome:
        """Call *tool_name* with one of its declared samples.

        Raises:
            UnknownToolError: If the active role has no such tool.
            IndexError: If the plugin has no sample at *index*.
        """
        plugin = self.roles.lookup(tool_name)
        if not 0 <= index < len(plugin.samples):
            msg = f"{tool_name} has no sample #{index}"
            raise IndexError(msg)
        sample = plugin.samples[index]
        logger.debug("Running sample %r of %s", sample.name, tool_name)
        call = ToolCall(name=tool_name, arguments=dict(sample.args))
        return await self.call_tool(call)

    # ── View-side operations ──────────────────────────────────

    async def update_result(
        self, uuid: str, partial: Mapping[str, Any]
    ) -> ToolResultComplete:
        """Apply an update coming from a result's view (e.g. ``view_state``)."""
        return await self.coordinator.update_result(uuid, partial)

    def select(self, uuid: str) -> ToolResultComplete:
        return self.store.select(uuid)

    def subscribe(self, listener: Callable[[UiEvent], None]) -> Callable[[], None]:
        return self.bus.subscribe(listener)

    # ── Internals ─────────────────────────────────────────────

    def _all_config_schemas(self) -> list[PluginConfigSchema]:
        seen: set[str] = set()
        schemas: list[PluginConfigSchema] = []
        for role in self.roles.roles():
            for plugin in role.plugins:
                schema = plugin.config_schema
                if schema is not None and schema.key not in seen:
                    seen.add(schema.key)
                    schemas.append(schema)
        return schemas
