"""Role manager: the active tool set and system prompt.

A role pairs an ordered set of plugins with a system prompt. Each
registered role gets its own :class:`ToolRegistry`, built (and checked
for duplicate tool names) at registration time. Activation swaps a
single immutable snapshot, so a concurrent lookup sees either the old
role or the new one, never a mix.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from guichat.core.errors import RoleError, RoleNotFoundError, UnknownToolError
from guichat.engine.registry import ToolRegistry

if TYPE_CHECKING:
    from collections.abc import Iterable

    from guichat.protocol.plugin import BackendType, ToolPlugin
    from guichat.protocol.schema import ToolDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Role:
    """A named tool subset with its system prompt."""

    id: str
    name: str
    system_prompt: str
    plugins: tuple[ToolPlugin, ...] = ()


@dataclass(frozen=True, slots=True)
class _ActiveRole:
    role: Role
    registry: ToolRegistry


class RoleManager:
    """Owns the registered roles and the currently active one."""

    def __init__(
        self,
        roles: Iterable[Role] = (),
        *,
        available_backends: frozenset[BackendType] | None = None,
    ) -> None:
        self._available_backends = available_backends
        self._roles: dict[str, _ActiveRole] = {}
        self._active: _ActiveRole | None = None
        for role in roles:
            self.register(role)

    # ── Registration ─────────────────────────────────────────────

    def register(self, role: Role) -> None:
        """Register *role* and build its tool registry.

        Raises:
            RoleError: If a role with the same id is already registered.
            DuplicateToolNameError: If two of the role's plugins share a
                tool name.
        """
        if role.id in self._roles:
            msg = f"Role already registered: {role.id}"
            raise RoleError(msg)
        registry = ToolRegistry(
            role.plugins, available_backends=self._available_backends
        )
        self._roles[role.id] = _ActiveRole(role=role, registry=registry)

    def get(self, role_id: str) -> Role:
        """Raises RoleNotFoundError for an unknown id."""
        entry = self._roles.get(role_id)
        if entry is None:
            raise RoleNotFoundError(role_id)
        return entry.role

    def roles(self) -> list[Role]:
        return [entry.role for entry in self._roles.values()]

    # ── Activation ───────────────────────────────────────────────

    def activate(self, role_id: str) -> Role:
        """Make *role_id* the active role.

        Raises:
            RoleNotFoundError: If the role is not registered. The
                previously active role stays active.
        """
        entry = self._roles.get(role_id)
        if entry is None:
            raise RoleNotFoundError(role_id)
        previous = self._active
        self._active = entry
        logger.info(
            "Activated role %s (was %s)",
            role_id,
            previous.role.id if previous else None,
        )
        return entry.role

    @property
    def active_role(self) -> Role | None:
        active = self._active
        return active.role if active else None

    # ── Scoped queries ───────────────────────────────────────────

    def lookup(self, name: str) -> ToolPlugin:
        """Find *name* in the active role.

        Raises:
            UnknownToolError: If no role is active or the active role
                has no such tool.
        """
        active = self._active
        if active is None:
            raise UnknownToolError(name)
        return active.registry.lookup(name)

    def active_plugins(self, start_response: Any = None) -> list[ToolPlugin]:
        active = self._active
        if active is None:
            return []
        return active.registry.active_plugins(start_response)

    def active_definitions(self, start_response: Any = None) -> list[ToolDefinition]:
        return [p.tool_definition for p in self.active_plugins(start_response)]

    def system_prompt(self, start_response: Any = None) -> str:
        """The role prompt followed by enabled plugins' prompt fragments."""
        active = self._active
        if active is None:
            return ""
        parts = [active.role.system_prompt] if active.role.system_prompt else []
        parts.extend(
            p.system_prompt
            for p in active.registry.active_plugins(start_response)
            if p.system_prompt
        )
        return "\n\n".join(parts)
