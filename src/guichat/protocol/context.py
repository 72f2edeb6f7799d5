"""Tool context and the host capability registry.

A fresh ``ToolContext`` is built for every invocation. Its ``app`` is a
``ToolContextApp``: plugin config accessors plus the named functions the
host chooses to expose (``generate_image``, ``browse``...). Plugins look
capabilities up by name and must handle their absence.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from guichat.core.errors import CapabilityNotFoundError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from guichat.protocol.results import ToolResultComplete
    from guichat.protocol.schema import PluginConfigSchema

logger = logging.getLogger(__name__)

_RESERVED = frozenset({"get_config", "set_config"})


class ToolContextApp:
    """Host-provided capabilities and plugin config values.

    Capabilities are registered explicitly by name. ``get`` returns
    ``None`` for a missing capability, ``require`` raises
    :class:`CapabilityNotFoundError`.
    """

    def __init__(
        self,
        capabilities: dict[str, Callable[..., Any]] | None = None,
        config: dict[str, Any] | None = None,
    ) -> None:
        self._capabilities: dict[str, Callable[..., Any]] = {}
        self._config: dict[str, Any] = dict(config or {})
        for name, fn in (capabilities or {}).items():
            self.register(name, fn)

    # ── Config ────────────────────────────────────────────────

    def get_config(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def set_config(self, key: str, value: Any) -> None:
        self._config[key] = value

    def seed_defaults(self, schemas: Iterable[PluginConfigSchema]) -> None:
        """Fill in defaults for keys that have no value yet."""
        for schema in schemas:
            self._config.setdefault(schema.key, schema.default_value)

    def config_snapshot(self) -> dict[str, Any]:
        return dict(self._config)

    # ── Capabilities ──────────────────────────────────────────

    def register(self, name: str, fn: Callable[..., Any]) -> None:
        """Expose *fn* to plugins under *name*.

        Raises:
            ValueError: If *name* is reserved or already registered,
                or *fn* is not callable.
        """
        if name in _RESERVED:
            msg = f"Capability name is reserved: {name}"
            raise ValueError(msg)
        if name in self._capabilities:
            msg = f"Capability already registered: {name}"
            raise ValueError(msg)
        if not callable(fn):
            msg = f"Capability {name} is not callable"
            raise ValueError(msg)
        self._capabilities[name] = fn
        logger.debug("Registered host capability %s", name)

    def get(self, name: str) -> Callable[..., Any] | None:
        return self._capabilities.get(name)

    def require(self, name: str) -> Callable[..., Any]:
        fn = self._capabilities.get(name)
        if fn is None:
            raise CapabilityNotFoundError(name)
        return fn

    def names(self) -> list[str]:
        return list(self._capabilities)

    def __contains__(self, name: str) -> bool:
        return name in self._capabilities


@dataclass(frozen=True, slots=True)
class ToolContext:
    """Read-only context passed to ``execute``."""

    current_result: ToolResultComplete | None = None
    app: ToolContextApp | None = None
