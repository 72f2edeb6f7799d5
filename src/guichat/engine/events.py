"""UI events emitted by the engine.

Renderers subscribe to an :class:`EventBus` and redraw from the
records they receive. Listeners run synchronously in emit order; a
failing listener is logged and does not stop the others.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from guichat.protocol.results import Placeholder, ToolResultComplete

logger = logging.getLogger(__name__)


class UiEventKind(enum.Enum):
    APPEND = "append"
    UPDATE = "update"
    SELECT = "select"
    GENERATING = "generating"
    GENERATING_DONE = "generating_done"


@dataclass(frozen=True, slots=True)
class UiEvent:
    """One change the UI should reflect.

    Record events carry ``record``; placeholder events carry
    ``placeholder``.
    """

    kind: UiEventKind
    record: ToolResultComplete | None = None
    placeholder: Placeholder | None = None


class EventBus:
    """Fan-out of UI events to subscribed listeners."""

    def __init__(self) -> None:
        self._listeners: list[Callable[[UiEvent], None]] = []

    def subscribe(self, listener: Callable[[UiEvent], None]) -> Callable[[], None]:
        """Add *listener*; returns a function that removes it again."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def emit(self, event: UiEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("UI listener failed on %s event", event.kind.value)

    def __len__(self) -> int:
        return len(self._listeners)
