"""Plugin execution and result reconciliation engine.

Provides the result store, role-scoped tool registries, input routing
and the execution coordinator, wired together by :class:`ChatSession`.
"""

from guichat.engine.coordinator import ExecutionCoordinator, InvocationOutcome, ToolCall
from guichat.engine.events import EventBus, UiEvent, UiEventKind
from guichat.engine.machine import InvocationState
from guichat.engine.registry import ToolRegistry
from guichat.engine.roles import Role, RoleManager
from guichat.engine.router import HandlerMatch, InputRouter
from guichat.engine.session import ChatSession
from guichat.engine.store import ResultStore

__all__ = [
    "ChatSession",
    "EventBus",
    "ExecutionCoordinator",
    "HandlerMatch",
    "InputRouter",
    "InvocationOutcome",
    "InvocationState",
    "ResultStore",
    "Role",
    "RoleManager",
    "ToolCall",
    "ToolRegistry",
    "UiEvent",
    "UiEventKind",
]
