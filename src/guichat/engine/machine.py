"""Invocation state machine: states, context, transitions and guards.

Pure logic module. No IO (no plugin calls, no store writes). The
coordinator performs the work; this module keeps each invocation's
lifecycle legal:

    PENDING -> EXECUTING -> COMPLETED | CANCELLED | FAILED

FAILED is reachable from any non-terminal state.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from guichat.core.errors import InvocationStateError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from guichat.protocol.plugin import ToolPlugin
    from guichat.protocol.results import (
        LlmResponse,
        ToolResult,
        ToolResultComplete,
    )


class InvocationState(enum.Enum):
    """States in a tool invocation's lifecycle."""

    PENDING = "pending"
    EXECUTING = "executing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class InvocationSource(enum.Enum):
    """What started the invocation."""

    TOOL_CALL = "tool_call"
    INPUT = "input"


@dataclass
class InvocationContext:
    """Mutable state for one tool call or input event.

    Created by the coordinator per invocation and mutated as it moves
    through the state machine.
    """

    call_id: str
    tool_name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    source: InvocationSource = InvocationSource.TOOL_CALL
    chain_id: str | None = None
    target_uuid: str | None = None

    state: InvocationState = InvocationState.PENDING

    # Set while PENDING
    plugin: ToolPlugin | None = None

    # Set while EXECUTING
    current_result: ToolResultComplete | None = None
    result: ToolResult | None = None

    # Set on completion
    record: ToolResultComplete | None = None
    response: LlmResponse | None = None

    error: str | None = None


_VALID_TRANSITIONS: dict[InvocationState, frozenset[InvocationState]] = {
    InvocationState.PENDING: frozenset({InvocationState.EXECUTING}),
    InvocationState.EXECUTING: frozenset(
        {InvocationState.COMPLETED, InvocationState.CANCELLED}
    ),
    InvocationState.COMPLETED: frozenset(),
    InvocationState.CANCELLED: frozenset(),
    InvocationState.FAILED: frozenset(),
}

_TERMINAL_STATES: frozenset[InvocationState] = frozenset(
    {InvocationState.COMPLETED, InvocationState.CANCELLED, InvocationState.FAILED}
)


class InvocationStateMachine:
    """Validates transitions and guards, then mutates the context."""

    def __init__(self, context: InvocationContext) -> None:
        self._ctx = context

    @property
    def context(self) -> InvocationContext:
        return self._ctx

    @property
    def state(self) -> InvocationState:
        return self._ctx.state

    @property
    def is_terminal(self) -> bool:
        return self._ctx.state in _TERMINAL_STATES

    def can_transition(self, to: InvocationState) -> bool:
        """Check if a transition is valid without raising."""
        if self._ctx.state in _TERMINAL_STATES:
            return False
        if to == InvocationState.FAILED:
            return True
        if to not in _VALID_TRANSITIONS[self._ctx.state]:
            return False
        return self._check_guard(to) is None

    def transition(self, to: InvocationState) -> None:
        """Execute a state transition with guard validation.

        Raises:
            InvocationStateError: If the transition is invalid or a
                guard condition is not met.
        """
        current = self._ctx.state
        if current in _TERMINAL_STATES:
            msg = f"Cannot transition from terminal state {current.value}"
            raise InvocationStateError(msg)

        if to != InvocationState.FAILED:
            if to not in _VALID_TRANSITIONS[current]:
                msg = f"Invalid transition: {current.value} -> {to.value}"
                raise InvocationStateError(msg)
            guard_error = self._check_guard(to)
            if guard_error is not None:
                raise InvocationStateError(guard_error)

        self._ctx.state = to

    def fail(self, error: str) -> None:
        """Transition to FAILED with an error message."""
        self.transition(InvocationState.FAILED)
        self._ctx.error = error

    def valid_transitions(self) -> Sequence[InvocationState]:
        if self._ctx.state in _TERMINAL_STATES:
            return []
        candidates = [*_VALID_TRANSITIONS[self._ctx.state], InvocationState.FAILED]
        return [t for t in candidates if self.can_transition(t)]

    # ── Guards ────────────────────────────────────────────────

    def _check_guard(self, to: InvocationState) -> str | None:
        """Return an error message if a guard condition fails, else None."""
        ctx = self._ctx

        if to == InvocationState.EXECUTING:
            if ctx.plugin is None:
                return "Cannot execute: plugin not resolved"

        elif to == InvocationState.COMPLETED:
            if ctx.result is None:
                return "Cannot complete: no result"
            if ctx.result.cancelled:
                return "Cannot complete: result was cancelled"

        elif to == InvocationState.CANCELLED:
            if ctx.result is None or not ctx.result.cancelled:
                return "Cannot cancel: result is not cancelled"

        return None
