"""Tool results and the LLM-facing response.

``ToolResult`` is what a plugin's ``execute`` or an input handler
returns. The store turns it into a ``ToolResultComplete`` by assigning
``tool_name`` and ``uuid``. Only ``message``, ``json_data`` and
``instructions`` ever reach the LLM; ``data`` and ``view_state`` are
for the UI.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from typing import Any

from guichat.core.errors import InvalidResultError

# Flags steer the engine; they are never stored as content or merged.
_FLAG_FIELDS = frozenset({"updating", "cancelled"})


@dataclass(frozen=True, slots=True, kw_only=True)
class ToolResult:
    """Result returned from plugin execution or input handling."""

    message: str
    title: str | None = None
    json_data: Any = None
    instructions: str | None = None
    instructions_required: bool = False
    updating: bool = False
    cancelled: bool = False
    data: Any = None
    view_state: dict[str, Any] | None = None

    def validate(self, tool_name: str) -> None:
        """Raise InvalidResultError unless the result can be stored.

        ``message`` must be a non-empty string and ``view_state``, when
        set, a mapping.
        """
        if not isinstance(self.message, str):
            raise InvalidResultError(tool_name, "message must be a string")
        if not self.message.strip():
            raise InvalidResultError(tool_name, "message is empty")
        if self.view_state is not None and not isinstance(self.view_state, Mapping):
            kind = type(self.view_state).__name__
            reason = f"view_state must be a mapping, got {kind}"
            raise InvalidResultError(tool_name, reason)

    def content_fields(self) -> dict[str, Any]:
        """Fields an update applies: everything set, minus the flags."""
        out: dict[str, Any] = {}
        for f in fields(ToolResult):
            if f.name in _FLAG_FIELDS:
                continue
            value = getattr(self, f.name)
            if value is None:
                continue
            if f.name == "instructions_required" and not value:
                continue
            out[f.name] = value
        return out


@dataclass(frozen=True, slots=True, kw_only=True)
class ToolResultComplete(ToolResult):
    """A stored result with its engine-assigned identity."""

    tool_name: str
    uuid: str

    @classmethod
    def from_result(
        cls, result: ToolResult, *, tool_name: str, uuid: str
    ) -> ToolResultComplete:
        values = {
            f.name: copy.deepcopy(getattr(result, f.name)) for f in fields(ToolResult)
        }
        values["updating"] = False
        values["cancelled"] = False
        return cls(tool_name=tool_name, uuid=uuid, **values)

    def detached(self) -> ToolResultComplete:
        """Copy whose payload containers can be changed without touching this one."""
        return replace(
            self,
            json_data=copy.deepcopy(self.json_data),
            data=copy.deepcopy(self.data),
            view_state=copy.deepcopy(self.view_state),
        )


@dataclass(frozen=True, slots=True)
class LlmResponse:
    """Function-call response handed back to the LLM channel."""

    message: str
    json_data: Any = None
    instructions: str | None = None
    is_error: bool = False

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"message": self.message}
        if self.json_data is not None:
            payload["jsonData"] = self.json_data
        if self.instructions:
            payload["instructions"] = self.instructions
        return payload


def llm_response_for(
    result: ToolResult, *, suppress_instructions: bool = False
) -> LlmResponse:
    """Build the LLM response for *result*.

    Instructions are dropped when suppression is on, unless the result
    marks them as required.
    """
    instructions = result.instructions
    if suppress_instructions and not result.instructions_required:
        instructions = None
    return LlmResponse(
        message=result.message,
        json_data=result.json_data,
        instructions=instructions,
    )


@dataclass(frozen=True, slots=True)
class Placeholder:
    """Provisional UI item shown while a tool is executing."""

    call_id: str
    tool_name: str
    message: str
    chain_id: str | None = None
    target_uuid: str | None = None
