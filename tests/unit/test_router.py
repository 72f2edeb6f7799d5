"""Tests for routing raw inputs to plugin handlers."""

from __future__ import annotations

import pytest

from guichat.core.errors import NoHandlerForInputError
from guichat.engine.roles import Role, RoleManager
from guichat.engine.router import InputRouter
from guichat.protocol.inputs import InputEvent, InputKind, UrlInputHandler
from guichat.protocol.plugin import BackendType, ToolPlugin
from guichat.protocol.results import ToolResult
from tests.fixtures.plugins import COUNTER, GENERAL, MAP, TUTOR


def _router(role_id: str = "general", **kwargs: object) -> InputRouter:
    roles = RoleManager([GENERAL, TUTOR], **kwargs)  # type: ignore[arg-type]
    roles.activate(role_id)
    return InputRouter(roles)


class TestRoute:
    def test_url_pattern_picks_map(self) -> None:
        match = _router().route(InputEvent(InputKind.URL, "https://maps.example/x"))
        assert match.plugin is MAP
        assert match.tool_name == "showMap"

    def test_non_matching_url_dropped(self, caplog: pytest.LogCaptureFixture) -> None:
        with pytest.raises(NoHandlerForInputError, match="url"):
            _router().route(InputEvent(InputKind.URL, "https://example.com"))
        assert "Dropping url input" in caplog.text

    def test_file_by_mime_type(self) -> None:
        event = InputEvent(
            InputKind.FILE, "data:...", {"mime_type": "application/pdf"}
        )
        assert _router().route(event).tool_name == "readDocument"

    def test_rejected_file_type(self) -> None:
        event = InputEvent(InputKind.FILE, "data:...", {"mime_type": "image/png"})
        with pytest.raises(NoHandlerForInputError):
            _router().route(event)

    def test_scoped_to_active_role(self) -> None:
        with pytest.raises(NoHandlerForInputError):
            _router("tutor").route(InputEvent(InputKind.URL, "https://maps.example/x"))

    def test_unavailable_backend_hides_handler(self) -> None:
        router = _router(available_backends=frozenset({BackendType.TEXT_LLM}))
        with pytest.raises(NoHandlerForInputError):
            router.route(InputEvent(InputKind.URL, "https://maps.example/x"))

    def test_first_registered_plugin_wins(self) -> None:
        def _first(url: str) -> ToolResult:
            return ToolResult(message="first")

        def _second(url: str) -> ToolResult:
            return ToolResult(message="second")

        first = ToolPlugin(
            tool_definition=COUNTER.tool_definition,
            execute=COUNTER.execute,
            generating_message="",
            input_handlers=(UrlInputHandler(handle_input=_first),),
        )
        second = ToolPlugin(
            tool_definition=MAP.tool_definition,
            execute=MAP.execute,
            generating_message="",
            input_handlers=(UrlInputHandler(handle_input=_second),),
        )
        role = Role(id="r", name="R", system_prompt="", plugins=(first, second))
        roles = RoleManager([role])
        roles.activate("r")
        match = InputRouter(roles).route(InputEvent(InputKind.URL, "https://x"))
        assert match.plugin is first

    def test_long_payload_truncated_in_error(self) -> None:
        with pytest.raises(NoHandlerForInputError) as exc_info:
            _router().route(InputEvent(InputKind.TEXT, "x" * 500))
        assert len(str(exc_info.value)) < 200


class TestAccepts:
    def test_accepts(self) -> None:
        router = _router()
        assert router.accepts(InputEvent(InputKind.TEXT, "note: buy milk"))
        assert not router.accepts(InputEvent(InputKind.TEXT, "hello"))
