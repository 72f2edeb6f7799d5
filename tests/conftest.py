"""Shared test fixtures for guichat."""

from __future__ import annotations

from typing import Any

import pytest

from guichat.config.schema import EngineConfig, GuiChatConfig
from guichat.engine.events import EventBus, UiEvent
from guichat.engine.session import ChatSession
from guichat.engine.store import ResultStore
from guichat.protocol.results import ToolResult
from tests.fixtures.plugins import ROLES


@pytest.fixture(autouse=True)
def _isolate_config_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Any
) -> None:
    """Keep the developer's config files and env vars out of tests."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for var in (
        "GUICHAT_CONFIG",
        "GUICHAT_LOG_LEVEL",
        "GUICHAT_BACKENDS",
        "GUICHAT_SUPPRESS_INSTRUCTIONS",
        "GUICHAT_ROLES",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def events() -> list[UiEvent]:
    return []


@pytest.fixture
def bus(events: list[UiEvent]) -> EventBus:
    """Event bus that records every emitted event."""
    bus = EventBus()
    bus.subscribe(events.append)
    return bus


@pytest.fixture
def store(bus: EventBus) -> ResultStore:
    return ResultStore(bus)


@pytest.fixture
def make_result() -> Any:
    """Factory fixture for ToolResult with sensible defaults."""

    def _make(**overrides: Any) -> ToolResult:
        defaults: dict[str, Any] = {"message": "Done."}
        defaults.update(overrides)
        return ToolResult(**defaults)

    return _make


@pytest.fixture
def make_session() -> Any:
    """Factory fixture for a session over the sample roles."""

    def _make(role_id: str | None = "general", **engine: Any) -> ChatSession:
        config = GuiChatConfig(engine=EngineConfig(**engine))
        session = ChatSession(ROLES, config=config)
        if role_id is not None:
            session.activate_role(role_id)
        return session

    return _make


@pytest.fixture
def session(make_session: Any) -> ChatSession:
    """Session with the general role active and execution delays off."""
    return make_session(honor_execution_delay=False)
