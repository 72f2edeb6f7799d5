"""Tests for RoleManager: registration, activation, scoped queries."""

from __future__ import annotations

import pytest

from guichat.core.errors import (
    DuplicateToolNameError,
    RoleError,
    RoleNotFoundError,
    UnknownToolError,
)
from guichat.engine.roles import Role, RoleManager
from guichat.protocol.plugin import BackendType
from tests.fixtures.plugins import COUNTER, GENERAL, MAP, QUIZ, SEARCH, TUTOR


def _manager(**kwargs: object) -> RoleManager:
    return RoleManager([GENERAL, TUTOR], **kwargs)  # type: ignore[arg-type]


class TestRegistration:
    def test_roles_in_order(self) -> None:
        assert [r.id for r in _manager().roles()] == ["general", "tutor"]

    def test_duplicate_role_id(self) -> None:
        mgr = _manager()
        with pytest.raises(RoleError, match="general"):
            mgr.register(Role(id="general", name="Again", system_prompt=""))

    def test_duplicate_tool_in_role(self) -> None:
        with pytest.raises(DuplicateToolNameError):
            RoleManager(
                [Role(id="r", name="R", system_prompt="", plugins=(QUIZ, QUIZ))]
            )

    def test_get(self) -> None:
        mgr = _manager()
        assert mgr.get("tutor") is TUTOR
        with pytest.raises(RoleNotFoundError):
            mgr.get("ghost")


class TestActivation:
    def test_nothing_active_initially(self) -> None:
        mgr = _manager()
        assert mgr.active_role is None
        assert mgr.active_plugins() == []
        assert mgr.system_prompt() == ""
        with pytest.raises(UnknownToolError):
            mgr.lookup("putQuestions")

    def test_activate_switches_tool_set(self) -> None:
        mgr = _manager()
        mgr.activate("general")
        assert mgr.lookup("bump") is COUNTER

        mgr.activate("tutor")
        assert mgr.active_role is TUTOR
        assert [p.name for p in mgr.active_plugins()] == ["putQuestions"]
        with pytest.raises(UnknownToolError):
            mgr.lookup("bump")

    def test_unknown_role_keeps_previous(self) -> None:
        mgr = _manager()
        mgr.activate("tutor")
        with pytest.raises(RoleNotFoundError, match="ghost"):
            mgr.activate("ghost")
        assert mgr.active_role is TUTOR

    def test_activation_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        mgr = _manager()
        with caplog.at_level("INFO", logger="guichat.engine.roles"):
            mgr.activate("tutor")
        assert "Activated role tutor" in caplog.text


class TestScopedQueries:
    def test_system_prompt_joins_fragments(self) -> None:
        mgr = _manager()
        mgr.activate("general")
        assert mgr.system_prompt() == (
            "You are a helpful assistant.\n\n"
            "Use putQuestions to quiz the user.\n\n"
            "Use showMap for places."
        )

    def test_system_prompt_includes_enabled_only(self) -> None:
        mgr = _manager()
        mgr.activate("general")
        assert "Use search" in mgr.system_prompt({"hasSearch": True})

    def test_backends_limit_advertisement(self) -> None:
        mgr = _manager(available_backends=frozenset({BackendType.SEARCH}))
        mgr.activate("general")
        names = [d.name for d in mgr.active_definitions({"hasSearch": True})]
        assert "showMap" not in names
        assert "search" in names
        assert "Use showMap" not in mgr.system_prompt()

    def test_empty_role_prompt(self) -> None:
        mgr = RoleManager([Role(id="r", name="R", system_prompt="", plugins=(MAP,))])
        mgr.activate("r")
        assert mgr.system_prompt() == "Use showMap for places."

    def test_lookup_of_disabled_plugin(self) -> None:
        mgr = _manager()
        mgr.activate("general")
        assert mgr.lookup("search") is SEARCH
