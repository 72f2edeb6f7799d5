"""Tests for the UI event bus."""

from __future__ import annotations

from guichat.engine.events import EventBus, UiEvent, UiEventKind


class TestEventBus:
    def test_emit_in_subscription_order(self) -> None:
        bus = EventBus()
        seen: list[str] = []
        bus.subscribe(lambda e: seen.append("a"))
        bus.subscribe(lambda e: seen.append("b"))
        bus.emit(UiEvent(kind=UiEventKind.APPEND))
        assert seen == ["a", "b"]

    def test_unsubscribe(self) -> None:
        bus = EventBus()
        seen: list[UiEvent] = []
        unsubscribe = bus.subscribe(seen.append)
        assert len(bus) == 1
        unsubscribe()
        unsubscribe()
        assert len(bus) == 0
        bus.emit(UiEvent(kind=UiEventKind.SELECT))
        assert seen == []

    def test_failing_listener_does_not_stop_others(self, caplog) -> None:
        bus = EventBus()
        seen: list[UiEvent] = []

        def _broken(event: UiEvent) -> None:
            msg = "render failed"
            raise RuntimeError(msg)

        bus.subscribe(_broken)
        bus.subscribe(seen.append)
        bus.emit(UiEvent(kind=UiEventKind.UPDATE))

        assert len(seen) == 1
        assert "UI listener failed" in caplog.text
