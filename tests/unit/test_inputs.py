"""Tests for input events and the built-in handler types."""

from __future__ import annotations

from typing import Any

import pytest

from guichat.protocol.inputs import (
    AudioInputHandler,
    CameraInputHandler,
    ClipboardImageInputHandler,
    FileInputHandler,
    InputEvent,
    InputKind,
    TextInputHandler,
    UrlInputHandler,
    pattern_matches,
)


def _echo(*args: Any) -> tuple[Any, ...]:
    return args


class TestInputEvent:
    def test_kind_coerced_from_string(self) -> None:
        event = InputEvent("clipboard-image", "data:image/png;base64,AAA")
        assert event.kind is InputKind.CLIPBOARD_IMAGE

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ValueError):
            InputEvent("fax", "x")


class TestPatternMatches:
    def test_regex(self) -> None:
        assert pattern_matches(r"^https://maps\.", "https://maps.example.com/x")
        assert not pattern_matches(r"^https://maps\.", "https://example.com/maps.")

    def test_invalid_regex_falls_back_to_substring(self) -> None:
        assert pattern_matches("[unclosed", "text with [unclosed bracket")
        assert not pattern_matches("[unclosed", "nothing here")


# ── File ─────────────────────────────────────────────────────────


class TestFileInputHandler:
    def _event(self, mime: str = "", name: str = "") -> InputEvent:
        return InputEvent(
            InputKind.FILE, "data:...", {"mime_type": mime, "file_name": name}
        )

    def test_accepts_everything_without_types(self) -> None:
        handler = FileInputHandler(handle_input=_echo)
        assert handler.matches(self._event("text/plain", "a.txt"))

    def test_mime_wildcard(self) -> None:
        handler = FileInputHandler(handle_input=_echo, accepted_types=("image/*",))
        assert handler.matches(self._event("image/png", "a.png"))
        assert not handler.matches(self._event("application/pdf", "a.pdf"))

    def test_extension(self) -> None:
        handler = FileInputHandler(handle_input=_echo, accepted_types=(".csv",))
        assert handler.matches(self._event("", "Data.CSV"))
        assert not handler.matches(self._event("text/csv", "data.tsv"))

    def test_wrong_kind(self) -> None:
        handler = FileInputHandler(handle_input=_echo)
        assert not handler.matches(InputEvent(InputKind.URL, "https://x"))

    def test_arguments_include_file_name(self) -> None:
        handler = FileInputHandler(handle_input=_echo)
        assert handler.invoke(self._event("application/pdf", "a.pdf")) == (
            "data:...",
            "a.pdf",
        )


# ── Pattern handlers ─────────────────────────────────────────────


class TestPatternHandlers:
    def test_url_without_patterns_accepts_any_url(self) -> None:
        handler = UrlInputHandler(handle_input=_echo)
        assert handler.matches(InputEvent(InputKind.URL, "https://anything"))

    def test_url_patterns(self) -> None:
        handler = UrlInputHandler(handle_input=_echo, patterns=(r"youtube\.com",))
        assert handler.matches(InputEvent(InputKind.URL, "https://www.youtube.com/x"))
        assert not handler.matches(InputEvent(InputKind.URL, "https://vimeo.com/x"))

    def test_text_handler_ignores_urls(self) -> None:
        handler = TextInputHandler(handle_input=_echo)
        assert not handler.matches(InputEvent(InputKind.URL, "https://x"))
        assert handler.invoke(InputEvent(InputKind.TEXT, "hello")) == ("hello",)

    def test_clipboard_image(self) -> None:
        handler = ClipboardImageInputHandler(handle_input=_echo)
        event = InputEvent(InputKind.CLIPBOARD_IMAGE, "data:image/png;base64,AA")
        assert handler.matches(event)
        assert handler.invoke(event) == ("data:image/png;base64,AA",)


# ── Camera and audio ─────────────────────────────────────────────


class TestCameraInputHandler:
    def test_mode_must_agree(self) -> None:
        handler = CameraInputHandler(handle_input=_echo, mode="video")
        assert handler.matches(InputEvent(InputKind.CAMERA, "x", {"mode": "video"}))
        assert not handler.matches(
            InputEvent(InputKind.CAMERA, "x", {"mode": "photo"})
        )

    def test_missing_mode_matches(self) -> None:
        handler = CameraInputHandler(handle_input=_echo)
        assert handler.matches(InputEvent(InputKind.CAMERA, "x"))

    def test_extras_exclude_mode(self) -> None:
        handler = CameraInputHandler(handle_input=_echo)
        event = InputEvent(InputKind.CAMERA, "x", {"mode": "photo", "facing": "user"})
        assert handler.invoke(event) == ("x", {"facing": "user"})

    def test_no_extras_is_none(self) -> None:
        handler = CameraInputHandler(handle_input=_echo)
        assert handler.invoke(InputEvent(InputKind.CAMERA, "x")) == ("x", None)


class TestAudioInputHandler:
    def test_duration_passed_as_float(self) -> None:
        handler = AudioInputHandler(handle_input=_echo)
        event = InputEvent(InputKind.AUDIO, "data:audio/webm", {"duration": "2"})
        assert handler.invoke(event) == ("data:audio/webm", 2.0)

    def test_duration_defaults_to_zero(self) -> None:
        handler = AudioInputHandler(handle_input=_echo)
        assert handler.invoke(InputEvent(InputKind.AUDIO, "a")) == ("a", 0.0)
