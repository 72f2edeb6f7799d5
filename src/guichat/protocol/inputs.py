"""Input handlers for non-LLM inputs.

Plugins may declare handlers for raw inputs the user provides directly
(file drops, clipboard images, pasted urls and text, camera captures,
audio recordings). Each handler type knows which events it accepts and
how to unpack an event into its ``handle_input`` arguments.

``handle_input`` may be a plain function or a coroutine function; it
returns a :class:`~guichat.protocol.results.ToolResult`.
"""

from __future__ import annotations

import enum
import fnmatch
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Literal

if TYPE_CHECKING:
    from collections.abc import Callable


class InputKind(enum.Enum):
    """Kinds of raw input the host can deliver."""

    FILE = "file"
    CLIPBOARD_IMAGE = "clipboard-image"
    URL = "url"
    TEXT = "text"
    CAMERA = "camera"
    AUDIO = "audio"


@dataclass(frozen=True, slots=True)
class InputEvent:
    """A raw input tagged with its kind.

    ``payload`` is the input itself (data url, url, text...).
    ``metadata`` carries kind-specific extras such as ``file_name``,
    ``mime_type``, ``mode`` or ``duration``.
    """

    kind: InputKind
    payload: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.kind, InputKind):
            object.__setattr__(self, "kind", InputKind(self.kind))


def pattern_matches(pattern: str, text: str) -> bool:
    """Match *pattern* against *text* as a regex, or as a substring if invalid."""
    try:
        return re.search(pattern, text) is not None
    except re.error:
        return pattern in text


@dataclass(frozen=True, slots=True, kw_only=True)
class InputHandler:
    """Base for all input handlers."""

    kind: ClassVar[InputKind]

    handle_input: Callable[..., Any]

    def matches(self, event: InputEvent) -> bool:
        return event.kind is self.kind

    def arguments(self, event: InputEvent) -> tuple[Any, ...]:
        return (event.payload,)

    def invoke(self, event: InputEvent) -> Any:
        """Call ``handle_input`` with the arguments for *event*."""
        return self.handle_input(*self.arguments(event))


@dataclass(frozen=True, slots=True, kw_only=True)
class FileInputHandler(InputHandler):
    """Accepts dropped or uploaded files.

    ``accepted_types`` entries are MIME types (``application/pdf``),
    wildcards (``image/*``) or extensions (``.csv``). Empty accepts all.
    """

    kind: ClassVar[InputKind] = InputKind.FILE

    accepted_types: tuple[str, ...] = ()

    def matches(self, event: InputEvent) -> bool:
        if event.kind is not self.kind:
            return False
        if not self.accepted_types:
            return True
        mime_type = str(event.metadata.get("mime_type", "")).lower()
        file_name = str(event.metadata.get("file_name", "")).lower()
        for rule in self.accepted_types:
            accepted = rule.lower()
            if accepted.startswith("."):
                if file_name.endswith(accepted):
                    return True
            elif mime_type and fnmatch.fnmatchcase(mime_type, accepted):
                return True
        return False

    def arguments(self, event: InputEvent) -> tuple[Any, ...]:
        return (event.payload, event.metadata.get("file_name", ""))


@dataclass(frozen=True, slots=True, kw_only=True)
class ClipboardImageInputHandler(InputHandler):
    kind: ClassVar[InputKind] = InputKind.CLIPBOARD_IMAGE


@dataclass(frozen=True, slots=True, kw_only=True)
class _PatternInputHandler(InputHandler):
    """Handler that may restrict itself with regex or substring patterns."""

    patterns: tuple[str, ...] = ()

    def matches(self, event: InputEvent) -> bool:
        if event.kind is not self.kind:
            return False
        if not self.patterns:
            return True
        return any(pattern_matches(p, event.payload) for p in self.patterns)


@dataclass(frozen=True, slots=True, kw_only=True)
class UrlInputHandler(_PatternInputHandler):
    kind: ClassVar[InputKind] = InputKind.URL


@dataclass(frozen=True, slots=True, kw_only=True)
class TextInputHandler(_PatternInputHandler):
    kind: ClassVar[InputKind] = InputKind.TEXT


@dataclass(frozen=True, slots=True, kw_only=True)
class CameraInputHandler(InputHandler):
    """Accepts camera captures; an event ``mode`` must agree with ours."""

    kind: ClassVar[InputKind] = InputKind.CAMERA

    mode: Literal["photo", "video"] = "photo"

    def matches(self, event: InputEvent) -> bool:
        if event.kind is not self.kind:
            return False
        requested = event.metadata.get("mode")
        return requested is None or requested == self.mode

    def arguments(self, event: InputEvent) -> tuple[Any, ...]:
        extras = {k: v for k, v in event.metadata.items() if k != "mode"}
        return (event.payload, extras or None)


@dataclass(frozen=True, slots=True, kw_only=True)
class AudioInputHandler(InputHandler):
    kind: ClassVar[InputKind] = InputKind.AUDIO

    def arguments(self, event: InputEvent) -> tuple[Any, ...]:
        return (event.payload, float(event.metadata.get("duration", 0.0)))
