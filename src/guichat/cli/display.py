"""Rich display for roles, tool definitions and stored results.

Renders the result store the way a chat UI's preview column would:
one panel per record, the selected one highlighted. Accepts an optional
:class:`~rich.console.Console` for dependency injection in tests.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from collections.abc import Sequence

    from guichat.engine.events import UiEvent
    from guichat.engine.roles import Role
    from guichat.protocol.results import ToolResultComplete

_TRUNCATE_LEN = 300


def _truncate(text: str, limit: int = _TRUNCATE_LEN) -> str:
    """Truncate text to *limit* characters with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + " ..."


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


class ResultDisplay:
    """Terminal rendering of engine state."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    # ── Roles ─────────────────────────────────────────────────

    def show_roles(self, roles: Sequence[Role], active_id: str | None = None) -> None:
        table = Table(title="Roles", show_lines=False)
        table.add_column("id", style="cyan")
        table.add_column("name")
        table.add_column("tools")
        for role in roles:
            marker = " *" if role.id == active_id else ""
            tools = ", ".join(p.name for p in role.plugins) or "-"
            table.add_row(escape(role.id) + marker, escape(role.name), escape(tools))
        self._console.print(table)

    # ── Payloads ──────────────────────────────────────────────

    def show_llm_payload(
        self, payload: dict[str, Any], *, is_error: bool = False
    ) -> None:
        style = "red" if is_error else "green"
        self._console.print(
            Panel(
                Text(_dump(payload)),
                title="[bold]LLM response[/bold]",
                border_style=style,
                padding=(0, 1),
            )
        )

    # ── Records ───────────────────────────────────────────────

    def show_record(
        self, record: ToolResultComplete, *, selected: bool = False
    ) -> None:
        body = Text()
        body.append(record.message + "\n", style="bold")
        if record.data is not None:
            body.append(_truncate(_dump(record.data)) + "\n", style="dim")
        if record.view_state:
            body.append("view: " + _truncate(_dump(record.view_state)), style="italic")
        title = record.title or record.tool_name
        self._console.print(
            Panel(
                body,
                title=f"[bold]{escape(title)}[/bold]",
                subtitle=f"[dim]{record.uuid}[/dim]",
                border_style="yellow" if selected else "blue",
                padding=(0, 1),
            )
        )

    def show_records(
        self,
        records: Sequence[ToolResultComplete],
        selected_uuid: str | None = None,
    ) -> None:
        if not records:
            self._console.print("[dim]No results.[/dim]")
            return
        for record in records:
            self.show_record(record, selected=record.uuid == selected_uuid)

    def show_event(self, event: UiEvent) -> None:
        """One-line trace of a UI event. Plugin text is printed literally."""
        kind = event.kind.value
        if event.placeholder is not None:
            placeholder = event.placeholder
            self._console.print(
                f"[dim]{kind}[/dim] {escape(placeholder.tool_name)}: "
                f"{escape(placeholder.message)}"
            )
        elif event.record is not None:
            record = event.record
            self._console.print(
                f"[dim]{kind}[/dim] {escape(record.tool_name)} {record.uuid}"
            )
