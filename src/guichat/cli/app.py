"""Main CLI application.

Click commands for inspecting and exercising a role catalog: roles,
tools, prompt, samples, call. The catalog is a Python object named as
``module:attribute`` (a sequence of roles, or a callable returning one).
"""

from __future__ import annotations

import asyncio
import importlib
import json as json_mod
import logging
import sys
from typing import TYPE_CHECKING, Any, NoReturn

import click

from guichat import __version__
from guichat.config.loader import load_config
from guichat.core.errors import ConfigError, GuiChatError

if TYPE_CHECKING:
    from guichat.cli.display import ResultDisplay
    from guichat.config.schema import GuiChatConfig
    from guichat.engine.coordinator import InvocationOutcome
    from guichat.engine.roles import Role
    from guichat.engine.session import ChatSession


# ── Helpers ──────────────────────────────────────────────────────


def _error(msg: str) -> NoReturn:
    """Print an error message to stderr and exit."""
    click.echo(f"Error: {msg}", err=True)
    sys.exit(1)


def _load_config(config_path: str | None) -> GuiChatConfig:
    """Load config with user-friendly error handling."""
    try:
        return load_config(path=config_path)
    except ConfigError as e:
        _error(str(e))


def _configure_logging(config: GuiChatConfig) -> None:
    """Apply the logging section of the config to the root logger."""
    level = getattr(logging, config.logging.level.upper(), logging.INFO)
    kwargs: dict[str, Any] = {
        "level": level,
        "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
    }
    if config.logging.file:
        kwargs["filename"] = config.logging.file
    logging.basicConfig(**kwargs)


def _load_roles(target: str | None) -> list[Role]:
    """Import a role catalog from ``module:attribute``."""
    from guichat.engine.roles import Role

    if not target:
        _error("No role catalog given. Use --roles or set GUICHAT_ROLES.")
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        _error(f"Role catalog must look like module:attribute, got {target!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        _error(f"Cannot import {module_name}: {e}")

    obj = getattr(module, attr, None)
    if obj is None:
        _error(f"{module_name} has no attribute {attr}")
    if callable(obj):
        obj = obj()

    roles = list(obj)
    for role in roles:
        if not isinstance(role, Role):
            _error(f"{target} contains a non-Role item: {role!r}")
    return roles


def _make_session(ctx: click.Context, role_id: str | None = None) -> ChatSession:
    """Build a session from the CLI context, optionally activating a role."""
    from guichat.engine.session import ChatSession

    config = _load_config(ctx.obj["config_path"])
    _configure_logging(config)
    roles = _load_roles(ctx.obj["roles"])
    try:
        session = ChatSession(roles, config=config)
        if role_id is not None:
            session.activate_role(role_id)
    except GuiChatError as e:
        _error(str(e))
    return session


def _display() -> ResultDisplay:
    from guichat.cli.display import ResultDisplay

    return ResultDisplay()


# ── CLI group ────────────────────────────────────────────────────


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="guichat")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True),
    default=None,
    help="Path to config file.",
)
@click.option(
    "--roles",
    "roles",
    envvar="GUICHAT_ROLES",
    default=None,
    help="Role catalog as module:attribute.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, roles: str | None) -> None:
    """guichat - GUI chat plugin engine.

    Inspect roles and run tool calls the way a chat app would.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["roles"] = roles
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ── roles ────────────────────────────────────────────────────────


@cli.command()
@click.option(
    "--active",
    "active_id",
    default=None,
    help="Activate this role and mark it in the listing.",
)
@click.pass_context
def roles(ctx: click.Context, active_id: str | None) -> None:
    """List the roles in the catalog."""
    session = _make_session(ctx, active_id)
    active = session.roles.active_role
    _display().show_roles(
        session.roles.roles(), active.id if active is not None else None
    )


# ── tools ────────────────────────────────────────────────────────


@cli.command()
@click.argument("role_id")
@click.pass_context
def tools(ctx: click.Context, role_id: str) -> None:
    """Print the tool definitions ROLE_ID advertises to the LLM."""
    session = _make_session(ctx, role_id)
    click.echo(json_mod.dumps(session.tool_definitions(), indent=2))


# ── prompt ───────────────────────────────────────────────────────


@cli.command()
@click.argument("role_id")
@click.pass_context
def prompt(ctx: click.Context, role_id: str) -> None:
    """Print the system prompt for ROLE_ID."""
    session = _make_session(ctx, role_id)
    click.echo(session.system_prompt())


# ── samples ──────────────────────────────────────────────────────


@cli.command()
@click.argument("role_id")
@click.pass_context
def samples(ctx: click.Context, role_id: str) -> None:
    """List sample arguments declared by ROLE_ID's tools."""
    session = _make_session(ctx, role_id)
    found = False
    for plugin in session.roles.active_plugins():
        for index, sample in enumerate(plugin.samples):
            found = True
            args = json_mod.dumps(sample.args)
            click.echo(f"{plugin.name} [{index}] {sample.name}: {args}")
    if not found:
        click.echo("No samples.")


# ── call ─────────────────────────────────────────────────────────


@cli.command()
@click.argument("role_id")
@click.argument("tool")
@click.argument("args_json", required=False, default=None)
@click.option(
    "--sample",
    "sample_index",
    type=int,
    default=None,
    help="Run the tool's sample at this index instead of ARGS_JSON.",
)
@click.option("--trace", is_flag=True, default=False, help="Print UI events.")
@click.pass_context
def call(
    ctx: click.Context,
    role_id: str,
    tool: str,
    args_json: str | None,
    sample_index: int | None,
    trace: bool,
) -> None:
    """Run one TOOL call in ROLE_ID and show the result.

    ARGS_JSON is the JSON object of arguments the LLM would send.
    """
    if args_json is not None and sample_index is not None:
        _error("Give either ARGS_JSON or --sample, not both.")

    session = _make_session(ctx, role_id)
    display = _display()
    if trace:
        session.subscribe(display.show_event)

    try:
        outcome = asyncio.run(_call_async(session, tool, args_json, sample_index))
    except (GuiChatError, IndexError) as e:
        _error(str(e))

    display.show_llm_payload(outcome.llm_payload, is_error=outcome.response.is_error)
    selected = session.store.selected
    display.show_records(
        session.store.records(), selected.uuid if selected is not None else None
    )
    if outcome.response.is_error:
        sys.exit(1)


async def _call_async(
    session: ChatSession,
    tool: str,
    args_json: str | None,
    sample_index: int | None,
) -> InvocationOutcome:
    from guichat.engine.coordinator import ToolCall

    if sample_index is not None:
        return await session.run_sample(tool, sample_index)
    return await session.call_tool(ToolCall.from_raw(tool, args_json))
