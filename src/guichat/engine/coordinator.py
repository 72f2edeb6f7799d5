"""Execution coordinator: dispatch tool calls and inputs, reconcile results.

Every invocation follows the same path:

1. Resolve the plugin (tool calls: through the active role; inputs:
   through the :class:`InputRouter`).
2. Serialize on the chain and target uuid it will touch.
3. Build a fresh :class:`ToolContext`, show the generating placeholder,
   await the plugin.
4. Validate the result; append it, merge it into the target, or drop
   it if cancelled; clear the placeholder.
5. Hand ``{message, json_data, instructions}`` back for the LLM.

Plugin failures and results the store rejects never escape: they
become a failure message for the LLM so the function call is always
answered.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import json
import logging
import uuid as uuid_mod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from guichat.config.schema import EngineConfig
from guichat.core.errors import (
    InvalidResultError,
    PluginExecutionError,
    StoreError,
    UnknownResultError,
    UnknownToolError,
)
from guichat.engine.events import UiEvent, UiEventKind
from guichat.engine.machine import (
    InvocationContext,
    InvocationSource,
    InvocationState,
    InvocationStateMachine,
)
from guichat.protocol.context import ToolContext
from guichat.protocol.results import (
    LlmResponse,
    Placeholder,
    ToolResult,
    llm_response_for,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from guichat.engine.events import EventBus
    from guichat.engine.roles import RoleManager
    from guichat.engine.router import InputRouter
    from guichat.engine.store import ResultStore
    from guichat.protocol.context import ToolContextApp
    from guichat.protocol.inputs import InputEvent
    from guichat.protocol.results import ToolResultComplete

    Invoke = Callable[[ToolContext], Awaitable[Any]]

logger = logging.getLogger(__name__)


def _new_call_id() -> str:
    return f"call-{uuid_mod.uuid4().hex[:12]}"


@dataclass(frozen=True, slots=True)
class ToolCall:
    """A tool invocation requested by the LLM.

    ``chain_id`` groups calls that continue the same rendered item (a
    game, a quiz); ``target_uuid`` names that item explicitly.
    """

    name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    call_id: str = field(default_factory=_new_call_id)
    chain_id: str | None = None
    target_uuid: str | None = None

    @classmethod
    def from_raw(
        cls,
        name: str,
        arguments: str | Mapping[str, Any] | None,
        **kwargs: Any,
    ) -> ToolCall:
        """Build a call from provider output, where arguments may be JSON text.

        Unparseable or non-object arguments become ``{}``.
        """
        if arguments is None or arguments == "":
            args: Any = {}
        elif isinstance(arguments, str):
            try:
                args = json.loads(arguments)
            except json.JSONDecodeError:
                logger.warning("Unparseable arguments for %s: %r", name, arguments)
                args = {}
        else:
            args = dict(arguments)
        if not isinstance(args, dict):
            logger.warning("Non-object arguments for %s: %r", name, args)
            args = {}
        return cls(name=name, arguments=args, **kwargs)


@dataclass(frozen=True, slots=True)
class InvocationOutcome:
    """What an invocation produced, for both the LLM and the host."""

    call_id: str
    tool_name: str
    state: InvocationState
    response: LlmResponse
    record: ToolResultComplete | None = None

    @property
    def llm_payload(self) -> dict[str, Any]:
        return self.response.to_dict()


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class ExecutionCoordinator:
    """Runs tool calls and input handlers against the result store.

    Calls for different uuids run concurrently. Calls on the same chain
    or targeting the same uuid run one at a time in arrival order, so
    each sees the previous call's committed record as its
    ``current_result``.
    """

    def __init__(
        self,
        store: ResultStore,
        roles: RoleManager,
        router: InputRouter,
        *,
        bus: EventBus | None = None,
        app: ToolContextApp | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self._store = store
        self._roles = roles
        self._router = router
        self._bus = bus
        self._app = app
        self._config = config or EngineConfig()
        self._in_flight: dict[str, Placeholder] = {}

    @property
    def in_flight(self) -> list[Placeholder]:
        """Placeholders for invocations currently executing."""
        return list(self._in_flight.values())

    # ── Entry points ──────────────────────────────────────────

    async def call_tool(self, call: ToolCall) -> InvocationOutcome:
        """Execute an LLM tool call.

        Never raises for plugin problems; unknown tools, plugin
        exceptions and invalid results become failure responses.
        """
        ctx = InvocationContext(
            call_id=call.call_id,
            tool_name=call.name,
            arguments=dict(call.arguments),
            chain_id=call.chain_id,
            target_uuid=call.target_uuid,
        )
        sm = InvocationStateMachine(ctx)

        try:
            plugin = self._roles.lookup(call.name)
        except UnknownToolError as e:
            logger.warning("LLM called unknown tool %s", call.name)
            return self._fail(sm, str(e))
        ctx.plugin = plugin

        outcome = await self._run(
            sm, lambda context: _resolve(plugin.execute(context, ctx.arguments))
        )

        delay = plugin.delay_after_execution
        if (
            outcome.state is InvocationState.COMPLETED
            and delay > 0
            and self._config.honor_execution_delay
        ):
            await asyncio.sleep(delay)
        return outcome

    async def handle_input(
        self,
        event: InputEvent,
        start_response: Any = None,
        *,
        chain_id: str | None = None,
        target_uuid: str | None = None,
    ) -> InvocationOutcome:
        """Route a raw input to its handler and store the result.

        Raises:
            NoHandlerForInputError: If no active handler matches. The
                event is dropped.
        """
        match = self._router.route(event, start_response)
        ctx = InvocationContext(
            call_id=f"input-{uuid_mod.uuid4().hex[:12]}",
            tool_name=match.tool_name,
            arguments={"kind": event.kind.value},
            source=InvocationSource.INPUT,
            chain_id=chain_id,
            target_uuid=target_uuid,
            plugin=match.plugin,
        )
        sm = InvocationStateMachine(ctx)
        return await self._run(
            sm, lambda _context: _resolve(match.handler.invoke(event))
        )

    async def update_result(
        self, uuid: str, partial: Mapping[str, Any]
    ) -> ToolResultComplete:
        """Apply a view-originated update, serialized with tool calls.

        Raises:
            UnknownResultError, ImmutableFieldError, InvalidUpdateError:
                As :meth:`ResultStore.update`.
        """
        async with self._store.lock_for(uuid):
            return self._store.update(uuid, partial)

    # ── Internals ─────────────────────────────────────────────

    async def _run(
        self, sm: InvocationStateMachine, invoke: Invoke
    ) -> InvocationOutcome:
        ctx = sm.context
        async with contextlib.AsyncExitStack() as stack:
            if ctx.chain_id is not None:
                await stack.enter_async_context(
                    self._store.lock_for(f"chain:{ctx.chain_id}")
                )
                if ctx.target_uuid is None:
                    ctx.target_uuid = self._store.open_target(ctx.chain_id)

            if ctx.target_uuid is not None:
                await stack.enter_async_context(self._store.lock_for(ctx.target_uuid))
                try:
                    ctx.current_result = self._store.get(ctx.target_uuid)
                except UnknownResultError as e:
                    logger.warning("%s targets unknown result %s", ctx.call_id, e.uuid)
                    return self._fail(sm, str(e))

            sm.transition(InvocationState.EXECUTING)
            current = ctx.current_result
            context = ToolContext(
                current_result=current.detached() if current is not None else None,
                app=self._app,
            )
            self._show_placeholder(ctx)
            try:
                return await self._execute(sm, invoke, context)
            finally:
                self._clear_placeholder(ctx.call_id)

    async def _execute(
        self,
        sm: InvocationStateMachine,
        invoke: Invoke,
        context: ToolContext,
    ) -> InvocationOutcome:
        ctx = sm.context
        try:
            result = await invoke(context)
            if not isinstance(result, ToolResult):
                reason = f"expected ToolResult, got {type(result).__name__}"
                raise InvalidResultError(ctx.tool_name, reason)
            if not result.cancelled:
                result.validate(ctx.tool_name)
        except InvalidResultError as e:
            logger.warning("%s", e)
            return self._fail(sm, self._failure_message(ctx.tool_name, e))
        except Exception as e:
            err = PluginExecutionError(ctx.tool_name, e)
            logger.exception("%s (%s)", err, ctx.call_id)
            return self._fail(sm, self._failure_message(ctx.tool_name, e))

        ctx.result = result
        if result.cancelled:
            sm.transition(InvocationState.CANCELLED)
            logger.debug("%s cancelled by user", ctx.call_id)
            ctx.response = LlmResponse(message=self._config.cancelled_ack)
            return self._outcome(ctx)

        try:
            ctx.record = self._commit(ctx, result)
        except StoreError as e:
            logger.warning("%s could not store its result: %s", ctx.call_id, e)
            return self._fail(sm, self._failure_message(ctx.tool_name, e))
        sm.transition(InvocationState.COMPLETED)
        ctx.response = llm_response_for(
            result, suppress_instructions=self._config.suppress_instructions
        )
        return self._outcome(ctx)

    def _commit(self, ctx: InvocationContext, result: ToolResult) -> ToolResultComplete:
        """Merge into the target when updating, else append."""
        if result.updating and ctx.target_uuid is not None:
            record = self._store.update(ctx.target_uuid, result.content_fields())
        else:
            if result.updating:
                logger.debug(
                    "%s asked to update but has no target; appending", ctx.call_id
                )
            appended = self._store.append(result, ctx.tool_name)
            if appended is None:
                msg = "append returned nothing for a non-cancelled result"
                raise RuntimeError(msg)
            record = appended

        if ctx.chain_id is not None:
            self._store.bind_chain(ctx.chain_id, record.uuid)
        return record

    def _failure_message(self, tool_name: str, error: Exception) -> str:
        return self._config.failure_template.format(tool_name=tool_name, error=error)

    def _fail(self, sm: InvocationStateMachine, message: str) -> InvocationOutcome:
        sm.fail(message)
        sm.context.response = LlmResponse(message=message, is_error=True)
        return self._outcome(sm.context)

    @staticmethod
    def _outcome(ctx: InvocationContext) -> InvocationOutcome:
        if ctx.response is None:
            msg = f"{ctx.call_id} finished without a response"
            raise RuntimeError(msg)
        return InvocationOutcome(
            call_id=ctx.call_id,
            tool_name=ctx.tool_name,
            state=ctx.state,
            response=ctx.response,
            record=ctx.record,
        )

    def _show_placeholder(self, ctx: InvocationContext) -> None:
        message = ctx.plugin.generating_message if ctx.plugin else ""
        placeholder = Placeholder(
            call_id=ctx.call_id,
            tool_name=ctx.tool_name,
            message=message,
            chain_id=ctx.chain_id,
            target_uuid=ctx.target_uuid,
        )
        self._in_flight[ctx.call_id] = placeholder
        if self._bus is not None:
            self._bus.emit(
                UiEvent(kind=UiEventKind.GENERATING, placeholder=placeholder)
            )

    def _clear_placeholder(self, call_id: str) -> None:
        placeholder = self._in_flight.pop(call_id, None)
        if placeholder is not None and self._bus is not None:
            self._bus.emit(
                UiEvent(kind=UiEventKind.GENERATING_DONE, placeholder=placeholder)
            )
