"""Result store: the ordered, uuid-indexed record of rendered results.

The store is the single source of truth for what the UI shows. Records
are only ever appended; updates replace a record in place and never
change its position. uuids are time-ordered (version 7 layout) and
strictly increasing within a store, so they are never reused.

Mutations are synchronous; callers that await between reading a record
and writing it back serialize through :meth:`ResultStore.lock_for`.
Records own deep copies of their payloads, so the objects a plugin or
view passed in can be changed afterwards without reaching the store.
"""

from __future__ import annotations

import asyncio
import contextlib
import copy
import logging
import random
import time
import uuid as uuid_mod
from collections.abc import Mapping
from dataclasses import fields, replace
from typing import TYPE_CHECKING, Any

from guichat.core.errors import (
    ImmutableFieldError,
    InvalidUpdateError,
    UnknownResultError,
)
from guichat.engine.events import UiEvent, UiEventKind
from guichat.protocol.results import ToolResult, ToolResultComplete

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from guichat.engine.events import EventBus

logger = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = frozenset({"tool_name", "uuid"})
_UPDATABLE_FIELDS = frozenset(
    f.name for f in fields(ToolResult) if f.name not in {"updating", "cancelled"}
)

_MS_MASK = (1 << 48) - 1
_COUNTER_MAX = 0xFFF


class UuidSequence:
    """Generate strictly increasing version 7 uuid strings.

    48 bits of unix milliseconds, a 12-bit counter for ids minted in the
    same millisecond, 62 random bits. If the clock stalls or goes
    backwards the last timestamp is reused and the counter advances.
    """

    def __init__(self) -> None:
        self._last_ms = 0
        self._counter = 0

    def next(self) -> str:
        now_ms = time.time_ns() // 1_000_000
        if now_ms > self._last_ms:
            self._last_ms = now_ms
            self._counter = 0
        else:
            self._counter += 1
            if self._counter > _COUNTER_MAX:
                self._last_ms += 1
                self._counter = 0

        value = (self._last_ms & _MS_MASK) << 80
        value |= 0x7 << 76
        value |= self._counter << 64
        value |= 0b10 << 62
        value |= random.getrandbits(62)
        return str(uuid_mod.UUID(int=value))


class ResultStore:
    """Ordered collection of :class:`ToolResultComplete` records.

    Also tracks which record is selected (shown full-size) and, per
    caller-supplied chain id, which record is the open target for
    ``updating`` results.
    """

    def __init__(self, bus: EventBus | None = None) -> None:
        self._bus = bus
        self._records: list[ToolResultComplete] = []
        self._index: dict[str, int] = {}
        self._chains: dict[str, str] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}
        self._selected: str | None = None
        self._uuids = UuidSequence()

    # ── Mutations ─────────────────────────────────────────────

    def append(self, result: ToolResult, tool_name: str) -> ToolResultComplete | None:
        """Store *result* as a new record at the end.

        Cancelled results are ignored and ``None`` is returned.
        """
        if result.cancelled:
            logger.debug("Dropping cancelled result from %s", tool_name)
            return None

        uid = self._uuids.next()
        while uid in self._index:
            uid = self._uuids.next()

        record = ToolResultComplete.from_result(result, tool_name=tool_name, uuid=uid)
        self._index[uid] = len(self._records)
        self._records.append(record)
        self._emit(UiEventKind.APPEND, record)
        return record

    def update(self, uuid: str, partial: Mapping[str, Any]) -> ToolResultComplete:
        """Merge *partial* over the record with *uuid*.

        Fields are replaced shallowly, except ``view_state`` which is
        merged key by key. A ``view_state`` of ``None`` leaves it as is.

        Raises:
            UnknownResultError: If no record has this uuid.
            ImmutableFieldError: If *partial* touches ``tool_name`` or ``uuid``.
            InvalidUpdateError: If *partial* names unknown fields, blanks
                the message or gives a ``view_state`` that is not a mapping.
        """
        pos = self._position(uuid)

        for name in partial:
            if name in _IMMUTABLE_FIELDS:
                raise ImmutableFieldError(name)
        unknown = sorted(set(partial) - _UPDATABLE_FIELDS)
        if unknown:
            msg = f"Unknown result fields: {', '.join(unknown)}"
            raise InvalidUpdateError(msg)
        if "message" in partial:
            message = partial["message"]
            if not isinstance(message, str) or not message.strip():
                msg = "message must be a non-empty string"
                raise InvalidUpdateError(msg)

        incoming = partial.get("view_state")
        if incoming is not None and not isinstance(incoming, Mapping):
            msg = f"view_state must be a mapping, got {type(incoming).__name__}"
            raise InvalidUpdateError(msg)

        current = self._records[pos]
        changes = copy.deepcopy(dict(partial))
        if "view_state" in changes:
            incoming = changes.pop("view_state")
            if incoming is not None:
                merged = copy.deepcopy(dict(current.view_state or {}))
                merged.update(incoming)
                changes["view_state"] = merged

        record = replace(current, **changes)
        self._records[pos] = record
        self._emit(UiEventKind.UPDATE, record)
        return record

    def select(self, uuid: str) -> ToolResultComplete:
        """Mark the record with *uuid* as the one shown full-size."""
        record = self._records[self._position(uuid)]
        self._selected = uuid
        self._emit(UiEventKind.SELECT, record)
        return record

    # ── Chains ────────────────────────────────────────────────

    def open_target(self, chain_id: str) -> str | None:
        """uuid an ``updating`` result on this chain should merge into."""
        return self._chains.get(chain_id)

    def bind_chain(self, chain_id: str, uuid: str) -> None:
        self._position(uuid)
        self._chains[chain_id] = uuid

    def latest_for(self, chain_id: str) -> ToolResultComplete | None:
        uid = self._chains.get(chain_id)
        if uid is None:
            return None
        return self._records[self._index[uid]]

    # ── Serialization ─────────────────────────────────────────

    @contextlib.asynccontextmanager
    async def lock_for(self, key: str) -> AsyncIterator[None]:
        """Hold the lock serializing read-modify-write cycles on *key*.

        Keys are uuids or chain ids. ``asyncio.Lock`` wakes waiters in
        FIFO order, so mutations apply in arrival order. A key's lock is
        dropped once nobody holds or waits for it.
        """
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]

    @property
    def lock_count(self) -> int:
        """Keys with a lock currently held or awaited."""
        return len(self._locks)

    # ── Queries ───────────────────────────────────────────────

    def get(self, uuid: str) -> ToolResultComplete:
        """Return the record with *uuid*.

        Raises:
            UnknownResultError: If no record has this uuid.
        """
        return self._records[self._position(uuid)]

    def records(self) -> list[ToolResultComplete]:
        return list(self._records)

    @property
    def selected(self) -> ToolResultComplete | None:
        if self._selected is None:
            return None
        return self._records[self._index[self._selected]]

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, uuid: object) -> bool:
        return uuid in self._index

    def __iter__(self) -> Iterator[ToolResultComplete]:
        return iter(list(self._records))

    # ── Internals ─────────────────────────────────────────────

    def _position(self, uuid: str) -> int:
        pos = self._index.get(uuid)
        if pos is None:
            raise UnknownResultError(uuid)
        return pos

    def _emit(self, kind: UiEventKind, record: ToolResultComplete) -> None:
        if self._bus is not None:
            self._bus.emit(UiEvent(kind=kind, record=record))
