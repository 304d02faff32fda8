"""Client-side owner of the five collection snapshots.

The synchronizer keeps the authoritative in-memory copy of news, scores,
products, orders and users for as long as the application runs, and routes
every change through one of three write paths:

- bulk replace (admin edits of news/scores/products): memory is swapped
  immediately, then the whole array is written to the store in the
  background;
- append (order placement, plus user registration and block/unblock): the
  record is added or flagged in memory immediately, then sent to the store;
- live delta merge: a `DeltaEvent` from the publisher is folded into the
  scores snapshot in memory only. The store never sees it.

Mutation methods are plain functions: they validate, update memory and
return the `asyncio.Task` doing the durable write. They must be called from
a running event loop. A failed write is logged and remembered as the
collection's `last_write_error` until a write issued after it succeeds;
memory is not rolled back and nothing is retried. Score edits that leave out
`currentMinute` keep the running clock of the match they replace.
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Dict, List, Optional, Sequence, Set, Union

from sporta.errors import NotReadyError, StoreError, ValidationError
from sporta.merge import merge
from sporta.models import (
    COLLECTIONS,
    ORDERS,
    REPLACEABLE,
    SCORES,
    USERS,
    DeltaEvent,
    MatchStatus,
    check_collection,
)
from sporta.publisher import LiveUpdatePublisher, Subscription
from sporta.validation import validate_collection, validate_order, validate_user

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

# Minute shown for live matches stored without a clock.
DEFAULT_LIVE_MINUTE = 72


class CollectionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class StateSynchronizer:
    def __init__(self, store: Any, default_live_minute: int = DEFAULT_LIVE_MINUTE) -> None:
        self._store = store
        self.default_live_minute = default_live_minute
        self._snapshots: Dict[str, List[Record]] = {key: [] for key in COLLECTIONS}
        self._states: Dict[str, CollectionState] = {key: CollectionState.UNINITIALIZED for key in COLLECTIONS}
        self._pending: Dict[str, int] = {key: 0 for key in COLLECTIONS}
        self._last_errors: Dict[str, Optional[StoreError]] = {key: None for key in COLLECTIONS}
        # Issue order of durable writes, and the write that recorded the current error.
        self._issued: Dict[str, int] = {key: 0 for key in COLLECTIONS}
        self._error_seq: Dict[str, int] = {key: 0 for key in COLLECTIONS}
        self._tasks: Set[asyncio.Task] = set()

    # -- loading ---------------------------------------------------------
    def _with_live_clock(self, scores: List[Record]) -> List[Record]:
        out = []
        for match in scores:
            if match.get("status") == MatchStatus.LIVE.value and match.get("currentMinute") is None:
                match = {**match, "currentMinute": self.default_live_minute}
            out.append(match)
        return out

    def _carry_clock(self, records: List[Record]) -> List[Record]:
        """Keep the running minute of edited matches that arrive without one."""
        clocks = {m.get("id"): m.get("currentMinute") for m in self._snapshots[SCORES]}
        for r in records:
            if isinstance(r, dict) and r.get("currentMinute") is None and clocks.get(r.get("id")) is not None:
                r["currentMinute"] = clocks[r["id"]]
        return records

    async def load(self) -> None:
        """Fetch every collection in parallel and mark them Ready."""
        for key in COLLECTIONS:
            self._states[key] = CollectionState.LOADING
        try:
            results = await asyncio.gather(*(self._store.get(key) for key in COLLECTIONS))
        except StoreError:
            for key in COLLECTIONS:
                self._states[key] = CollectionState.UNINITIALIZED
            logger.error("initial load failed", exc_info=True)
            raise

        for key, records in zip(COLLECTIONS, results):
            records = list(records)
            if key == SCORES:
                records = self._with_live_clock(records)
            self._snapshots[key] = records
            self._states[key] = CollectionState.READY
        logger.info(
            "loaded %s",
            ", ".join(f"{len(self._snapshots[k])} {k}" for k in COLLECTIONS),
        )

    # -- observation -----------------------------------------------------
    def state(self, collection: str) -> CollectionState:
        return self._states[check_collection(collection)]

    @property
    def ready(self) -> bool:
        return all(s is CollectionState.READY for s in self._states.values())

    def snapshot(self, collection: str) -> List[Record]:
        """Current snapshot. Treat it as read-only; it is never changed in place."""
        return self._snapshots[check_collection(collection)]

    @property
    def syncing(self) -> bool:
        return any(self._pending.values())

    def is_syncing(self, collection: str) -> bool:
        return self._pending[check_collection(collection)] > 0

    def last_write_error(self, collection: str) -> Optional[StoreError]:
        return self._last_errors[check_collection(collection)]

    def _require_ready(self, collection: str) -> None:
        if self._states[check_collection(collection)] is not CollectionState.READY:
            raise NotReadyError(f"{collection} is not loaded yet")

    # -- durable writes --------------------------------------------------
    async def _run_write(self, collection: str, seq: int, write: Awaitable[None]) -> bool:
        try:
            await write
        except StoreError as exc:
            if seq >= self._error_seq[collection]:
                self._last_errors[collection] = exc
                self._error_seq[collection] = seq
            logger.warning("durable write to %s failed; memory kept as is: %s", collection, exc)
            return False
        else:
            # An older write finishing late does not vouch for a newer failed one.
            if seq >= self._error_seq[collection]:
                self._last_errors[collection] = None
            return True
        finally:
            self._pending[collection] -= 1

    def _persist(
        self, loop: asyncio.AbstractEventLoop, collection: str, write: Awaitable[None]
    ) -> "asyncio.Task[bool]":
        self._pending[collection] += 1
        self._issued[collection] += 1
        task = loop.create_task(self._run_write(collection, self._issued[collection], write))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_for_writes(self) -> None:
        """Wait for every write issued so far (including ones started meanwhile)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # -- write paths -----------------------------------------------------
    def replace(self, collection: str, records: Sequence[Record]) -> "asyncio.Task[bool]":
        """Optimistically replace a whole collection and persist it.

        Only news, scores and products accept bulk replace.
        """
        self._require_ready(collection)
        if collection not in REPLACEABLE:
            raise ValidationError(f"{collection}: collection cannot be replaced in bulk")
        new = [dict(r) if isinstance(r, dict) else r for r in records]
        if collection == SCORES:
            new = self._carry_clock(new)
        validate_collection(collection, new, previous=self._snapshots[collection])

        loop = asyncio.get_running_loop()
        self._snapshots[collection] = new
        return self._persist(loop, collection, self._store.replace(collection, new))

    def place_order(self, order: Record) -> "asyncio.Task[bool]":
        """Prepend `order` in memory and append it to the durable store."""
        self._require_ready(ORDERS)
        validate_order(order)
        order = dict(order)

        loop = asyncio.get_running_loop()
        self._snapshots[ORDERS] = [order, *self._snapshots[ORDERS]]
        return self._persist(loop, ORDERS, self._store.append_order(order))

    def register_user(self, user: Record) -> "asyncio.Task[bool]":
        self._require_ready(USERS)
        validate_user(user)
        email = str(user["email"]).lower()
        if any(str(u.get("email", "")).lower() == email for u in self._snapshots[USERS]):
            raise ValidationError("User already exists.")
        user = dict(user)

        loop = asyncio.get_running_loop()
        self._snapshots[USERS] = [*self._snapshots[USERS], user]
        return self._persist(loop, USERS, self._store.register_user(user))

    def set_user_blocked(self, user_id: str, is_blocked: bool) -> "asyncio.Task[bool]":
        self._require_ready(USERS)
        users = self._snapshots[USERS]
        if not any(u.get("id") == user_id for u in users):
            raise ValidationError(f"users: unknown user '{user_id}'")

        loop = asyncio.get_running_loop()
        self._snapshots[USERS] = [
            {**u, "isBlocked": is_blocked} if u.get("id") == user_id else u for u in users
        ]
        return self._persist(loop, USERS, self._store.block_user(user_id, is_blocked))

    def apply_delta(self, delta: Union[DeltaEvent, Record]) -> List[Record]:
        """Merge a live update into the scores snapshot (memory only)."""
        self._require_ready(SCORES)
        self._snapshots[SCORES] = merge(self._snapshots[SCORES], delta)
        return self._snapshots[SCORES]

    def attach(self, publisher: LiveUpdatePublisher) -> Subscription:
        """Feed every event of `publisher` into `apply_delta`."""
        return publisher.subscribe(self.apply_delta)
