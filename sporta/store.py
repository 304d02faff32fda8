"""File-backed JSON store: one document holding five named arrays.

Every change rewrites the whole document through a temp file and
`os.replace`, so a single write lands completely or not at all. Read-modify-
write cycles are serialised by a process-local lock; nothing is coordinated
across processes.
"""
from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Union

from sporta.errors import StoreError
from sporta.models import COLLECTIONS, ORDERS, REPLACEABLE, USERS, check_collection
from sporta.seed import initial_document

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
Document = Dict[str, List[Record]]


class JsonFileStore:
    """Async key-value adapter over a single JSON file.

    File I/O runs in a worker thread so the event loop is never blocked.
    """

    def __init__(self, path: Union[str, Path], seed_demo_data: bool = True) -> None:
        self.path = Path(path)
        self.seed_demo_data = seed_demo_data
        self._lock = threading.Lock()

    # -- internals -----------------------------------------------------
    def _read(self) -> Document:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                doc = json.load(fh)
        except FileNotFoundError:
            raise StoreError(f"store file {self.path} does not exist; call init() first") from None
        except (OSError, ValueError) as exc:
            raise StoreError(f"cannot read store file {self.path}: {exc}") from exc
        for key in COLLECTIONS:
            doc.setdefault(key, [])
        return doc

    def _write(self, doc: Document) -> None:
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=".db-", suffix=".json", dir=str(directory))
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(doc, fh, indent=2)
                os.replace(tmp, self.path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as exc:
            raise StoreError(f"cannot write store file {self.path}: {exc}") from exc
        except (TypeError, ValueError) as exc:
            raise StoreError(f"cannot serialise store document for {self.path}: {exc}") from exc

    def _init_sync(self) -> bool:
        with self._lock:
            if self.path.exists():
                return False
            self._write(initial_document(self.seed_demo_data))
            return True

    def _update(self, collection: str, mutate: Callable[[List[Record]], List[Record]]) -> None:
        with self._lock:
            doc = self._read()
            doc[collection] = mutate(doc[collection])
            self._write(doc)

    def _locked_read(self) -> Document:
        with self._lock:
            return self._read()

    # -- public API ----------------------------------------------------
    async def init(self) -> bool:
        """Create the document with default content if it is missing.

        Returns True when a new file was written.
        """
        created = await asyncio.to_thread(self._init_sync)
        if created:
            logger.info("created store at %s (demo data: %s)", self.path, self.seed_demo_data)
        return created

    async def get(self, collection: str) -> List[Record]:
        check_collection(collection)
        doc = await asyncio.to_thread(self._locked_read)
        return doc[collection]

    async def replace(self, collection: str, records: List[Record]) -> None:
        check_collection(collection)
        if collection not in REPLACEABLE:
            raise ValueError(f"{collection} cannot be replaced in bulk")
        payload = list(records)
        await asyncio.to_thread(self._update, collection, lambda _old: payload)

    async def append_order(self, order: Record) -> None:
        await asyncio.to_thread(self._update, ORDERS, lambda old: [order, *old])

    async def block_user(self, user_id: str, is_blocked: bool) -> None:
        def _flag(users: List[Record]) -> List[Record]:
            return [{**u, "isBlocked": is_blocked} if u.get("id") == user_id else u for u in users]

        await asyncio.to_thread(self._update, USERS, _flag)

    async def register_user(self, user: Record) -> None:
        await asyncio.to_thread(self._update, USERS, lambda old: [*old, user])

    async def dump(self) -> Document:
        """Return the whole document (used by the CLI and tests)."""
        return await asyncio.to_thread(self._locked_read)
