"""Small FIFO buffers that fan live deltas out to streaming HTTP clients.

Each open stream gets its own key. A publisher listener pushes every delta
into the stream's buffer and the SSE generator drains it on each poll.
"""
from collections import deque
from typing import Any, Deque, Dict, Optional


class UpdateBuffer:
    def __init__(self, max_pending: int = 500) -> None:
        self.max_pending = max_pending
        self._updates: Dict[str, Deque[Any]] = {}

    def open(self, key: str) -> None:
        self._updates.setdefault(str(key), deque(maxlen=self.max_pending))

    def close(self, key: str) -> None:
        self._updates.pop(str(key), None)

    def push_update(self, key: str, update: Any) -> None:
        """Queue `update` for an open stream; the oldest entry is dropped when full."""
        pending = self._updates.get(str(key))
        if pending is not None:
            pending.append(update)

    def get_update(self, key: str) -> Optional[Any]:
        pending = self._updates.get(str(key))
        if not pending:
            return None
        return pending.popleft()

    def pending(self, key: str) -> int:
        return len(self._updates.get(str(key), ()))

    @property
    def streams(self) -> int:
        return len(self._updates)
