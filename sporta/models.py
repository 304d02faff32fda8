"""Collection keys, match status and the live delta event."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

NEWS = "news"
SCORES = "scores"
PRODUCTS = "products"
ORDERS = "orders"
USERS = "users"

COLLECTIONS = (NEWS, SCORES, PRODUCTS, ORDERS, USERS)
# Collections persisted by whole-array replace.
REPLACEABLE = (NEWS, SCORES, PRODUCTS)

# Elapsed minute at which a live match is forced to Finished.
FINISH_MINUTE = 95


class MatchStatus(str, Enum):
    UPCOMING = "Upcoming"
    LIVE = "Live"
    FINISHED = "Finished"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)


_STATUS_ORDER = [MatchStatus.UPCOMING, MatchStatus.LIVE, MatchStatus.FINISHED]


def check_collection(name: str) -> str:
    if name not in COLLECTIONS:
        raise ValueError(f"unknown collection: {name}")
    return name


def _positive(value: Any, name: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
    return value


@dataclass(frozen=True)
class DeltaEvent:
    """Partial, additive-only update for one tracked match.

    A goal belongs to exactly one side, so at most one of the two score
    increments may be set.
    """

    id: str
    minute_increment: Optional[int] = None
    score_a_increment: Optional[int] = None
    score_b_increment: Optional[int] = None
    last_event: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("delta event requires a match id")
        _positive(self.minute_increment, "minuteIncrement")
        _positive(self.score_a_increment, "scoreAIncrement")
        _positive(self.score_b_increment, "scoreBIncrement")
        if self.score_a_increment is not None and self.score_b_increment is not None:
            raise ValueError("a delta may increment only one side's score")

    @property
    def is_empty(self) -> bool:
        return (
            self.minute_increment is None
            and self.score_a_increment is None
            and self.score_b_increment is None
            and self.last_event is None
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeltaEvent":
        return cls(
            id=str(data.get("id") or ""),
            minute_increment=data.get("minuteIncrement") or None,
            score_a_increment=data.get("scoreAIncrement") or None,
            score_b_increment=data.get("scoreBIncrement") or None,
            last_event=data.get("lastEvent") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id}
        if self.minute_increment is not None:
            out["minuteIncrement"] = self.minute_increment
        if self.score_a_increment is not None:
            out["scoreAIncrement"] = self.score_a_increment
        if self.score_b_increment is not None:
            out["scoreBIncrement"] = self.score_b_increment
        if self.last_event is not None:
            out["lastEvent"] = self.last_event
        return out
