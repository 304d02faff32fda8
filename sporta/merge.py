"""Fold live delta events into a scores snapshot.

The engine never mutates its input: it returns a fresh list in which every
record other than the target is the very same object as before, and the
target (when it changes) is a shallow copy. Readers still holding the old
list never see a half-applied update.
"""
from __future__ import annotations

from typing import Any, Dict, List, Sequence, Union

from sporta.models import FINISH_MINUTE, DeltaEvent, MatchStatus

Record = Dict[str, Any]


def _as_event(delta: Union[DeltaEvent, Dict[str, Any]]) -> DeltaEvent:
    if isinstance(delta, DeltaEvent):
        return delta
    return DeltaEvent.from_dict(delta)


def apply_to_match(match: Record, delta: DeltaEvent) -> Record:
    """Return `match` with `delta` applied, or `match` itself when nothing changes.

    Finished matches are frozen: every field is left as is. The minute
    increment is applied first, so a combined event that crosses the
    finishing minute still carries its goal.
    """
    if match.get("status") == MatchStatus.FINISHED.value or delta.is_empty:
        return match

    updated = dict(match)
    if delta.minute_increment:
        minute = (updated.get("currentMinute") or 0) + delta.minute_increment
        updated["currentMinute"] = minute
        # Hard ceiling, independent of the score.
        if minute >= FINISH_MINUTE:
            updated["status"] = MatchStatus.FINISHED.value
    if delta.score_a_increment:
        updated["scoreA"] = (updated.get("scoreA") or 0) + delta.score_a_increment
    if delta.score_b_increment:
        updated["scoreB"] = (updated.get("scoreB") or 0) + delta.score_b_increment
    if delta.last_event:
        updated["lastEvent"] = delta.last_event
    return updated


def merge(snapshot: Sequence[Record], delta: Union[DeltaEvent, Dict[str, Any]]) -> List[Record]:
    """Apply one delta to a scores snapshot and return the new snapshot.

    Records are matched on `id`; an unknown target yields an equal copy of
    the input. Ordering is preserved.
    """
    event = _as_event(delta)
    return [apply_to_match(m, event) if m.get("id") == event.id else m for m in snapshot]
