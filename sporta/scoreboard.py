"""Admin edits of the scores collection.

Like the editorial helpers, every function returns a new list ready for a
bulk replace of the scores collection.
"""
from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from sporta.errors import ValidationError
from sporta.models import MatchStatus

Record = Dict[str, Any]

DEFAULT_STATS = {"possessionA": 50, "possessionB": 50, "shotsA": 0, "shotsB": 0}


def build_match(
    team_a: str,
    team_b: str,
    venue: str,
    score_a: int = 0,
    score_b: int = 0,
    status: str = MatchStatus.UPCOMING.value,
    sport: str = "Football",
    start_time: Optional[datetime] = None,
    team_a_logo: str = "",
    team_b_logo: str = "",
    match_id: Optional[str] = None,
) -> Record:
    """Match record as the admin form produces it; no clock and no stats."""
    if not team_a or not team_b or not venue:
        raise ValidationError("scores: both teams and a venue are required")
    try:
        status = MatchStatus(status).value
    except ValueError:
        raise ValidationError(f"scores: invalid status {status!r}") from None
    return {
        "id": match_id or str(time.time_ns()),
        "teamA": team_a,
        "teamB": team_b,
        "teamALogo": team_a_logo,
        "teamBLogo": team_b_logo,
        "scoreA": score_a,
        "scoreB": score_b,
        "status": status,
        "sport": sport,
        "startTime": (start_time or datetime.now(timezone.utc)).isoformat(),
        "venue": venue,
    }


def upsert_match(scores: Sequence[Record], match: Record) -> List[Record]:
    """Replace the match with the same id, keeping its stats, or add it first.

    A new match starts with `DEFAULT_STATS`.
    """
    out = []
    found = False
    for m in scores:
        if m.get("id") == match.get("id"):
            m = {**match, "stats": m.get("stats", match.get("stats"))}
            found = True
        out.append(m)
    if found:
        return out
    return [{**match, "stats": match.get("stats") or dict(DEFAULT_STATS)}, *scores]


def remove_match(scores: Sequence[Record], match_id: str) -> List[Record]:
    return [m for m in scores if m.get("id") != match_id]


def live_count(scores: Sequence[Record]) -> int:
    return sum(1 for m in scores if m.get("status") == MatchStatus.LIVE.value)
