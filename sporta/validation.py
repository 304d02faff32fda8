"""Checks applied to administrative input before any state changes.

Each validator raises `ValidationError` on the first problem found. The
scores validator also enforces the match lifecycle against the records that
are being replaced: status never moves backwards and a live match's minute
never goes down.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Sequence

from sporta.errors import ValidationError
from sporta.models import NEWS, ORDERS, PRODUCTS, SCORES, USERS, MatchStatus

Record = Dict[str, Any]

REQUIRED_FIELDS = {
    NEWS: ("id", "title", "content"),
    SCORES: ("id", "teamA", "teamB", "venue"),
    PRODUCTS: ("id", "name", "price"),
    ORDERS: ("id", "userId", "items", "total"),
    USERS: ("id", "username", "email"),
}


def _require(collection: str, record: Any) -> Record:
    if not isinstance(record, dict):
        raise ValidationError(f"{collection}: each record must be an object")
    for name in REQUIRED_FIELDS[collection]:
        value = record.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f"{collection}: missing required field '{name}'")
    return record


def _non_negative_int(record: Record, name: str, required: bool = True) -> None:
    value = record.get(name)
    if value is None and not required:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"scores: '{name}' must be a non-negative integer")


def _non_negative_number(collection: str, record: Record, name: str) -> None:
    value = record.get(name)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise ValidationError(f"{collection}: '{name}' must be a non-negative number")


def _unique_ids(collection: str, records: Iterable[Record]) -> None:
    seen = set()
    for r in records:
        rid = str(r["id"])
        if rid in seen:
            raise ValidationError(f"{collection}: duplicate id '{rid}'")
        seen.add(rid)


def validate_news(records: Sequence[Any]) -> None:
    for r in records:
        _require(NEWS, r)
    _unique_ids(NEWS, records)


def validate_products(records: Sequence[Any]) -> None:
    for r in records:
        _non_negative_number(PRODUCTS, _require(PRODUCTS, r), "price")
    _unique_ids(PRODUCTS, records)


def _status(record: Record) -> MatchStatus:
    try:
        return MatchStatus(record.get("status"))
    except ValueError:
        raise ValidationError(f"scores: invalid status {record.get('status')!r}") from None


def validate_scores(records: Sequence[Any], previous: Optional[Sequence[Record]] = None) -> None:
    """Validate a full scores array, optionally against the array it replaces."""
    prior = {str(p.get("id")): p for p in (previous or ())}
    for r in records:
        _require(SCORES, r)
        _non_negative_int(r, "scoreA")
        _non_negative_int(r, "scoreB")
        _non_negative_int(r, "currentMinute", required=False)
        status = _status(r)

        old = prior.get(str(r["id"]))
        if old is None:
            continue
        try:
            old_status = MatchStatus(old.get("status"))
        except ValueError:
            continue
        if status.rank < old_status.rank:
            raise ValidationError(
                f"scores: match '{r['id']}' cannot go from {old_status.value} back to {status.value}"
            )
        # A record without a clock leaves the minute alone.
        if status is MatchStatus.LIVE and old_status is MatchStatus.LIVE and r.get("currentMinute") is not None:
            if r["currentMinute"] < (old.get("currentMinute") or 0):
                raise ValidationError(f"scores: match '{r['id']}' minute cannot decrease while live")
    _unique_ids(SCORES, records)


def validate_order(order: Any) -> None:
    _require(ORDERS, order)
    items = order.get("items")
    if not isinstance(items, list) or not items:
        raise ValidationError("orders: an order needs at least one item")
    _non_negative_number(ORDERS, order, "total")


def validate_user(user: Any) -> None:
    _require(USERS, user)
    if "@" not in str(user.get("email")):
        raise ValidationError("users: email address looks invalid")


def validate_collection(collection: str, records: Sequence[Any], previous: Optional[Sequence[Record]] = None) -> None:
    """Dispatch to the validator of a replaceable collection."""
    if not isinstance(records, (list, tuple)):
        raise ValidationError(f"{collection}: expected an array of records")
    if collection == NEWS:
        validate_news(records)
    elif collection == SCORES:
        validate_scores(records, previous)
    elif collection == PRODUCTS:
        validate_products(records)
    else:
        raise ValidationError(f"{collection}: collection cannot be replaced in bulk")
