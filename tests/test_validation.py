import pytest

from sporta.errors import ValidationError
from sporta.validation import (
    validate_collection,
    validate_news,
    validate_order,
    validate_products,
    validate_scores,
    validate_user,
)


def _match(**kw):
    base = {"id": "s1", "teamA": "A", "teamB": "B", "venue": "V", "scoreA": 0, "scoreB": 0, "status": "Upcoming"}
    base.update(kw)
    return base


def test_news_requires_title_and_content():
    validate_news([{"id": "1", "title": "t", "content": "c"}])
    with pytest.raises(ValidationError, match="title"):
        validate_news([{"id": "1", "title": " ", "content": "c"}])


def test_duplicate_ids_rejected():
    with pytest.raises(ValidationError, match="duplicate"):
        validate_news([{"id": "1", "title": "t", "content": "c"}, {"id": "1", "title": "u", "content": "d"}])


def test_products_need_non_negative_price():
    validate_products([{"id": "p1", "name": "Ball", "price": 10}])
    with pytest.raises(ValidationError):
        validate_products([{"id": "p1", "name": "Ball", "price": -1}])


def test_scores_need_valid_status_and_counts():
    validate_scores([_match()])
    with pytest.raises(ValidationError, match="status"):
        validate_scores([_match(status="Paused")])
    with pytest.raises(ValidationError):
        validate_scores([_match(scoreA=-1)])
    with pytest.raises(ValidationError, match="venue"):
        validate_scores([_match(venue="")])


def test_status_cannot_regress():
    previous = [_match(status="Finished")]
    with pytest.raises(ValidationError, match="back to"):
        validate_scores([_match(status="Live")], previous)
    validate_scores([_match(status="Finished", scoreA=2)], previous)


def test_live_minute_cannot_go_down():
    previous = [_match(status="Live", currentMinute=80)]
    with pytest.raises(ValidationError, match="minute"):
        validate_scores([_match(status="Live", currentMinute=70)], previous)
    validate_scores([_match(status="Live", currentMinute=81)], previous)


def test_new_matches_are_not_checked_against_history():
    validate_scores([_match(id="s99", status="Live")], [_match(status="Finished")])


def test_order_requires_items():
    order = {"id": "ORD-1", "userId": "u1", "items": [{"id": "p1", "quantity": 1}], "total": 10.0}
    validate_order(order)
    with pytest.raises(ValidationError, match="item"):
        validate_order(dict(order, items=[]))


def test_user_requires_email():
    validate_user({"id": "2", "username": "ann", "email": "ann@example.com"})
    with pytest.raises(ValidationError):
        validate_user({"id": "2", "username": "ann", "email": "not-an-email"})


def test_only_replaceable_collections_dispatch():
    with pytest.raises(ValidationError, match="cannot be replaced"):
        validate_collection("orders", [])
    with pytest.raises(ValidationError, match="array"):
        validate_collection("news", {"id": "1"})


def test_live_edit_without_a_clock_is_accepted():
    previous = [_match(status="Live", currentMinute=80)]
    validate_scores([_match(status="Live", scoreA=1)], previous)
