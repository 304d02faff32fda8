import asyncio
import json

import pytest
from fastapi.testclient import TestClient

from sporta import server
from sporta.config import Settings
from sporta.models import DeltaEvent
from sporta.publisher import LiveUpdatePublisher
from sporta.server import create_app, score_stream
from sporta.textgen import ERROR_FALLBACK
from sporta.update_buffer import UpdateBuffer


@pytest.fixture
def client(tmp_path):
    settings = Settings(db_path=str(tmp_path / "db.json"))
    with TestClient(create_app(settings)) as c:
        yield c


def _order(oid):
    return {"id": oid, "userId": "1", "items": [{"id": "p1", "quantity": 2}], "total": 20.0, "status": "Pending"}


def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json()["ok"] is True
    assert r.json()["liveFeed"] is False


def test_fresh_store_is_seeded(client):
    scores = client.get("/api/scores").json()
    assert [m["id"] for m in scores][:3] == ["s1", "s10", "s11"]
    assert client.get("/api/orders").json() == []
    assert client.get("/api/users").json()[0]["role"] == "admin"


def test_bulk_replace_round_trip(client):
    news = [{"id": "n1", "title": "Derby day", "content": "Sold out."}]
    r = client.post("/api/news", json=news)
    assert r.status_code == 200
    assert r.json() == {"success": True}
    assert client.get("/api/news").json() == news


def test_orders_are_prepended(client):
    assert client.post("/api/orders", json=_order("ORD-1")).json() == {"success": True}
    client.post("/api/orders", json=_order("ORD-2"))
    assert [o["id"] for o in client.get("/api/orders").json()] == ["ORD-2", "ORD-1"]


def test_register_then_block_user(client):
    user = {"id": "42", "username": "ana", "email": "ana@example.com", "role": "user", "isBlocked": False}
    assert client.post("/api/users/register", json=user).status_code == 200
    dup = client.post("/api/users/register", json=dict(user, id="43", email="ANA@example.com"))
    assert dup.status_code == 409
    assert dup.json()["error"] == "User already exists."

    assert client.post("/api/users/block", json={"userId": "42", "isBlocked": True}).status_code == 200
    users = {u["id"]: u for u in client.get("/api/users").json()}
    assert users["42"]["isBlocked"] is True

    assert client.post("/api/users/block", json={"userId": "42", "isBlocked": "yes"}).status_code == 422


def test_unknown_and_non_replaceable_collections(client):
    assert client.get("/api/tickets").status_code == 404
    assert client.post("/api/tickets", json=[]).status_code == 404
    assert client.post("/api/users", json=[]).status_code == 405


def test_invalid_payloads_are_rejected(client):
    assert client.post("/api/news", json={"id": "n1"}).status_code == 422
    bad = client.post("/api/products", json=[{"id": "p1", "name": "Ball", "price": -5}])
    assert bad.status_code == 422
    assert bad.json()["success"] is False
    assert client.post("/api/orders", json=dict(_order("ORD-3"), items=[])).status_code == 422


def test_scores_cannot_regress_through_the_api(client):
    scores = client.get("/api/scores").json()
    finished = [dict(m, status="Finished") if m["id"] == "s1" else m for m in scores]
    assert client.post("/api/scores", json=finished).status_code == 200
    reopened = [dict(m, status="Live") if m["id"] == "s1" else m for m in finished]
    r = client.post("/api/scores", json=reopened)
    assert r.status_code == 422
    assert "back to" in r.json()["error"]


def test_corrupt_store_file_gives_500(tmp_path):
    path = tmp_path / "db.json"
    with TestClient(create_app(Settings(db_path=str(path)))) as c:
        path.write_text("{broken", encoding="utf-8")
        r = c.get("/api/news")
        assert r.status_code == 500
        assert r.json()["success"] is False


def test_ai_news_uses_the_generator(client, monkeypatch):
    monkeypatch.setattr(server, "generate_sports_news", lambda topic, settings: {"title": topic, "content": "ok"})
    r = client.post("/api/ai/news", json={"topic": "Tennis"})
    assert r.json() == {"title": "Tennis", "content": "ok"}


def test_ai_news_without_key_falls_back(client):
    r = client.post("/api/ai/news", json={"topic": "Cricket"})
    assert r.status_code == 200
    assert r.json() == ERROR_FALLBACK


def test_ai_summary(client, monkeypatch):
    monkeypatch.setattr(server, "generate_match_summary", lambda description, settings: f"Recap: {description}")
    r = client.post("/api/ai/summary", json={"description": "late winner"})
    assert r.json() == {"summary": "Recap: late winner"}


def test_score_stream_yields_sse_frames():
    async def _inner():
        pub = LiveUpdatePublisher(["s1", "s10"])
        buf = UpdateBuffer()
        agen = score_stream(pub, buf, match_id="s1", poll_interval=0.01)
        pending = asyncio.ensure_future(agen.__anext__())
        await asyncio.sleep(0.02)
        assert pub.listener_count == 1
        pub.publish(DeltaEvent(id="s10", minute_increment=1))
        pub.publish(DeltaEvent(id="s1", score_a_increment=1, last_event="GOAL! Team A Scores"))
        frame = await asyncio.wait_for(pending, 1.0)
        assert frame.startswith("data: ") and frame.endswith("\n\n")
        assert json.loads(frame[len("data: "):]) == {
            "id": "s1", "scoreAIncrement": 1, "lastEvent": "GOAL! Team A Scores"
        }
        await agen.aclose()
        assert pub.listener_count == 0
        assert buf.streams == 0

    asyncio.run(_inner())
