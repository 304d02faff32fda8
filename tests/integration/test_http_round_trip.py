import asyncio
import os
import socket
import threading
import time

import pytest

pytestmark = pytest.mark.integration


def _free_port():
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def test_synchronizer_against_a_running_server(tmp_path):
    """Serve the API on a real port and drive a synchronizer through HttpStore.

    Runs only when RUN_INTEGRATION=1.
    """
    if not os.getenv("RUN_INTEGRATION"):
        pytest.skip("Integration tests disabled; set RUN_INTEGRATION=1 to enable")

    import uvicorn

    from sporta.config import Settings
    from sporta.http_store import HttpStore
    from sporta.models import DeltaEvent
    from sporta.server import create_app
    from sporta.synchronizer import StateSynchronizer

    port = _free_port()
    app = create_app(Settings(db_path=str(tmp_path / "db.json")))
    server = uvicorn.Server(uvicorn.Config(app, host="127.0.0.1", port=port, log_level="warning"))
    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()
    deadline = time.time() + 10
    while not server.started and time.time() < deadline:
        time.sleep(0.05)
    assert server.started

    async def _inner():
        async with HttpStore(f"http://127.0.0.1:{port}") as store:
            sync = StateSynchronizer(store)
            await sync.load()
            assert sync.snapshot("scores")[0]["currentMinute"] == 72

            order = {"id": "ORD-INTEG001", "userId": "1", "items": [{"id": "p1", "quantity": 1}],
                     "total": 89.99, "status": "Pending"}
            assert await sync.place_order(order) is True

            sync.apply_delta(DeltaEvent(id="s1", score_a_increment=1))
            news = [{"id": "n1", "title": "Live from the API", "content": "Round trip."}]
            assert await sync.replace("news", news) is True

            assert await store.get("news") == news
            assert (await store.get("orders"))[0]["id"] == "ORD-INTEG001"
            assert (await store.get("scores"))[0]["scoreA"] == 3

    try:
        asyncio.run(_inner())
    finally:
        server.should_exit = True
        thread.join(timeout=10)
