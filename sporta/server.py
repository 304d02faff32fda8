"""FastAPI persistence API backed by the JSON file store.

Routes (all JSON):

- GET  /api/{collection}          read news | scores | products | orders | users
- POST /api/{collection}          replace news | scores | products (whole array)
- POST /api/orders                prepend one order
- POST /api/users/block           {userId, isBlocked}
- POST /api/users/register        append one user
- GET  /api/stream/scores         live deltas as Server-Sent Events
- POST /api/ai/news               {topic} -> {title, content}
- POST /api/ai/summary            {description} -> {summary}
- GET  /api/health

Run with: `uvicorn sporta.server:create_app --factory --port 3001`, or
`python -m sporta.cli serve`. Set ENABLE_LIVE_FEED=1 to run the simulated
feed in the server process.
"""
from __future__ import annotations

import asyncio
import json
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse

from sporta.accounts import find_user
from sporta.config import Settings
from sporta.errors import StoreError, ValidationError
from sporta.models import COLLECTIONS, REPLACEABLE, USERS, DeltaEvent
from sporta.publisher import LiveUpdatePublisher
from sporta.store import JsonFileStore
from sporta.textgen import generate_match_summary, generate_sports_news
from sporta.update_buffer import UpdateBuffer
from sporta.validation import validate_collection, validate_order, validate_user

logger = logging.getLogger(__name__)

OK = {"success": True}


async def score_stream(
    publisher: LiveUpdatePublisher,
    buffer: UpdateBuffer,
    match_id: Optional[str] = None,
    poll_interval: float = 1.0,
) -> AsyncIterator[str]:
    """Yield SSE `data:` frames for every delta the publisher emits.

    The subscription lives as long as the generator; closing it (client
    disconnect) unsubscribes and drops the stream's buffer.
    """
    key = uuid.uuid4().hex
    buffer.open(key)

    def _listener(event: DeltaEvent) -> None:
        if match_id is None or event.id == match_id:
            buffer.push_update(key, event.to_dict())

    subscription = publisher.subscribe(_listener)
    try:
        while True:
            update = buffer.get_update(key)
            if update is not None:
                yield f"data: {json.dumps(update)}\n\n"
                continue
            await asyncio.sleep(poll_interval)
    finally:
        subscription.unsubscribe()
        buffer.close(key)


def _check_known(collection: str) -> None:
    if collection not in COLLECTIONS:
        raise HTTPException(status_code=404, detail=f"unknown collection: {collection}")


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[JsonFileStore] = None,
    publisher: Optional[LiveUpdatePublisher] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    store = store or JsonFileStore(settings.db_path, seed_demo_data=settings.seed_demo_data)
    publisher = publisher or LiveUpdatePublisher(
        settings.live_match_ids, interval=settings.live_feed_interval
    )
    buffer = UpdateBuffer()

    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        await store.init()
        if settings.enable_live_feed:
            publisher.start()
        try:
            yield
        finally:
            publisher.stop()

    app = FastAPI(title="Sporta Store API", lifespan=_lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.publisher = publisher
    app.state.buffer = buffer

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StoreError)
    async def _store_error(request, exc: StoreError):
        logger.error("store failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})

    @app.exception_handler(ValidationError)
    async def _validation_error(request, exc: ValidationError):
        return JSONResponse(status_code=422, content={"success": False, "error": str(exc)})

    @app.get("/api/health")
    async def health() -> Dict[str, Any]:
        return {
            "ok": True,
            "liveFeed": publisher.running,
            "listeners": publisher.listener_count,
            "streams": buffer.streams,
        }

    # Fixed paths are registered before the /api/{collection} catch-alls.
    @app.post("/api/orders")
    async def append_order(order: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
        validate_order(order)
        await store.append_order(order)
        return OK

    @app.post("/api/users/block")
    async def block_user(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
        user_id = payload.get("userId")
        is_blocked = payload.get("isBlocked")
        if not user_id or not isinstance(is_blocked, bool):
            raise ValidationError("users: userId and boolean isBlocked are required")
        await store.block_user(str(user_id), is_blocked)
        return OK

    @app.post("/api/users/register")
    async def register_user(user: Dict[str, Any] = Body(...)):
        validate_user(user)
        if find_user(await store.get(USERS), user["email"]) is not None:
            return JSONResponse(status_code=409, content={"success": False, "error": "User already exists."})
        await store.register_user(user)
        return OK

    @app.get("/api/stream/scores")
    async def stream_scores(match_id: Optional[str] = None):
        return StreamingResponse(
            score_stream(publisher, buffer, match_id=match_id),
            media_type="text/event-stream",
        )

    @app.post("/api/ai/news")
    def ai_news(payload: Dict[str, Any] = Body(...)) -> Dict[str, str]:
        topic = str(payload.get("topic") or "Football")
        return generate_sports_news(topic, settings)

    @app.post("/api/ai/summary")
    def ai_summary(payload: Dict[str, Any] = Body(...)) -> Dict[str, str]:
        description = str(payload.get("description") or "")
        return {"summary": generate_match_summary(description, settings)}

    @app.get("/api/{collection}")
    async def read_collection(collection: str) -> List[Dict[str, Any]]:
        _check_known(collection)
        return await store.get(collection)

    @app.post("/api/{collection}")
    async def replace_collection(collection: str, records: List[Dict[str, Any]] = Body(...)) -> Dict[str, Any]:
        _check_known(collection)
        if collection not in REPLACEABLE:
            raise HTTPException(status_code=405, detail=f"{collection} cannot be replaced in bulk")
        validate_collection(collection, records, previous=await store.get(collection))
        await store.replace(collection, records)
        return OK

    return app
