"""Command-line entry point.

Usage:
    python -m sporta.cli serve --port 3001
    python -m sporta.cli show scores --api-url http://localhost:3001
    python -m sporta.cli generate-news --topic Tennis
    python -m sporta.cli watch --duration 60

`watch` loads every collection from the API into a synchronizer, attaches a
local live feed and prints the score line of each match the feed touches.
"""
from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
from typing import Any, Callable, Dict, Optional

from sporta.config import Settings
from sporta.errors import StoreError
from sporta.models import COLLECTIONS, SCORES, DeltaEvent
from sporta.publisher import LiveUpdatePublisher
from sporta.synchronizer import StateSynchronizer

logger = logging.getLogger(__name__)


def format_match(match: Dict[str, Any]) -> str:
    line = f"{match.get('teamA')} {match.get('scoreA', 0)} - {match.get('scoreB', 0)} {match.get('teamB')}"
    status = match.get("status", "")
    if status == "Live" and match.get("currentMinute") is not None:
        status = f"Live {match['currentMinute']}'"
    line += f"  [{status}]"
    if match.get("lastEvent"):
        line += f"  {match['lastEvent']}"
    return line


async def run_watch(
    store: Any,
    publisher: LiveUpdatePublisher,
    duration: float,
    out: Callable[[str], None] = print,
) -> StateSynchronizer:
    sync = StateSynchronizer(store)
    await sync.load()
    for match in sync.snapshot(SCORES):
        out(format_match(match))

    def _show(event: DeltaEvent) -> None:
        match = next((m for m in sync.snapshot(SCORES) if m.get("id") == event.id), None)
        if match is not None:
            out(format_match(match))

    # The synchronizer subscribes first so the printer sees merged state.
    with sync.attach(publisher), publisher.subscribe(_show):
        publisher.start()
        try:
            await asyncio.sleep(duration)
        finally:
            publisher.stop()
    return sync


async def _show_collection(api_url: str, collection: str, timeout: float):
    from sporta.http_store import HttpStore

    async with HttpStore(api_url, timeout=timeout) as store:
        return await store.get(collection)


async def _watch(settings: Settings, api_url: str, duration: float, interval: float) -> None:
    from sporta.http_store import HttpStore

    publisher = LiveUpdatePublisher(settings.live_match_ids, interval=interval)
    async with HttpStore(api_url, timeout=settings.http_timeout) as store:
        await run_watch(store, publisher, duration)


def _serve(settings: Settings, host: str, port: int) -> None:
    import uvicorn

    from sporta.server import create_app

    uvicorn.run(create_app(settings), host=host, port=port, log_level=settings.log_level.lower())


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="sporta", description="Sporta store and live-score tools")
    sub = p.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the persistence API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.add_argument("--db", default=None, help="Path of the JSON store file")
    serve.add_argument("--live-feed", action="store_true", help="Run the simulated live feed in-process")

    show = sub.add_parser("show", help="Print one collection from the API")
    show.add_argument("collection", choices=COLLECTIONS)
    show.add_argument("--api-url", default=None)

    gen = sub.add_parser("generate-news", help="Draft a news article with the text model")
    gen.add_argument("--topic", default="Football")

    watch = sub.add_parser("watch", help="Follow live scores through a local synchronizer")
    watch.add_argument("--api-url", default=None)
    watch.add_argument("--duration", type=float, default=60.0, help="seconds to run")
    watch.add_argument("--interval", type=float, default=None, help="seconds between feed ticks")
    return p


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    api_url = getattr(args, "api_url", None) or settings.api_url

    try:
        if args.command == "serve":
            overrides: Dict[str, Any] = {}
            if args.db:
                overrides["db_path"] = args.db
            if args.live_feed:
                overrides["enable_live_feed"] = True
            if overrides:
                settings = dataclasses.replace(settings, **overrides)
            _serve(settings, args.host or settings.host, args.port or settings.port)
        elif args.command == "show":
            records = asyncio.run(_show_collection(api_url, args.collection, settings.http_timeout))
            print(json.dumps(records, indent=2))
        elif args.command == "generate-news":
            from sporta.textgen import generate_sports_news

            print(json.dumps(generate_sports_news(args.topic, settings), indent=2))
        elif args.command == "watch":
            interval = args.interval or settings.live_feed_interval
            asyncio.run(_watch(settings, api_url, args.duration, interval))
    except StoreError as exc:
        print(json.dumps({"ok": False, "error": str(exc)}))
        return 2
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())  # pragma: no cover
