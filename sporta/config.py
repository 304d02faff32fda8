"""Runtime settings read from the environment.

Values can also come from a local `.env` file (loaded with python-dotenv).
Defaults target a local demo: the JSON store lives in `db.json` next to the
working directory and the API listens on port 3001.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from dotenv import load_dotenv

DEFAULT_LIVE_MATCH_IDS = ("s1", "s10", "s11")


def _as_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _as_list(value: Optional[str], default: Tuple[str, ...]) -> Tuple[str, ...]:
    if not value:
        return default
    items = [v.strip() for v in value.split(",") if v.strip()]
    return tuple(items) or default


@dataclass(frozen=True)
class Settings:
    db_path: str = "db.json"
    api_url: str = "http://localhost:3001"
    host: str = "127.0.0.1"
    port: int = 3001
    live_feed_interval: float = 5.0
    live_match_ids: Tuple[str, ...] = DEFAULT_LIVE_MATCH_IDS
    enable_live_feed: bool = False
    seed_demo_data: bool = True
    demo_password: str = "password"
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    http_timeout: float = 10.0
    log_level: str = "INFO"
    cors_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"]
    )

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """Build settings from environment variables (and `.env` if present)."""
        if dotenv:
            load_dotenv()
        env = os.environ
        return cls(
            db_path=env.get("SPORTA_DB_PATH", cls.db_path),
            api_url=env.get("SPORTA_API_URL", cls.api_url),
            host=env.get("SPORTA_HOST", cls.host),
            port=int(env.get("SPORTA_PORT", str(cls.port))),
            live_feed_interval=float(env.get("LIVE_FEED_INTERVAL", str(cls.live_feed_interval))),
            live_match_ids=_as_list(env.get("LIVE_MATCH_IDS"), DEFAULT_LIVE_MATCH_IDS),
            enable_live_feed=_as_bool(env.get("ENABLE_LIVE_FEED")),
            seed_demo_data=_as_bool(env.get("SPORTA_SEED_DEMO"), default=True),
            demo_password=env.get("DEMO_PASSWORD", cls.demo_password),
            openai_api_key=env.get("OPENAI_API_KEY") or None,
            openai_model=env.get("OPENAI_MODEL", cls.openai_model),
            http_timeout=float(env.get("HTTP_TIMEOUT", str(cls.http_timeout))),
            log_level=env.get("LOG_LEVEL", cls.log_level).upper(),
            cors_origins=list(
                _as_list(env.get("CORS_ORIGINS"), ("http://localhost:5173", "http://127.0.0.1:5173"))
            ),
        )
