"""Building and editing news articles.

All helpers return new lists so the result can go straight into a bulk
replace of the news collection.
"""
from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from sporta.errors import ValidationError

Record = Dict[str, Any]

SPORT_IMAGES = {
    "Football": "https://images.unsplash.com/photo-1574629810360-7efbbe195018",
    "Basketball": "https://images.unsplash.com/photo-1504450758481-7338eba7524a",
    "Tennis": "https://images.unsplash.com/photo-1595435063121-657f2084c8a5",
    "Cricket": "https://images.unsplash.com/photo-1531415074968-036ba1b575da",
    "Other": "https://images.unsplash.com/photo-1461896756913-6611c851c890",
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return str(time.time_ns())


def build_article(
    title: str,
    content: str,
    category: str = "Football",
    tags: Iterable[str] = (),
    read_time: str = "5 min read",
    author: str = "Chief Administrator",
) -> Record:
    if not title or not title.strip() or not content or not content.strip():
        raise ValidationError("news: title and content are required")
    image = SPORT_IMAGES.get(category, SPORT_IMAGES["Other"])
    return {
        "id": _new_id(),
        "title": title.strip(),
        "content": content.strip(),
        "category": category,
        "image": f"{image}?auto=format&fit=crop&w=1200&q=80",
        "author": author,
        "date": _now(),
        "readTime": read_time,
        "tags": [t.strip() for t in tags if t and t.strip()],
        "comments": [],
    }


def publish(articles: Sequence[Record], article: Record) -> List[Record]:
    """Newest first."""
    return [article, *articles]


def remove_article(articles: Sequence[Record], article_id: str) -> List[Record]:
    return [a for a in articles if a.get("id") != article_id]


def add_comment(articles: Sequence[Record], article_id: str, username: str, text: str) -> List[Record]:
    if not text or not text.strip():
        raise ValidationError("news: comment text is empty")
    comment = {"id": _new_id(), "username": username, "text": text.strip(), "date": _now()}
    out = []
    found = False
    for a in articles:
        if a.get("id") == article_id:
            a = {**a, "comments": [comment, *a.get("comments", [])]}
            found = True
        out.append(a)
    if not found:
        raise ValidationError(f"news: unknown article '{article_id}'")
    return out


def generated_article(
    topic: str,
    generate: Optional[Callable[[str], Dict[str, str]]] = None,
) -> Record:
    """Article drafted by the text generator; never fails."""
    if generate is None:
        from sporta.textgen import generate_sports_news as generate
    pair = generate(topic)
    return build_article(
        title=pair.get("title") or "Elite Performance Update",
        content=pair.get("content") or "Fresh tactical insights and professional updates just arrived from our AI desk.",
        category=topic if topic in SPORT_IMAGES else "Other",
        tags=["AI-Driven", "Strategic"],
        read_time="3 min read",
        author="AI Desk",
    )
