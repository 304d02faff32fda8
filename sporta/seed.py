"""Demo content written into a fresh store."""
from __future__ import annotations

import copy
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

ADMIN_EMAIL = "admin@worldsporta.com"


def _iso(delta_days: int = 0) -> str:
    return (datetime.now(timezone.utc) - timedelta(days=delta_days)).isoformat()


_NEWS: List[Dict[str, Any]] = [
    {
        "id": "1",
        "title": "Continental Glory: The Final Showdown",
        "content": (
            "The atmosphere is electric as the world prepares for the grandest stage in club "
            "football. Tactical masterclasses and individual brilliance are expected to define "
            "this historic clash at the Zenith Arena."
        ),
        "image": "https://images.unsplash.com/photo-1574629810360-7efbbe195018?auto=format&fit=crop&w=1200&q=80",
        "category": "Football",
        "author": "Julian Vercetti",
        "readTime": "8 min read",
        "tags": ["Championship", "Elite", "Football"],
        "comments": [],
    },
    {
        "id": "2",
        "title": "Precision & Power: The Hard Court Season",
        "content": (
            "The summer swing brings renewed intensity to the tour. With the world number one "
            "defending a narrow lead, every baseline exchange becomes a battle of wills."
        ),
        "image": "https://images.unsplash.com/photo-1595435063121-657f2084c8a5?auto=format&fit=crop&w=1200&q=80",
        "category": "Tennis",
        "author": "Sarah Jenkins",
        "readTime": "5 min read",
        "tags": ["Grand Slam", "Tennis", "Analysis"],
        "comments": [],
    },
    {
        "id": "3",
        "title": "Hardwood Legends: The Playoff Push",
        "content": (
            "The race for the post-season has never been tighter. Momentum is the only currency "
            "that matters as teams fight for home-court advantage."
        ),
        "image": "https://images.unsplash.com/photo-1504450758481-7338eba7524a?auto=format&fit=crop&w=1200&q=80",
        "category": "Basketball",
        "author": "Marcus Sterling",
        "readTime": "6 min read",
        "tags": ["Playoffs", "Basketball", "Pro"],
        "comments": [],
    },
]

_SCORES: List[Dict[str, Any]] = [
    {
        "id": "s1",
        "teamA": "Madrid Kings",
        "teamB": "Barcelona FC",
        "scoreA": 3,
        "scoreB": 2,
        "status": "Live",
        "sport": "Football",
        "venue": "Bernabeu Stadium",
        "stats": {"possessionA": 52, "possessionB": 48, "shotsA": 14, "shotsB": 11},
    },
    {
        "id": "s10",
        "teamA": "Bavaria Munich",
        "teamB": "Dortmund United",
        "scoreA": 1,
        "scoreB": 1,
        "status": "Live",
        "sport": "Football",
        "venue": "Allianz Arena",
    },
    {
        "id": "s11",
        "teamA": "Golden State",
        "teamB": "Chicago Bulls",
        "scoreA": 104,
        "scoreB": 98,
        "status": "Live",
        "sport": "Basketball",
        "venue": "Chase Center",
    },
]

_PRODUCTS: List[Dict[str, Any]] = [
    {
        "id": "p1",
        "name": "Vapor Elite Speed Cleats",
        "brand": "ProDirect",
        "price": 245.0,
        "rating": 4.9,
        "category": "Football",
        "stock": 12,
    },
    {
        "id": "p2",
        "name": "Precision Grip Pro Ball",
        "brand": "HoopCraft",
        "price": 85.0,
        "rating": 4.8,
        "category": "Basketball",
        "stock": 45,
    },
    {
        "id": "p3",
        "name": "Graphite Strike Racket",
        "brand": "AceMaster",
        "price": 310.0,
        "rating": 5.0,
        "category": "Tennis",
        "stock": 8,
    },
]


def admin_user() -> Dict[str, Any]:
    return {
        "id": "1",
        "username": "admin",
        "email": ADMIN_EMAIL,
        "role": "admin",
        "isBlocked": False,
        "createdAt": _iso(),
    }


def initial_document(with_demo_data: bool = True) -> Dict[str, List[Dict[str, Any]]]:
    """Return the five named arrays of a brand new store."""
    doc: Dict[str, List[Dict[str, Any]]] = {
        "news": [],
        "scores": [],
        "products": [],
        "orders": [],
        "users": [admin_user()],
    }
    if with_demo_data:
        news = copy.deepcopy(_NEWS)
        for i, article in enumerate(news):
            article["date"] = _iso(i)
        scores = copy.deepcopy(_SCORES)
        for match in scores:
            match["startTime"] = _iso()
        doc.update(news=news, scores=scores, products=copy.deepcopy(_PRODUCTS))
    return doc
