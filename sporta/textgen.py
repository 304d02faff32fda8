"""Text generation for the editorial desk.

`generate_sports_news` asks an OpenAI chat model for a short article as a
JSON object `{"title": ..., "content": ...}`. Callers always get a usable
pair back: output that cannot be parsed becomes `PARSE_FALLBACK`, and every
other failure (no API key, network, empty reply) becomes `ERROR_FALLBACK`.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from openai import OpenAI

from sporta.config import Settings

logger = logging.getLogger(__name__)

PARSE_FALLBACK = {
    "title": "Breaking News Update",
    "content": "The situation on the field is developing rapidly. Stay tuned for more details.",
}
ERROR_FALLBACK = {
    "title": "Latest Updates",
    "content": "Fresh tactical insights are being prepared. Stay tuned for more sports updates coming soon.",
}
SUMMARY_FALLBACK = "The match continues with intense action from both sides!"


class EmptyResponse(Exception):
    pass


def _client(settings: Settings) -> OpenAI:
    if not settings.openai_api_key:
        raise RuntimeError("OPENAI_API_KEY is not configured")
    return OpenAI(api_key=settings.openai_api_key, timeout=settings.http_timeout)


def _complete(client: OpenAI, model: str, prompt: str, json_mode: bool = False) -> str:
    kwargs: Dict[str, Any] = {}
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}
    response = client.chat.completions.create(
        model=model,
        messages=[{"role": "user", "content": prompt}],
        max_tokens=500,
        temperature=0.7,
        **kwargs,
    )
    text = response.choices[0].message.content if response.choices else None
    if not text or not text.strip():
        raise EmptyResponse("empty response from text model")
    return text.strip()


def parse_article(text: str) -> Dict[str, str]:
    """Parse model output into a title/content pair or fall back."""
    try:
        data = json.loads(text)
    except ValueError:
        logger.warning("could not parse generated article: %.200s", text)
        return dict(PARSE_FALLBACK)
    if not isinstance(data, dict):
        return dict(PARSE_FALLBACK)
    title, content = data.get("title"), data.get("content")
    if not isinstance(title, str) or not isinstance(content, str) or not title or not content:
        return dict(PARSE_FALLBACK)
    return {"title": title, "content": content}


def generate_sports_news(topic: str, settings: Optional[Settings] = None) -> Dict[str, str]:
    settings = settings or Settings.from_env()
    prompt = (
        f"Generate a short, exciting sports news article title and content for {topic}. "
        'Reply with a JSON object with the string keys "title" and "content".'
    )
    try:
        text = _complete(_client(settings), settings.openai_model, prompt, json_mode=True)
    except Exception as exc:
        logger.warning("news generation for %r failed: %s", topic, exc)
        return dict(ERROR_FALLBACK)
    return parse_article(text)


def generate_match_summary(description: str, settings: Optional[Settings] = None) -> str:
    settings = settings or Settings.from_env()
    prompt = f"Write a 2-sentence thrilling commentary for a match described as: {description}"
    try:
        return _complete(_client(settings), settings.openai_model, prompt)
    except Exception as exc:
        logger.warning("match summary failed: %s", exc)
        return SUMMARY_FALLBACK
