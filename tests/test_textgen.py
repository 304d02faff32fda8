import json
from types import SimpleNamespace

import pytest

from sporta import textgen
from sporta.config import Settings
from sporta.textgen import (
    ERROR_FALLBACK,
    PARSE_FALLBACK,
    SUMMARY_FALLBACK,
    generate_match_summary,
    generate_sports_news,
    parse_article,
)

KEYED = Settings(openai_api_key="sk-test")


def _fake_openai(monkeypatch, content=None, error=None):
    calls = []

    class FakeCompletions:
        def create(self, **kwargs):
            calls.append(kwargs)
            if error is not None:
                raise error
            return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])

    class FakeOpenAI:
        def __init__(self, api_key=None, timeout=None):
            self.api_key = api_key
            self.chat = SimpleNamespace(completions=FakeCompletions())

    monkeypatch.setattr(textgen, "OpenAI", FakeOpenAI)
    return calls


def test_news_is_parsed_from_json(monkeypatch):
    calls = _fake_openai(monkeypatch, json.dumps({"title": "Upset at Wimbledon", "content": "Unseeded run."}))
    assert generate_sports_news("Tennis", KEYED) == {"title": "Upset at Wimbledon", "content": "Unseeded run."}
    assert calls[0]["model"] == "gpt-4o-mini"
    assert calls[0]["response_format"] == {"type": "json_object"}
    assert "Tennis" in calls[0]["messages"][0]["content"]


def test_unparseable_reply_uses_parse_fallback(monkeypatch):
    _fake_openai(monkeypatch, "Here is your article!")
    assert generate_sports_news("Football", KEYED) == PARSE_FALLBACK


def test_empty_reply_and_errors_use_error_fallback(monkeypatch):
    _fake_openai(monkeypatch, "   ")
    assert generate_sports_news("Football", KEYED) == ERROR_FALLBACK
    _fake_openai(monkeypatch, error=RuntimeError("rate limited"))
    assert generate_sports_news("Football", KEYED) == ERROR_FALLBACK


def test_missing_key_never_builds_a_client(monkeypatch):
    def _no_client(*a, **kw):
        raise AssertionError("client should not be created")

    monkeypatch.setattr(textgen, "OpenAI", _no_client)
    assert generate_sports_news("Football", Settings()) == ERROR_FALLBACK
    assert generate_match_summary("a draw", Settings()) == SUMMARY_FALLBACK


def test_summary(monkeypatch):
    calls = _fake_openai(monkeypatch, "  What a finish.  ")
    assert generate_match_summary("3-2 thriller", KEYED) == "What a finish."
    assert "response_format" not in calls[0]


def test_fallback_dicts_are_copies():
    out = parse_article("nope")
    out["title"] = "changed"
    assert PARSE_FALLBACK["title"] == "Breaking News Update"


@pytest.mark.parametrize("text", ["[1, 2]", '{"title": "only title"}', '{"title": "", "content": "x"}'])
def test_incomplete_articles_fall_back(text):
    assert parse_article(text) == PARSE_FALLBACK
