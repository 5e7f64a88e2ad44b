"""End-to-end conversations through Oracle, a real provider, and a mock transport."""

import base64
import json
from datetime import timedelta

import httpx
import pytest

from oracle import Oracle, RateLimitError
from oracle.config import get_settings
from oracle.providers.anthropic import Anthropic
from oracle.providers.dispatch import RequestDispatcher
from oracle.providers.factory import build_language_model
from oracle.references import PNG_SIGNATURE

PNG_BYTES = PNG_SIGNATURE + b"\x00\x00\x00\rIHDR"
ODD_EVEN_PURPOSE = "To answer if a number is odd or even in a specific format"


def test_odd_even_conversation_over_chat_completions(monkeypatch: pytest.MonkeyPatch) -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content.decode("utf-8")))
        return httpx.Response(200, json={"choices": [{"message": {"content": "+++even+++"}}]})

    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    get_settings.cache_clear()
    oracle = Oracle(build_language_model(get_settings(), transport=httpx.MockTransport(handler)))
    oracle.set_purpose(ODD_EVEN_PURPOSE)
    oracle.give_example("2", "+++even+++")
    oracle.give_example("3", "---odd---")

    assert oracle.ask("6") == "+++even+++"

    messages = bodies[0]["messages"]
    assert messages[0] == {"role": "system", "content": ODD_EVEN_PURPOSE}
    turns = messages[1:-1]
    assert turns == [
        {"role": "user", "content": "2"},
        {"role": "assistant", "content": "+++even+++"},
        {"role": "user", "content": "3"},
        {"role": "assistant", "content": "---odd---"},
    ]
    assert messages[-1] == {"role": "user", "content": "6"}
    assert oracle.history[-1] == ("6", "+++even+++")


def test_text_and_image_references_over_content_blocks() -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content.decode("utf-8")))
        return httpx.Response(200, json={"content": [{"type": "text", "text": "a sunrise"}]})

    client = Anthropic(
        "ak-test", dispatcher=RequestDispatcher(transport=httpx.MockTransport(handler))
    )
    oracle = Oracle(client, purpose="Describe images")
    assert oracle.ask("What is this?", "It's time to shine", PNG_BYTES) == "a sunrise"

    messages = bodies[0]["messages"]
    assert bodies[0]["system"] == "Describe images"
    assert messages[0] == {"role": "user", "content": "What is this?"}
    assert messages[1] == {"role": "user", "content": "Reference 1: It's time to shine"}
    image = messages[2]["content"][0]
    assert image["type"] == "image"
    assert base64.b64decode(image["source"]["data"]) == PNG_BYTES


def test_multi_turn_history_over_local_stream() -> None:
    replies = iter(["first", "second"])
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content.decode("utf-8")))
        line = json.dumps({"message": {"role": "assistant", "content": next(replies)}})
        return httpx.Response(200, text=line + '\n{"done":true}\n')

    oracle = Oracle.ollama("llama3", transport=httpx.MockTransport(handler))
    oracle.ask("one")
    oracle.ask("two")

    assert [m["content"] for m in bodies[1]["messages"]] == [
        "You are a helpful assistant",
        "one",
        "first",
        "two",
    ]
    assert oracle.history == [("one", "first"), ("two", "second")]


def test_rate_limit_surfaces_backoff_and_keeps_history(monkeypatch: pytest.MonkeyPatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            429,
            headers={
                "X-Ratelimit-Remaining-Requests": "0",
                "X-Ratelimit-Remaining-Tokens": "90000",
                "X-Ratelimit-Reset-Requests": "1m30s",
                "X-Ratelimit-Reset-Tokens": "5ms",
            },
            json={"error": {"message": "Rate limit reached for requests"}},
        )

    oracle = Oracle.chatgpt("sk-test", transport=httpx.MockTransport(handler))
    oracle.give_example("q", "a")
    with pytest.raises(RateLimitError) as excinfo:
        oracle.ask("again")
    assert excinfo.value.retry_after == timedelta(seconds=90)
    assert excinfo.value.status == 429
    assert oracle.history == [("q", "a")]
