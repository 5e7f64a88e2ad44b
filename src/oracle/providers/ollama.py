"""Local inference provider (Ollama chat schema)."""

from __future__ import annotations

import json
from typing import Any

import httpx

from oracle.errors import CapabilityError, EmptyResponseError, ResponseDecodeError
from oracle.models import ModelConfig
from oracle.prompt import PromptSource
from oracle.providers.base import ImageBlock, WireMessage, artifacts, compile_messages
from oracle.providers.dispatch import HttpRequest, RequestDispatcher
from oracle.providers.failures import raise_for_status
from oracle.strategy import Strategy, select_checked

DEFAULT_ENDPOINT = "http://localhost:11434"


def serialize_messages(messages: list[WireMessage]) -> tuple[list[dict[str, str]], list[str]]:
    """Encode text turns as messages and lift image turns into a raw base64 list."""
    turns: list[dict[str, str]] = []
    images: list[str] = []
    for message in messages:
        if message.has_image:
            images.extend(b.base64 for b in message.blocks if isinstance(b, ImageBlock))
            continue
        turns.append({"role": message.role, "content": message.joined_text()})
    return turns, images


def parse_response(response: httpx.Response) -> str:
    """Join the ``message.content`` of every streamed JSON line."""
    fragments: list[str] = []
    seen = 0
    for raw in response.text.splitlines():
        line = raw.strip()
        if not line:
            continue
        try:
            event = json.loads(line)
        except json.JSONDecodeError as exc:
            raise ResponseDecodeError(f"ollama stream line is not JSON: {exc}") from exc
        if not isinstance(event, dict):
            raise ResponseDecodeError("ollama stream line is not an object")
        message = event.get("message")
        if not isinstance(message, dict):
            continue
        seen += 1
        content = message.get("content")
        if isinstance(content, str):
            fragments.append(content)
    if seen == 0:
        raise EmptyResponseError("no messages returned")
    return "".join(fragments)


class Ollama:
    def __init__(
        self,
        model: str,
        endpoint: str = DEFAULT_ENDPOINT,
        *,
        stream: bool = True,
        dispatcher: RequestDispatcher | None = None,
    ) -> None:
        self.model = ModelConfig(model)
        self.endpoint = endpoint.rstrip("/")
        self.stream = stream
        self.dispatcher = dispatcher or RequestDispatcher()

    def compile(self, prompt: PromptSource) -> list[WireMessage]:
        return compile_messages(prompt, self.model)

    def build_request(self, messages: list[WireMessage], strategy: Strategy) -> HttpRequest:
        turns, images = serialize_messages(messages)
        body: dict[str, Any] = {
            "model": self.model.name,
            "messages": turns,
            "stream": self.stream,
        }
        if strategy is Strategy.VISION and images:
            body["images"] = images
        return HttpRequest(
            url=f"{self.endpoint}/api/chat",
            headers={"Content-Type": "application/json"},
            body=body,
        )

    def complete(self, prompt: PromptSource, *, timeout: float | None = None) -> str:
        if artifacts(prompt):
            raise CapabilityError(f"model {self.model.name} cannot write artifacts")
        strategy = select_checked(prompt.get_references(), self.model)
        request = self.build_request(self.compile(prompt), strategy)
        response = self.dispatcher.send(request, timeout=timeout)
        raise_for_status(response)
        return parse_response(response)

    def generate_embedding(
        self, prompt: PromptSource, *, timeout: float | None = None
    ) -> list[float]:
        request = HttpRequest(
            url=f"{self.endpoint}/api/embeddings",
            headers={"Content-Type": "application/json"},
            body={"model": self.model.name, "prompt": prompt.get_question()},
        )
        response = self.dispatcher.send(request, timeout=timeout)
        raise_for_status(response)
        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ResponseDecodeError(f"ollama embedding is not JSON: {exc}") from exc
        embedding = payload.get("embedding") if isinstance(payload, dict) else None
        if not isinstance(embedding, list) or not embedding:
            raise EmptyResponseError("no embedding returned")
        return [float(item) for item in embedding if isinstance(item, int | float)]
