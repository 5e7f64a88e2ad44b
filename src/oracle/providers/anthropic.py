"""Content-block chat provider (Anthropic messages schema)."""

from __future__ import annotations

import json
from typing import Any

import httpx

from oracle.errors import CapabilityError, EmptyResponseError, ResponseDecodeError
from oracle.models import ANTHROPIC_MODELS, ModelConfig, resolve_model
from oracle.prompt import PromptSource
from oracle.providers.base import (
    ROLE_SYSTEM,
    ImageBlock,
    TextBlock,
    WireMessage,
    artifacts,
    compile_messages,
)
from oracle.providers.dispatch import HttpRequest, RequestDispatcher
from oracle.providers.failures import raise_for_status
from oracle.strategy import Strategy, select_checked

DEFAULT_BASE_URL = "https://api.anthropic.com/v1"
DEFAULT_MODEL = "ClaudeSonnet3_7"
DEFAULT_VERSION = "2023-06-01"
DEFAULT_MAX_TOKENS = 1024


def _block_to_content(block: TextBlock | ImageBlock) -> dict[str, Any]:
    if isinstance(block, ImageBlock):
        return {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": block.media_type,
                "data": block.base64,
            },
        }
    return {"type": "text", "text": block.text}


def serialize_messages(messages: list[WireMessage]) -> tuple[str | None, list[dict[str, Any]]]:
    """Split out the system turn and encode the rest as content-block turns."""
    system: str | None = None
    turns: list[dict[str, Any]] = []
    for message in messages:
        if message.role == ROLE_SYSTEM:
            system = message.joined_text()
            continue
        if message.has_image:
            content: Any = [_block_to_content(block) for block in message.blocks]
        else:
            content = message.joined_text()
        turns.append({"role": message.role, "content": content})
    return system, turns


def parse_response(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ResponseDecodeError(f"anthropic response is not JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ResponseDecodeError("anthropic response is not an object")
    content = payload.get("content")
    if not isinstance(content, list) or not content:
        raise EmptyResponseError("no content returned")
    fragments: list[str] = []
    for item in content:
        if isinstance(item, dict):
            text = item.get("text")
            if isinstance(text, str):
                fragments.append(text)
    return "".join(fragments)


class Anthropic:
    def __init__(
        self,
        token: str,
        *,
        model: ModelConfig | str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        version: str = DEFAULT_VERSION,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        dispatcher: RequestDispatcher | None = None,
    ) -> None:
        self.token = token
        self.model = resolve_model(ANTHROPIC_MODELS, model) if isinstance(model, str) else model
        self.base_url = base_url.rstrip("/")
        self.version = version
        self.max_tokens = max_tokens
        self.dispatcher = dispatcher or RequestDispatcher()

    def with_model(self, name: str) -> None:
        self.model = resolve_model(ANTHROPIC_MODELS, name)

    def compile(self, prompt: PromptSource) -> list[WireMessage]:
        return compile_messages(prompt, self.model)

    def build_request(self, messages: list[WireMessage], strategy: Strategy) -> HttpRequest:
        system, turns = serialize_messages(messages)
        body: dict[str, Any] = {
            "model": self.model.name,
            "max_tokens": min(self.max_tokens, self.model.max_tokens),
            "messages": turns,
        }
        if system is not None:
            body["system"] = system
        return HttpRequest(
            url=f"{self.base_url}/messages",
            headers={
                "Content-Type": "application/json",
                "x-api-key": self.token,
                "anthropic-version": self.version,
            },
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
