"""Turn-based generative provider (Vertex AI streamGenerateContent schema).

The schema has no system role, so the purpose is framed as a user statement
followed by an assistant acknowledgment.
"""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
from typing import Any

import httpx

from oracle.errors import CapabilityError, ConfigError, EmptyResponseError, ResponseDecodeError
from oracle.models import VERTEX_MODELS, ModelConfig, resolve_model
from oracle.prompt import PromptSource
from oracle.providers.base import (
    ROLE_ASSISTANT,
    ImageBlock,
    WireMessage,
    artifacts,
    compile_messages,
)
from oracle.providers.dispatch import HttpRequest, RequestDispatcher
from oracle.providers.failures import raise_for_status
from oracle.strategy import Strategy, select_checked

logger = logging.getLogger(__name__)

ROLE_USER = "USER"
ROLE_BOT = "ASSISTANT"
DEFAULT_MODEL = "GeminiPro"
DEFAULT_LOCATION = "us-central1"
PURPOSE_PREFIX = "SYSTEM: USER PROVIDED PURPOSE: "
PURPOSE_ACKNOWLEDGMENT = "Understood!"

_TEXT_GENERATION_CONFIG = {
    "maxOutputTokens": 8192,
    "temperature": 0.9,
    "topP": 0.8,
    "topK": 40,
}
_VISION_GENERATION_CONFIG = {
    "maxOutputTokens": 1024,
    "temperature": 0.0,
    "topP": 0.8,
    "topK": 40,
}


def _gcloud(*args: str) -> str:
    if shutil.which("gcloud") is None:
        raise ConfigError("gcloud CLI not found; set VERTEX_PROJECT and VERTEX_ACCESS_TOKEN")
    try:
        completed = subprocess.run(
            ["gcloud", *args],
            capture_output=True,
            check=True,
            text=True,
            timeout=30,
        )
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired) as exc:
        raise ConfigError(f"gcloud {' '.join(args)} failed: {exc}") from exc
    return completed.stdout.strip()


def authenticate() -> tuple[str, str]:
    """Return ``(project_id, access_token)`` from the local gcloud login."""
    token = _gcloud("auth", "print-access-token")
    project = _gcloud("config", "get-value", "project")
    if not token or not project:
        raise ConfigError("gcloud returned an empty project or access token")
    return project, token


def _to_part(block: Any) -> dict[str, Any]:
    if isinstance(block, ImageBlock):
        return {"inlineData": {"mimeType": block.media_type, "data": block.base64}}
    return {"text": block.text}


def serialize_contents(messages: list[WireMessage]) -> list[dict[str, Any]]:
    contents: list[dict[str, Any]] = []
    for message in messages:
        role = ROLE_BOT if message.role == ROLE_ASSISTANT else ROLE_USER
        contents.append({"role": role, "parts": [_to_part(block) for block in message.blocks]})
    return contents


def _candidate_text(candidate: object) -> str:
    if not isinstance(candidate, dict):
        return ""
    content = candidate.get("content")
    if not isinstance(content, dict):
        return ""
    parts = content.get("parts")
    if not isinstance(parts, list):
        return ""
    texts = [p.get("text") for p in parts if isinstance(p, dict)]
    return "".join(t for t in texts if isinstance(t, str))


def parse_response(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ResponseDecodeError(f"vertex response is not JSON: {exc}") from exc
    chunks = payload if isinstance(payload, list) else [payload]
    candidates: list[object] = []
    for chunk in chunks:
        if not isinstance(chunk, dict):
            raise ResponseDecodeError("vertex response chunk is not an object")
        found = chunk.get("candidates")
        if isinstance(found, list):
            candidates.extend(found)
    if not candidates:
        raise EmptyResponseError("no candidates returned")
    return "".join(_candidate_text(candidate) for candidate in candidates).strip(" ")


class Vertex:
    def __init__(
        self,
        *,
        model: ModelConfig | str = DEFAULT_MODEL,
        project_id: str = "",
        token: str = "",
        location: str = DEFAULT_LOCATION,
        dispatcher: RequestDispatcher | None = None,
    ) -> None:
        self.model = resolve_model(VERTEX_MODELS, model) if isinstance(model, str) else model
        self.project_id = project_id
        self.token = token
        self.location = location
        self.dispatcher = dispatcher or RequestDispatcher()

    def with_model(self, name: str) -> None:
        self.model = resolve_model(VERTEX_MODELS, name)

    def _ensure_credentials(self) -> None:
        if self.project_id and self.token:
            return
        logger.info("vertex credentials not configured; asking gcloud")
        self.project_id, self.token = authenticate()

    def compile(self, prompt: PromptSource) -> list[WireMessage]:
        return compile_messages(
            prompt,
            self.model,
            purpose_pair=(PURPOSE_PREFIX + prompt.get_purpose(), PURPOSE_ACKNOWLEDGMENT),
        )

    def endpoint(self) -> str:
        return (
            f"https://{self.location}-aiplatform.googleapis.com/v1/projects/{self.project_id}"
            f"/locations/{self.location}/publishers/google/models/{self.model.name}"
            ":streamGenerateContent"
        )

    def build_request(self, messages: list[WireMessage], strategy: Strategy) -> HttpRequest:
        config = _VISION_GENERATION_CONFIG if strategy is Strategy.VISION else _TEXT_GENERATION_CONFIG
        return HttpRequest(
            url=self.endpoint(),
            headers={
                "Authorization": f"Bearer {self.token}",
                "Content-Type": "application/json; charset=utf-8",
            },
            body={
                "contents": serialize_contents(messages),
                "generation_config": dict(config),
            },
        )

    def complete(self, prompt: PromptSource, *, timeout: float | None = None) -> str:
        if artifacts(prompt):
            raise CapabilityError(f"model {self.model.name} cannot write artifacts")
        strategy = select_checked(prompt.get_references(), self.model)
        messages = self.compile(prompt)
        self._ensure_credentials()
        response = self.dispatcher.send(self.build_request(messages, strategy), timeout=timeout)
        raise_for_status(response)
        return parse_response(response)
