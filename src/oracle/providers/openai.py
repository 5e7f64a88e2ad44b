"""Simple chat provider (OpenAI chat completions schema)."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any

import httpx

from oracle.errors import EmptyResponseError, OracleError, ResponseDecodeError
from oracle.models import OPENAI_MODELS, ModelConfig, resolve_model
from oracle.prompt import PromptSource
from oracle.providers.base import ImageBlock, TextBlock, WireMessage, artifacts, compile_messages
from oracle.providers.dispatch import HttpRequest, RequestDispatcher
from oracle.providers.failures import raise_for_status
from oracle.strategy import Strategy, select_checked

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4.1"
IMAGE_MODEL = "dall-e-3"
IMAGE_SIZE = "1024x1024"
SPEECH_MODEL = "tts-1"
SPEECH_VOICE = "echo"
TRANSCRIPTION_MODEL = "whisper-1"
PICTURE_ACKNOWLEDGMENT = "I drew you a picture!"


def _coerce_text(value: object) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        chunks: list[str] = []
        for item in value:
            if isinstance(item, str):
                chunks.append(item)
            elif isinstance(item, dict):
                text = item.get("text")
                if isinstance(text, str):
                    chunks.append(text)
        return "".join(chunks)
    return ""


def _block_to_part(block: TextBlock | ImageBlock) -> dict[str, Any]:
    if isinstance(block, ImageBlock):
        return {"type": "image_url", "image_url": {"url": block.data_uri}}
    return {"type": "text", "text": block.text}


def serialize_messages(messages: list[WireMessage], strategy: Strategy) -> list[dict[str, Any]]:
    if strategy is Strategy.TEXT:
        return [{"role": m.role, "content": m.joined_text()} for m in messages]
    return [
        {"role": m.role, "content": [_block_to_part(block) for block in m.blocks]}
        for m in messages
    ]


def parse_response(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ResponseDecodeError(f"openai response is not JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ResponseDecodeError("openai response is not an object")
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        raise EmptyResponseError("no choices returned")
    fragments: list[str] = []
    for choice in choices:
        if not isinstance(choice, dict):
            raise ResponseDecodeError("openai response choice malformed")
        message = choice.get("message")
        if not isinstance(message, dict):
            raise ResponseDecodeError("openai response message missing")
        fragments.append(_coerce_text(message.get("content")))
    return "".join(fragments)


class ChatGPT:
    def __init__(
        self,
        token: str,
        *,
        model: ModelConfig | str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        vision_max_tokens: int = 300,
        dispatcher: RequestDispatcher | None = None,
    ) -> None:
        self.token = token
        self.model = resolve_model(OPENAI_MODELS, model) if isinstance(model, str) else model
        self.base_url = base_url.rstrip("/")
        self.vision_max_tokens = vision_max_tokens
        self.dispatcher = dispatcher or RequestDispatcher()

    def with_model(self, name: str) -> None:
        self.model = resolve_model(OPENAI_MODELS, name)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }

    def compile(self, prompt: PromptSource) -> list[WireMessage]:
        return compile_messages(prompt, self.model)

    def build_request(self, messages: list[WireMessage], strategy: Strategy) -> HttpRequest:
        body: dict[str, Any] = {
            "model": self.model.name,
            "messages": serialize_messages(messages, strategy),
        }
        if strategy is Strategy.VISION:
            body["max_tokens"] = self.vision_max_tokens
        return HttpRequest(
            url=f"{self.base_url}/chat/completions",
            headers=self._headers(),
            body=body,
        )

    def complete(self, prompt: PromptSource, *, timeout: float | None = None) -> str:
        sinks = artifacts(prompt)
        if sinks:
            image = self.create_image(prompt.get_question(), timeout=timeout)
            failures: list[Exception] = []
            for ref in sinks:
                try:
                    ref.sink.write(image)
                except (OSError, TypeError, ValueError) as exc:
                    failures.append(exc)
            if failures:
                raise OracleError(
                    f"failed to write generated image to {len(failures)} artifact(s): "
                    f"{failures[0]}"
                ) from failures[0]
            logger.info("wrote generated image to %d artifact(s)", len(sinks))
            return PICTURE_ACKNOWLEDGMENT

        strategy = select_checked(prompt.get_references(), self.model)
        request = self.build_request(self.compile(prompt), strategy)
        response = self.dispatcher.send(request, timeout=timeout)
        raise_for_status(response)
        return parse_response(response)

    def create_image(self, description: str, *, timeout: float | None = None) -> bytes:
        request = HttpRequest(
            url=f"{self.base_url}/images/generations",
            headers=self._headers(),
            body={
                "model": IMAGE_MODEL,
                "prompt": description,
                "n": 1,
                "size": IMAGE_SIZE,
                "response_format": "b64_json",
            },
        )
        response = self.dispatcher.send(request, timeout=timeout)
        raise_for_status(response)
        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ResponseDecodeError(f"image response is not JSON: {exc}") from exc
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            raise EmptyResponseError("no images returned")
        encoded = data[0].get("b64_json")
        if not isinstance(encoded, str) or not encoded:
            raise ResponseDecodeError("image response missing b64_json")
        try:
            return base64.b64decode(encoded, validate=True)
        except binascii.Error as exc:
            raise ResponseDecodeError(f"image payload is not base64: {exc}") from exc

    def create_transcript(self, audio: bytes, *, timeout: float | None = None) -> str:
        request = HttpRequest(
            url=f"{self.base_url}/audio/transcriptions",
            headers={"Authorization": f"Bearer {self.token}"},
            data={"model": TRANSCRIPTION_MODEL, "response_format": "text"},
            files={"file": ("audio.wav", audio, "audio/wav")},
        )
        response = self.dispatcher.send(request, timeout=timeout)
        raise_for_status(response)
        return response.text

    def create_audio(self, text: str, *, timeout: float | None = None) -> bytes:
        request = HttpRequest(
            url=f"{self.base_url}/audio/speech",
            headers=self._headers(),
            body={"model": SPEECH_MODEL, "input": text, "voice": SPEECH_VOICE},
        )
        response = self.dispatcher.send(request, timeout=timeout)
        raise_for_status(response)
        return response.content
