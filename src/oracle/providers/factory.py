"""Provider construction helpers."""

import httpx

from oracle.config import Settings, validate_settings_for_provider
from oracle.providers.anthropic import Anthropic
from oracle.providers.base import LanguageModel
from oracle.providers.dispatch import RequestDispatcher
from oracle.providers.ollama import Ollama
from oracle.providers.openai import ChatGPT
from oracle.providers.vertex import Vertex


def build_language_model(
    settings: Settings,
    name: str | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
) -> LanguageModel:
    provider = (name or settings.default_provider).strip().lower()
    validate_settings_for_provider(settings, provider)
    dispatcher = RequestDispatcher(
        transport=transport, timeout_seconds=settings.request_timeout_seconds
    )
    if provider == "anthropic":
        return Anthropic(
            settings.anthropic_api_key,
            model=settings.anthropic_model,
            base_url=settings.anthropic_base_url,
            version=settings.anthropic_version,
            dispatcher=dispatcher,
        )
    if provider == "vertex":
        return Vertex(
            model=settings.vertex_model,
            project_id=settings.vertex_project,
            token=settings.vertex_access_token,
            location=settings.vertex_location,
            dispatcher=dispatcher,
        )
    if provider == "ollama":
        return Ollama(settings.ollama_model, settings.ollama_base_url, dispatcher=dispatcher)
    return ChatGPT(
        settings.openai_api_key,
        model=settings.openai_model,
        base_url=settings.openai_base_url,
        vision_max_tokens=settings.openai_vision_max_tokens,
        dispatcher=dispatcher,
    )
