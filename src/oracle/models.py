"""Model capability descriptors and per-provider catalogs."""

from __future__ import annotations

from dataclasses import dataclass

from oracle.errors import ConfigError


@dataclass(frozen=True, slots=True)
class ModelConfig:
    name: str
    supports_vision: bool = True
    supports_system_messages: bool = True
    max_tokens: int = 4096
    description: str = ""


OPENAI_MODELS: dict[str, ModelConfig] = {
    "gpt-4.1": ModelConfig("gpt-4.1", max_tokens=32768),
    "gpt-4o": ModelConfig("gpt-4o", max_tokens=16384),
    "gpt-4o-mini": ModelConfig("gpt-4o-mini", max_tokens=16384),
    "o1-preview": ModelConfig(
        "o1-preview", supports_vision=False, supports_system_messages=False, max_tokens=32768
    ),
    "o1-mini": ModelConfig(
        "o1-mini", supports_vision=False, supports_system_messages=False, max_tokens=65536
    ),
}

ANTHROPIC_MODELS: dict[str, ModelConfig] = {
    "ClaudeOpus4": ModelConfig(
        "claude-opus-4-20250514",
        max_tokens=64000,
        description="Most capable model with a large context window.",
    ),
    "ClaudeSonnet4": ModelConfig(
        "claude-sonnet-4-20250514",
        max_tokens=64000,
        description="Complex reasoning with a large context window.",
    ),
    "ClaudeSonnet3_7": ModelConfig(
        "claude-3-7-sonnet-20250219",
        max_tokens=64000,
        description="Advanced reasoning and complex tasks.",
    ),
    "ClaudeSonnet3_5": ModelConfig(
        "claude-3-5-sonnet-20241022",
        max_tokens=64000,
        description="Versatile general purpose model.",
    ),
    "ClaudeHaiku3_5": ModelConfig(
        "claude-3-5-haiku-20241022",
        max_tokens=64000,
        description="Concise and efficient responses.",
    ),
}

VERTEX_MODELS: dict[str, ModelConfig] = {
    "GeminiPro": ModelConfig(
        "gemini-1.5-pro-002",
        max_tokens=8192,
        description="Multimodal (text, images, code) across a wide range of tasks.",
    ),
    "GeminiFlash": ModelConfig(
        "gemini-1.5-flash-002",
        max_tokens=8192,
        description="Fast multimodal model for high volume tasks.",
    ),
}


def resolve_model(catalog: dict[str, ModelConfig], name: str) -> ModelConfig:
    model = catalog.get(name)
    if model is None:
        supported = ", ".join(sorted(catalog))
        raise ConfigError(f"model {name} not found. Supported models include: {supported}")
    return model
