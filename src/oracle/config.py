"""Application configuration contract."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from oracle.errors import ConfigError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = Field(alias="APP_ENV", default="dev")
    log_level: str = Field(alias="LOG_LEVEL", default="INFO")
    default_provider: str = Field(alias="ORACLE_PROVIDER", default="openai")
    request_timeout_seconds: float = Field(alias="ORACLE_REQUEST_TIMEOUT_SECONDS", default=120)

    openai_api_key: str = Field(alias="OPENAI_API_KEY", default="")
    openai_base_url: str = Field(alias="OPENAI_BASE_URL", default="https://api.openai.com/v1")
    openai_model: str = Field(alias="OPENAI_MODEL", default="gpt-4.1")
    openai_vision_max_tokens: int = Field(alias="OPENAI_VISION_MAX_TOKENS", default=300)

    anthropic_api_key: str = Field(alias="ANTHROPIC_API_KEY", default="")
    anthropic_base_url: str = Field(
        alias="ANTHROPIC_BASE_URL", default="https://api.anthropic.com/v1"
    )
    anthropic_version: str = Field(alias="ANTHROPIC_VERSION", default="2023-06-01")
    anthropic_model: str = Field(alias="ANTHROPIC_MODEL", default="ClaudeSonnet3_7")

    vertex_project: str = Field(alias="VERTEX_PROJECT", default="")
    vertex_location: str = Field(alias="VERTEX_LOCATION", default="us-central1")
    vertex_access_token: str = Field(alias="VERTEX_ACCESS_TOKEN", default="")
    vertex_model: str = Field(alias="VERTEX_MODEL", default="GeminiPro")

    ollama_base_url: str = Field(alias="OLLAMA_BASE_URL", default="http://localhost:11434")
    ollama_model: str = Field(alias="OLLAMA_MODEL", default="llama3")


def validate_settings_for_provider(settings: Settings, provider: str | None = None) -> None:
    name = (provider or settings.default_provider).strip().lower()
    required: dict[str, str] = {}
    if name == "openai":
        required = {
            "OPENAI_API_KEY": settings.openai_api_key,
            "OPENAI_BASE_URL": settings.openai_base_url,
        }
    elif name == "anthropic":
        required = {
            "ANTHROPIC_API_KEY": settings.anthropic_api_key,
            "ANTHROPIC_BASE_URL": settings.anthropic_base_url,
            "ANTHROPIC_VERSION": settings.anthropic_version,
        }
    elif name == "vertex":
        # Project and token may come from the gcloud CLI at call time.
        required = {"VERTEX_LOCATION": settings.vertex_location}
    elif name == "ollama":
        required = {
            "OLLAMA_BASE_URL": settings.ollama_base_url,
            "OLLAMA_MODEL": settings.ollama_model,
        }
    else:
        raise ConfigError(f"unknown provider: {name}")

    missing = [key for key, value in required.items() if not value.strip()]
    if missing:
        keys = ", ".join(sorted(missing))
        raise ConfigError(f"invalid {name} configuration: {keys}")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
