import pytest

from oracle.config import get_settings

_ORACLE_ENV = (
    "APP_ENV",
    "LOG_LEVEL",
    "ORACLE_PROVIDER",
    "ORACLE_REQUEST_TIMEOUT_SECONDS",
    "OPENAI_API_KEY",
    "OPENAI_BASE_URL",
    "OPENAI_MODEL",
    "OPENAI_VISION_MAX_TOKENS",
    "ANTHROPIC_API_KEY",
    "ANTHROPIC_BASE_URL",
    "ANTHROPIC_VERSION",
    "ANTHROPIC_MODEL",
    "VERTEX_PROJECT",
    "VERTEX_LOCATION",
    "VERTEX_ACCESS_TOKEN",
    "VERTEX_MODEL",
    "OLLAMA_BASE_URL",
    "OLLAMA_MODEL",
)


@pytest.fixture(autouse=True)
def test_env(tmp_path, monkeypatch):
    for key in _ORACLE_ENV:
        monkeypatch.delenv(key, raising=False)
    # Keep a developer's .env out of the settings under test.
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
