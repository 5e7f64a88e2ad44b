import pytest

from oracle.errors import CapabilityError, ConfigError
from oracle.models import ANTHROPIC_MODELS, OPENAI_MODELS, resolve_model
from oracle.references import PNG_SIGNATURE, classify
from oracle.strategy import Strategy, ensure_capable, select_checked, select_strategy

PNG_BYTES = PNG_SIGNATURE + b"pixels"


def test_text_only_references_select_text() -> None:
    assert select_strategy([]) is Strategy.TEXT
    assert select_strategy([classify("a"), classify("b")]) is Strategy.TEXT


def test_single_image_forces_vision() -> None:
    refs = [classify("a"), classify(PNG_BYTES), classify("b")]
    assert select_strategy(refs) is Strategy.VISION


def test_vision_rejected_for_text_only_model() -> None:
    with pytest.raises(CapabilityError, match="o1-mini"):
        ensure_capable(Strategy.VISION, OPENAI_MODELS["o1-mini"])
    ensure_capable(Strategy.TEXT, OPENAI_MODELS["o1-mini"])


def test_select_checked_returns_strategy() -> None:
    assert select_checked([classify(PNG_BYTES)], OPENAI_MODELS["gpt-4o"]) is Strategy.VISION


def test_resolve_model_lists_supported_names() -> None:
    assert resolve_model(ANTHROPIC_MODELS, "ClaudeHaiku3_5").name == "claude-3-5-haiku-20241022"
    with pytest.raises(ConfigError, match="Supported models include: ClaudeHaiku3_5"):
        resolve_model(ANTHROPIC_MODELS, "Claude2")
