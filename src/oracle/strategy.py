"""Completion strategy selection."""

from __future__ import annotations

import enum
from collections.abc import Iterable

from oracle.errors import CapabilityError
from oracle.models import ModelConfig
from oracle.references import Reference


class Strategy(enum.Enum):
    TEXT = "text"
    VISION = "vision"


def select_strategy(references: Iterable[Reference]) -> Strategy:
    # One image anywhere forces vision for the whole request.
    if any(ref.is_image for ref in references):
        return Strategy.VISION
    return Strategy.TEXT


def ensure_capable(strategy: Strategy, model: ModelConfig) -> None:
    if strategy is Strategy.VISION and not model.supports_vision:
        raise CapabilityError(f"model {model.name} does not support image references")


def select_checked(references: Iterable[Reference], model: ModelConfig) -> Strategy:
    strategy = select_strategy(references)
    ensure_capable(strategy, model)
    return strategy
