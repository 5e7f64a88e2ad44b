"""Provider-agnostic prompt contract."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from oracle.errors import HistoryMismatchError
from oracle.references import Reference


class PromptSource(Protocol):
    """The accessor surface every compiler and dispatcher depends on."""

    def get_purpose(self) -> str: ...

    def get_history(self) -> tuple[tuple[str, ...], tuple[str, ...]]: ...

    def get_question(self) -> str: ...

    def get_references(self) -> tuple[Reference, ...]: ...


@dataclass(frozen=True, slots=True)
class Prompt:
    purpose: str = ""
    input_history: tuple[str, ...] = ()
    output_history: tuple[str, ...] = ()
    question: str = ""
    references: tuple[Reference, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if len(self.input_history) != len(self.output_history):
            raise HistoryMismatchError(
                f"history has {len(self.input_history)} inputs "
                f"but {len(self.output_history)} outputs"
            )

    def get_purpose(self) -> str:
        return self.purpose

    def get_history(self) -> tuple[tuple[str, ...], tuple[str, ...]]:
        return self.input_history, self.output_history

    def get_question(self) -> str:
        return self.question

    def get_references(self) -> tuple[Reference, ...]:
        return self.references


def history_pairs(prompt: PromptSource) -> list[tuple[str, str]]:
    inputs, outputs = prompt.get_history()
    if len(inputs) != len(outputs):
        raise HistoryMismatchError(
            f"history has {len(inputs)} inputs but {len(outputs)} outputs"
        )
    return list(zip(inputs, outputs))
