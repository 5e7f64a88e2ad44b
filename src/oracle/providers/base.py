"""Provider contracts and the shared prompt-to-message compiler."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Protocol

from oracle.models import ModelConfig
from oracle.prompt import PromptSource, history_pairs
from oracle.references import Reference

ROLE_SYSTEM = "system"
ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"

PNG_MEDIA_TYPE = "image/png"


@dataclass(frozen=True, slots=True)
class TextBlock:
    text: str


@dataclass(frozen=True, slots=True)
class ImageBlock:
    data: bytes
    media_type: str = PNG_MEDIA_TYPE

    @property
    def base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    @property
    def data_uri(self) -> str:
        return f"data:{self.media_type};base64,{self.base64}"


Block = TextBlock | ImageBlock


@dataclass(frozen=True, slots=True)
class WireMessage:
    """One provider-agnostic turn; each provider serializes it to its own schema."""

    role: str
    blocks: tuple[Block, ...]

    @classmethod
    def text(cls, role: str, text: str) -> WireMessage:
        return cls(role, (TextBlock(text),))

    @classmethod
    def image(cls, role: str, data: bytes) -> WireMessage:
        return cls(role, (ImageBlock(data),))

    @property
    def has_image(self) -> bool:
        return any(isinstance(block, ImageBlock) for block in self.blocks)

    def joined_text(self) -> str:
        return "".join(block.text for block in self.blocks if isinstance(block, TextBlock))


class LanguageModel(Protocol):
    def complete(self, prompt: PromptSource, *, timeout: float | None = None) -> str: ...


def reference_label(number: int, reference: Reference) -> str:
    return f"Reference {number}: {reference.text()}"


def compile_messages(
    prompt: PromptSource,
    model: ModelConfig,
    *,
    purpose_pair: tuple[str, str] | None = None,
) -> list[WireMessage]:
    """Compile a prompt into ordered turns.

    Order: purpose (system message, or the ``purpose_pair`` user/assistant
    turns for schemas without a system role), history pairs, the question,
    then one turn per readable reference. Artifacts are destinations and are
    never inlined. Reference labels are 1-based positions among the inlined
    references.
    """
    messages: list[WireMessage] = []
    if model.supports_system_messages:
        if purpose_pair is None:
            messages.append(WireMessage.text(ROLE_SYSTEM, prompt.get_purpose()))
        else:
            statement, acknowledgment = purpose_pair
            messages.append(WireMessage.text(ROLE_USER, statement))
            messages.append(WireMessage.text(ROLE_ASSISTANT, acknowledgment))
    for given_input, ideal_output in history_pairs(prompt):
        messages.append(WireMessage.text(ROLE_USER, given_input))
        messages.append(WireMessage.text(ROLE_ASSISTANT, ideal_output))
    messages.append(WireMessage.text(ROLE_USER, prompt.get_question()))

    number = 0
    for reference in prompt.get_references():
        if reference.is_artifact:
            continue
        number += 1
        if reference.is_image:
            messages.append(WireMessage.image(ROLE_USER, reference.payload))
            continue
        messages.append(WireMessage.text(ROLE_USER, reference_label(number, reference)))
    return messages


def artifacts(prompt: PromptSource) -> list[Reference]:
    return [ref for ref in prompt.get_references() if ref.is_artifact]
