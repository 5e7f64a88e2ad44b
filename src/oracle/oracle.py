"""Conversation state bound to one language model client."""

from __future__ import annotations

import logging

import httpx

from oracle.config import get_settings
from oracle.errors import ConfigError
from oracle.logging import log_context
from oracle.prompt import Prompt
from oracle.providers.base import LanguageModel
from oracle.providers.factory import build_language_model
from oracle.references import classify_all

logger = logging.getLogger(__name__)

DEFAULT_PURPOSE = "You are a helpful assistant"


class Oracle:
    """Holds a purpose and question/answer history and asks questions through a client.

    One ``ask`` in flight per instance; history is not synchronized.
    """

    def __init__(
        self,
        client: LanguageModel,
        *,
        purpose: str = DEFAULT_PURPOSE,
        stateful: bool = True,
    ) -> None:
        self.client = client
        self.purpose = purpose
        self.stateful = stateful
        self._inputs: list[str] = []
        self._outputs: list[str] = []

    @classmethod
    def chatgpt(
        cls, token: str | None = None, *, transport: httpx.BaseTransport | None = None
    ) -> Oracle:
        settings = get_settings()
        if token is not None:
            settings = settings.model_copy(update={"openai_api_key": token})
        return cls(build_language_model(settings, "openai", transport=transport))

    @classmethod
    def anthropic(
        cls, token: str | None = None, *, transport: httpx.BaseTransport | None = None
    ) -> Oracle:
        settings = get_settings()
        if token is not None:
            settings = settings.model_copy(update={"anthropic_api_key": token})
        return cls(build_language_model(settings, "anthropic", transport=transport))

    @classmethod
    def vertex(cls, *, transport: httpx.BaseTransport | None = None) -> Oracle:
        return cls(build_language_model(get_settings(), "vertex", transport=transport))

    @classmethod
    def ollama(
        cls,
        model: str | None = None,
        endpoint: str | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> Oracle:
        update: dict[str, str] = {}
        if model is not None:
            update["ollama_model"] = model
        if endpoint is not None:
            update["ollama_base_url"] = endpoint
        settings = get_settings().model_copy(update=update)
        return cls(build_language_model(settings, "ollama", transport=transport))

    @property
    def history(self) -> list[tuple[str, str]]:
        return list(zip(self._inputs, self._outputs))

    def remember(self) -> Oracle:
        self.stateful = True
        return self

    def forget(self) -> Oracle:
        self.reset()
        self.stateful = False
        return self

    def reset(self) -> None:
        self.purpose = ""
        self._inputs.clear()
        self._outputs.clear()

    def set_purpose(self, purpose: str) -> None:
        self.purpose = purpose

    def give_example(self, given_input: str, ideal_output: str) -> None:
        self._inputs.append(given_input)
        self._outputs.append(ideal_output)

    def with_model(self, name: str) -> Oracle:
        switch = getattr(self.client, "with_model", None)
        if not callable(switch):
            raise ConfigError(f"{type(self.client).__name__} has no model catalog")
        switch(name)
        return self

    def prompt_for(self, question: str, references: tuple[object, ...] = ()) -> Prompt:
        """Project the current session state into an immutable Prompt."""
        return Prompt(
            purpose=self.purpose,
            input_history=tuple(self._inputs),
            output_history=tuple(self._outputs),
            question=question,
            references=classify_all(references),
        )

    def ask(self, question: str, *references: object, timeout: float | None = None) -> str:
        prompt = self.prompt_for(question, references)
        model = getattr(self.client, "model", None)
        with log_context(
            provider=type(self.client).__name__, model=getattr(model, "name", None)
        ):
            answer = self.client.complete(prompt, timeout=timeout)
        if self.stateful:
            self.give_example(question, answer)
        logger.debug(
            "answered question with %d reference(s); history=%d",
            len(prompt.references),
            len(self._inputs),
        )
        return answer
