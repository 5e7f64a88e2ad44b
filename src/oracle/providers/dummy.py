"""In-memory provider used by tests and offline callers."""

from __future__ import annotations

from oracle.prompt import PromptSource


class Dummy:
    def __init__(self, fixed_response: str = "", failure: Exception | None = None) -> None:
        self.fixed_response = fixed_response
        self.failure = failure
        self.prompt: PromptSource | None = None
        self.prompts: list[PromptSource] = []

    def complete(self, prompt: PromptSource, *, timeout: float | None = None) -> str:
        self.prompt = prompt
        self.prompts.append(prompt)
        if self.failure is not None:
            raise self.failure
        return self.fixed_response
