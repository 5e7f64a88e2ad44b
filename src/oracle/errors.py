"""Oracle exception hierarchy.

All Oracle-specific exceptions inherit from OracleError so callers can
catch the whole family in one clause, then narrow on the subclass to
decide whether to back off, shrink the request, or give up.
"""

from datetime import timedelta


class OracleError(Exception):
    """Base exception for all Oracle errors."""

    def __init__(self, message: str = "", *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class ConfigError(OracleError):
    """Invalid or missing configuration."""


class UnprocessableReferenceError(OracleError, TypeError):
    """A reference of a type the classifier does not recognize."""

    def __init__(self, reference: object, *, reason: str = "") -> None:
        message = f"unprocessable reference type: {type(reference).__name__}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.reference_type = type(reference)


class HistoryMismatchError(OracleError, ValueError):
    """Prompt history has a different number of inputs and outputs."""


class CapabilityError(OracleError):
    """The selected model cannot serve the request as compiled."""


class ClientError(OracleError):
    """Non-2xx response from a provider."""

    def __init__(
        self,
        status: int,
        message: str = "",
        *,
        status_text: str = "",
        retryable: bool = False,
    ) -> None:
        head = f"client error: {status} {status_text}".strip()
        text = f"{head}: {message}" if status_text and message else f"{head} {message}".strip()
        super().__init__(text, retryable=retryable)
        self.status = status
        self.status_text = status_text
        self.message = message


class BadRequestError(ClientError):
    """Provider rejected the request body, usually for exceeding the token limit."""

    def __init__(
        self,
        message: str = "",
        *,
        prompt_tokens: int = 0,
        total_tokens: int = 0,
        token_limit: int = 0,
        status_text: str = "",
    ) -> None:
        super().__init__(400, message, status_text=status_text)
        self.prompt_tokens = prompt_tokens
        self.total_tokens = total_tokens
        self.token_limit = token_limit

    def __str__(self) -> str:
        return (
            f"bad request: requested {self.prompt_tokens} tokens, "
            f"limit is {self.token_limit}"
        )


class RateLimitError(ClientError):
    """Provider signaled 429; ``retry_after`` is how long to back off."""

    def __init__(
        self,
        message: str = "",
        *,
        retry_after: timedelta = timedelta(0),
        status_text: str = "",
    ) -> None:
        super().__init__(429, message, status_text=status_text, retryable=True)
        self.retry_after = retry_after

    def __str__(self) -> str:
        return f"rate limit exceeded; retry after {self.retry_after.total_seconds()}s"


class ResponseDecodeError(OracleError):
    """Provider returned success but the body could not be decoded."""


class EmptyResponseError(ResponseDecodeError):
    """Provider returned success with no choices or candidates."""
