"""Classification of non-2xx provider responses into typed errors."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import httpx

from oracle.errors import BadRequestError, ClientError, RateLimitError

logger = logging.getLogger(__name__)

HEADER_REMAINING_REQUESTS = "X-Ratelimit-Remaining-Requests"
HEADER_REMAINING_TOKENS = "X-Ratelimit-Remaining-Tokens"
HEADER_RESET_REQUESTS = "X-Ratelimit-Reset-Requests"
HEADER_RESET_TOKENS = "X-Ratelimit-Reset-Tokens"

_DURATION_UNITS_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_TERM = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(value: str | None) -> timedelta | None:
    """Parse a duration such as ``17ms``, ``6m0s`` or ``1h2m3.5s``.

    Returns None when the value is missing or malformed.
    """
    text = str(value or "").strip()
    if not text:
        return None
    if text == "0":
        return timedelta(0)
    position = 0
    total = 0.0
    for match in _DURATION_TERM.finditer(text):
        if match.start() != position:
            return None
        total += float(match.group(1)) * _DURATION_UNITS_SECONDS[match.group(2)]
        position = match.end()
    if position != len(text):
        return None
    return timedelta(seconds=total)


def _parse_count(value: str | None) -> int | None:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True, slots=True)
class RateLimitWindow:
    remaining_requests: int | None
    remaining_tokens: int | None
    reset_requests: timedelta
    reset_tokens: timedelta

    def retry_after(self) -> timedelta:
        # Token exhaustion wins over request exhaustion.
        if self.remaining_tokens == 0:
            return self.reset_tokens
        if self.remaining_requests == 0:
            return self.reset_requests
        return timedelta(0)


def parse_rate_limit(headers: httpx.Headers) -> RateLimitWindow:
    return RateLimitWindow(
        remaining_requests=_parse_count(headers.get(HEADER_REMAINING_REQUESTS)),
        remaining_tokens=_parse_count(headers.get(HEADER_REMAINING_TOKENS)),
        reset_requests=parse_duration(headers.get(HEADER_RESET_REQUESTS)) or timedelta(0),
        reset_tokens=parse_duration(headers.get(HEADER_RESET_TOKENS)) or timedelta(0),
    )


def _decode_json(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = json.loads(response.content or b"null")
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return payload if isinstance(payload, dict) else {}


def _as_int(value: object) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        return _parse_count(value) or 0
    return 0


def _error_message(payload: dict[str, Any], response: httpx.Response) -> str:
    error_obj = payload.get("error")
    if isinstance(error_obj, dict):
        message = error_obj.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    if isinstance(error_obj, str) and error_obj.strip():
        return error_obj.strip()
    return response.reason_phrase


def classify_error(response: httpx.Response) -> ClientError:
    """Map a non-2xx response to a ClientError (or one of its subclasses)."""
    status = response.status_code
    payload = _decode_json(response)
    message = _error_message(payload, response)
    status_text = response.reason_phrase

    error: ClientError
    if status == 400:
        usage = payload.get("usage")
        usage_map = usage if isinstance(usage, dict) else {}
        error = BadRequestError(
            message,
            prompt_tokens=_as_int(usage_map.get("prompt_tokens")),
            total_tokens=_as_int(usage_map.get("total_tokens")),
            token_limit=_as_int(usage_map.get("token_limit")),
            status_text=status_text,
        )
    elif status == 429:
        window = parse_rate_limit(response.headers)
        error = RateLimitError(
            message, retry_after=window.retry_after(), status_text=status_text
        )
    elif status in {401, 403}:
        error = ClientError(status, message, status_text=status_text)
    else:
        error = ClientError(
            status, message, status_text=status_text, retryable=status >= 500
        )

    logger.warning(
        "provider request failed",
        extra={
            "status_code": status,
            "kind": type(error).__name__,
            "retryable": error.retryable,
            "message_preview": message[:240],
        },
    )
    return error


def raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    raise classify_error(response)
