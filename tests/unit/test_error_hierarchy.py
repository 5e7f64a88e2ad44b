"""Tests for error hierarchy."""

from datetime import timedelta

import pytest

from oracle.errors import (
    BadRequestError,
    CapabilityError,
    ClientError,
    ConfigError,
    EmptyResponseError,
    HistoryMismatchError,
    OracleError,
    RateLimitError,
    ResponseDecodeError,
    UnprocessableReferenceError,
)


def test_hierarchy() -> None:
    assert issubclass(ConfigError, OracleError)
    assert issubclass(CapabilityError, OracleError)
    assert issubclass(ClientError, OracleError)
    assert issubclass(BadRequestError, ClientError)
    assert issubclass(RateLimitError, ClientError)
    assert issubclass(EmptyResponseError, ResponseDecodeError)
    assert issubclass(UnprocessableReferenceError, TypeError)
    assert issubclass(HistoryMismatchError, ValueError)


def test_retryable_default() -> None:
    assert OracleError("test").retryable is False
    assert ClientError(401).retryable is False
    assert ClientError(503, retryable=True).retryable is True
    assert RateLimitError().retryable is True
    assert BadRequestError().retryable is False


def test_client_error_fields() -> None:
    err = ClientError(500, "upstream exploded")
    assert err.status == 500
    assert err.message == "upstream exploded"
    assert str(err) == "client error: 500 upstream exploded"
    assert err.status_text == ""

    named = ClientError(502, "upstream exploded", status_text="Bad Gateway")
    assert str(named) == "client error: 502 Bad Gateway: upstream exploded"


def test_rate_limit_is_also_a_client_error() -> None:
    err = RateLimitError("slow down", retry_after=timedelta(seconds=1.5))
    assert isinstance(err, ClientError)
    assert err.status == 429
    assert err.retry_after == timedelta(seconds=1.5)
    assert str(err) == "rate limit exceeded; retry after 1.5s"


def test_bad_request_carries_token_usage() -> None:
    err = BadRequestError("too long", prompt_tokens=5000, total_tokens=5100, token_limit=4096)
    assert err.status == 400
    assert (err.prompt_tokens, err.total_tokens, err.token_limit) == (5000, 5100, 4096)
    assert str(err) == "bad request: requested 5000 tokens, limit is 4096"


def test_unprocessable_reference_names_type() -> None:
    err = UnprocessableReferenceError(42)
    assert str(err) == "unprocessable reference type: int"
    assert err.reference_type is int


def test_catch_as_oracle_error() -> None:
    with pytest.raises(OracleError) as excinfo:
        raise RateLimitError("test")
    assert excinfo.value.retryable is True
