"""Outbound HTTP for every provider.

The dispatcher owns the httpx transport so tests and callers can inject one
(``httpx.MockTransport`` in tests); there is no process-wide client. It sends
exactly one request per call, never retries, and never looks at the body.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 120.0


def encode_body(body: dict[str, Any]) -> bytes:
    return json.dumps(body, ensure_ascii=False).encode("utf-8")


@dataclass(frozen=True, slots=True)
class HttpRequest:
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: dict[str, Any] | None = None
    data: dict[str, str] | None = None
    files: dict[str, tuple[str, bytes, str]] | None = None
    method: str = "POST"

    def content(self) -> bytes | None:
        if self.body is None:
            return None
        return encode_body(self.body)


class RequestDispatcher:
    def __init__(
        self,
        *,
        transport: httpx.BaseTransport | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._transport = transport
        self.timeout_seconds = timeout_seconds

    def send(self, request: HttpRequest, *, timeout: float | None = None) -> httpx.Response:
        effective_timeout = self.timeout_seconds if timeout is None else timeout
        started = time.perf_counter()
        with httpx.Client(timeout=effective_timeout, transport=self._transport) as client:
            response = client.request(
                request.method,
                request.url,
                headers=request.headers,
                content=request.content(),
                data=request.data,
                files=request.files,
            )
        logger.debug(
            "provider request %s %s -> %s in %dms",
            request.method,
            response.request.url.host,
            response.status_code,
            int((time.perf_counter() - started) * 1000),
        )
        return response
