"""structlog rendering for the stdlib loggers used across the package.

Library modules only call ``logging.getLogger(__name__)``. An application
opts into rendering by calling ``configure_logging`` once at startup.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

# httpx logs every request at INFO; outside DEBUG the dispatcher line is enough.
_CHATTY_LOGGERS = ("httpx", "httpcore")


def _renderer(json_output: bool) -> structlog.types.Processor:
    if json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def configure_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """Route stdlib records through structlog on a single stderr handler.

    ``level`` defaults to ``LOG_LEVEL``; ``json_output`` defaults to JSON when
    ``APP_ENV=prod``.
    """
    if level is None or json_output is None:
        from oracle.config import get_settings

        settings = get_settings()
        level = level if level is not None else settings.log_level
        json_output = json_output if json_output is not None else settings.app_env == "prod"

    log_level = getattr(logging, level.upper(), logging.INFO)
    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(json_output),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level)
    chatty_level = log_level if log_level <= logging.DEBUG else max(log_level, logging.WARNING)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(chatty_level)


@contextmanager
def log_context(**values: object) -> Iterator[None]:
    """Attach ``values`` to every record logged inside the block, then restore."""
    with structlog.contextvars.bound_contextvars(**values):
        yield
