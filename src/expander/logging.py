"""Structured logging for Expander.

Log records are produced with structlog and routed through the standard
library root logger to stderr, so command output on stdout stays clean.
``EXPANDER_LOG_FORMAT=json`` switches the renderer to JSON lines and
``EXPANDER_LOG_LEVEL`` sets the default level.

While a document is processed its path and scope are bound as context
variables, so every event logged on its behalf carries them::

    bind_context(path="notes/today.md", scope="all")
    try:
        log.info("file_processed", replacements=2)
    finally:
        clear_context("path", "scope")
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog
from structlog.types import Processor

__all__ = [
    "get_logger",
    "configure_logging",
    "bind_context",
    "clear_context",
]

LOG_FORMAT_ENV_VAR = "EXPANDER_LOG_FORMAT"
LOG_LEVEL_ENV_VAR = "EXPANDER_LOG_LEVEL"

DEFAULT_LOG_LEVEL = "INFO"


def _level_from_env() -> int:
    level_name = os.environ.get(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL).upper()
    level = logging.getLevelName(level_name)
    return level if isinstance(level, int) else logging.INFO


def _wants_json() -> bool:
    return os.environ.get(LOG_FORMAT_ENV_VAR, "").lower() == "json"


def _pre_chain() -> list[Processor]:
    """Processors applied to structlog and foreign stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(use_json: bool) -> Processor:
    if use_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stderr.isatty(),
        exception_formatter=structlog.dev.plain_traceback,
    )


def configure_logging(
    *,
    force_json: bool = False,
    level: int | None = None,
) -> None:
    """Configure structlog and the root logger.

    Safe to call more than once; the root logger always ends up with a
    single stderr handler.

    Args:
        force_json: Render JSON regardless of ``EXPANDER_LOG_FORMAT``.
        level: Log level. Defaults to ``EXPANDER_LOG_LEVEL`` or INFO.
    """
    use_json = force_json or _wants_json()
    log_level = level if level is not None else _level_from_env()
    exception_processor: Processor = (
        structlog.processors.dict_tracebacks
        if use_json
        else structlog.processors.format_exc_info
    )

    structlog.configure(
        processors=[
            *_pre_chain(),
            exception_processor,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(use_json),
            ],
            foreign_pre_chain=_pre_chain(),
        )
    )

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger, usually called as ``get_logger(__name__)``."""
    log: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return log


def bind_context(**context: Any) -> None:
    """Attach key-value pairs to every event logged from the current context.

    Bindings are stored in context variables, so concurrent tasks each see
    only their own.
    """
    structlog.contextvars.bind_contextvars(**context)


def clear_context(*keys: str) -> None:
    """Remove bound context.

    Args:
        *keys: Keys to unbind. With no keys every binding is removed.
    """
    if keys:
        structlog.contextvars.unbind_contextvars(*keys)
    else:
        structlog.contextvars.clear_contextvars()
