"""Structured logging for Folio.

Engine modules emit structlog events (``project_published``,
``transaction_retry``, ``assets_collected`` ...) with keyword context. Output
goes through one stdlib root handler, either stdout or a size-rotated file,
rendered as JSON lines or as colourised console text.

Two kinds of context ride along on every event:

* a correlation ID, one per CLI invocation or caller-defined unit of work
* the project and actor of the mutation in progress, bound by the publisher

Example:
    >>> setup_logging(LoggingConfig(level="INFO", format="json"))
    >>> set_correlation_id(new_correlation_id())
    >>> get_logger(__name__).info("project_saved", revision=4)
"""

from __future__ import annotations

import contextvars
import logging
import logging.handlers
import sys
import uuid
from contextlib import AbstractContextManager
from typing import Any

import structlog

from folio.config import LoggingConfig

# Third-party loggers that are chatty at INFO; kept at WARNING unless debugging
QUIET_LOGGERS = ("botocore", "boto3", "s3transfer", "urllib3", "aiosqlite", "asyncio")

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "folio_correlation_id", default=None
)


def new_correlation_id() -> str:
    """Short random identifier for one unit of work."""
    return uuid.uuid4().hex[:12]


def set_correlation_id(correlation_id: str | None) -> None:
    _correlation_id.set(correlation_id)


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def add_correlation_id(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor stamping the current correlation ID, when one is set."""
    correlation_id = _correlation_id.get()
    if correlation_id is not None:
        event_dict["correlation_id"] = correlation_id
    return event_dict


def project_context(project_id: str, actor: str) -> AbstractContextManager[None]:
    """Attach ``project_id`` and ``actor`` to events logged inside the block.

    Values bound before the block are restored on exit.
    """
    return structlog.contextvars.bound_contextvars(project_id=project_id, actor=actor)


def _build_handler(config: LoggingConfig) -> logging.Handler:
    if config.file is None:
        return logging.StreamHandler(sys.stdout)
    config.file.parent.mkdir(parents=True, exist_ok=True)
    return logging.handlers.RotatingFileHandler(
        filename=config.file,
        maxBytes=config.rotation_size_mb * 1024 * 1024,
        backupCount=config.retention_count,
        encoding="utf-8",
    )


def _renderer(log_format: str) -> Any:
    if log_format == "console":
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def _shared_processors() -> list[Any]:
    """Processors run for structlog events and foreign stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        add_correlation_id,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def setup_logging(config: LoggingConfig) -> None:
    """Install the root handler and configure structlog.

    Safe to call more than once; each call replaces the previous handler.

    Args:
        config: Logging section of FolioConfig.
    """
    level = getattr(logging, config.level)

    # Tracebacks are rendered into the event by format_exc_info; the
    # formatter drops the record's own exc_info so stdlib never appends one.
    handler = _build_handler(config)
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_shared_processors(),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(config.format),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
