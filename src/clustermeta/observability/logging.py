"""Structured logging configuration.

Features:
- JSON and text format support
- Sync pass correlation: every line logged inside one discovery pass
  carries its sync_id
- Per-source query logging with durations
"""

import logging
import sys
from contextvars import ContextVar, Token
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from clustermeta.config import LogFormat, LogLevel, get_settings

sync_id_var: ContextVar[str | None] = ContextVar("sync_id", default=None)

_NOISY_LOGGERS = ("httpx", "httpcore", "botocore", "urllib3", "azure", "kubernetes")


def add_service_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add service name and environment to log events."""
    settings = get_settings()
    event_dict["service"] = settings.app_name
    event_dict["environment"] = settings.environment.value
    return event_dict


def add_sync_id(
    logger: logging.Logger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    if sync_id := sync_id_var.get():
        event_dict.setdefault("sync_id", sync_id)
    return event_dict


def setup_logging(
    log_level: LogLevel | None = None,
    log_format: LogFormat | None = None,
) -> None:
    """Configure structured logging for the application.

    Args:
        log_level: Override log level (defaults to settings.log_level)
        log_format: Override log format (defaults to settings.log_format)
    """
    settings = get_settings()
    level = LogLevel(log_level or settings.log_level)
    fmt = LogFormat(log_format or settings.log_format)

    logging.basicConfig(
        level=getattr(logging, level.value),
        stream=sys.stdout,
        format="%(message)s",
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        add_service_context,
        add_sync_id,
        structlog.processors.StackInfoRenderer(),
    ]

    if fmt == LogFormat.JSON:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback)
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Cloud SDKs log every request at INFO
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


class SyncContext:
    """Scopes log lines to one discovery pass.

    Usage:
        async with SyncContext(sync_id=uuid4().hex):
            logger.info("Sync started")  # Includes sync_id
    """

    def __init__(self, sync_id: str):
        self.sync_id = sync_id
        self._token: Token | None = None

    def __enter__(self) -> "SyncContext":
        self._token = sync_id_var.set(self.sync_id)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if self._token is not None:
            sync_id_var.reset(self._token)
            self._token = None

    async def __aenter__(self) -> "SyncContext":
        return self.__enter__()

    async def __aexit__(self, *exc_info: Any) -> None:
        self.__exit__(*exc_info)


def log_source_query_start(logger: structlog.stdlib.BoundLogger, source: str) -> None:
    logger.debug("Source query started", source=source)


def log_source_query_end(
    logger: structlog.stdlib.BoundLogger,
    source: str,
    duration_ms: float,
    clusters: int | None = None,
    error: str | None = None,
) -> None:
    """Log the outcome of one source query.

    A query with an error is logged at warning level and loses only that
    source's contribution to the pass.
    """
    if error is None:
        logger.debug(
            "Source query completed",
            source=source,
            clusters=clusters,
            duration_ms=round(duration_ms, 2),
        )
    else:
        logger.warning(
            "Source query failed",
            source=source,
            error=error,
            duration_ms=round(duration_ms, 2),
        )
