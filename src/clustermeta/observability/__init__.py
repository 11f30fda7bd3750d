"""Observability module for structured logging."""

from .logging import (
    SyncContext,
    get_logger,
    log_source_query_end,
    log_source_query_start,
    setup_logging,
    sync_id_var,
)

__all__ = [
    "SyncContext",
    "get_logger",
    "log_source_query_end",
    "log_source_query_start",
    "setup_logging",
    "sync_id_var",
]
