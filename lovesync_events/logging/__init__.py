"""Logging configuration and handlers."""

from lovesync_events.logging.logger import (
    LogContext,
    get_logger,
    log_region_run,
    log_source_call,
    setup_logging,
)

__all__ = ["LogContext", "get_logger", "log_region_run", "log_source_call", "setup_logging"]
