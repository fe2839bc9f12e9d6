"""Structured logging configuration using structlog."""

import logging
import sys
from pathlib import Path

import structlog
from structlog.types import Processor

SHARED_PROCESSORS: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _render_chain(log_format: str, to_file: bool) -> list[Processor]:
    # files always get JSON lines
    if log_format == "json" or to_file:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [
        structlog.dev.ConsoleRenderer(
            colors=sys.stdout.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
    ]


def setup_logging(
    level: str = "INFO",
    log_format: str = "console",
    log_file: str | None = None,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_format: "console" for humans, "json" for log shipping
        log_file: Optional path; records go there as JSON instead of stdout
    """
    log_level = getattr(logging, level.upper())
    # third-party libraries (httpx, apscheduler) log through stdlib logging
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        factory = structlog.WriteLoggerFactory(file=path.open("a", encoding="utf-8"))
    else:
        factory = structlog.PrintLoggerFactory()

    structlog.configure(
        processors=[*SHARED_PROCESSORS, *_render_chain(log_format, bool(log_file))],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=factory,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger instance (usually for `__name__`)."""
    return structlog.get_logger(name)


class LogContext:
    """Binds keys to every log line emitted inside the block. None values are dropped."""

    def __init__(self, **kwargs: str | int | float | bool | None) -> None:
        self.context = {k: v for k, v in kwargs.items() if v is not None}

    def __enter__(self) -> "LogContext":
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: object) -> None:
        structlog.contextvars.unbind_contextvars(*self.context)


def log_region_run(cache_key: str, country: str, city: str | None = None) -> LogContext:
    return LogContext(region=cache_key, country=country, city=city)


def log_source_call(source_id: str) -> LogContext:
    return LogContext(source=source_id)
