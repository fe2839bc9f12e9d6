"""Retry logic for provider HTTP calls, built on tenacity."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from functools import wraps
from typing import ParamSpec, TypeVar

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from lovesync_events.logging import get_logger

logger = get_logger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


# Exceptions that should trigger a retry
RETRYABLE_EXCEPTIONS: tuple[type[BaseException], ...] = (
    ConnectionError,
    asyncio.TimeoutError,
    httpx.TransportError,
)


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 30.0
    jitter: float = 1.0
    retryable_status_codes: tuple[int, ...] = field(
        default_factory=lambda: (429, 500, 502, 503, 504)
    )
    retryable_exceptions: tuple[type[BaseException], ...] = field(
        default_factory=lambda: RETRYABLE_EXCEPTIONS
    )


class RetryableHTTPError(Exception):
    """HTTP error that can be retried."""

    def __init__(self, status_code: int, message: str = ""):
        self.status_code = status_code
        self.message = message
        super().__init__(f"HTTP {status_code}: {message}")


def _should_retry(config: RetryConfig) -> Callable[[BaseException], bool]:
    def predicate(exc: BaseException) -> bool:
        if isinstance(exc, RetryableHTTPError):
            return exc.status_code in config.retryable_status_codes
        return isinstance(exc, config.retryable_exceptions)

    return predicate


def _log_before_sleep(func_name: str) -> Callable[[RetryCallState], None]:
    def before_sleep(state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome else None
        logger.warning(
            "retrying",
            function=func_name,
            attempt=state.attempt_number,
            error=str(exc),
            error_type=type(exc).__name__ if exc else None,
            delay=round(state.next_action.sleep, 2) if state.next_action else None,
        )

    return before_sleep


def with_retry(
    config: RetryConfig | None = None,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorator adding exponential-backoff retries to an async function.

    Usage:
        @with_retry(RetryConfig(max_attempts=5))
        async def fetch_data():
            ...
    """
    if config is None:
        config = RetryConfig()

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            retrying = AsyncRetrying(
                stop=stop_after_attempt(config.max_attempts),
                wait=wait_exponential_jitter(
                    initial=config.initial_delay,
                    max=config.max_delay,
                    jitter=config.jitter,
                ),
                retry=retry_if_exception(_should_retry(config)),
                before_sleep=_log_before_sleep(func.__name__),
                reraise=True,
            )
            async for attempt in retrying:
                with attempt:
                    return await func(*args, **kwargs)
            raise RuntimeError("Retry loop exited without result")  # pragma: no cover

        return wrapper

    return decorator
