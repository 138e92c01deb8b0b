"""Retry policy for transient store I/O, built on tenacity."""

from dataclasses import dataclass, field
from typing import Any

import httpx
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from eventhub.logging import get_logger

logger = get_logger(__name__)


# Exceptions that should trigger a retry
RETRYABLE_EXCEPTIONS: tuple[type[BaseException], ...] = (
    ConnectionError,
    TimeoutError,
    httpx.TransportError,
)


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_attempts: int = 3
    initial_delay: float = 0.5
    max_delay: float = 10.0
    jitter: float = 0.5
    retryable_exceptions: tuple[type[BaseException], ...] = field(
        default_factory=lambda: RETRYABLE_EXCEPTIONS
    )


def _log_retry(retry_state: RetryCallState) -> None:
    outcome = retry_state.outcome
    error = outcome.exception() if outcome else None
    logger.warning(
        "retryable_error",
        function=getattr(retry_state.fn, "__name__", "?"),
        attempt=retry_state.attempt_number,
        error=str(error),
        error_type=type(error).__name__,
    )


def _retry_kwargs(config: RetryConfig) -> dict[str, Any]:
    return {
        "stop": stop_after_attempt(config.max_attempts),
        "wait": wait_exponential(multiplier=config.initial_delay, max=config.max_delay)
        + wait_random(0, config.jitter),
        "retry": retry_if_exception_type(config.retryable_exceptions),
        "before_sleep": _log_retry,
        "reraise": True,
    }


def with_retry(config: RetryConfig | None = None) -> Any:
    """Decorator retrying transient failures with exponential backoff and jitter.

    Coroutine functions are retried without blocking the event loop.

    Usage:
        @with_retry(RetryConfig(max_attempts=5))
        async def fetch_rows():
            ...
    """
    return retry(**_retry_kwargs(config or RetryConfig()))
