"""Retry strategy for provider operations.

Exponential backoff between attempts: the wait after failed attempt ``n``
(0-based) is ``base * 2**n`` capped at ``max``, plus optional jitter.
With the default policy (3 attempts, 1000 ms base) a provider that always
fails is called three times with waits of 1s and 2s in between; the last
failure is raised without waiting.

Every ProviderError is retried except the ones another call cannot fix
(bad credentials, blocked content, oversized prompt) and cancellation.

Waiting goes through a Scheduler so tests can simulate time, and an
optional CancellationToken stops the loop between attempts.
"""

import logging
import random
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

from smartapply.core.scheduler import CancellationToken, Scheduler, default_scheduler
from smartapply.providers.errors import (
    AuthenticationError,
    ContentFilterError,
    ContextLengthError,
    ProviderError,
    RateLimitError,
    RetryCancelledError,
)

__all__ = [
    "DEFAULT_RETRYABLE_ERRORS",
    "NON_RETRYABLE_ERRORS",
    "compute_backoff_delay",
    "with_retries",
]

if TYPE_CHECKING:
    from smartapply.providers.config import ProviderConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRYABLE_ERRORS: tuple[type[Exception], ...] = (ProviderError,)

# Subclasses of a retryable error that still fail immediately
NON_RETRYABLE_ERRORS: tuple[type[Exception], ...] = (
    AuthenticationError,
    ContentFilterError,
    ContextLengthError,
    RetryCancelledError,
)


def compute_backoff_delay(attempt: int, config: "ProviderConfig") -> float:
    """Seconds to wait after the given failed attempt (0-based)."""
    base_delay = config.retry_base_delay_ms * (2**attempt)
    jitter = 0.0
    if config.retry_jitter_ratio > 0:
        jitter = random.uniform(0, base_delay * config.retry_jitter_ratio)  # nosec B311
    return min(base_delay + jitter, config.retry_max_delay_ms) / 1000


async def with_retries(
    func: Callable[[], Awaitable[T]],
    config: "ProviderConfig",
    retryable_errors: tuple[type[Exception], ...] = DEFAULT_RETRYABLE_ERRORS,
    *,
    scheduler: Scheduler | None = None,
    cancel_token: CancellationToken | None = None,
) -> T:
    """Execute function with exponential backoff retry.

    Args:
        func: Async function to execute (no arguments).
        config: Provider configuration with retry settings.
        retryable_errors: Tuple of error types that should trigger retry.
            NON_RETRYABLE_ERRORS are raised at once even when listed here.
        scheduler: Sleep provider; defaults to asyncio.
        cancel_token: Checked before each attempt and after each wait.

    Returns:
        Result from successful function execution.

    Raises:
        RetryCancelledError: If cancel_token was cancelled.
        ProviderError: The last error once all attempts are used, or the
            first non-retryable one.

    Note:
        If the error is a RateLimitError with retry_after_seconds set,
        that value is used instead of exponential backoff.
    """
    sched = scheduler or default_scheduler
    attempts = max(config.max_attempts, 1)
    last_error: Exception | None = None

    for attempt in range(attempts):
        if cancel_token is not None and cancel_token.cancelled:
            raise RetryCancelledError(attempts=attempt)

        try:
            return await func()
        except retryable_errors as e:
            if isinstance(e, NON_RETRYABLE_ERRORS):
                raise
            last_error = e

            if attempt == attempts - 1:
                break  # No more attempts

            if isinstance(e, RateLimitError) and e.retry_after_seconds:
                delay = e.retry_after_seconds
            else:
                delay = compute_backoff_delay(attempt, config)

            logger.warning(
                "Provider error (attempt %d/%d): %s. Retrying in %.2fs",
                attempt + 1,
                attempts,
                e,
                delay,
            )

            await sched.sleep(delay)

    if last_error is not None:
        raise last_error
    raise RuntimeError("Retry loop exited without error or result")
