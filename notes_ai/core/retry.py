"""
================================================================================
FILE: notes_ai/core/retry.py
================================================================================

PURPOSE:
    Retry async operations with deterministic exponential backoff.

BACKOFF:
    delay(attempt) = min(base_delay * backoff_multiplier ** (attempt - 1), max_delay)
    attempt 1 -> 1s, attempt 2 -> 2s, attempt 3 -> 4s ... (defaults)
    No jitter: delays are reproducible in tests.

RETRYABILITY:
    - Default: ask the error classifier (ClassifiedError.retryable)
    - If RetryOptions.retryable_errors is given: the failure's message or
      code must contain/equal one of the entries

KEY FACTS:
    - Non-retryable failure -> re-raised after exactly 1 call
    - FatalException is never retried; RecoverableException always is
      (unless an explicit retryable_errors list is given)
    - Exhaustion -> the LAST failure is re-raised as-is (never an aggregate)
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple, TypeVar

from notes_ai.config.constants import (
    DEFAULT_BACKOFF_MULTIPLIER,
    DEFAULT_RETRY_BASE_DELAY_SECONDS,
    DEFAULT_RETRY_MAX_ATTEMPTS,
    DEFAULT_RETRY_MAX_DELAY_SECONDS,
    REMOTE_RETRY_MAX_DELAY_SECONDS,
)
from .error_classifier import classify_error, inspect_failure
from .exceptions import FatalException, RecoverableException

logger = logging.getLogger(__name__)

T = TypeVar("T")
SleepFn = Callable[[float], Awaitable[Any]]

DEFAULT_RETRYABLE_CODES: Tuple[str, ...] = (
    "ECONNRESET",
    "ETIMEDOUT",
    "ENOTFOUND",
    "ECONNREFUSED",
    "RATE_LIMIT_EXCEEDED",
    "SERVICE_UNAVAILABLE",
    "INTERNAL_ERROR",
)


@dataclass(frozen=True)
class RetryOptions:
    max_attempts: int = DEFAULT_RETRY_MAX_ATTEMPTS
    base_delay: float = DEFAULT_RETRY_BASE_DELAY_SECONDS
    max_delay: float = DEFAULT_RETRY_MAX_DELAY_SECONDS
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER
    retryable_errors: Optional[Tuple[str, ...]] = None

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("delays must not be negative")


REMOTE_RETRY_OPTIONS = RetryOptions(max_delay=REMOTE_RETRY_MAX_DELAY_SECONDS)


def compute_backoff_delay(attempt: int, options: RetryOptions) -> float:
    """Delay before retrying after the given (1-based) failed attempt."""
    return min(
        options.base_delay * options.backoff_multiplier ** (attempt - 1),
        options.max_delay,
    )


def matches_retryable_list(error: BaseException, retryable_errors: Tuple[str, ...]) -> bool:
    facts = inspect_failure(error)
    return any(
        entry.lower() in facts.message or entry.upper() in facts.codes
        for entry in retryable_errors
    )


def should_retry(error: BaseException, options: RetryOptions) -> bool:
    if options.retryable_errors is not None:
        return matches_retryable_list(error, options.retryable_errors)
    if isinstance(error, FatalException):
        return False
    if isinstance(error, RecoverableException):
        return True
    return classify_error(error).retryable


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    options: Optional[RetryOptions] = None,
    *,
    sleep: Optional[SleepFn] = None,
) -> T:
    """
    Call operation() until it succeeds, fails permanently, or attempts run out.

    Args:
        operation: Zero-arg async callable
        options: Retry policy (defaults: 3 attempts, 1s base, 10s cap, x2)
        sleep: Awaitable sleep used between attempts (asyncio.sleep)

    Returns:
        Result of the first successful attempt

    Raises:
        The last failure, unchanged
    """
    options = options or RetryOptions()
    sleep = sleep or asyncio.sleep

    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as e:
            if attempt >= options.max_attempts or not should_retry(e, options):
                raise

            delay = compute_backoff_delay(attempt, options)
            logger.warning(
                f"Retry {attempt}/{options.max_attempts} after {delay}s: {str(e)}"
            )
            await sleep(delay)
            attempt += 1


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    options: Optional[RetryOptions] = None,
) -> T:
    """Retry preset for Gemini calls (3 attempts, 1s base, 5s cap)."""
    return await with_retry(operation, options or REMOTE_RETRY_OPTIONS)


__all__ = [
    "DEFAULT_RETRYABLE_CODES",
    "REMOTE_RETRY_OPTIONS",
    "RetryOptions",
    "call_with_retry",
    "compute_backoff_delay",
    "should_retry",
    "with_retry",
]
