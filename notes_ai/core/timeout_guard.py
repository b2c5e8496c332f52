"""
================================================================================
FILE: notes_ai/core/timeout_guard.py
================================================================================

PURPOSE:
    Bounds the wall-clock time of async operations. Used by the orchestrator
    around the whole retry loop, so one deadline covers every attempt.

KEY FACTS:
    - Operations are zero-arg callables returning an awaitable
    - On expiry raises OperationTimeoutError (ErrorKind.TIMEOUT)
    - Cancellation is best effort: asyncio.wait_for cancels the awaiting
      task, but work already handed to a thread (asyncio.to_thread) keeps
      running; callers must not rely on side effects after the deadline
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

from notes_ai.config.constants import DEFAULT_REMOTE_TIMEOUT_SECONDS
from .exceptions import OperationTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_timeout(
    operation: Callable[[], Awaitable[T]],
    timeout: float = DEFAULT_REMOTE_TIMEOUT_SECONDS,
    message: Optional[str] = None,
) -> T:
    """
    Run operation() and fail if it does not finish within timeout seconds.

    Raises:
        OperationTimeoutError: If the deadline fires first
    """
    if timeout <= 0:
        raise ValueError("timeout must be positive")

    try:
        return await asyncio.wait_for(operation(), timeout=timeout)
    except asyncio.TimeoutError as e:
        text = message or f"Operation timed out after {timeout}s"
        logger.warning(text)
        raise OperationTimeoutError(text, context={"timeout_s": timeout}) from e


async def call_with_timeout(
    operation: Callable[[], Awaitable[T]],
    timeout: float = DEFAULT_REMOTE_TIMEOUT_SECONDS,
) -> T:
    """Timeout preset for Gemini calls."""
    return await with_timeout(
        operation,
        timeout=timeout,
        message=f"Gemini API call timed out after {timeout}s",
    )


async def with_parallel_timeout(
    operations: Sequence[Callable[[], Awaitable[T]]],
    timeout: float = DEFAULT_REMOTE_TIMEOUT_SECONDS,
    message: Optional[str] = None,
) -> List[T]:
    """
    Run operations concurrently under one shared deadline.

    Each member is guarded individually and the group as a whole; the first
    failure (or expiry) fails the group and cancels the remaining members.

    Returns:
        Results in the order of operations
    """

    async def run_all() -> List[T]:
        tasks = [
            asyncio.ensure_future(with_timeout(op, timeout=timeout, message=message))
            for op in operations
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    return await with_timeout(
        run_all,
        timeout=timeout,
        message=f"Parallel operations timed out after {timeout}s",
    )


__all__ = ["with_timeout", "call_with_timeout", "with_parallel_timeout"]
