"""Asynchronous operation utilities"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Coroutine, Iterable, List, TypeVar

from ..api.exceptions import is_retryable
from ..models.config import RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar('T')


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run async coroutine in sync context

    Args:
        coro: Coroutine to run

    Returns:
        Coroutine result

    Raises:
        RuntimeError: If called from a running event loop
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    coro.close()
    raise RuntimeError("run_async() cannot be used inside a running event loop; await the coroutine instead")


async def retry_async(coro_func: Callable[..., Awaitable[T]],
                      *args,
                      policy: RetryPolicy,
                      description: str = "operation",
                      **kwargs) -> T:
    """
    Retry async operation on transient errors

    Only errors classified as retryable are retried; anything else
    propagates on the first occurrence.

    Args:
        coro_func: Coroutine function
        *args: Function arguments
        policy: Retry policy (attempt bound and backoff schedule)
        description: Operation name used in log messages
        **kwargs: Function keyword arguments

    Returns:
        Function result

    Raises:
        Last exception if all attempts fail
    """
    attempt = 1
    while True:
        try:
            return await coro_func(*args, **kwargs)
        except Exception as e:
            if not is_retryable(e) or attempt >= policy.max_attempts:
                raise
            logger.warning("%s failed (attempt %d/%d): %s",
                           description, attempt, policy.max_attempts, e)
            await policy.wait(attempt)
            attempt += 1


async def gather_bounded(coros: Iterable[Awaitable[T]], limit: int) -> List[Any]:
    """
    Run awaitables with at most ``limit`` in flight

    Every awaitable runs to completion before this returns; exceptions are
    returned in place of results so the caller decides what to raise.

    Args:
        coros: Awaitables to run
        limit: Concurrency cap

    Returns:
        Results or exceptions in input order
    """
    semaphore = asyncio.Semaphore(limit)

    async def wrapped(coro):
        async with semaphore:
            return await coro

    return await asyncio.gather(*[wrapped(c) for c in coros], return_exceptions=True)
