"""Async helpers for running blocking HTTP and file calls off the event loop."""

import asyncio
import logging
from typing import Any, Callable, Coroutine, Sequence, TypeVar

T = TypeVar("T")
logger = logging.getLogger(__name__)

# Bounds concurrent Shopify requests; set by init_semaphore() at startup.
_semaphore: asyncio.Semaphore | None = None


def init_semaphore(max_parallel: int = 4) -> None:
    """Create the request semaphore. Call once per process before syncing."""
    global _semaphore
    _semaphore = asyncio.Semaphore(max_parallel)
    logger.debug("Request semaphore initialized: max_parallel=%d", max_parallel)


async def run_sync(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a blocking callable in a worker thread.

    Used for local filesystem work; does not count against the request
    semaphore.

    Example:
        written = await run_sync(write_if_changed, path, text)
    """
    return await asyncio.to_thread(func, *args, **kwargs)


async def run_sync_limited(
    func: Callable[..., T], *args: Any, **kwargs: Any
) -> T:
    """Run a blocking remote call in a worker thread under the semaphore.

    Without an initialized semaphore the call is unbounded.

    Args:
        func: Blocking callable, usually a ``ShopifyClient`` method.
        *args: Positional arguments for func.
        **kwargs: Keyword arguments for func.

    Returns:
        Result of func(*args, **kwargs).
    """
    if _semaphore is None:
        return await asyncio.to_thread(func, *args, **kwargs)
    async with _semaphore:
        return await asyncio.to_thread(func, *args, **kwargs)


async def gather_limited(
    coros: Sequence[Coroutine[Any, Any, T]],
) -> list[T]:
    """Await a batch of coroutines concurrently, keeping input order.

    The coroutines are expected to bound themselves via
    ``run_sync_limited``.  The first exception propagates; coroutines
    already running are not cancelled.
    """
    return list(await asyncio.gather(*coros))
