"""Async utilities for bounded concurrent processing."""

import asyncio
from typing import Any, Awaitable, Callable, Iterable, TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def run_with_concurrency(
    items: Iterable[T],
    worker: Callable[[T], Awaitable[R]],
    max_concurrent: int = 2,
    return_exceptions: bool = True,
) -> list[R | Any]:
    """Run worker over items with semaphore-controlled concurrency.

    Workers acquire the semaphore in item order, so at most ``max_concurrent``
    are in flight and the next item starts only once a slot frees up.
    Results come back in item order regardless of completion order.
    """
    semaphore = asyncio.Semaphore(max(1, max_concurrent))

    async def limited(item: T) -> R:
        async with semaphore:
            return await worker(item)

    return await asyncio.gather(
        *[limited(item) for item in items],
        return_exceptions=return_exceptions,
    )
