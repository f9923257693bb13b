"""Fan-out/join over independent store reads."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Coroutine, Iterable, TypeVar

logger = logging.getLogger("datasources.fanout")

T = TypeVar("T")


async def join_all(reads: Iterable[Coroutine[Any, Any, T]]) -> list[T]:
    """Run ``reads`` concurrently and return their results in submission order.

    All reads share one task group: if any read raises, the outstanding ones
    are cancelled and the first exception is re-raised unchanged.  Cancelling
    the caller cancels every read still in flight.

    Args:
        reads: Coroutines to run.  Each is scheduled exactly once.

    Returns:
        List of results, one per coroutine, in the order given.
    """
    tasks: list[asyncio.Task[T]] = []
    try:
        async with asyncio.TaskGroup() as group:
            for read in reads:
                tasks.append(group.create_task(read))
    except BaseExceptionGroup as exc_group:
        first = exc_group.exceptions[0]
        logger.debug(
            "join_all: %d of %d reads failed, first: %r",
            len(exc_group.exceptions), len(tasks), first,
        )
        raise first
    return [task.result() for task in tasks]


async def unwrap_result(pending: Awaitable) -> Any:
    """Await a UseCaseResult and return its data, raising the error on failure."""
    result = await pending
    return result.unwrap()
