"""Bounded-concurrency task dispatch with input-ordered results."""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Awaitable, Callable, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def run_all(
    tasks: Sequence[T],
    limit: int,
    worker: Callable[[T, int], Awaitable[R]],
) -> list[R]:
    """Run ``worker(task, index)`` for every task, at most ``limit`` at a time.

    Runners pull the next unclaimed index from a shared cursor instead of
    owning a fixed slice, so one slow site never leaves a slot idle while
    work remains. ``results[i]`` always belongs to ``tasks[i]`` whatever the
    completion order.

    The worker is expected to encode its own failures in the value it
    returns. An exception escaping it aborts the whole pool.
    """
    total = len(tasks)
    if total == 0:
        return []

    runner_count = min(max(1, limit), total)
    results: list[R | None] = [None] * total
    # next() on the counter is the only shared mutation; nothing awaits
    # between claiming an index and checking it against the bounds.
    cursor = itertools.count()

    async def _runner(runner_id: int) -> None:
        while True:
            idx = next(cursor)
            if idx >= total:
                return
            logger.debug("Runner %d claimed task %d/%d", runner_id, idx + 1, total)
            results[idx] = await worker(tasks[idx], idx)

    logger.debug("Dispatching %d tasks over %d runners", total, runner_count)
    await asyncio.gather(*(_runner(i) for i in range(runner_count)))
    return results  # type: ignore[return-value]
