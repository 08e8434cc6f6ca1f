from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, List, Sequence, TypeVar, Union

T = TypeVar("T")
R = TypeVar("R")


async def run_bounded(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    concurrency: int = 5,
) -> List[Union[R, BaseException]]:
    """Run ``worker`` over ``items`` with at most ``concurrency`` calls in flight.

    Results line up with ``items``. A failing call leaves its exception in the
    result slot instead of aborting the other workers.
    """
    results: List[Union[R, BaseException]] = [None] * len(items)  # type: ignore[list-item]
    if not items:
        return results

    queue: asyncio.Queue[int] = asyncio.Queue()
    for index in range(len(items)):
        queue.put_nowait(index)

    async def _drain() -> None:
        while True:
            try:
                index = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                results[index] = await worker(items[index])
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                results[index] = exc
            finally:
                queue.task_done()

    size = max(1, min(int(concurrency), len(items)))
    await asyncio.gather(*(_drain() for _ in range(size)))
    return results
