from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Awaitable, Callable

logger = logging.getLogger("wallet_role_bot.jobs")

Notify = Callable[[str], Awaitable[object]]


class JobRunner:
    """Runs maintenance jobs in the background and reports their outcome."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def active(self) -> int:
        return len(self._tasks)

    def submit(self, name: str, job: Callable[[], Awaitable[object]], notify: Notify) -> asyncio.Task[None]:
        task = asyncio.create_task(self._run(name, job, notify), name=f"job-{name}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, name: str, job: Callable[[], Awaitable[object]], notify: Notify) -> None:
        logger.info("Job %s started", name)
        try:
            outcome = await job()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.exception("Job %s failed", name)
            await self._notify(name, notify, f"{name} failed: {exc}")
            return

        summary = getattr(outcome, "summary", None)
        message = summary() if callable(summary) else f"{name} finished."
        logger.info("Job %s finished: %s", name, message)
        await self._notify(name, notify, message)

    @staticmethod
    async def _notify(name: str, notify: Notify, message: str) -> None:
        try:
            await notify(message)
        except Exception as exc:
            logger.warning("Could not deliver %s result: %s", name, exc)

    async def close(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
