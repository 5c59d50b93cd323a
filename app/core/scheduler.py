"""Delayed task scheduling on the running event loop."""

import asyncio
from collections.abc import Awaitable, Callable

import structlog

logger = structlog.get_logger()

SleepFn = Callable[[float], Awaitable[None]]


class Scheduler:
    """Runs coroutine callbacks after a delay and tracks them until done.

    The sleep function is injectable so tests can drive delays without
    waiting on the wall clock.
    """

    def __init__(self, sleep: SleepFn = asyncio.sleep) -> None:
        self._sleep = sleep
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        """Number of scheduled callbacks that have not finished."""
        return len(self._pending)

    def call_later(
        self,
        delay: float,
        callback: Callable[[], Awaitable[None]],
        name: str = "scheduled",
    ) -> asyncio.Task[None]:
        """Schedule ``callback`` to run ``delay`` seconds from now."""
        task = asyncio.create_task(self._run(delay, callback, name), name=name)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _run(
        self,
        delay: float,
        callback: Callable[[], Awaitable[None]],
        name: str,
    ) -> None:
        await self._sleep(delay)
        try:
            await callback()
        except Exception:
            logger.exception("Scheduled task failed", task=name, delay=delay)

    async def drain(self) -> None:
        """Wait until every scheduled callback, including chained ones, is done."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def cancel_all(self) -> None:
        """Cancel all pending callbacks."""
        for task in list(self._pending):
            task.cancel()
