"""Timer and task scheduling for the publisher."""

import asyncio
from typing import Any, Callable, Coroutine, Protocol

from ..logging_config import get_logger

logger = get_logger(__name__)


class ITimer(Protocol):
    def cancel(self) -> None:
        ...


class IScheduler(Protocol):
    """Periodic callbacks and background coroutines."""

    def call_every(self, interval_s: float, callback: Callable[[], None]) -> ITimer:
        """Invoke callback every interval_s seconds until cancelled."""
        ...

    def spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        """Run a coroutine in the background."""
        ...


class _PeriodicTimer:
    def __init__(self, task: asyncio.Task):
        self._task = task

    def cancel(self) -> None:
        self._task.cancel()

    @property
    def cancelled(self) -> bool:
        return self._task.cancelled() or self._task.done()


class AsyncioScheduler:
    """Scheduler backed by the running asyncio event loop."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()

    def call_every(self, interval_s: float, callback: Callable[[], None]) -> ITimer:
        """Invoke callback every interval_s seconds until cancelled."""

        async def _run() -> None:
            while True:
                await asyncio.sleep(interval_s)
                try:
                    callback()
                except Exception as e:
                    logger.error("Periodic callback error: %s", e, exc_info=True)

        return _PeriodicTimer(asyncio.get_running_loop().create_task(_run()))

    def spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        """Run a coroutine in the background, holding a reference until done."""
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Wait for every spawned coroutine to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
