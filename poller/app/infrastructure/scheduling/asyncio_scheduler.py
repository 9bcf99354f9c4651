"""Scheduler implementation on the running asyncio event loop."""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from loguru import logger

from poller.app.core import SERVICE_NAME


class _AsyncioScheduledCall:
    def __init__(self) -> None:
        self.handle: asyncio.TimerHandle | None = None
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        if self.handle is not None:
            self.handle.cancel()


class AsyncioScheduler:
    """Fires callbacks via loop.call_later; each callback runs as its own task."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[None]] = set()

    def call_later(
        self,
        delay_seconds: float,
        callback: Callable[[], Awaitable[None]],
    ) -> _AsyncioScheduledCall:
        loop = asyncio.get_running_loop()
        call = _AsyncioScheduledCall()

        def fire() -> None:
            if call.cancelled:
                return
            task = loop.create_task(callback())
            self._tasks.add(task)
            task.add_done_callback(self._on_task_done)

        call.handle = loop.call_later(delay_seconds, fire)
        return call

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.bind(service_name=SERVICE_NAME, event="scheduled_callback_failed").opt(
                exception=exc
            ).error("scheduled callback failed: {}", exc)

    async def aclose(self) -> None:
        """Wait for callbacks that already fired. In-flight checks are allowed to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
