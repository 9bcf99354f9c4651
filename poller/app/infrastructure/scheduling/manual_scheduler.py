"""Scheduler driven by a virtual clock.

Nothing fires until `advance` is awaited; due callbacks then run in due-time order,
each awaited to completion before the next. Used for deterministic tests and replays.
"""
from __future__ import annotations

import itertools
from typing import Awaitable, Callable


class _ManualScheduledCall:
    def __init__(self, due: float, seq: int, callback: Callable[[], Awaitable[None]]) -> None:
        self.due = due
        self.seq = seq
        self.callback = callback
        self.fired = False
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class ManualScheduler:
    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)
        self._calls: list[_ManualScheduledCall] = []
        self._seq = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        return sum(1 for call in self._calls if not call.fired and not call.cancelled)

    def next_due(self) -> float | None:
        due = [call.due for call in self._calls if not call.fired and not call.cancelled]
        return min(due) if due else None

    def call_later(
        self,
        delay_seconds: float,
        callback: Callable[[], Awaitable[None]],
    ) -> _ManualScheduledCall:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        call = _ManualScheduledCall(self._now + delay_seconds, next(self._seq), callback)
        self._calls.append(call)
        return call

    async def advance(self, seconds: float) -> None:
        """Move the clock forward, running every callback that falls due on the way."""
        if seconds < 0:
            raise ValueError("seconds must be >= 0")
        await self._run_until(self._now + seconds)

    async def run_until_idle(self, max_steps: int = 10_000) -> None:
        """Jump to each next due callback until nothing is pending."""
        for _ in range(max_steps):
            due = self.next_due()
            if due is None:
                return
            await self._run_until(due)
        raise RuntimeError("scheduler did not go idle")

    async def _run_until(self, target: float) -> None:
        while True:
            due = [
                call
                for call in self._calls
                if not call.fired and not call.cancelled and call.due <= target
            ]
            if not due:
                break
            call = min(due, key=lambda c: (c.due, c.seq))
            self._now = call.due
            call.fired = True
            await call.callback()
        self._now = max(self._now, target)
        self._calls = [call for call in self._calls if not call.fired and not call.cancelled]
