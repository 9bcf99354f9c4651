"""Port: cancellable delayed execution for the poll loop."""
from __future__ import annotations

from typing import Awaitable, Callable, Protocol


class ScheduledCall(Protocol):
    """Handle for one pending callback."""

    @property
    def cancelled(self) -> bool: ...

    def cancel(self) -> None:
        """Stop the callback from firing. Does not interrupt a callback already running."""
        ...


class Scheduler(Protocol):
    def call_later(
        self,
        delay_seconds: float,
        callback: Callable[[], Awaitable[None]],
    ) -> ScheduledCall: ...
