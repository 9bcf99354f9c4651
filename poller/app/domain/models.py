"""Domain models."""
from __future__ import annotations

from dataclasses import dataclass

from poller.app.constants import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_RETRY_INTERVAL_MS,
    SessionState,
)


@dataclass(frozen=True)
class PollerConfig:
    """Timing for one poll session: fixed delay between attempts and the attempt ceiling."""

    retry_interval_ms: int = DEFAULT_RETRY_INTERVAL_MS
    max_attempts: int = DEFAULT_MAX_ATTEMPTS

    def __post_init__(self) -> None:
        if not isinstance(self.retry_interval_ms, int) or self.retry_interval_ms < 0:
            raise ValueError("retry_interval_ms must be a non-negative int")
        if not isinstance(self.max_attempts, int) or self.max_attempts < 1:
            raise ValueError("max_attempts must be an int >= 1")

    @property
    def retry_interval_seconds(self) -> float:
        return self.retry_interval_ms / 1000.0


@dataclass(frozen=True)
class StatusTransition:
    """One state change published to the UI layer."""

    resource_id: str | None
    state: SessionState
    attempt: int = 0
    error_reason: str | None = None
