"""Status resolver: maps the asset store's current tag set to one moderation status.

Uses the AssetStore port; the concrete store is built in the composition root.
`StatusResolver` makes exactly one read per call and never sleeps. Retrying is the
caller's job, which keeps every call idempotent and the server stateless.

`BlockingStatusResolver` is the alternative mode: it re-reads the tags with a fixed
delay until a verdict appears or its attempt/wall-clock budget runs out, then answers
`timeout`. It holds the request open for the whole budget, so it is only used when
selected explicitly.
"""
from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable

from loguru import logger

from api.app.constants import (
    DEFAULT_SAFE_VERDICT_TAG,
    DEFAULT_UNSAFE_VERDICT_TAG,
    ModerationStatus,
    VERDICT_STATUSES,
)
from api.app.core import SERVICE_NAME
from api.app.core.backoff import fixed_delay_attempts
from api.app.ports.asset_store import AssetStore, UpstreamError


class ValidationError(Exception):
    """Raised when the resource id is missing or malformed. Never retried."""


@dataclass(frozen=True)
class VerdictTags:
    """The two reserved tag values the moderation pipeline writes."""

    safe: str = DEFAULT_SAFE_VERDICT_TAG
    unsafe: str = DEFAULT_UNSAFE_VERDICT_TAG

    def __post_init__(self) -> None:
        if not self.safe or not self.unsafe:
            raise ValueError("verdict tags must be non-empty")
        if self.safe == self.unsafe:
            raise ValueError("safe and unsafe verdict tags must differ")


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def validate_resource_id(resource_id: Any) -> str:
    if not isinstance(resource_id, str) or not resource_id.strip():
        raise ValidationError("public_id is required")
    return resource_id


def status_from_tags(tags: Iterable[str], verdict_tags: VerdictTags) -> str:
    """Unsafe wins if both verdict tags are present."""
    tag_set = frozenset(tags)
    if verdict_tags.unsafe in tag_set:
        return ModerationStatus.REJECTED
    if verdict_tags.safe in tag_set:
        return ModerationStatus.APPROVED
    return ModerationStatus.PROCESSING


class StatusResolver:
    """Single-shot resolver: one tag read, one status."""

    def __init__(
        self,
        asset_store: AssetStore,
        *,
        verdict_tags: VerdictTags | None = None,
    ) -> None:
        self._asset_store = asset_store
        self._verdict_tags = verdict_tags or VerdictTags()

    @property
    def verdict_tags(self) -> VerdictTags:
        return self._verdict_tags

    async def resolve(self, resource_id: str) -> str:
        public_id = validate_resource_id(resource_id)
        status = await self._read_status(public_id)
        _log("status_resolved", public_id=public_id, status=status)
        return status

    async def _read_status(self, public_id: str) -> str:
        try:
            tags = await self._asset_store.get_tags(public_id)
        except UpstreamError as exc:
            logger.bind(service_name=SERVICE_NAME, event="asset_store_error", public_id=public_id).warning(
                "tag lookup failed: {}", exc
            )
            raise
        return status_from_tags(tags, self._verdict_tags)


class BlockingStatusResolver(StatusResolver):
    """Re-reads the tags until a verdict appears, up to max_attempts reads and max_wait_seconds."""

    def __init__(
        self,
        asset_store: AssetStore,
        *,
        verdict_tags: VerdictTags | None = None,
        max_attempts: int = 7,
        retry_delay_seconds: float = 3.0,
        max_wait_seconds: float | None = 21.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(asset_store, verdict_tags=verdict_tags)
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if retry_delay_seconds < 0:
            raise ValueError("retry_delay_seconds must be >= 0")
        self._max_attempts = int(max_attempts)
        self._retry_delay_seconds = float(retry_delay_seconds)
        self._max_wait_seconds = max_wait_seconds
        self._sleep = sleep
        self._clock = clock

    async def resolve(self, resource_id: str) -> str:
        public_id = validate_resource_id(resource_id)
        started = self._clock()

        async for attempt in fixed_delay_attempts(
            self._retry_delay_seconds,
            self._max_attempts,
            sleep=self._sleep,
        ):
            if attempt > 1 and self._deadline_passed(started):
                break
            status = await self._read_status(public_id)
            _log("status_check_attempt", public_id=public_id, attempt=attempt, status=status)
            if status in VERDICT_STATUSES:
                _log("status_resolved", public_id=public_id, status=status, attempt=attempt)
                return status

        _log("status_check_timeout", public_id=public_id, max_attempts=self._max_attempts)
        return ModerationStatus.TIMEOUT

    def _deadline_passed(self, started: float) -> bool:
        if self._max_wait_seconds is None:
            return False
        return self._clock() - started >= self._max_wait_seconds
