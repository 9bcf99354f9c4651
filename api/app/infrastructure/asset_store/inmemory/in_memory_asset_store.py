"""In-memory asset store for local mode and tests.

Local mode seeds it from INMEMORY_ASSET_STORE_SEED.

`add_tags` stands in for the moderation pipeline writing a verdict.
"""
from __future__ import annotations

from typing import Iterable

from api.app.constants import MODERATION_QUEUE_TAG
from api.app.ports.asset_store import UpstreamError


class InMemoryAssetStore:
    def __init__(self, tags_by_id: dict[str, Iterable[str]] | None = None) -> None:
        self._tags_by_id: dict[str, set[str]] = {
            resource_id: set(tags) for resource_id, tags in (tags_by_id or {}).items()
        }

    async def connect(self) -> None:
        return

    @property
    def ready(self) -> bool:
        return True

    def register(self, resource_id: str, tags: Iterable[str] = (MODERATION_QUEUE_TAG,)) -> None:
        """Record an upload; by default it carries only the queue tag the widget applies."""
        self._tags_by_id[resource_id] = set(tags)

    def add_tags(self, resource_id: str, *tags: str) -> None:
        self._tags_by_id.setdefault(resource_id, set()).update(tags)

    async def get_tags(self, resource_id: str) -> frozenset[str]:
        if resource_id not in self._tags_by_id:
            raise UpstreamError(f"unknown resource {resource_id}")
        return frozenset(self._tags_by_id[resource_id])

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return
