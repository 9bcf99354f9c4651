"""Port: read access to the external asset store holding moderation tags.

The moderation pipeline writes tags on its own schedule; this service only reads them.
Implementations live in infrastructure.
"""
from __future__ import annotations

from typing import Protocol


class UpstreamError(Exception):
    """Asset store unreachable, returned unusable data, or does not know the resource."""


class AssetStore(Protocol):
    """Interface for tag lookups plus connection lifecycle and ping."""

    @property
    def ready(self) -> bool: ...

    async def connect(self) -> None: ...

    async def get_tags(self, resource_id: str) -> frozenset[str]:
        """Return the current tag set; raise UpstreamError on any transport or data problem."""
        ...

    async def ping(self) -> bool: ...

    async def close(self) -> None: ...
