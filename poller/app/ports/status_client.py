"""Status client port: contract for asking the status endpoint about one resource.

The poll session depends on this port; infrastructure (e.g. httpx) implements it.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable


class StatusTransportError(Exception):
    """Raised when a status check fails: network, timeout, non-success answer or unusable body."""


@runtime_checkable
class StatusClient(Protocol):
    """Port: one status check per call. Implementations live in infrastructure."""

    async def check_status(self, resource_id: str) -> str:
        """Return processing, approved, rejected or timeout; raise StatusTransportError on failure."""
        ...

    async def close(self) -> None:
        """Release resources (e.g. connection pool). No-op allowed if nothing to close."""
        ...
