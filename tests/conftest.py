from __future__ import annotations

import asyncio
from typing import Iterable

import pytest
from fastapi import FastAPI

from api.app.constants import DEFAULT_SAFE_VERDICT_TAG, DEFAULT_UNSAFE_VERDICT_TAG
from api.app.domain.status_resolver import StatusResolver
from api.app.ports.asset_store import UpstreamError
from api.app.routers.health import health_router
from api.app.routers.status import status_router
from poller.app.ports.status_client import StatusTransportError

SAFE = DEFAULT_SAFE_VERDICT_TAG
UNSAFE = DEFAULT_UNSAFE_VERDICT_TAG


class FakeAssetStore:
    """Implements AssetStore for tests; records every read.

    `tag_sequence` gives successive answers for one resource; the last entry repeats.
    """

    def __init__(
        self,
        tags_by_id: dict[str, Iterable[str]] | None = None,
        *,
        tag_sequence: list[Iterable[str]] | None = None,
        raise_on_get: Exception | None = None,
        ping_ok: bool = True,
        connected: bool = True,
    ) -> None:
        self._tags_by_id = {key: frozenset(value) for key, value in (tags_by_id or {}).items()}
        self._tag_sequence = [frozenset(tags) for tags in (tag_sequence or [])]
        self._raise_on_get = raise_on_get
        self._ping_ok = ping_ok
        self._connected = connected
        self.reads: list[str] = []

    @property
    def ready(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        self._connected = True

    async def get_tags(self, resource_id: str) -> frozenset[str]:
        self.reads.append(resource_id)
        if self._raise_on_get is not None:
            raise self._raise_on_get
        if self._tag_sequence:
            index = min(len(self.reads), len(self._tag_sequence)) - 1
            return self._tag_sequence[index]
        if resource_id not in self._tags_by_id:
            raise UpstreamError(f"unknown resource {resource_id}")
        return self._tags_by_id[resource_id]

    def set_tags(self, resource_id: str, tags: Iterable[str]) -> None:
        self._tags_by_id[resource_id] = frozenset(tags)

    async def ping(self) -> bool:
        return self._ping_ok

    async def close(self) -> None:
        self._connected = False


class ScriptedStatusClient:
    """Implements StatusClient for tests; answers from a script, last entry repeats.

    An Exception entry is raised instead of returned.
    """

    def __init__(self, script: list[str | Exception]) -> None:
        self._script = list(script)
        self.calls: list[str] = []
        self.closed = False

    async def check_status(self, resource_id: str) -> str:
        self.calls.append(resource_id)
        answer = self._script[min(len(self.calls), len(self._script)) - 1]
        if isinstance(answer, Exception):
            raise answer
        return answer

    async def close(self) -> None:
        self.closed = True


class GatedStatusClient:
    """Status client whose answer is held until release() is called."""

    def __init__(self, answer: str | Exception = "approved") -> None:
        self.answer = answer
        self.calls: list[str] = []
        self.started = asyncio.Event()
        self._gate = asyncio.Event()

    def release(self) -> None:
        self._gate.set()

    async def check_status(self, resource_id: str) -> str:
        self.calls.append(resource_id)
        self.started.set()
        await self._gate.wait()
        if isinstance(self.answer, Exception):
            raise self.answer
        return self.answer

    async def close(self) -> None:
        return


def transport_error(message: str = "connection refused") -> StatusTransportError:
    return StatusTransportError(message)


@pytest.fixture()
def asset_store() -> FakeAssetStore:
    return FakeAssetStore(
        {
            "uploads/pending": [],
            "uploads/safe": [SAFE],
            "uploads/unsafe": [UNSAFE],
        }
    )


@pytest.fixture()
def test_app(asset_store: FakeAssetStore) -> FastAPI:
    app = FastAPI()
    app.state.asset_store = asset_store
    app.state.status_resolver = StatusResolver(asset_store)
    app.include_router(health_router)
    app.include_router(status_router)
    return app
