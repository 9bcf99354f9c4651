"""Poller composition root: build and lifecycle-manage concrete dependencies.

Composition may: import concrete classes, call factories, store interface types,
manage high-level lifecycle.
"""
from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from poller.app.application.convergence_poller import ConvergencePoller
from poller.app.config.settings import Settings
from poller.app.core import SERVICE_NAME
from poller.app.domain.models import PollerConfig
from poller.app.infrastructure.http.factory import create_status_client
from poller.app.infrastructure.scheduling.asyncio_scheduler import AsyncioScheduler
from poller.app.ports.status_client import StatusClient


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class PollerDependencies:
    """Holds wired poller dependencies and their lifecycle."""

    def __init__(
        self,
        *,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._status_client: StatusClient | None = None
        self._scheduler: AsyncioScheduler | None = None
        self._poller: ConvergencePoller | None = None
        self._connected = False

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def status_client(self) -> StatusClient:
        if self._status_client is None:
            raise RuntimeError("status_client is not initialized")
        return self._status_client

    @property
    def poller(self) -> ConvergencePoller:
        if self._poller is None:
            raise RuntimeError("poller is not initialized")
        return self._poller

    async def connect(self) -> None:
        self._status_client = create_status_client(self._settings, transport=self._transport)
        self._scheduler = AsyncioScheduler()
        config = PollerConfig(
            retry_interval_ms=self._settings.retry_interval_ms,
            max_attempts=self._settings.max_attempts,
        )
        self._poller = ConvergencePoller(self._status_client, self._scheduler, config)
        self._connected = True
        _log(
            "poller_ready",
            status_api_base_url=self._settings.status_api_base_url,
            retry_interval_ms=config.retry_interval_ms,
            max_attempts=config.max_attempts,
        )

    async def close(self) -> None:
        if self._poller is not None:
            self._poller.reset()
            self._poller = None

        if self._scheduler is not None:
            await self._scheduler.aclose()
            self._scheduler = None

        if self._status_client is not None:
            try:
                await self._status_client.close()
            except Exception as exc:
                logger.warning("status client close failed: {}", exc)
            self._status_client = None

        self._connected = False


def create_poller_dependencies(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> PollerDependencies:
    return PollerDependencies(settings=settings or Settings(), transport=transport)
