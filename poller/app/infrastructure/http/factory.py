"""Status client factory: builds StatusClient from settings (no provider logic in composition)."""
from __future__ import annotations

import httpx

from poller.app.config.settings import Settings
from poller.app.ports.status_client import StatusClient
from poller.app.infrastructure.http.httpx_status_client import HttpxStatusClient


def create_status_client(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> StatusClient:
    """Build a status client from settings. Read timeout must cover a blocking-mode server call."""
    async_client = httpx.AsyncClient(
        base_url=settings.status_api_base_url.rstrip("/"),
        timeout=httpx.Timeout(
            connect=settings.request_connect_timeout_seconds,
            read=settings.request_read_timeout_seconds,
            write=settings.request_connect_timeout_seconds,
            pool=settings.request_connect_timeout_seconds,
        ),
        transport=transport,
    )
    return HttpxStatusClient(async_client, status_path=settings.status_path)
