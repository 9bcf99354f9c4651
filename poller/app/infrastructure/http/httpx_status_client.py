"""Concrete status client using httpx (injected where StatusClient is needed)."""
from __future__ import annotations

from typing import Any

import httpx

from poller.app.constants import RESOLVER_STATUSES, SessionState
from poller.app.ports.status_client import StatusClient, StatusTransportError


class HttpxStatusClient(StatusClient):
    """StatusClient implementation using httpx.AsyncClient against POST /status.

    200 carries processing/approved/rejected; 408 carries the blocking server's timeout.
    Anything else, including an unrecognised status value, is a transport failure.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        status_path: str = "/status",
    ) -> None:
        self._client = client
        self._status_path = status_path

    async def check_status(self, resource_id: str) -> str:
        try:
            response = await self._client.post(self._status_path, json={"public_id": resource_id})
        except httpx.TimeoutException as exc:
            raise StatusTransportError(f"timeout while checking status for {resource_id}") from exc
        except httpx.HTTPError as exc:
            raise StatusTransportError(f"status check failed for {resource_id}: {exc}") from exc

        if response.status_code not in (200, 408):
            raise StatusTransportError(
                f"status check answered http {response.status_code} for {resource_id}: {self._error_text(response)}"
            )

        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise StatusTransportError(f"malformed status response for {resource_id}") from exc

        status = payload.get("status") if isinstance(payload, dict) else None
        if response.status_code == 408:
            if status != SessionState.TIMEOUT.value:
                raise StatusTransportError(f"unexpected 408 body for {resource_id}")
            return status
        if status not in RESOLVER_STATUSES or status == SessionState.TIMEOUT.value:
            raise StatusTransportError(f"unrecognised status {status!r} for {resource_id}")
        return status

    @staticmethod
    def _error_text(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.text
        if isinstance(payload, dict) and "error" in payload:
            return str(payload["error"])
        return response.text

    async def close(self) -> None:
        await self._client.aclose()
