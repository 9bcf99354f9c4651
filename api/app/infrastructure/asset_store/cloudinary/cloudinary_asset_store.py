"""Cloudinary implementation of the AssetStore port using the Admin API over httpx.

Tags are read from the resource details endpoint; a resource with no tags has no
`tags` key. Transport failures, non-2xx answers (including an unknown public_id) and
malformed bodies are all mapped to UpstreamError.
"""
from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from api.app.config.settings import Settings
from api.app.ports.asset_store import AssetStore, UpstreamError


class CloudinaryAssetStore(AssetStore):
    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def ready(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            base_url=self._settings.cloudinary_api_base_url.rstrip("/"),
            auth=(self._settings.cloudinary_api_key, self._settings.cloudinary_api_secret),
            timeout=httpx.Timeout(
                connect=self._settings.asset_store_connect_timeout_seconds,
                read=self._settings.asset_store_read_timeout_seconds,
                write=self._settings.asset_store_read_timeout_seconds,
                pool=self._settings.asset_store_connect_timeout_seconds,
            ),
            transport=self._transport,
        )

    def _resource_path(self, public_id: str) -> str:
        # public_ids may contain folder separators; keep "/" literal.
        return (
            f"/v1_1/{self._settings.cloudinary_cloud_name}/resources/"
            f"{self._settings.cloudinary_resource_type}/upload/{quote(public_id, safe='/')}"
        )

    async def get_tags(self, resource_id: str) -> frozenset[str]:
        if self._client is None:
            raise UpstreamError("asset store is not connected")
        try:
            response = await self._client.get(self._resource_path(resource_id))
        except httpx.TimeoutException as exc:
            raise UpstreamError(f"timeout while fetching tags for {resource_id}") from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"tag fetch failed for {resource_id}: {exc}") from exc

        if response.status_code == 404:
            raise UpstreamError(f"unknown resource {resource_id}")
        if response.status_code >= 400:
            raise UpstreamError(f"asset store answered http {response.status_code} for {resource_id}")

        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise UpstreamError(f"malformed asset store response for {resource_id}") from exc
        if not isinstance(payload, dict):
            raise UpstreamError(f"malformed asset store response for {resource_id}")

        tags = payload.get("tags") or []
        if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
            raise UpstreamError(f"malformed tags for {resource_id}")
        return frozenset(tags)

    async def ping(self) -> bool:
        if self._client is None:
            return False
        try:
            response = await self._client.get(f"/v1_1/{self._settings.cloudinary_cloud_name}/ping")
        except httpx.HTTPError:
            return False
        return response.status_code == 200

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
