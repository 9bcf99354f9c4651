"""Asset store factory: selects implementation from config. Only place that imports concrete stores."""
from __future__ import annotations

from api.app.config.settings import Settings
from api.app.ports.asset_store import AssetStore
from api.app.infrastructure.asset_store.cloudinary.cloudinary_asset_store import CloudinaryAssetStore
from api.app.infrastructure.asset_store.inmemory.in_memory_asset_store import InMemoryAssetStore


def create_asset_store(settings: Settings) -> AssetStore:
    backend = settings.asset_store_backend.strip().lower()

    if backend == "cloudinary":
        if not settings.cloudinary_cloud_name:
            raise ValueError("CLOUDINARY_CLOUD_NAME is required for the cloudinary asset store")
        return CloudinaryAssetStore(settings)

    if backend == "inmemory":
        return InMemoryAssetStore(settings.inmemory_asset_store_seed)

    raise ValueError(f"Unsupported asset store backend: {backend}")
