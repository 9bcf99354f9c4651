"""
Composition root: single place where concrete implementations are wired.

Builds settings, asset store, and status resolver from config; provides connect/close
lifecycle. Used by lifespan to populate app.state. No DI container library,
explicit wiring only. Backend and resolver mode selection (e.g. asset_store_backend=inmemory,
resolver_mode=blocking) is driven by settings.
"""

from api.app.config.settings import Settings
from api.app.constants import ResolverMode
from api.app.domain.status_resolver import BlockingStatusResolver, StatusResolver, VerdictTags
from api.app.ports.asset_store import AssetStore
from api.app.infrastructure.asset_store.factory import create_asset_store


class AppDependencies:
    """Holds wired dependencies and their lifecycle. Built only in composition root."""

    def __init__(
        self,
        *,
        settings: Settings,
        asset_store: AssetStore,
        status_resolver: StatusResolver,
    ) -> None:
        self._settings = settings
        self._asset_store = asset_store
        self._status_resolver = status_resolver
        self._asset_store_connected = False

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def asset_store(self) -> AssetStore:
        return self._asset_store

    @property
    def status_resolver(self) -> StatusResolver:
        return self._status_resolver

    async def connect(self) -> None:
        await self._asset_store.connect()
        self._asset_store_connected = True

    async def close(self) -> None:
        if self._asset_store_connected:
            await self._asset_store.close()
            self._asset_store_connected = False


def create_status_resolver(settings: Settings, asset_store: AssetStore) -> StatusResolver:
    mode = settings.resolver_mode.strip().lower()
    verdict_tags = VerdictTags(safe=settings.safe_verdict_tag, unsafe=settings.unsafe_verdict_tag)

    if mode == ResolverMode.SINGLE:
        return StatusResolver(asset_store, verdict_tags=verdict_tags)

    if mode == ResolverMode.BLOCKING:
        return BlockingStatusResolver(
            asset_store,
            verdict_tags=verdict_tags,
            max_attempts=settings.blocking_max_attempts,
            retry_delay_seconds=settings.blocking_retry_delay_seconds,
            max_wait_seconds=settings.blocking_max_wait_seconds,
        )

    raise ValueError(f"Unsupported resolver mode: {mode}")


def create_app_dependencies(settings: Settings | None = None) -> AppDependencies:
    """
    Composition root: build all app dependencies in one place.
    Caller owns lifecycle (connect/close).
    """
    _settings = settings or Settings()
    asset_store = create_asset_store(_settings)
    resolver = create_status_resolver(_settings, asset_store)

    return AppDependencies(
        settings=_settings,
        asset_store=asset_store,
        status_resolver=resolver,
    )
