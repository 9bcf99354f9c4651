import asyncio

from typing import Any
from fastapi import APIRouter, Request, Response
from loguru import logger

from api.app.routers.utils import readiness_ping_timeout_seconds
from api.app.core import SERVICE_NAME

health_router = APIRouter(tags=["Health"])

def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")

@health_router.get(
    "/health/live",
    summary="Liveness probe",
    description="Returns 200 if the API process is running.",
    responses={200: {"description": "Service is alive."}},
)
async def live() -> dict:
    return {"status": "ok"}


@health_router.get(
    "/health/ready",
    summary="Readiness probe",
    description="Returns 200 only when the asset store client is connected and the asset store answers a ping in time.",
    responses={
        200: {"description": "Asset store is reachable."},
        503: {"description": "Asset store or resolver not ready."},
    },
)
async def ready(request: Request) -> Response:
    asset_store = getattr(request.app.state, "asset_store", None)
    resolver = getattr(request.app.state, "status_resolver", None)
    if asset_store is None or resolver is None:
        _log("components_not_initialized")
        return Response(status_code=503, content="Not ready")
    if not asset_store.ready:
        _log("asset_store_not_connected")
        return Response(status_code=503, content="Asset store not ready")

    timeout_s = readiness_ping_timeout_seconds(request)
    try:
        ping_ok = await asyncio.wait_for(asset_store.ping(), timeout=timeout_s)
    except asyncio.TimeoutError:
        _log("asset_store_ping_timeout")
        return Response(status_code=503, content="Asset store not ready")
    if not ping_ok:
        _log("asset_store_not_ready")
        return Response(status_code=503, content="Asset store not ready")
    return Response(status_code=200, content="OK")
