from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request, Response
from loguru import logger

from api.app.core import SERVICE_NAME
from api.app.routers.status_serializers import response_from_outcome
from api.app.schemas.status import ErrorResponse, StatusRequest
from api.app.services.check_status import check_status


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).warning("")


status_router = APIRouter(tags=["Moderation"])


@status_router.post(
    "/status",
    summary="Resolve moderation status",
    description="Reads the asset's current tags from the asset store and maps them to a moderation status. Answers from a single read; clients poll until the status is terminal. When the server runs in blocking mode the call re-reads for a bounded time and may answer 408 timeout.",
    responses={
        200: {"description": "Status resolved: approved, rejected or processing."},
        400: {"description": "public_id missing or empty."},
        408: {"description": "Blocking mode only: no verdict tag within the server-side budget."},
        500: {"description": "Asset store unreachable or returned unusable data."},
        503: {"description": "Status resolver not initialized."},
    },
)
async def post_status(request: Request, body: StatusRequest | None = None) -> Response:
    resolver = getattr(request.app.state, "status_resolver", None)
    if resolver is None:
        _log("status_rejected", reason="resolver_not_ready")
        return Response(
            status_code=503,
            media_type="application/json",
            content=ErrorResponse(error="Status resolver not available").model_dump_json(),
        )

    public_id = body.public_id if body is not None else None
    outcome = await check_status(public_id, resolver)
    if not outcome.success:
        _log(
            "status_check_failed",
            public_id=public_id,
            reason=outcome.error,
            validation=outcome.is_validation_error,
        )
    return response_from_outcome(outcome)
