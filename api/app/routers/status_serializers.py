"""Helpers to serialize status check outcomes into API responses."""
from __future__ import annotations

from fastapi import Response

from api.app.schemas.status import ErrorResponse, StatusResponse
from api.app.services.check_status import CheckStatusOutcome

UPSTREAM_ERROR_MESSAGE = "Failed to check image status"


def response_from_outcome(outcome: CheckStatusOutcome) -> Response:
    """
    Map a status check outcome to an HTTP response.

    Rules:
    - processing/approved/rejected -> 200 {"status": ...}
    - timeout (blocking mode only) -> 408 {"status": "timeout"}
    - validation failure -> 400 {"error": ...}
    - upstream failure -> 500 {"error": ...} with a fixed message; details stay in the log
    """
    if outcome.success:
        return Response(
            status_code=408 if outcome.is_timeout else 200,
            media_type="application/json",
            content=StatusResponse(status=str(outcome.status)).model_dump_json(),
        )

    if outcome.is_validation_error:
        return Response(
            status_code=400,
            media_type="application/json",
            content=ErrorResponse(error=outcome.error or "public_id is required").model_dump_json(),
        )

    return Response(
        status_code=500,
        media_type="application/json",
        content=ErrorResponse(error=UPSTREAM_ERROR_MESSAGE).model_dump_json(),
    )
