from pydantic import BaseModel

from api.app.constants import ModerationStatus


class StatusRequest(BaseModel):
    # Optional so a missing id reaches the resolver and is answered with 400, not 422.
    public_id: str | None = None


class StatusResponse(BaseModel):
    status: str = ModerationStatus.PROCESSING


class ErrorResponse(BaseModel):
    error: str
