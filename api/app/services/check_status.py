"""
Accepts plain Python types and a StatusResolver; returns an outcome.
Router translates outcome to HTTP status codes and content.
"""

from dataclasses import dataclass

from api.app.constants import ModerationStatus
from api.app.domain.status_resolver import StatusResolver, ValidationError
from api.app.ports.asset_store import UpstreamError


@dataclass(frozen=True)
class CheckStatusOutcome:
    """Result of check_status.
    success=True => status set (processing, approved, rejected or, in blocking mode, timeout).
    success=False => error set; is_validation_error tells a bad request from an upstream failure.
    """
    success: bool
    status: str | None = None
    error: str | None = None
    is_validation_error: bool = False

    @property
    def is_timeout(self) -> bool:
        return self.success and self.status == ModerationStatus.TIMEOUT


async def check_status(public_id: str | None, resolver: StatusResolver) -> CheckStatusOutcome:
    """
    Resolve the moderation status for one public_id.
    Validation happens inside the resolver before any asset store access.
    """
    try:
        status = await resolver.resolve(public_id)  # type: ignore[arg-type]
    except ValidationError as e:
        return CheckStatusOutcome(success=False, error=str(e), is_validation_error=True)
    except UpstreamError as e:
        return CheckStatusOutcome(success=False, error=str(e))
    return CheckStatusOutcome(success=True, status=status)
