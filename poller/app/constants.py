"""Poller-level constants shared across modules."""
from __future__ import annotations

from enum import Enum


class SessionState(str, Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    APPROVED = "approved"
    REJECTED = "rejected"
    TIMEOUT = "timeout"
    ERROR = "error"


TERMINAL_STATES = frozenset(
    {
        SessionState.APPROVED,
        SessionState.REJECTED,
        SessionState.TIMEOUT,
        SessionState.ERROR,
    }
)

# Values the status endpoint may answer with.
RESOLVER_STATUSES = frozenset(
    {
        SessionState.PROCESSING.value,
        SessionState.APPROVED.value,
        SessionState.REJECTED.value,
        SessionState.TIMEOUT.value,
    }
)


class ErrorReason:
    TRANSPORT = "transport"
    ATTEMPTS_EXHAUSTED = "attempts_exhausted"
    UNEXPECTED_STATUS = "unexpected_status"


DEFAULT_RETRY_INTERVAL_MS = 3000
DEFAULT_MAX_ATTEMPTS = 30
