"""API-level constants shared across modules."""
from __future__ import annotations


class ModerationStatus:
    PROCESSING = "processing"
    APPROVED = "approved"
    REJECTED = "rejected"
    TIMEOUT = "timeout"
    ERROR = "error"


VERDICT_STATUSES = frozenset({ModerationStatus.APPROVED, ModerationStatus.REJECTED})

# Tags written by the moderation pipeline once it has reached a verdict.
DEFAULT_SAFE_VERDICT_TAG = "safe-and-processed"
DEFAULT_UNSAFE_VERDICT_TAG = "unsafe-content"

# Applied by the upload widget; carries no verdict.
MODERATION_QUEUE_TAG = "moderation-queue"


class ResolverMode:
    SINGLE = "single"
    BLOCKING = "blocking"
