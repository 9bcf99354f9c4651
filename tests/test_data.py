"""
Shared tag sets for resolver, endpoint and poller tests.

Each entry pairs a tag set as the moderation pipeline might leave it with the status
the resolver must answer. Use for parametrized resolver/endpoint tests.
"""

from api.app.constants import MODERATION_QUEUE_TAG
from tests.conftest import SAFE, UNSAFE

# ---- No verdict yet: always processing ----
TAGSETS_PROCESSING = [
    [],
    [MODERATION_QUEUE_TAG],
    [MODERATION_QUEUE_TAG, "kid-safe-platform"],
    ["safe-and-processed-draft"],
    ["unsafe"],
]

# ---- Safe verdict only ----
TAGSETS_APPROVED = [
    [SAFE],
    [MODERATION_QUEUE_TAG, SAFE],
]

# ---- Unsafe verdict, with or without the safe tag (unsafe wins) ----
TAGSETS_REJECTED = [
    [UNSAFE],
    [MODERATION_QUEUE_TAG, UNSAFE],
    [SAFE, UNSAFE],
]

# ---- Public ids as the upload widget hands them over ----
PUBLIC_IDS = [
    "kid-safe-platform/abc123",
    "sample",
    "folder/with space/photo",
]
