"""
Social graph domain — enums and limits.
"""
from __future__ import annotations

import enum

BLOCK_REASON_MAX_LENGTH: int = 200


class FriendshipState(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    BLOCKED = "blocked"
