"""
Notifications domain — enums.
"""
from __future__ import annotations

import enum


class NotificationType(str, enum.Enum):
    # Social
    FOLLOW = "follow"
    FRIEND_REQUEST = "friend_request"
    FRIEND_ACCEPTED = "friend_accepted"
    COMMENT = "comment"
    MENTION = "mention"
    # Moderation (source is always the system)
    MODERATION_WARNING = "moderation_warning"
    MODERATION_SUSPENSION = "moderation_suspension"
    MODERATION_BAN = "moderation_ban"
    MODERATION_CONTENT_REMOVED = "moderation_content_removed"
    MODERATION_REACTIVATION = "moderation_reactivation"


# Display names used in moderation messages, keyed by report content type.
CONTENT_TYPE_LABELS: dict[str, str] = {
    "song": "song",
    "album": "album",
    "playlist": "playlist",
    "comment": "comment",
    "user": "profile",
}
