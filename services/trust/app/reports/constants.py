"""
Reports domain — enums and limits.
"""
from __future__ import annotations

import enum

DESCRIPTION_MAX_LENGTH: int = 1000
NOTE_MAX_LENGTH: int = 1000


class ContentType(str, enum.Enum):
    SONG = "song"
    ALBUM = "album"
    PLAYLIST = "playlist"
    USER = "user"
    COMMENT = "comment"


class ReportReason(str, enum.Enum):
    SPAM = "spam"
    INAPPROPRIATE_CONTENT = "inappropriate_content"
    COPYRIGHT = "copyright"
    HATE_SPEECH = "hate_speech"
    HARASSMENT = "harassment"
    MISINFORMATION = "misinformation"
    OTHER = "other"


class ReportStatus(str, enum.Enum):
    PENDING = "pending"
    IN_REVIEW = "in_review"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class ReportPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ResolutionAction(str, enum.Enum):
    NONE = "none"
    WARNING = "warning"
    REMOVE_CONTENT = "remove_content"
    SUSPEND_USER = "suspend_user"
    BAN_USER = "ban_user"


ACTIVE_STATUSES: tuple[ReportStatus, ...] = (ReportStatus.PENDING, ReportStatus.IN_REVIEW)
TERMINAL_STATUSES: tuple[ReportStatus, ...] = (ReportStatus.RESOLVED, ReportStatus.REJECTED)

# Queue ordering: higher rank first.
PRIORITY_RANK: dict[ReportPriority, int] = {
    ReportPriority.LOW: 0,
    ReportPriority.MEDIUM: 1,
    ReportPriority.HIGH: 2,
    ReportPriority.URGENT: 3,
}

# Actions that act on the account behind a reported profile.
ACCOUNT_ACTIONS: frozenset[ResolutionAction] = frozenset(
    {ResolutionAction.SUSPEND_USER, ResolutionAction.BAN_USER}
)
