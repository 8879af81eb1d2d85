"""
Accounts domain — enums and limits.
"""
from __future__ import annotations

import enum

DEFAULT_LIVES: int = 3
MAX_LIVES: int = 10
MAX_SUSPENSION_DAYS: int = 365

# Longest reason accepted on standing actions (suspend / ban / reactivate).
REASON_MAX_LENGTH: int = 500


class ConductAction(str, enum.Enum):
    WARNING = "warning"
    CONTENT_REMOVED = "content_removed"
    SUSPENSION = "suspension"
    BAN = "ban"
    SUSPENSION_EXPIRED = "suspension_expired"
    REACTIVATION = "reactivation"
    LIVES_ADDED = "lives_added"
    LIVES_RESET = "lives_reset"
