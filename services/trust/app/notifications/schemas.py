"""
Notifications domain — Pydantic V2 response schemas.
"""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from shared.models.pagination import PaginatedResponse
from app.notifications.constants import NotificationType


class NotificationItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    source_id: uuid.UUID | None
    type: NotificationType
    message: str
    resource_type: str | None
    resource_id: uuid.UUID | None
    is_read: bool
    created_at: datetime


NotificationListResponse = PaginatedResponse[NotificationItem]
