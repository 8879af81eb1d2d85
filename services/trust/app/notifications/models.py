"""
Notifications domain — SQLAlchemy ORM models.
"""
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from shared.database.postgres import Base
from shared.database.types import UTCDateTime, utcnow
from app.notifications.constants import NotificationType


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    target_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    # NULL = system / moderation.
    source_id: Mapped[uuid.UUID | None] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("accounts.id", ondelete="SET NULL"),
        nullable=True,
    )
    type: Mapped[NotificationType] = mapped_column(
        sa.Enum(
            NotificationType,
            name="notification_type",
            values_callable=lambda cls: [m.value for m in cls],
        ),
        nullable=False,
    )
    message: Mapped[str] = mapped_column(sa.Text, nullable=False)
    resource_type: Mapped[str | None] = mapped_column(sa.String(20), nullable=True)
    resource_id: Mapped[uuid.UUID | None] = mapped_column(sa.Uuid, nullable=True)
    is_read: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    is_hidden: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)

    __table_args__ = (
        sa.Index("idx_notifications_target_created", "target_id", "created_at"),
        sa.Index("idx_notifications_pair", "target_id", "source_id"),
    )
