"""
Notifications domain — pure business logic (zero FastAPI imports).

Moderation messages append the moderator's note as a trailing
"Reason:" paragraph so the recipient sees why the action was taken.
"""
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from shared.database.types import utcnow
from shared.models.pagination import page_offset
from app.notifications.constants import CONTENT_TYPE_LABELS, NotificationType
from app.notifications.models import Notification


def compose_message(message: str, reason: str | None) -> str:
    if reason:
        return f"{message}\n\nReason: {reason}"
    return message


def create_notification(
    session: AsyncSession,
    *,
    target_id: uuid.UUID,
    type: NotificationType,
    message: str,
    source_id: uuid.UUID | None = None,
    resource_type: str | None = None,
    resource_id: uuid.UUID | None = None,
    now: datetime | None = None,
) -> Notification:
    notification = Notification(
        target_id=target_id,
        source_id=source_id,
        type=type,
        message=message,
        resource_type=resource_type,
        resource_id=resource_id,
        created_at=now or utcnow(),
    )
    session.add(notification)
    return notification


# ── Moderation messages ────────────────────────────────────────────────────────

def notify_warning(
    session: AsyncSession,
    target_id: uuid.UUID,
    content_type: str,
    reason: str | None,
    *,
    now: datetime | None = None,
) -> Notification:
    if content_type == "user":
        message = "You have received a warning from the moderation team."
    else:
        label = CONTENT_TYPE_LABELS.get(content_type, "content")
        message = f"You have received a warning about your {label}."
    return create_notification(
        session,
        target_id=target_id,
        type=NotificationType.MODERATION_WARNING,
        message=compose_message(message, reason),
        now=now,
    )


def notify_suspension(
    session: AsyncSession,
    target_id: uuid.UUID,
    days: int,
    reason: str | None,
    *,
    now: datetime | None = None,
) -> Notification:
    if days:
        message = f"Your account has been suspended for {days} days."
    else:
        message = "Your account has been suspended until further notice."
    return create_notification(
        session,
        target_id=target_id,
        type=NotificationType.MODERATION_SUSPENSION,
        message=compose_message(message, reason),
        now=now,
    )


def notify_ban(
    session: AsyncSession,
    target_id: uuid.UUID,
    reason: str | None,
    *,
    now: datetime | None = None,
) -> Notification:
    return create_notification(
        session,
        target_id=target_id,
        type=NotificationType.MODERATION_BAN,
        message=compose_message("Your account has been permanently deactivated.", reason),
        now=now,
    )


def notify_content_removed(
    session: AsyncSession,
    target_id: uuid.UUID,
    content_type: str,
    content_id: uuid.UUID,
    reason: str | None,
    *,
    now: datetime | None = None,
) -> Notification:
    label = CONTENT_TYPE_LABELS.get(content_type, "content")
    return create_notification(
        session,
        target_id=target_id,
        type=NotificationType.MODERATION_CONTENT_REMOVED,
        message=compose_message(
            f"Your {label} has been removed by the moderation team.", reason
        ),
        resource_type=content_type,
        resource_id=content_id,
        now=now,
    )


def notify_reactivation(
    session: AsyncSession,
    target_id: uuid.UUID,
    *,
    now: datetime | None = None,
) -> Notification:
    return create_notification(
        session,
        target_id=target_id,
        type=NotificationType.MODERATION_REACTIVATION,
        message="Your account has been reactivated. You can access the platform again.",
        now=now,
    )


# ── Visibility ─────────────────────────────────────────────────────────────────

async def hide_between(
    session: AsyncSession, user_a: uuid.UUID, user_b: uuid.UUID
) -> int:
    """Hide every notification exchanged between two users, in both directions."""
    result = await session.execute(
        sa.update(Notification)
        .where(
            sa.or_(
                sa.and_(Notification.target_id == user_a, Notification.source_id == user_b),
                sa.and_(Notification.target_id == user_b, Notification.source_id == user_a),
            )
        )
        .values(is_hidden=True)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0


async def list_for_target(
    session: AsyncSession,
    target_id: uuid.UUID,
    *,
    unread_only: bool = False,
    page: int,
    size: int,
) -> tuple[list[Notification], int]:
    base = sa.select(Notification).where(
        Notification.target_id == target_id,
        Notification.is_hidden.is_(False),
    )
    if unread_only:
        base = base.where(Notification.is_read.is_(False))

    count_result = await session.execute(
        sa.select(sa.func.count()).select_from(base.subquery())
    )
    total = count_result.scalar_one()

    result = await session.execute(
        base.order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset(page_offset(page, size))
        .limit(size)
    )
    return list(result.scalars().all()), total
