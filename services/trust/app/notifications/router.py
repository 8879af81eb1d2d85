"""
Notifications domain — user-facing routes.

Routes:
  GET /api/v1/notifications/me   My notifications, newest first (hidden ones excluded)
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts.dependencies import get_current_user
from app.database import get_db
from app.notifications import service as svc
from app.notifications.schemas import NotificationItem, NotificationListResponse
from shared.models.user import CurrentUser

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get(
    "/me",
    response_model=NotificationListResponse,
    summary="List my notifications",
    description="Notifications hidden by a block between the parties are never returned.",
)
async def list_my_notifications(
    unread_only: bool = Query(False, description="Only unread notifications"),
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> NotificationListResponse:
    rows, total = await svc.list_for_target(
        session, current_user.id, unread_only=unread_only, page=page, size=size
    )
    return NotificationListResponse(
        items=[NotificationItem.model_validate(n) for n in rows],
        total=total,
        page=page,
        size=size,
    )
