"""
Reports domain — user-facing routes.

Routes:
  POST /api/v1/reports       Report a song, album, playlist, comment or user
  GET  /api/v1/reports/me    My reports (paginated, optional status filter)

Reports are confidential: the reported party is not notified.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts.dependencies import get_current_user
from app.database import get_db
from app.moderation.content import ContentStore, get_content_store
from app.rate_limit import REPORT_RATE_LIMIT, limiter
from app.reports import controller as ctrl
from app.reports.constants import ReportStatus
from app.reports.schemas import ReportListResponse, ReportRequest, ReportResponse
from shared.models.user import CurrentUser

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post(
    "",
    response_model=ReportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Report content or a user",
    description=(
        "Only one active report may exist per content item. A second report on "
        "the same item returns 409 until the first one is closed."
    ),
)
@limiter.limit(REPORT_RATE_LIMIT)
async def submit_report(
    request: Request,
    body: ReportRequest,
    current_user: CurrentUser = Depends(get_current_user),
    store: ContentStore = Depends(get_content_store),
    session: AsyncSession = Depends(get_db),
) -> ReportResponse:
    return await ctrl.submit_report(session, store, current_user.id, body)


@router.get(
    "/me",
    response_model=ReportListResponse,
    summary="List my reports",
)
async def list_my_reports(
    status_filter: ReportStatus | None = Query(None, alias="status", description="Filter by status"),
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> ReportListResponse:
    return await ctrl.list_my_reports(session, current_user.id, status_filter, page, size)
