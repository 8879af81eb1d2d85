"""
Reports domain — admin-facing routes.

Routes:
  GET   /api/v1/admin/reports                              Work queue (priority desc, newest first)
  GET   /api/v1/admin/reports/stats                        Counts by status / type / priority
  GET   /api/v1/admin/reports/content/{type}/{content_id}  Every report on one item
  PATCH /api/v1/admin/reports/{report_id}/priority         Change priority (active reports)
  POST  /api/v1/admin/reports/{report_id}/open             pending → in_review
  POST  /api/v1/admin/reports/{report_id}/reject           pending | in_review → rejected
  PUT   /api/v1/admin/reports/{report_id}/assignee         Reassign (super admin only)

Requires: ADMIN or SUPER_ADMIN role.  Admins only see reports assigned to them.
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts.dependencies import require_admin, require_super_admin
from app.database import get_db
from app.reports import controller as ctrl
from app.reports.constants import ContentType, ReportPriority, ReportStatus
from app.reports.schemas import (
    AdminReportItem,
    AdminReportListResponse,
    AssigneeRequest,
    PriorityRequest,
    RejectRequest,
    ReportStatsResponse,
)
from shared.models.user import CurrentUser

router = APIRouter(prefix="/admin/reports", tags=["admin-reports"])


@router.get(
    "",
    response_model=AdminReportListResponse,
    summary="[Admin] Report queue",
)
async def list_reports(
    status_filter: ReportStatus | None = Query(None, alias="status", description="Filter by status"),
    priority: ReportPriority | None = Query(None, description="Filter by priority"),
    content_type: ContentType | None = Query(None, description="Filter by content type"),
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    admin: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> AdminReportListResponse:
    return await ctrl.admin_list_reports(
        session,
        admin.id,
        status_filter=status_filter,
        priority=priority,
        content_type=content_type,
        page=page,
        size=size,
    )


@router.get(
    "/stats",
    response_model=ReportStatsResponse,
    summary="[Admin] Report statistics",
)
async def report_stats(
    admin: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> ReportStatsResponse:
    return await ctrl.admin_stats(session, admin.id)


@router.get(
    "/content/{content_type}/{content_id}",
    response_model=list[AdminReportItem],
    summary="[Admin] All reports on one content item",
)
async def reports_for_content(
    content_type: ContentType,
    content_id: uuid.UUID,
    admin: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> list[AdminReportItem]:
    return await ctrl.admin_reports_for_content(session, admin.id, content_type, content_id)


@router.patch(
    "/{report_id}/priority",
    response_model=AdminReportItem,
    summary="[Admin] Change report priority",
)
async def change_priority(
    report_id: uuid.UUID,
    body: PriorityRequest,
    admin: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> AdminReportItem:
    return await ctrl.admin_change_priority(session, report_id, admin.id, body)


@router.post(
    "/{report_id}/open",
    response_model=AdminReportItem,
    summary="[Admin] Start reviewing a report",
)
async def open_report(
    report_id: uuid.UUID,
    admin: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> AdminReportItem:
    return await ctrl.admin_open_report(session, report_id, admin.id)


@router.post(
    "/{report_id}/reject",
    response_model=AdminReportItem,
    summary="[Admin] Reject a report",
    description="Closes the report without action. Rejected reports cannot be reopened.",
)
async def reject_report(
    report_id: uuid.UUID,
    body: RejectRequest | None = Body(None),
    admin: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> AdminReportItem:
    return await ctrl.admin_reject_report(session, report_id, admin.id, body)


@router.put(
    "/{report_id}/assignee",
    response_model=AdminReportItem,
    summary="[Super admin] Reassign a report",
    description="The new assignee must be an active admin or super admin.",
)
async def reassign_report(
    report_id: uuid.UUID,
    body: AssigneeRequest,
    admin: CurrentUser = Depends(require_super_admin),
    session: AsyncSession = Depends(get_db),
) -> AdminReportItem:
    return await ctrl.admin_reassign(session, report_id, admin.id, body)
