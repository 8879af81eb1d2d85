"""
Reports domain — request orchestration.
"""
from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.moderation.content import ContentStore
from app.reports import service as svc
from app.reports.constants import ContentType, ReportPriority, ReportStatus
from app.reports.schemas import (
    AdminReportItem,
    AdminReportListResponse,
    AssigneeRequest,
    PriorityRequest,
    RejectRequest,
    ReportListResponse,
    ReportRequest,
    ReportResponse,
    ReportStatsResponse,
)


async def submit_report(
    session: AsyncSession,
    store: ContentStore,
    reporter_id: uuid.UUID,
    body: ReportRequest,
) -> ReportResponse:
    report = await svc.submit(
        session,
        store,
        reporter_id,
        body.content_type,
        body.content_id,
        body.reason,
        body.description,
    )
    return ReportResponse.model_validate(report)


async def list_my_reports(
    session: AsyncSession,
    reporter_id: uuid.UUID,
    status_filter: ReportStatus | None,
    page: int,
    size: int,
) -> ReportListResponse:
    rows, total = await svc.list_my_reports(
        session, reporter_id, status=status_filter, page=page, size=size
    )
    return ReportListResponse(
        items=[ReportResponse.model_validate(r) for r in rows],
        total=total,
        page=page,
        size=size,
    )


async def admin_list_reports(
    session: AsyncSession,
    admin_id: uuid.UUID,
    *,
    status_filter: ReportStatus | None,
    priority: ReportPriority | None,
    content_type: ContentType | None,
    page: int,
    size: int,
) -> AdminReportListResponse:
    rows, total = await svc.list_queue(
        session,
        admin_id,
        status=status_filter,
        priority=priority,
        content_type=content_type,
        page=page,
        size=size,
    )
    return AdminReportListResponse(
        items=[AdminReportItem.model_validate(r) for r in rows],
        total=total,
        page=page,
        size=size,
    )


async def admin_stats(session: AsyncSession, admin_id: uuid.UUID) -> ReportStatsResponse:
    data = await svc.stats(session, admin_id)
    return ReportStatsResponse(
        by_status=data["by_status"],
        by_content_type=data["by_content_type"],
        by_priority=data["by_priority"],
        total=data["totals"]["all"],
        active=data["totals"]["active"],
        orphaned=data["totals"]["orphaned"],
    )


async def admin_reports_for_content(
    session: AsyncSession,
    admin_id: uuid.UUID,
    content_type: ContentType,
    content_id: uuid.UUID,
) -> list[AdminReportItem]:
    rows = await svc.reports_for_content(session, admin_id, content_type, content_id)
    return [AdminReportItem.model_validate(r) for r in rows]


async def admin_change_priority(
    session: AsyncSession, report_id: uuid.UUID, admin_id: uuid.UUID, body: PriorityRequest
) -> AdminReportItem:
    report = await svc.change_priority(session, report_id, body.priority, admin_id)
    return AdminReportItem.model_validate(report)


async def admin_open_report(
    session: AsyncSession, report_id: uuid.UUID, admin_id: uuid.UUID
) -> AdminReportItem:
    report = await svc.open_report(session, report_id, admin_id)
    return AdminReportItem.model_validate(report)


async def admin_reject_report(
    session: AsyncSession, report_id: uuid.UUID, admin_id: uuid.UUID, body: RejectRequest | None
) -> AdminReportItem:
    report = await svc.reject(session, report_id, body.note if body else None, admin_id)
    return AdminReportItem.model_validate(report)


async def admin_reassign(
    session: AsyncSession, report_id: uuid.UUID, admin_id: uuid.UUID, body: AssigneeRequest
) -> AdminReportItem:
    report = await svc.reassign(session, report_id, body.admin_id, admin_id)
    return AdminReportItem.model_validate(report)
