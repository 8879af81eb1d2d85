"""
Resolution engine — request orchestration.
"""
from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.moderation import service as svc
from app.moderation.content import ContentStore
from app.moderation.schemas import ResolutionResponse, ResolveRequest
from app.reports.schemas import AdminReportItem


def _to_response(outcome: svc.ResolutionOutcome) -> ResolutionResponse:
    return ResolutionResponse(
        report=AdminReportItem.model_validate(outcome.report),
        degraded=outcome.degraded,
        owner_ids=outcome.owner_ids or [],
    )


async def resolve_report(
    session: AsyncSession,
    store: ContentStore,
    report_id: uuid.UUID,
    admin_id: uuid.UUID,
    body: ResolveRequest,
) -> ResolutionResponse:
    outcome = await svc.resolve(
        session,
        store,
        report_id,
        body.action,
        body.note,
        admin_id,
        suspension_days=body.suspension_days,
    )
    return _to_response(outcome)


async def retry_side_effects(
    session: AsyncSession,
    store: ContentStore,
    report_id: uuid.UUID,
    admin_id: uuid.UUID,
) -> ResolutionResponse:
    outcome = await svc.retry_side_effects(session, store, report_id, admin_id)
    return _to_response(outcome)
