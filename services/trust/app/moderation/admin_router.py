"""
Resolution engine — admin-facing routes.

Routes:
  POST /api/v1/admin/reports/{report_id}/resolve              Close a report with an action
  POST /api/v1/admin/reports/{report_id}/retry-side-effects   Re-run a failed content deletion

Requires: ADMIN or SUPER_ADMIN role.  Admins may only resolve reports assigned
to them.
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts.dependencies import require_admin
from app.database import get_db
from app.moderation import controller as ctrl
from app.moderation.content import ContentStore, get_content_store
from app.moderation.schemas import ResolutionResponse, ResolveRequest
from shared.models.user import CurrentUser

router = APIRouter(prefix="/admin/reports", tags=["admin-moderation"])


@router.post(
    "/{report_id}/resolve",
    response_model=ResolutionResponse,
    summary="[Admin] Resolve a report",
    description=(
        "Actions: `none`, `warning`, `remove_content` (songs, albums, playlists, comments), "
        "`suspend_user` / `ban_user` (reported profiles only). If deleting the content "
        "fails, the resolution is still recorded and `degraded` is true."
    ),
)
async def resolve_report(
    report_id: uuid.UUID,
    body: ResolveRequest,
    admin: CurrentUser = Depends(require_admin),
    store: ContentStore = Depends(get_content_store),
    session: AsyncSession = Depends(get_db),
) -> ResolutionResponse:
    return await ctrl.resolve_report(session, store, report_id, admin.id, body)


@router.post(
    "/{report_id}/retry-side-effects",
    response_model=ResolutionResponse,
    summary="[Admin] Retry a failed content removal",
)
async def retry_side_effects(
    report_id: uuid.UUID,
    admin: CurrentUser = Depends(require_admin),
    store: ContentStore = Depends(get_content_store),
    session: AsyncSession = Depends(get_db),
) -> ResolutionResponse:
    return await ctrl.retry_side_effects(session, store, report_id, admin.id)
