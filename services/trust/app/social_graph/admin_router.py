"""
Social graph domain — admin-facing routes.

Routes:
  POST /api/v1/admin/accounts/{account_id}/recompute-counters   Recount follower/following

Requires: SUPER_ADMIN role.
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts.capabilities import Capability
from app.accounts.dependencies import require_capability
from app.database import get_db
from app.social_graph import controller as ctrl
from app.social_graph.schemas import CounterResponse
from shared.models.user import CurrentUser

router = APIRouter(prefix="/admin/accounts", tags=["admin-social-graph"])


@router.post(
    "/{account_id}/recompute-counters",
    response_model=CounterResponse,
    summary="[Super admin] Recompute follower/following counters",
    description="Counts are rebuilt from the follow edges; stored values are ignored.",
)
async def recompute_counters(
    account_id: uuid.UUID,
    admin: CurrentUser = Depends(require_capability(Capability.MAINTAIN_COUNTERS)),
    session: AsyncSession = Depends(get_db),
) -> CounterResponse:
    return await ctrl.recompute_counters(session, account_id)
