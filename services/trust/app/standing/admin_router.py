"""
Account standing — admin-facing routes.

Routes:
  POST /api/v1/admin/accounts/{account_id}/suspend       Suspend (0 days = indefinite)
  POST /api/v1/admin/accounts/{account_id}/ban           Ban (blocks login)
  POST /api/v1/admin/accounts/{account_id}/reactivate    Clear suspension and ban
  POST /api/v1/admin/accounts/{account_id}/lives         Add lives (clamped at 10)
  POST /api/v1/admin/accounts/{account_id}/lives/reset   Reset lives to 3
  GET  /api/v1/admin/accounts/{account_id}/conduct       Conduct history + current lives

Requires: ADMIN or SUPER_ADMIN role.  Administrator targets are refused with 403.
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts.capabilities import Capability
from app.accounts.dependencies import require_capability
from app.database import get_db
from app.standing import controller as ctrl
from app.standing.schemas import (
    AddLivesRequest,
    BanRequest,
    ConductHistoryResponse,
    ReactivateRequest,
    ResetLivesRequest,
    StandingResponse,
    SuspendRequest,
)
from shared.models.user import CurrentUser

router = APIRouter(prefix="/admin/accounts", tags=["admin-standing"])

require_moderator = require_capability(Capability.MODERATE_ACCOUNTS)


@router.post(
    "/{account_id}/suspend",
    response_model=StandingResponse,
    summary="[Admin] Suspend an account",
    description="Suspended accounts can still log in but cannot upload. `days=0` is indefinite.",
)
async def suspend_account(
    account_id: uuid.UUID,
    body: SuspendRequest,
    admin: CurrentUser = Depends(require_moderator),
    session: AsyncSession = Depends(get_db),
) -> StandingResponse:
    return await ctrl.suspend_account(session, account_id, admin.id, body)


@router.post(
    "/{account_id}/ban",
    response_model=StandingResponse,
    summary="[Admin] Ban an account",
)
async def ban_account(
    account_id: uuid.UUID,
    body: BanRequest,
    admin: CurrentUser = Depends(require_moderator),
    session: AsyncSession = Depends(get_db),
) -> StandingResponse:
    return await ctrl.ban_account(session, account_id, admin.id, body)


@router.post(
    "/{account_id}/reactivate",
    response_model=StandingResponse,
    summary="[Admin] Reactivate an account",
)
async def reactivate_account(
    account_id: uuid.UUID,
    body: ReactivateRequest | None = Body(None),
    admin: CurrentUser = Depends(require_moderator),
    session: AsyncSession = Depends(get_db),
) -> StandingResponse:
    return await ctrl.reactivate_account(session, account_id, admin.id, body)


@router.post(
    "/{account_id}/lives",
    response_model=StandingResponse,
    summary="[Admin] Add lives",
    description="Lives are capped at 10. Lifts an automatic zero-lives ban.",
)
async def add_lives(
    account_id: uuid.UUID,
    body: AddLivesRequest,
    admin: CurrentUser = Depends(require_moderator),
    session: AsyncSession = Depends(get_db),
) -> StandingResponse:
    return await ctrl.add_lives(session, account_id, admin.id, body)


@router.post(
    "/{account_id}/lives/reset",
    response_model=StandingResponse,
    summary="[Admin] Reset lives to the default",
)
async def reset_lives(
    account_id: uuid.UUID,
    body: ResetLivesRequest | None = Body(None),
    admin: CurrentUser = Depends(require_moderator),
    session: AsyncSession = Depends(get_db),
) -> StandingResponse:
    return await ctrl.reset_lives(session, account_id, admin.id, body)


@router.get(
    "/{account_id}/conduct",
    response_model=ConductHistoryResponse,
    summary="[Admin] Conduct history",
)
async def get_conduct(
    account_id: uuid.UUID,
    admin: CurrentUser = Depends(require_moderator),
    session: AsyncSession = Depends(get_db),
) -> ConductHistoryResponse:
    return await ctrl.get_conduct(session, account_id)
