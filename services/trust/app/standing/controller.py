"""
Account standing — request orchestration.
"""
from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts.models import Account
from app.standing import service as svc
from app.standing.schemas import (
    AddLivesRequest,
    BanRequest,
    ConductEntryItem,
    ConductHistoryResponse,
    ReactivateRequest,
    ResetLivesRequest,
    StandingResponse,
    SuspendRequest,
)


def to_standing(account: Account) -> StandingResponse:
    return StandingResponse(
        account_id=account.id,
        nick=account.nick,
        role=account.role,
        standing=svc.standing_of(account),
        is_active=account.is_active,
        is_banned=account.is_banned,
        ban_reason=account.ban_reason,
        zero_lives_ban=account.zero_lives_ban,
        is_suspended=account.is_suspended,
        suspended_until=account.suspended_until,
        suspension_reason=account.suspension_reason,
        lives=account.lives,
        can_upload_content=account.can_upload_content,
    )


async def suspend_account(
    session: AsyncSession, account_id: uuid.UUID, admin_id: uuid.UUID, body: SuspendRequest
) -> StandingResponse:
    account = await svc.suspend(session, account_id, body.days, body.reason, admin_id)
    return to_standing(account)


async def ban_account(
    session: AsyncSession, account_id: uuid.UUID, admin_id: uuid.UUID, body: BanRequest
) -> StandingResponse:
    account = await svc.ban(session, account_id, body.reason, admin_id)
    return to_standing(account)


async def reactivate_account(
    session: AsyncSession, account_id: uuid.UUID, admin_id: uuid.UUID, body: ReactivateRequest | None
) -> StandingResponse:
    account = await svc.reactivate(session, account_id, admin_id, body.reason if body else None)
    return to_standing(account)


async def add_lives(
    session: AsyncSession, account_id: uuid.UUID, admin_id: uuid.UUID, body: AddLivesRequest
) -> StandingResponse:
    account = await svc.add_lives(session, account_id, body.amount, admin_id, body.reason)
    return to_standing(account)


async def reset_lives(
    session: AsyncSession, account_id: uuid.UUID, admin_id: uuid.UUID, body: ResetLivesRequest | None
) -> StandingResponse:
    account = await svc.reset_lives(session, account_id, admin_id, body.reason if body else None)
    return to_standing(account)


async def get_conduct(session: AsyncSession, account_id: uuid.UUID) -> ConductHistoryResponse:
    account, entries = await svc.conduct_history(session, account_id)
    return ConductHistoryResponse(
        account_id=account.id,
        lives=account.lives,
        entries=[ConductEntryItem.model_validate(e) for e in entries],
    )


async def login_check(session: AsyncSession, account_id: uuid.UUID) -> StandingResponse:
    return to_standing(await svc.login_check(session, account_id))


async def upload_check(session: AsyncSession, account_id: uuid.UUID) -> StandingResponse:
    return to_standing(await svc.upload_check(session, account_id))
