"""
Accounts domain — pure business logic (zero FastAPI imports).

Lookups shared by every other domain plus the conduct log writer.  Standing
transitions live in app.standing.service; this module never changes flags.
"""
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from shared.constants import Role
from shared.database.types import utcnow
from app.accounts.capabilities import Capability, roles_with
from app.accounts.constants import ConductAction
from app.accounts.models import Account, ConductEntry
from app.exceptions import AccountNotFound


async def get_account(
    session: AsyncSession,
    account_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> Account:
    stmt = sa.select(Account).where(Account.id == account_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    account = result.scalar_one_or_none()
    if account is None:
        raise AccountNotFound()
    return account


async def find_account(session: AsyncSession, account_id: uuid.UUID) -> Account | None:
    result = await session.execute(sa.select(Account).where(Account.id == account_id))
    return result.scalar_one_or_none()


async def get_accounts(
    session: AsyncSession, account_ids: list[uuid.UUID]
) -> list[Account]:
    """Existing accounts among ``account_ids``; unknown ids are skipped."""
    if not account_ids:
        return []
    result = await session.execute(sa.select(Account).where(Account.id.in_(account_ids)))
    return list(result.scalars().all())


async def list_active_admins(
    session: AsyncSession,
    capability: Capability = Capability.RECEIVE_AUTO_ASSIGNMENT,
) -> list[Account]:
    """Active accounts whose role grants ``capability``, in stable enumeration order."""
    result = await session.execute(
        sa.select(Account)
        .where(
            Account.role.in_(roles_with(capability)),
            Account.is_active.is_(True),
        )
        .order_by(Account.created_at.asc(), Account.id.asc())
    )
    return list(result.scalars().all())


async def create_account(
    session: AsyncSession,
    *,
    nick: str,
    email: str,
    role: Role = Role.USER,
    created_at: datetime | None = None,
) -> Account:
    account = Account(
        nick=nick,
        email=email.lower(),
        role=role,
        created_at=created_at or utcnow(),
    )
    session.add(account)
    await session.flush()
    return account


def record_conduct(
    session: AsyncSession,
    account: Account,
    action: ConductAction,
    *,
    reason: str | None = None,
    moderator_id: uuid.UUID | None = None,
    content_type: str | None = None,
    content_label: str | None = None,
    now: datetime | None = None,
) -> ConductEntry:
    """Append to the account's conduct log. Caller flushes."""
    entry = ConductEntry(
        account_id=account.id,
        action=action,
        reason=reason,
        moderator_id=moderator_id,
        content_type=content_type,
        content_label=content_label,
        lives_remaining=account.lives,
        created_at=now or utcnow(),
    )
    session.add(entry)
    return entry


async def get_conduct_history(
    session: AsyncSession, account_id: uuid.UUID
) -> list[ConductEntry]:
    result = await session.execute(
        sa.select(ConductEntry)
        .where(ConductEntry.account_id == account_id)
        .order_by(ConductEntry.seq.asc())
    )
    return list(result.scalars().all())
