"""
Account standing — pure business logic (zero FastAPI imports).

An account is in exactly one of three states, plus an independent lives
counter:

  active     is_banned = False, is_suspended = False
  suspended  is_suspended = True; suspended_until NULL means indefinite.
             Login still works, uploads do not.
  banned     is_banned = True, is_active = False. Login is refused.

Suspensions expire lazily: every login / upload check runs
``expire_suspension_if_due`` first, so no background sweep is needed.

Every entry point that changes standing re-reads the target's role and goes
through the capability table; administrators are never moderated.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from shared.database.types import utcnow
from app.accounts import service as accounts_svc
from app.accounts.capabilities import ensure_moderatable
from app.accounts.constants import DEFAULT_LIVES, MAX_LIVES, MAX_SUSPENSION_DAYS, ConductAction
from app.accounts.models import Account, ConductEntry
from app.exceptions import (
    AccountSuspended,
    UploadsDisabled,
    UserBanned,
    UserInactive,
    ValidationFailed,
)
from app.notifications import service as notifications_svc

logger = logging.getLogger(__name__)

ZERO_LIVES_BAN_REASON = "Account deactivated after losing all lives (repeated violations)."
ZERO_LIVES_BAN_MESSAGE = (
    "You have lost all your lives through repeated violations. "
    "Your account has been permanently deactivated."
)


def standing_of(account: Account) -> str:
    if account.is_banned:
        return "banned"
    if account.is_suspended:
        return "suspended"
    if not account.is_active:
        return "inactive"
    return "active"


def _clear_suspension(account: Account) -> None:
    account.is_suspended = False
    account.suspended_until = None
    account.suspension_reason = None


def _lift_zero_lives_ban(account: Account) -> bool:
    """Undo an automatic zero-lives ban once the account has lives again."""
    if not (account.zero_lives_ban and account.lives > 0):
        return False
    account.is_active = True
    account.is_banned = False
    account.ban_reason = None
    account.zero_lives_ban = False
    return True


async def _moderatable_account(session: AsyncSession, account_id: uuid.UUID) -> Account:
    account = await accounts_svc.get_account(session, account_id, for_update=True)
    ensure_moderatable(account.role)
    return account


# ── Lazy expiry ────────────────────────────────────────────────────────────────

def expire_suspension_if_due(
    session: AsyncSession,
    account: Account,
    now: datetime | None = None,
) -> bool:
    """Clear a timed suspension whose end has passed. Returns True if it expired."""
    now = now or utcnow()
    if not (account.is_suspended and account.suspended_until and now > account.suspended_until):
        return False
    _clear_suspension(account)
    account.can_upload_content = True
    accounts_svc.record_conduct(
        session,
        account,
        ConductAction.SUSPENSION_EXPIRED,
        reason="Suspension period ended.",
        now=now,
    )
    logger.info("Suspension of account %s expired", account.id)
    return True


# ── Suspend / ban / reactivate ─────────────────────────────────────────────────

async def suspend(
    session: AsyncSession,
    account_id: uuid.UUID,
    days: int,
    reason: str | None,
    moderator_id: uuid.UUID | None = None,
    *,
    content_type: str | None = None,
    content_label: str | None = None,
    now: datetime | None = None,
) -> Account:
    """Suspend for ``days`` (0 = until reactivated). Does not block login."""
    if not 0 <= days <= MAX_SUSPENSION_DAYS:
        raise ValidationFailed(f"Suspension days must be between 0 and {MAX_SUSPENSION_DAYS}.")
    now = now or utcnow()
    account = await _moderatable_account(session, account_id)

    account.is_suspended = True
    account.suspended_until = now + timedelta(days=days) if days else None
    account.suspension_reason = reason
    account.can_upload_content = False
    accounts_svc.record_conduct(
        session,
        account,
        ConductAction.SUSPENSION,
        reason=reason,
        moderator_id=moderator_id,
        content_type=content_type,
        content_label=content_label,
        now=now,
    )
    notifications_svc.notify_suspension(session, account.id, days, reason, now=now)
    await session.flush()
    logger.info("Account %s suspended for %s days by %s", account.id, days or "indefinite", moderator_id)
    return account


def _apply_ban(
    session: AsyncSession,
    account: Account,
    reason: str | None,
    moderator_id: uuid.UUID | None,
    *,
    zero_lives: bool,
    content_type: str | None = None,
    content_label: str | None = None,
    now: datetime,
) -> None:
    account.is_banned = True
    account.ban_reason = reason
    account.zero_lives_ban = zero_lives
    account.is_active = False
    _clear_suspension(account)
    accounts_svc.record_conduct(
        session,
        account,
        ConductAction.BAN,
        reason=reason,
        moderator_id=moderator_id,
        content_type=content_type,
        content_label=content_label,
        now=now,
    )


async def ban(
    session: AsyncSession,
    account_id: uuid.UUID,
    reason: str | None,
    moderator_id: uuid.UUID | None = None,
    *,
    content_type: str | None = None,
    content_label: str | None = None,
    now: datetime | None = None,
) -> Account:
    now = now or utcnow()
    account = await _moderatable_account(session, account_id)
    _apply_ban(
        session,
        account,
        reason,
        moderator_id,
        zero_lives=False,
        content_type=content_type,
        content_label=content_label,
        now=now,
    )
    notifications_svc.notify_ban(session, account.id, reason, now=now)
    await session.flush()
    logger.info("Account %s banned by %s", account.id, moderator_id)
    return account


async def reactivate(
    session: AsyncSession,
    account_id: uuid.UUID,
    moderator_id: uuid.UUID | None = None,
    reason: str | None = None,
    *,
    now: datetime | None = None,
) -> Account:
    """Clear suspension and ban, restore uploads and login. Lives are left as they are."""
    now = now or utcnow()
    account = await _moderatable_account(session, account_id)

    _clear_suspension(account)
    account.is_banned = False
    account.ban_reason = None
    account.zero_lives_ban = False
    account.is_active = True
    account.can_upload_content = True
    accounts_svc.record_conduct(
        session,
        account,
        ConductAction.REACTIVATION,
        reason=reason or "Reactivated by an administrator.",
        moderator_id=moderator_id,
        now=now,
    )
    notifications_svc.notify_reactivation(session, account.id, now=now)
    await session.flush()
    logger.info("Account %s reactivated by %s", account.id, moderator_id)
    return account


# ── Lives ──────────────────────────────────────────────────────────────────────

def deduct_life(
    session: AsyncSession,
    account: Account,
    *,
    reason: str | None,
    moderator_id: uuid.UUID | None = None,
    content_type: str | None = None,
    content_label: str | None = None,
    now: datetime | None = None,
) -> bool:
    """
    Take one life for removed content and log it.  At zero lives the account
    is banned automatically (``zero_lives_ban``) and told so.

    Returns True when this deduction caused the ban.  Caller flushes.
    """
    ensure_moderatable(account.role)
    now = now or utcnow()
    account.lives = max(0, account.lives - 1)
    accounts_svc.record_conduct(
        session,
        account,
        ConductAction.CONTENT_REMOVED,
        reason=reason,
        moderator_id=moderator_id,
        content_type=content_type,
        content_label=content_label,
        now=now,
    )
    if account.lives > 0 or account.is_banned:
        return False
    _apply_ban(
        session,
        account,
        ZERO_LIVES_BAN_REASON,
        None,
        zero_lives=True,
        content_type=content_type,
        content_label=content_label,
        now=now,
    )
    notifications_svc.notify_ban(session, account.id, ZERO_LIVES_BAN_MESSAGE, now=now)
    logger.info("Account %s banned automatically at zero lives", account.id)
    return True


async def add_lives(
    session: AsyncSession,
    account_id: uuid.UUID,
    amount: int,
    moderator_id: uuid.UUID | None = None,
    reason: str | None = None,
    *,
    now: datetime | None = None,
) -> Account:
    if not 1 <= amount <= MAX_LIVES:
        raise ValidationFailed(f"Lives to add must be between 1 and {MAX_LIVES}.")
    now = now or utcnow()
    account = await _moderatable_account(session, account_id)

    account.lives = min(MAX_LIVES, account.lives + amount)
    _lift_zero_lives_ban(account)
    accounts_svc.record_conduct(
        session,
        account,
        ConductAction.LIVES_ADDED,
        reason=reason or f"{amount} lives added by an administrator.",
        moderator_id=moderator_id,
        now=now,
    )
    await session.flush()
    return account


async def reset_lives(
    session: AsyncSession,
    account_id: uuid.UUID,
    moderator_id: uuid.UUID | None = None,
    reason: str | None = None,
    *,
    now: datetime | None = None,
) -> Account:
    now = now or utcnow()
    account = await _moderatable_account(session, account_id)

    account.lives = DEFAULT_LIVES
    _lift_zero_lives_ban(account)
    accounts_svc.record_conduct(
        session,
        account,
        ConductAction.LIVES_RESET,
        reason=reason or "Lives reset by an administrator.",
        moderator_id=moderator_id,
        now=now,
    )
    await session.flush()
    return account


# ── Checks called by other services ───────────────────────────────────────────

async def login_check(
    session: AsyncSession,
    account_id: uuid.UUID,
    now: datetime | None = None,
) -> Account:
    account = await accounts_svc.get_account(session, account_id, for_update=True)
    expire_suspension_if_due(session, account, now)
    await session.flush()
    if account.is_banned:
        raise UserBanned()
    if not account.is_active:
        raise UserInactive()
    return account


async def upload_check(
    session: AsyncSession,
    account_id: uuid.UUID,
    now: datetime | None = None,
) -> Account:
    account = await accounts_svc.get_account(session, account_id, for_update=True)
    expire_suspension_if_due(session, account, now)
    await session.flush()
    if account.is_banned:
        raise UserBanned()
    if not account.is_active:
        raise UserInactive()
    if account.is_suspended:
        raise AccountSuspended()
    if not account.can_upload_content:
        raise UploadsDisabled()
    return account


# ── History ────────────────────────────────────────────────────────────────────

async def conduct_history(
    session: AsyncSession,
    account_id: uuid.UUID,
) -> tuple[Account, list[ConductEntry]]:
    account = await accounts_svc.get_account(session, account_id)
    entries = await accounts_svc.get_conduct_history(session, account_id)
    return account, entries
