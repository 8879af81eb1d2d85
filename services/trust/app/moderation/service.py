"""
Resolution engine — pure business logic (zero FastAPI imports).

State machine:

  pending --open--> in_review --resolve--> resolved
  pending ------------------- --resolve--> resolved
  pending | in_review --reject--> rejected          (app.reports.service)

resolved and rejected are terminal.

``resolve`` validates everything (report state, the resolver's right to act,
action / content-type compatibility, admin immunity) before it mutates
anything.  Content deletion is the only call that leaves this database; if it
fails the resolution still stands, the error is kept in ``side_effect_error``
and the caller gets a degraded success.  ``retry_side_effects`` re-runs it.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from shared.database.types import utcnow
from app.accounts import service as accounts_svc
from app.accounts.capabilities import Capability, can, ensure_moderatable
from app.accounts.constants import MAX_SUSPENSION_DAYS, ConductAction
from app.exceptions import (
    ActionNotApplicable,
    AlreadyResolved,
    NoSideEffectToRetry,
    ValidationFailed,
)
from app.moderation.content import ContentStore, ContentStoreError
from app.notifications import service as notifications_svc
from app.reports import service as reports_svc
from app.reports.constants import (
    ACCOUNT_ACTIONS,
    TERMINAL_STATUSES,
    ContentType,
    ReportStatus,
    ResolutionAction,
)
from app.reports.models import Report
from app.standing import service as standing_svc

logger = logging.getLogger(__name__)

DEFAULT_REMOVAL_REASON = "Community guidelines violation."
DEFAULT_WARNING_REASON = "Warning issued for reported content."


@dataclass
class ResolutionOutcome:
    report: Report
    degraded: bool = False
    # Owners of removed content, looked up before deletion.
    owner_ids: list[uuid.UUID] | None = None


def _check_action_applies(action: ResolutionAction, content_type: ContentType) -> None:
    is_user = ContentType(content_type) == ContentType.USER
    if action == ResolutionAction.REMOVE_CONTENT and is_user:
        raise ActionNotApplicable("Accounts cannot be removed as content; suspend or ban instead.")
    if action in ACCOUNT_ACTIONS and not is_user:
        raise ActionNotApplicable("Suspend and ban only apply to reported user profiles.")


async def _owners_or_empty(store: ContentStore, report: Report) -> list[uuid.UUID]:
    if ContentType(report.content_type) == ContentType.USER:
        return [report.content_id]
    owners = await store.owner_of(ContentType(report.content_type).value, report.content_id)
    return owners or []


async def _remove_content(
    session: AsyncSession,
    store: ContentStore,
    report: Report,
    note: str | None,
    resolver_id: uuid.UUID,
    now: datetime,
) -> list[uuid.UUID]:
    """
    Look up owners, delete the content, then tell each owner and take a life
    from user-role owners.  Raises ContentStoreError if either call fails;
    nothing is charged to the owners in that case.
    """
    content_type = ContentType(report.content_type).value
    owner_ids = await store.owner_of(content_type, report.content_id) or []
    await store.hard_delete(content_type, report.content_id)

    reason = note or DEFAULT_REMOVAL_REASON
    for owner in await accounts_svc.get_accounts(session, owner_ids):
        if can(owner.role, Capability.ACCRUES_CONDUCT):
            banned = standing_svc.deduct_life(
                session,
                owner,
                reason=reason,
                moderator_id=resolver_id,
                content_type=content_type,
                now=now,
            )
            if banned:
                continue
            message_reason = f"{reason} You have {owner.lives} lives left."
        else:
            message_reason = reason
        notifications_svc.notify_content_removed(
            session, owner.id, content_type, report.content_id, message_reason, now=now
        )
    return owner_ids


async def _warn_owners(
    session: AsyncSession,
    store: ContentStore,
    report: Report,
    note: str | None,
    resolver_id: uuid.UUID,
    now: datetime,
) -> None:
    content_type = ContentType(report.content_type).value
    owner_ids = await _owners_or_empty(store, report)
    reason = note or DEFAULT_WARNING_REASON
    for owner in await accounts_svc.get_accounts(session, owner_ids):
        if can(owner.role, Capability.ACCRUES_CONDUCT):
            accounts_svc.record_conduct(
                session,
                owner,
                ConductAction.WARNING,
                reason=reason,
                moderator_id=resolver_id,
                content_type=content_type,
                now=now,
            )
        notifications_svc.notify_warning(session, owner.id, content_type, reason, now=now)


async def resolve(
    session: AsyncSession,
    store: ContentStore,
    report_id: uuid.UUID,
    action: ResolutionAction,
    note: str | None,
    resolver_id: uuid.UUID,
    *,
    suspension_days: int = 0,
    now: datetime | None = None,
) -> ResolutionOutcome:
    # ── Validation (no mutation above this line) ──────────────────────────────
    resolver = await reports_svc.get_staff_actor(session, resolver_id)
    report = await reports_svc.get_report(session, report_id, for_update=True)
    if report.status in TERMINAL_STATUSES:
        raise AlreadyResolved()
    reports_svc.ensure_can_act(resolver, report)
    _check_action_applies(action, report.content_type)
    if action in ACCOUNT_ACTIONS:
        if not 0 <= suspension_days <= MAX_SUSPENSION_DAYS:
            raise ValidationFailed(
                f"Suspension days must be between 0 and {MAX_SUSPENSION_DAYS}."
            )
        target = await accounts_svc.get_account(session, report.content_id)
        ensure_moderatable(target.role)

    now = now or utcnow()
    outcome = ResolutionOutcome(report=report)

    # ── Side effects ──────────────────────────────────────────────────────────
    if action == ResolutionAction.REMOVE_CONTENT:
        try:
            outcome.owner_ids = await _remove_content(
                session, store, report, note, resolver.id, now
            )
        except ContentStoreError as exc:
            logger.error(
                "Content removal for report %s failed; resolution kept: %s", report.id, exc
            )
            report.side_effect_error = str(exc)
            outcome.degraded = True
    elif action == ResolutionAction.SUSPEND_USER:
        await standing_svc.suspend(
            session,
            report.content_id,
            suspension_days,
            note,
            resolver.id,
            content_type=ContentType.USER.value,
            now=now,
        )
    elif action == ResolutionAction.BAN_USER:
        await standing_svc.ban(
            session,
            report.content_id,
            note,
            resolver.id,
            content_type=ContentType.USER.value,
            now=now,
        )
    elif action == ResolutionAction.WARNING:
        try:
            await _warn_owners(session, store, report, note, resolver.id, now)
        except ContentStoreError as exc:
            logger.error("Owner lookup for warning on report %s failed: %s", report.id, exc)
            report.side_effect_error = str(exc)
            outcome.degraded = True

    report.status = ReportStatus.RESOLVED
    report.resolution_action = action
    report.resolution_note = note
    report.resolved_by = resolver.id
    report.resolved_at = now
    await session.flush()
    logger.info(
        "Report %s resolved with %s by %s%s",
        report.id,
        ResolutionAction(action).value,
        resolver.id,
        " (degraded)" if outcome.degraded else "",
    )
    return outcome


async def retry_side_effects(
    session: AsyncSession,
    store: ContentStore,
    report_id: uuid.UUID,
    actor_id: uuid.UUID,
    *,
    now: datetime | None = None,
) -> ResolutionOutcome:
    """Re-run the content deletion of a resolved report whose side effect failed."""
    actor = await reports_svc.get_staff_actor(session, actor_id)
    report = await reports_svc.get_report(session, report_id, for_update=True)
    reports_svc.ensure_can_act(actor, report)
    if (
        report.status != ReportStatus.RESOLVED
        or report.resolution_action != ResolutionAction.REMOVE_CONTENT
        or not report.side_effect_error
    ):
        raise NoSideEffectToRetry()

    now = now or utcnow()
    outcome = ResolutionOutcome(report=report)
    try:
        outcome.owner_ids = await _remove_content(
            session, store, report, report.resolution_note, actor.id, now
        )
        report.side_effect_error = None
    except ContentStoreError as exc:
        logger.error("Retry of content removal for report %s failed: %s", report.id, exc)
        report.side_effect_error = str(exc)
        outcome.degraded = True
    await session.flush()
    return outcome
