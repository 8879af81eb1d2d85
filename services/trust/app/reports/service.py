"""
Reports domain — pure business logic (zero FastAPI imports).

State rules:
  submit:    reporter must exist and not be banned; no self-reports; one active
             report per content item system-wide
  assign:    least-loaded active admin (role=admin only), ties → earliest created;
             no admins → orphan (assigned_admin_id NULL)
  reassign:  super admin only; target must be an active admin or super admin
  visibility admins see and act on their assigned reports; super admins on all
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.database.locks import acquire_xact_lock
from shared.database.types import utcnow
from shared.models.pagination import page_offset
from app.accounts import service as accounts_svc
from app.accounts.capabilities import (
    Capability,
    can,
    ensure_staff,
    ensure_super_admin,
)
from app.accounts.models import Account
from app.exceptions import (
    AlreadyResolved,
    CannotReportOwnContent,
    ContentAlreadyUnderInvestigation,
    ContentNotFound,
    DuplicateActiveReport,
    InvalidAssignee,
    ReportNotActive,
    ReportNotAssignedToYou,
    ReportNotFound,
    ReportNotPending,
    UserBanned,
)
from app.moderation.content import ContentStore
from app.reports.constants import (
    ACTIVE_STATUSES,
    PRIORITY_RANK,
    TERMINAL_STATUSES,
    ContentType,
    ReportPriority,
    ReportReason,
    ReportStatus,
)
from app.reports.models import Report

logger = logging.getLogger(__name__)


# ── Internal helpers ───────────────────────────────────────────────────────────

def _content_lock_name(content_type: ContentType, content_id: uuid.UUID) -> str:
    return f"report:{ContentType(content_type).value}:{content_id}"


def _is_active(report: Report) -> bool:
    return report.status in ACTIVE_STATUSES


def _priority_order():
    return sa.case(
        {p: rank for p, rank in PRIORITY_RANK.items()},
        value=Report.priority,
        else_=0,
    )


async def resolve_owners(
    session: AsyncSession,
    store: ContentStore,
    content_type: ContentType,
    content_id: uuid.UUID,
) -> list[uuid.UUID]:
    """Owner account ids of a reportable item. Raises ContentNotFound when it is gone."""
    if content_type == ContentType.USER:
        if await accounts_svc.find_account(session, content_id) is None:
            raise ContentNotFound()
        return [content_id]
    owners = await store.owner_of(ContentType(content_type).value, content_id)
    if owners is None:
        raise ContentNotFound()
    return owners


async def get_report(
    session: AsyncSession, report_id: uuid.UUID, *, for_update: bool = False
) -> Report:
    stmt = sa.select(Report).where(Report.id == report_id)
    if for_update:
        stmt = stmt.with_for_update()
    report = (await session.execute(stmt)).scalar_one_or_none()
    if report is None:
        raise ReportNotFound()
    return report


async def get_staff_actor(session: AsyncSession, actor_id: uuid.UUID) -> Account:
    """The acting moderator as stored; the token's roles are not trusted here."""
    actor = await accounts_svc.get_account(session, actor_id)
    ensure_staff(actor.role)
    return actor


def ensure_can_act(actor: Account, report: Report) -> None:
    if can(actor.role, Capability.HANDLE_ANY_REPORT):
        return
    if report.assigned_admin_id != actor.id:
        raise ReportNotAssignedToYou()


def _visible_to(stmt: sa.Select, actor: Account) -> sa.Select:
    if can(actor.role, Capability.HANDLE_ANY_REPORT):
        return stmt
    return stmt.where(Report.assigned_admin_id == actor.id)


# ── Assignment ─────────────────────────────────────────────────────────────────

async def active_load_by_admin(session: AsyncSession) -> dict[uuid.UUID, int]:
    result = await session.execute(
        sa.select(Report.assigned_admin_id, sa.func.count())
        .where(
            Report.assigned_admin_id.is_not(None),
            Report.status.in_(ACTIVE_STATUSES),
        )
        .group_by(Report.assigned_admin_id)
    )
    return {admin_id: count for admin_id, count in result.all()}


async def pick_assignee(session: AsyncSession) -> uuid.UUID | None:
    """Least-loaded active admin; ties go to the earliest in enumeration order."""
    admins = await accounts_svc.list_active_admins(session, Capability.RECEIVE_AUTO_ASSIGNMENT)
    if not admins:
        return None
    loads = await active_load_by_admin(session)
    # min() keeps the first minimum, which is the earliest (created_at, id).
    chosen = min(admins, key=lambda a: loads.get(a.id, 0))
    return chosen.id


# ── Submit ─────────────────────────────────────────────────────────────────────

async def submit(
    session: AsyncSession,
    store: ContentStore,
    reporter_id: uuid.UUID,
    content_type: ContentType,
    content_id: uuid.UUID,
    reason: ReportReason,
    description: str | None = None,
    *,
    now: datetime | None = None,
) -> Report:
    reporter = await accounts_svc.get_account(session, reporter_id)
    if reporter.is_banned or not can(reporter.role, Capability.SUBMIT_REPORTS):
        raise UserBanned()

    owners = await resolve_owners(session, store, content_type, content_id)
    if reporter_id in owners:
        raise CannotReportOwnContent()

    await acquire_xact_lock(session, name=_content_lock_name(content_type, content_id))

    active = (
        await session.execute(
            sa.select(Report.reporter_id).where(
                Report.content_type == content_type,
                Report.content_id == content_id,
                Report.status.in_(ACTIVE_STATUSES),
            )
        )
    ).scalars().all()
    if reporter_id in active:
        raise DuplicateActiveReport()
    if active:
        raise ContentAlreadyUnderInvestigation()

    now = now or utcnow()
    report = Report(
        reporter_id=reporter_id,
        content_type=content_type,
        content_id=content_id,
        reason=reason,
        description=description,
        status=ReportStatus.PENDING,
        priority=ReportPriority.MEDIUM,
        assigned_admin_id=await pick_assignee(session),
        created_at=now,
        updated_at=now,
    )
    session.add(report)
    try:
        await session.flush()
    except IntegrityError as exc:
        # Lost a race the advisory lock could not cover (non-PostgreSQL backend).
        raise ContentAlreadyUnderInvestigation() from exc
    logger.info(
        "Report %s on %s/%s assigned to %s",
        report.id,
        ContentType(content_type).value,
        content_id,
        report.assigned_admin_id,
    )
    return report


# ── Admin transitions ──────────────────────────────────────────────────────────

async def reassign(
    session: AsyncSession,
    report_id: uuid.UUID,
    new_admin_id: uuid.UUID,
    actor_id: uuid.UUID,
) -> Report:
    actor = await get_staff_actor(session, actor_id)
    ensure_super_admin(actor.role)
    report = await get_report(session, report_id, for_update=True)
    if not _is_active(report):
        raise ReportNotActive()
    target = await accounts_svc.find_account(session, new_admin_id)
    if (
        target is None
        or not target.is_active
        or not can(target.role, Capability.RECEIVE_REASSIGNMENT)
    ):
        raise InvalidAssignee()
    previous = report.assigned_admin_id
    report.assigned_admin_id = target.id
    await session.flush()
    logger.info("Report %s reassigned %s -> %s by %s", report.id, previous, target.id, actor.id)
    return report


async def change_priority(
    session: AsyncSession,
    report_id: uuid.UUID,
    priority: ReportPriority,
    actor_id: uuid.UUID,
) -> Report:
    actor = await get_staff_actor(session, actor_id)
    report = await get_report(session, report_id, for_update=True)
    ensure_can_act(actor, report)
    if not _is_active(report):
        raise ReportNotActive()
    report.priority = priority
    await session.flush()
    return report


async def open_report(
    session: AsyncSession,
    report_id: uuid.UUID,
    actor_id: uuid.UUID,
) -> Report:
    actor = await get_staff_actor(session, actor_id)
    report = await get_report(session, report_id, for_update=True)
    ensure_can_act(actor, report)
    if report.status in TERMINAL_STATUSES:
        raise AlreadyResolved()
    if report.status != ReportStatus.PENDING:
        raise ReportNotPending()
    report.status = ReportStatus.IN_REVIEW
    await session.flush()
    return report


async def reject(
    session: AsyncSession,
    report_id: uuid.UUID,
    note: str | None,
    actor_id: uuid.UUID,
    *,
    now: datetime | None = None,
) -> Report:
    actor = await get_staff_actor(session, actor_id)
    report = await get_report(session, report_id, for_update=True)
    ensure_can_act(actor, report)
    if report.status in TERMINAL_STATUSES:
        raise AlreadyResolved()
    report.status = ReportStatus.REJECTED
    report.resolution_note = note
    report.resolved_by = actor.id
    report.resolved_at = now or utcnow()
    await session.flush()
    logger.info("Report %s rejected by %s", report.id, actor.id)
    return report


# ── Queries ────────────────────────────────────────────────────────────────────

async def list_my_reports(
    session: AsyncSession,
    reporter_id: uuid.UUID,
    *,
    status: ReportStatus | None = None,
    page: int,
    size: int,
) -> tuple[list[Report], int]:
    base = sa.select(Report).where(Report.reporter_id == reporter_id)
    if status is not None:
        base = base.where(Report.status == status)
    total = (
        await session.execute(sa.select(sa.func.count()).select_from(base.subquery()))
    ).scalar_one()
    result = await session.execute(
        base.order_by(Report.created_at.desc(), Report.id.desc())
        .offset(page_offset(page, size))
        .limit(size)
    )
    return list(result.scalars().all()), total


async def list_queue(
    session: AsyncSession,
    actor_id: uuid.UUID,
    *,
    status: ReportStatus | None = None,
    priority: ReportPriority | None = None,
    content_type: ContentType | None = None,
    page: int,
    size: int,
) -> tuple[list[Report], int]:
    """Admin work queue: highest priority first, newest first within a priority."""
    actor = await get_staff_actor(session, actor_id)
    base = _visible_to(sa.select(Report), actor)
    if status is not None:
        base = base.where(Report.status == status)
    if priority is not None:
        base = base.where(Report.priority == priority)
    if content_type is not None:
        base = base.where(Report.content_type == content_type)
    total = (
        await session.execute(sa.select(sa.func.count()).select_from(base.subquery()))
    ).scalar_one()
    result = await session.execute(
        base.order_by(_priority_order().desc(), Report.created_at.desc(), Report.id.desc())
        .offset(page_offset(page, size))
        .limit(size)
    )
    return list(result.scalars().all()), total


async def stats(
    session: AsyncSession,
    actor_id: uuid.UUID,
) -> dict[str, dict[str, int]]:
    """Report counts grouped by status, content type and priority."""
    actor = await get_staff_actor(session, actor_id)
    out: dict[str, dict[str, int]] = {}
    for key, column in (
        ("by_status", Report.status),
        ("by_content_type", Report.content_type),
        ("by_priority", Report.priority),
    ):
        stmt = _visible_to(sa.select(column, sa.func.count()).group_by(column), actor)
        rows = (await session.execute(stmt)).all()
        out[key] = {value.value: count for value, count in rows}
    out["totals"] = {
        "all": sum(out["by_status"].values()),
        "active": sum(out["by_status"].get(s.value, 0) for s in ACTIVE_STATUSES),
        "orphaned": 0,
    }
    if can(actor.role, Capability.HANDLE_ANY_REPORT):
        out["totals"]["orphaned"] = (
            await session.execute(
                sa.select(sa.func.count())
                .select_from(Report)
                .where(Report.assigned_admin_id.is_(None), Report.status.in_(ACTIVE_STATUSES))
            )
        ).scalar_one()
    return out


async def reports_for_content(
    session: AsyncSession,
    actor_id: uuid.UUID,
    content_type: ContentType,
    content_id: uuid.UUID,
) -> list[Report]:
    actor = await get_staff_actor(session, actor_id)
    stmt = _visible_to(
        sa.select(Report).where(
            Report.content_type == content_type,
            Report.content_id == content_id,
        ),
        actor,
    )
    result = await session.execute(stmt.order_by(Report.created_at.desc(), Report.id.desc()))
    return list(result.scalars().all())
