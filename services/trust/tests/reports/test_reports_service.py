import uuid
from datetime import timedelta

import pytest
import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError

from app.accounts import capabilities
from app.accounts.capabilities import Capability
from app.exceptions import (
    AlreadyResolved,
    CannotReportOwnContent,
    ContentAlreadyUnderInvestigation,
    ContentNotFound,
    DuplicateActiveReport,
    InvalidAssignee,
    ReportNotActive,
    ReportNotAssignedToYou,
    ReportNotPending,
    SuperAdminAccessRequired,
    UserBanned,
)
from app.reports import service as svc
from app.reports.constants import (
    ContentType,
    ReportPriority,
    ReportReason,
    ReportStatus,
)
from app.reports.models import Report
from shared.constants import Role
from tests.conftest import T0


def _active_report(content_type: str, reporter_id, admin_id, **fields) -> Report:
    return Report(
        reporter_id=reporter_id,
        content_type=ContentType(content_type),
        content_id=uuid.uuid4(),
        reason=ReportReason.SPAM,
        status=fields.pop("status", ReportStatus.PENDING),
        assigned_admin_id=admin_id,
        **fields,
    )


# ── Assignment ─────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_submit_assigns_least_loaded_admin(db_session, make_account, content_store) -> None:
    reporter = await make_account("reporter")
    artist = await make_account("artist")
    a1 = await make_account("a1", Role.ADMIN)
    a2 = await make_account("a2", Role.ADMIN)
    db_session.add_all([
        _active_report("song", reporter.id, a1.id),
        _active_report("album", reporter.id, a1.id),
    ])
    await db_session.flush()
    song = content_store.add("song", artist.id)

    report = await svc.submit(
        db_session, content_store, reporter.id, ContentType.SONG, song, ReportReason.SPAM
    )

    assert report.assigned_admin_id == a2.id
    assert report.status == ReportStatus.PENDING
    assert report.priority == ReportPriority.MEDIUM


@pytest.mark.asyncio
async def test_assignment_ties_go_to_earliest_admin(db_session, make_account, content_store) -> None:
    reporter = await make_account("reporter")
    artist = await make_account("artist")
    late = await make_account("late", Role.ADMIN, created_at=T0 - timedelta(days=1))
    early = await make_account("early", Role.ADMIN, created_at=T0 - timedelta(days=30))
    song = content_store.add("song", artist.id)

    report = await svc.submit(
        db_session, content_store, reporter.id, ContentType.SONG, song, ReportReason.COPYRIGHT
    )

    assert report.assigned_admin_id == early.id
    assert late.id != early.id


@pytest.mark.asyncio
async def test_super_admins_and_inactive_admins_are_not_auto_assigned(
    db_session, make_account, content_store
) -> None:
    reporter = await make_account("reporter")
    artist = await make_account("artist")
    await make_account("boss", Role.SUPER_ADMIN)
    await make_account("gone", Role.ADMIN, is_active=False)
    song = content_store.add("song", artist.id)

    report = await svc.submit(
        db_session, content_store, reporter.id, ContentType.SONG, song, ReportReason.SPAM
    )

    assert report.assigned_admin_id is None


@pytest.mark.asyncio
async def test_auto_assignment_follows_the_capability_table(
    db_session, make_account, content_store, monkeypatch
) -> None:
    reporter = await make_account("reporter")
    artist = await make_account("artist")
    boss = await make_account("boss", Role.SUPER_ADMIN)
    monkeypatch.setitem(
        capabilities._CAPABILITIES,
        Role.SUPER_ADMIN,
        capabilities._CAPABILITIES[Role.SUPER_ADMIN] | {Capability.RECEIVE_AUTO_ASSIGNMENT},
    )
    song = content_store.add("song", artist.id)

    report = await svc.submit(
        db_session, content_store, reporter.id, ContentType.SONG, song, ReportReason.SPAM
    )

    assert report.assigned_admin_id == boss.id


@pytest.mark.asyncio
async def test_load_stays_balanced_across_many_submissions(
    db_session, make_account, content_store
) -> None:
    reporter = await make_account("reporter")
    artist = await make_account("artist")
    admins = [await make_account(f"admin{i}", Role.ADMIN) for i in range(3)]

    for _ in range(10):
        song = content_store.add("song", artist.id)
        await svc.submit(
            db_session, content_store, reporter.id, ContentType.SONG, song, ReportReason.SPAM
        )
        loads = await svc.active_load_by_admin(db_session)
        counts = [loads.get(a.id, 0) for a in admins]
        assert max(counts) - min(counts) <= 1


# ── Intake validation ──────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_self_report_is_forbidden(db_session, make_account, content_store) -> None:
    artist = await make_account("artist")
    song = content_store.add("song", artist.id)
    with pytest.raises(CannotReportOwnContent):
        await svc.submit(
            db_session, content_store, artist.id, ContentType.SONG, song, ReportReason.SPAM
        )
    with pytest.raises(CannotReportOwnContent):
        await svc.submit(
            db_session, content_store, artist.id, ContentType.USER, artist.id, ReportReason.SPAM
        )


@pytest.mark.asyncio
async def test_missing_content_is_not_found(db_session, make_account, content_store) -> None:
    reporter = await make_account("reporter")
    with pytest.raises(ContentNotFound):
        await svc.submit(
            db_session, content_store, reporter.id, ContentType.PLAYLIST, uuid.uuid4(),
            ReportReason.OTHER,
        )
    with pytest.raises(ContentNotFound):
        await svc.submit(
            db_session, content_store, reporter.id, ContentType.USER, uuid.uuid4(),
            ReportReason.HARASSMENT,
        )


@pytest.mark.asyncio
async def test_banned_reporter_is_refused(db_session, make_account, content_store) -> None:
    reporter = await make_account("reporter", is_banned=True, is_active=False)
    artist = await make_account("artist")
    song = content_store.add("song", artist.id)
    with pytest.raises(UserBanned):
        await svc.submit(
            db_session, content_store, reporter.id, ContentType.SONG, song, ReportReason.SPAM
        )


@pytest.mark.asyncio
async def test_one_active_report_per_content(db_session, make_account, content_store) -> None:
    first = await make_account("first")
    second = await make_account("second")
    artist = await make_account("artist")
    song = content_store.add("song", artist.id)

    await svc.submit(db_session, content_store, first.id, ContentType.SONG, song, ReportReason.SPAM)

    with pytest.raises(DuplicateActiveReport):
        await svc.submit(
            db_session, content_store, first.id, ContentType.SONG, song, ReportReason.OTHER
        )
    with pytest.raises(ContentAlreadyUnderInvestigation):
        await svc.submit(
            db_session, content_store, second.id, ContentType.SONG, song, ReportReason.SPAM
        )


@pytest.mark.asyncio
async def test_content_can_be_reported_again_once_closed(
    db_session, make_account, content_store
) -> None:
    reporter = await make_account("reporter")
    artist = await make_account("artist")
    boss = await make_account("boss", Role.SUPER_ADMIN)
    song = content_store.add("song", artist.id)

    report = await svc.submit(
        db_session, content_store, reporter.id, ContentType.SONG, song, ReportReason.SPAM
    )
    await svc.reject(db_session, report.id, "Not spam.", boss.id)

    again = await svc.submit(
        db_session, content_store, reporter.id, ContentType.SONG, song, ReportReason.COPYRIGHT
    )
    assert again.id != report.id


@pytest.mark.asyncio
async def test_partial_unique_index_rejects_second_active_report(db_session, make_account) -> None:
    reporter = await make_account("reporter")
    content_id = uuid.uuid4()
    db_session.add(_active_report("song", reporter.id, None))
    db_session.add(Report(
        reporter_id=reporter.id, content_type=ContentType.SONG, content_id=content_id,
        reason=ReportReason.SPAM, status=ReportStatus.RESOLVED,
    ))
    db_session.add(Report(
        reporter_id=reporter.id, content_type=ContentType.SONG, content_id=content_id,
        reason=ReportReason.SPAM, status=ReportStatus.PENDING,
    ))
    await db_session.flush()

    db_session.add(Report(
        reporter_id=reporter.id, content_type=ContentType.SONG, content_id=content_id,
        reason=ReportReason.OTHER, status=ReportStatus.IN_REVIEW,
    ))
    with pytest.raises(IntegrityError):
        await db_session.flush()
    await db_session.rollback()


# ── Reassign / priority / open / reject ───────────────────────────────────────

@pytest.mark.asyncio
async def test_reassign_rules(db_session, make_account, content_store) -> None:
    reporter = await make_account("reporter")
    artist = await make_account("artist")
    admin = await make_account("admin", Role.ADMIN)
    other_admin = await make_account("other", Role.ADMIN)
    inactive_admin = await make_account("inactive", Role.ADMIN, is_active=False)
    boss = await make_account("boss", Role.SUPER_ADMIN)
    song = content_store.add("song", artist.id)
    report = await svc.submit(
        db_session, content_store, reporter.id, ContentType.SONG, song, ReportReason.SPAM
    )

    with pytest.raises(SuperAdminAccessRequired):
        await svc.reassign(db_session, report.id, other_admin.id, admin.id)
    with pytest.raises(InvalidAssignee):
        await svc.reassign(db_session, report.id, reporter.id, boss.id)
    with pytest.raises(InvalidAssignee):
        await svc.reassign(db_session, report.id, inactive_admin.id, boss.id)
    with pytest.raises(InvalidAssignee):
        await svc.reassign(db_session, report.id, uuid.uuid4(), boss.id)

    moved = await svc.reassign(db_session, report.id, boss.id, boss.id)
    assert moved.assigned_admin_id == boss.id

    await svc.reject(db_session, report.id, None, boss.id)
    with pytest.raises(ReportNotActive):
        await svc.reassign(db_session, report.id, admin.id, boss.id)


@pytest.mark.asyncio
async def test_admin_only_acts_on_assigned_reports(db_session, make_account, content_store) -> None:
    reporter = await make_account("reporter")
    artist = await make_account("artist")
    assignee = await make_account("assignee", Role.ADMIN)
    song = content_store.add("song", artist.id)
    report = await svc.submit(
        db_session, content_store, reporter.id, ContentType.SONG, song, ReportReason.SPAM
    )
    bystander = await make_account("bystander", Role.ADMIN)
    boss = await make_account("boss", Role.SUPER_ADMIN)

    with pytest.raises(ReportNotAssignedToYou):
        await svc.change_priority(db_session, report.id, ReportPriority.HIGH, bystander.id)

    updated = await svc.change_priority(db_session, report.id, ReportPriority.HIGH, assignee.id)
    assert updated.priority == ReportPriority.HIGH
    updated = await svc.change_priority(db_session, report.id, ReportPriority.URGENT, boss.id)
    assert updated.priority == ReportPriority.URGENT


@pytest.mark.asyncio
async def test_open_and_reject_transitions(db_session, make_account, content_store) -> None:
    reporter = await make_account("reporter")
    artist = await make_account("artist")
    admin = await make_account("admin", Role.ADMIN)
    song = content_store.add("song", artist.id)
    report = await svc.submit(
        db_session, content_store, reporter.id, ContentType.SONG, song, ReportReason.SPAM
    )

    opened = await svc.open_report(db_session, report.id, admin.id)
    assert opened.status == ReportStatus.IN_REVIEW
    with pytest.raises(ReportNotPending):
        await svc.open_report(db_session, report.id, admin.id)

    rejected = await svc.reject(db_session, report.id, "Fine as is.", admin.id, now=T0)
    assert rejected.status == ReportStatus.REJECTED
    assert rejected.resolved_by == admin.id
    assert rejected.resolved_at == T0
    assert rejected.resolution_action is None

    with pytest.raises(AlreadyResolved):
        await svc.reject(db_session, report.id, None, admin.id)
    with pytest.raises(AlreadyResolved):
        await svc.open_report(db_session, report.id, admin.id)
    with pytest.raises(ReportNotActive):
        await svc.change_priority(db_session, report.id, ReportPriority.LOW, admin.id)


# ── Queries ────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_queue_orders_by_priority_then_newest(db_session, make_account) -> None:
    reporter = await make_account("reporter")
    admin = await make_account("admin", Role.ADMIN)
    other = await make_account("other", Role.ADMIN)
    boss = await make_account("boss", Role.SUPER_ADMIN)
    old_high = _active_report("song", reporter.id, admin.id, priority=ReportPriority.HIGH,
                              created_at=T0 - timedelta(hours=3))
    new_high = _active_report("song", reporter.id, admin.id, priority=ReportPriority.HIGH,
                              created_at=T0 - timedelta(hours=1))
    urgent = _active_report("album", reporter.id, admin.id, priority=ReportPriority.URGENT,
                            created_at=T0 - timedelta(hours=5))
    low = _active_report("comment", reporter.id, admin.id, priority=ReportPriority.LOW,
                         created_at=T0)
    elsewhere = _active_report("song", reporter.id, other.id, created_at=T0)
    orphan = _active_report("playlist", reporter.id, None, created_at=T0)
    db_session.add_all([old_high, new_high, urgent, low, elsewhere, orphan])
    await db_session.flush()

    rows, total = await svc.list_queue(db_session, admin.id, page=1, size=20)
    assert total == 4
    assert [r.id for r in rows] == [urgent.id, new_high.id, old_high.id, low.id]

    rows, total = await svc.list_queue(
        db_session, admin.id, content_type=ContentType.SONG, page=1, size=20
    )
    assert [r.id for r in rows] == [new_high.id, old_high.id]

    rows, total = await svc.list_queue(db_session, boss.id, page=1, size=20)
    assert total == 6
    assert orphan.id in {r.id for r in rows}


@pytest.mark.asyncio
async def test_stats_and_reports_for_content(db_session, make_account) -> None:
    reporter = await make_account("reporter")
    admin = await make_account("admin", Role.ADMIN)
    boss = await make_account("boss", Role.SUPER_ADMIN)
    content_id = uuid.uuid4()
    db_session.add_all([
        Report(reporter_id=reporter.id, content_type=ContentType.SONG, content_id=content_id,
               reason=ReportReason.SPAM, status=ReportStatus.RESOLVED, assigned_admin_id=admin.id),
        Report(reporter_id=reporter.id, content_type=ContentType.SONG, content_id=content_id,
               reason=ReportReason.SPAM, status=ReportStatus.PENDING, assigned_admin_id=admin.id),
        _active_report("user", reporter.id, None),
    ])
    await db_session.flush()

    data = await svc.stats(db_session, boss.id)
    assert data["by_status"] == {"resolved": 1, "pending": 2}
    assert data["by_content_type"] == {"song": 2, "user": 1}
    assert data["totals"] == {"all": 3, "active": 2, "orphaned": 1}

    data = await svc.stats(db_session, admin.id)
    assert data["totals"] == {"all": 2, "active": 1, "orphaned": 0}

    history = await svc.reports_for_content(db_session, admin.id, ContentType.SONG, content_id)
    assert len(history) == 2


@pytest.mark.asyncio
async def test_list_my_reports_filters_by_status(db_session, make_account) -> None:
    reporter = await make_account("reporter")
    someone_else = await make_account("someone")
    db_session.add_all([
        _active_report("song", reporter.id, None),
        _active_report("album", reporter.id, None, status=ReportStatus.REJECTED),
        _active_report("song", someone_else.id, None),
    ])
    await db_session.flush()

    rows, total = await svc.list_my_reports(db_session, reporter.id, page=1, size=10)
    assert total == 2
    rows, total = await svc.list_my_reports(
        db_session, reporter.id, status=ReportStatus.REJECTED, page=1, size=10
    )
    assert total == 1
    assert rows[0].status == ReportStatus.REJECTED
    count = (await db_session.execute(sa.select(sa.func.count()).select_from(Report))).scalar_one()
    assert count == 3
