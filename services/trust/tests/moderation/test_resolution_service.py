import pytest
import sqlalchemy as sa

from app.accounts.constants import ConductAction
from app.accounts.models import ConductEntry
from app.exceptions import (
    ActionNotApplicable,
    AlreadyResolved,
    CannotModerateAdmin,
    NoSideEffectToRetry,
    ReportNotAssignedToYou,
)
from app.moderation import service as svc
from app.notifications.constants import NotificationType
from app.notifications.models import Notification
from app.reports import service as reports_svc
from app.reports.constants import ContentType, ReportReason, ReportStatus, ResolutionAction
from app.standing import service as standing_svc
from shared.constants import Role
from tests.conftest import T0


async def _notifications(session, target_id) -> list[tuple[NotificationType, str]]:
    rows = await session.execute(
        sa.select(Notification.type, Notification.message)
        .where(Notification.target_id == target_id)
        .order_by(Notification.created_at)
    )
    return [(t, m) for t, m in rows.all()]


async def _conduct(session, account_id) -> list[ConductAction]:
    rows = await session.execute(
        sa.select(ConductEntry.action)
        .where(ConductEntry.account_id == account_id)
        .order_by(ConductEntry.seq)
    )
    return list(rows.scalars().all())


@pytest.mark.asyncio
async def test_remove_content_scenario(db_session, make_account, content_store) -> None:
    reporter = await make_account("reporter")
    artist = await make_account("artist")
    a1 = await make_account("a1", Role.ADMIN)
    a2 = await make_account("a2", Role.ADMIN)
    for _ in range(2):
        other = content_store.add("album", artist.id)
        r = await reports_svc.submit(
            db_session, content_store, reporter.id, ContentType.ALBUM, other, ReportReason.OTHER
        )
        r.assigned_admin_id = a1.id
    await db_session.flush()
    song = content_store.add("song", artist.id)

    report = await reports_svc.submit(
        db_session, content_store, reporter.id, ContentType.SONG, song, ReportReason.SPAM
    )
    assert report.assigned_admin_id == a2.id

    outcome = await svc.resolve(
        db_session, content_store, report.id, ResolutionAction.REMOVE_CONTENT,
        "Spam uploads are not allowed.", a2.id, now=T0,
    )

    assert outcome.degraded is False
    assert outcome.owner_ids == [artist.id]
    assert ("song", song) in content_store.deleted
    assert outcome.report.status == ReportStatus.RESOLVED
    assert outcome.report.resolution_action == ResolutionAction.REMOVE_CONTENT
    assert outcome.report.resolved_by == a2.id
    assert outcome.report.resolved_at == T0

    notes = await _notifications(db_session, artist.id)
    assert len(notes) == 1
    kind, message = notes[0]
    assert kind == NotificationType.MODERATION_CONTENT_REMOVED
    assert "Spam uploads are not allowed." in message
    assert "2 lives left" in message

    await db_session.refresh(artist)
    assert artist.lives == 2
    assert await _conduct(db_session, artist.id) == [ConductAction.CONTENT_REMOVED]


@pytest.mark.asyncio
async def test_remove_content_at_last_life_bans_owner(db_session, make_account, content_store) -> None:
    reporter = await make_account("reporter")
    artist = await make_account("artist", lives=1)
    admin = await make_account("admin", Role.ADMIN)
    song = content_store.add("song", artist.id)
    report = await reports_svc.submit(
        db_session, content_store, reporter.id, ContentType.SONG, song, ReportReason.COPYRIGHT
    )

    await svc.resolve(
        db_session, content_store, report.id, ResolutionAction.REMOVE_CONTENT, None, admin.id,
        now=T0,
    )

    await db_session.refresh(artist)
    assert artist.lives == 0
    assert artist.is_banned is True
    assert artist.zero_lives_ban is True
    assert artist.is_active is False
    kinds = [k for k, _ in await _notifications(db_session, artist.id)]
    assert kinds == [NotificationType.MODERATION_BAN]
    assert await _conduct(db_session, artist.id) == [
        ConductAction.CONTENT_REMOVED,
        ConductAction.BAN,
    ]


@pytest.mark.asyncio
async def test_remove_content_spares_admin_owner_lives(db_session, make_account, content_store) -> None:
    reporter = await make_account("reporter")
    admin_owner = await make_account("curator", Role.ADMIN)
    boss = await make_account("boss", Role.SUPER_ADMIN)
    playlist = content_store.add("playlist", admin_owner.id)
    report = await reports_svc.submit(
        db_session, content_store, reporter.id, ContentType.PLAYLIST, playlist, ReportReason.OTHER
    )

    await svc.resolve(
        db_session, content_store, report.id, ResolutionAction.REMOVE_CONTENT, "Off-topic.", boss.id
    )

    await db_session.refresh(admin_owner)
    assert admin_owner.lives == 3
    assert await _conduct(db_session, admin_owner.id) == []
    kinds = [k for k, _ in await _notifications(db_session, admin_owner.id)]
    assert kinds == [NotificationType.MODERATION_CONTENT_REMOVED]


@pytest.mark.asyncio
async def test_failed_deletion_is_a_degraded_success(db_session, make_account, content_store) -> None:
    reporter = await make_account("reporter")
    artist = await make_account("artist")
    admin = await make_account("admin", Role.ADMIN)
    song = content_store.add("song", artist.id)
    report = await reports_svc.submit(
        db_session, content_store, reporter.id, ContentType.SONG, song, ReportReason.SPAM
    )
    content_store.fail_deletes = True

    outcome = await svc.resolve(
        db_session, content_store, report.id, ResolutionAction.REMOVE_CONTENT, "Spam.", admin.id
    )

    assert outcome.degraded is True
    assert outcome.report.status == ReportStatus.RESOLVED
    assert outcome.report.side_effect_error == "Content service is unavailable."
    await db_session.refresh(artist)
    assert artist.lives == 3
    assert await _notifications(db_session, artist.id) == []

    content_store.fail_deletes = False
    retried = await svc.retry_side_effects(db_session, content_store, report.id, admin.id)

    assert retried.degraded is False
    assert retried.report.side_effect_error is None
    assert ("song", song) in content_store.deleted
    await db_session.refresh(artist)
    assert artist.lives == 2

    with pytest.raises(NoSideEffectToRetry):
        await svc.retry_side_effects(db_session, content_store, report.id, admin.id)


@pytest.mark.asyncio
async def test_resolution_is_terminal(db_session, make_account, content_store) -> None:
    reporter = await make_account("reporter")
    artist = await make_account("artist")
    admin = await make_account("admin", Role.ADMIN)
    song = content_store.add("song", artist.id)
    report = await reports_svc.submit(
        db_session, content_store, reporter.id, ContentType.SONG, song, ReportReason.SPAM
    )
    await svc.resolve(db_session, content_store, report.id, ResolutionAction.NONE, None, admin.id)

    with pytest.raises(AlreadyResolved):
        await svc.resolve(
            db_session, content_store, report.id, ResolutionAction.WARNING, None, admin.id
        )


@pytest.mark.asyncio
async def test_resolve_from_in_review(db_session, make_account, content_store) -> None:
    reporter = await make_account("reporter")
    artist = await make_account("artist")
    admin = await make_account("admin", Role.ADMIN)
    song = content_store.add("song", artist.id)
    report = await reports_svc.submit(
        db_session, content_store, reporter.id, ContentType.SONG, song, ReportReason.SPAM
    )
    await reports_svc.open_report(db_session, report.id, admin.id)

    outcome = await svc.resolve(
        db_session, content_store, report.id, ResolutionAction.WARNING, "Last warning.", admin.id
    )

    assert outcome.report.status == ReportStatus.RESOLVED
    assert await _conduct(db_session, artist.id) == [ConductAction.WARNING]
    notes = await _notifications(db_session, artist.id)
    assert len(notes) == 1
    kind, message = notes[0]
    assert kind == NotificationType.MODERATION_WARNING
    assert message.startswith("You have received a warning about your song.")
    assert "Reason: Last warning." in message


@pytest.mark.asyncio
async def test_action_must_match_content_type(db_session, make_account, content_store) -> None:
    reporter = await make_account("reporter")
    artist = await make_account("artist")
    admin = await make_account("admin", Role.ADMIN)
    song = content_store.add("song", artist.id)
    song_report = await reports_svc.submit(
        db_session, content_store, reporter.id, ContentType.SONG, song, ReportReason.SPAM
    )
    user_report = await reports_svc.submit(
        db_session, content_store, reporter.id, ContentType.USER, artist.id, ReportReason.HARASSMENT
    )

    with pytest.raises(ActionNotApplicable):
        await svc.resolve(
            db_session, content_store, song_report.id, ResolutionAction.BAN_USER, None, admin.id
        )
    with pytest.raises(ActionNotApplicable):
        await svc.resolve(
            db_session, content_store, song_report.id, ResolutionAction.SUSPEND_USER, None, admin.id
        )
    with pytest.raises(ActionNotApplicable):
        await svc.resolve(
            db_session, content_store, user_report.id, ResolutionAction.REMOVE_CONTENT, None,
            admin.id,
        )
    report = await reports_svc.get_report(db_session, song_report.id)
    assert report.status == ReportStatus.PENDING


@pytest.mark.asyncio
async def test_suspend_and_ban_via_resolution(db_session, make_account, content_store) -> None:
    reporter = await make_account("reporter")
    troll = await make_account("troll")
    spammer = await make_account("spammer")
    admin = await make_account("admin", Role.ADMIN)
    r1 = await reports_svc.submit(
        db_session, content_store, reporter.id, ContentType.USER, troll.id, ReportReason.HARASSMENT
    )
    r2 = await reports_svc.submit(
        db_session, content_store, reporter.id, ContentType.USER, spammer.id, ReportReason.SPAM
    )

    await svc.resolve(
        db_session, content_store, r1.id, ResolutionAction.SUSPEND_USER, "Cool off.", admin.id,
        suspension_days=7, now=T0,
    )
    await svc.resolve(
        db_session, content_store, r2.id, ResolutionAction.BAN_USER, "Bot account.", admin.id,
        now=T0,
    )

    await db_session.refresh(troll)
    await db_session.refresh(spammer)
    assert troll.is_suspended is True
    assert troll.can_upload_content is False
    assert troll.suspended_until is not None
    assert (troll.suspended_until - T0).days == 7
    assert spammer.is_banned is True
    assert spammer.is_active is False


@pytest.mark.asyncio
async def test_admin_profiles_cannot_be_suspended_or_banned(
    db_session, make_account, content_store
) -> None:
    reporter = await make_account("reporter")
    admin = await make_account("admin", Role.ADMIN)
    boss = await make_account("boss", Role.SUPER_ADMIN)
    report = await reports_svc.submit(
        db_session, content_store, reporter.id, ContentType.USER, boss.id, ReportReason.OTHER
    )
    assert report.assigned_admin_id == admin.id

    with pytest.raises(CannotModerateAdmin):
        await svc.resolve(
            db_session, content_store, report.id, ResolutionAction.BAN_USER, None, admin.id
        )
    await db_session.refresh(boss)
    assert boss.is_banned is False


@pytest.mark.asyncio
async def test_unassigned_admin_cannot_resolve(db_session, make_account, content_store) -> None:
    reporter = await make_account("reporter")
    artist = await make_account("artist")
    assignee = await make_account("assignee", Role.ADMIN)
    song = content_store.add("song", artist.id)
    report = await reports_svc.submit(
        db_session, content_store, reporter.id, ContentType.SONG, song, ReportReason.SPAM
    )
    bystander = await make_account("bystander", Role.ADMIN)

    with pytest.raises(ReportNotAssignedToYou):
        await svc.resolve(
            db_session, content_store, report.id, ResolutionAction.NONE, None, bystander.id
        )
    assert report.assigned_admin_id == assignee.id
    assert content_store.deleted == []


@pytest.mark.asyncio
async def test_conduct_log_keeps_write_order_within_one_timestamp(
    db_session, make_account, content_store
) -> None:
    reporter = await make_account("reporter")
    admin = await make_account("admin", Role.ADMIN)
    artists = [await make_account(f"artist{i}", lives=1) for i in range(8)]
    for artist in artists:
        song = content_store.add("song", artist.id)
        report = await reports_svc.submit(
            db_session, content_store, reporter.id, ContentType.SONG, song, ReportReason.SPAM
        )
        await svc.resolve(
            db_session, content_store, report.id, ResolutionAction.REMOVE_CONTENT, None,
            admin.id, now=T0,
        )

    for artist in artists:
        _, entries = await standing_svc.conduct_history(db_session, artist.id)
        assert [e.action for e in entries] == [ConductAction.CONTENT_REMOVED, ConductAction.BAN]


@pytest.mark.asyncio
async def test_warning_on_admin_content_notifies_without_conduct(
    db_session, make_account, content_store
) -> None:
    reporter = await make_account("reporter")
    curator = await make_account("curator", Role.ADMIN)
    boss = await make_account("boss", Role.SUPER_ADMIN)
    playlist = content_store.add("playlist", curator.id)
    report = await reports_svc.submit(
        db_session, content_store, reporter.id, ContentType.PLAYLIST, playlist, ReportReason.OTHER
    )

    await svc.resolve(
        db_session, content_store, report.id, ResolutionAction.WARNING, None, boss.id, now=T0
    )

    assert await _conduct(db_session, curator.id) == []
    kinds = [k for k, _ in await _notifications(db_session, curator.id)]
    assert kinds == [NotificationType.MODERATION_WARNING]


@pytest.mark.asyncio
async def test_warning_on_profile_is_a_behaviour_warning(
    db_session, make_account, content_store
) -> None:
    reporter = await make_account("reporter")
    troll = await make_account("troll")
    admin = await make_account("admin", Role.ADMIN)
    report = await reports_svc.submit(
        db_session, content_store, reporter.id, ContentType.USER, troll.id, ReportReason.HARASSMENT
    )

    await svc.resolve(
        db_session, content_store, report.id, ResolutionAction.WARNING, None, admin.id, now=T0
    )

    [(kind, message)] = await _notifications(db_session, troll.id)
    assert kind == NotificationType.MODERATION_WARNING
    assert message.startswith("You have received a warning from the moderation team.")
    assert f"Reason: {svc.DEFAULT_WARNING_REASON}" in message
    await db_session.refresh(troll)
    assert troll.lives == 3
