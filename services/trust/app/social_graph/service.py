"""
Social graph domain — pure business logic (zero FastAPI imports).

State rules:
  follow:   cannot follow self, cannot follow while a block exists either way
  block:    cannot block self; tears down friendship and follow edges both ways,
            recounts both users' counters and hides notifications between them
  unblock:  only the user who created the block may remove it

Every mutation only flushes.  The request's single commit in get_db makes the
block teardown all-or-nothing.  Pair mutations take an advisory lock on the
unordered pair so a concurrent follow cannot slip in behind a block.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from shared.database.locks import acquire_xact_lock
from shared.database.types import utcnow
from shared.models.pagination import page_offset
from app.accounts import service as accounts_svc
from app.accounts.models import Account
from app.exceptions import (
    AlreadyBlocked,
    AlreadyFollowing,
    BlockedRelationship,
    BlockNotFound,
    CannotBlockSelf,
    CannotFollowSelf,
    NotBlocker,
    NotFollowing,
)
from app.notifications import service as notifications_svc
from app.notifications.constants import NotificationType
from app.social_graph.models import Block, Follow, Friendship, canonical_pair

logger = logging.getLogger(__name__)


# ── Internal helpers ───────────────────────────────────────────────────────────

async def _lock_pair(session: AsyncSession, a: uuid.UUID, b: uuid.UUID) -> None:
    low, high = canonical_pair(a, b)
    await acquire_xact_lock(session, name=f"pair:{low}:{high}")


async def _get_block(
    session: AsyncSession, blocker_id: uuid.UUID, blocked_id: uuid.UUID
) -> Block | None:
    result = await session.execute(
        sa.select(Block).where(
            Block.blocker_id == blocker_id,
            Block.blocked_id == blocked_id,
        )
    )
    return result.scalar_one_or_none()


async def _follow_exists(
    session: AsyncSession, follower_id: uuid.UUID, following_id: uuid.UUID
) -> bool:
    result = await session.execute(
        sa.select(sa.exists().where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id,
        ))
    )
    return result.scalar_one()


async def any_block_between(
    session: AsyncSession, a: uuid.UUID, b: uuid.UUID
) -> bool:
    result = await session.execute(
        sa.select(sa.exists().where(
            sa.or_(
                sa.and_(Block.blocker_id == a, Block.blocked_id == b),
                sa.and_(Block.blocker_id == b, Block.blocked_id == a),
            )
        ))
    )
    return result.scalar_one()


# ── Counters ───────────────────────────────────────────────────────────────────

async def recompute_counters(
    session: AsyncSession, account_id: uuid.UUID
) -> tuple[int, int]:
    """
    Recount follower/following for one account from the follow edges and
    write the result.  Returns ``(follower_count, following_count)``.
    """
    await session.flush()
    followers = (
        await session.execute(
            sa.select(sa.func.count()).select_from(Follow).where(Follow.following_id == account_id)
        )
    ).scalar_one()
    following = (
        await session.execute(
            sa.select(sa.func.count()).select_from(Follow).where(Follow.follower_id == account_id)
        )
    ).scalar_one()
    account = await session.get(Account, account_id)
    if account is not None:
        account.follower_count = followers
        account.following_count = following
        await session.flush()
    return followers, following


async def recompute_all_counters(session: AsyncSession) -> int:
    """Recount every account in one statement. Returns the number of rows touched."""
    followers = (
        sa.select(sa.func.count())
        .select_from(Follow)
        .where(Follow.following_id == Account.id)
        .scalar_subquery()
    )
    following = (
        sa.select(sa.func.count())
        .select_from(Follow)
        .where(Follow.follower_id == Account.id)
        .scalar_subquery()
    )
    result = await session.execute(
        sa.update(Account)
        .values(follower_count=followers, following_count=following)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0


# ── Follow ─────────────────────────────────────────────────────────────────────

async def follow(
    session: AsyncSession,
    follower_id: uuid.UUID,
    following_id: uuid.UUID,
    *,
    now: datetime | None = None,
) -> Follow:
    if follower_id == following_id:
        raise CannotFollowSelf()
    follower = await accounts_svc.get_account(session, follower_id)
    await accounts_svc.get_account(session, following_id)
    await _lock_pair(session, follower_id, following_id)
    if await any_block_between(session, follower_id, following_id):
        raise BlockedRelationship()
    if await _follow_exists(session, follower_id, following_id):
        raise AlreadyFollowing()

    edge = Follow(follower_id=follower_id, following_id=following_id, created_at=now or utcnow())
    session.add(edge)
    notifications_svc.create_notification(
        session,
        target_id=following_id,
        source_id=follower_id,
        type=NotificationType.FOLLOW,
        message=f"{follower.nick} started following you.",
        now=now,
    )
    await session.flush()
    await recompute_counters(session, follower_id)
    await recompute_counters(session, following_id)
    return edge


async def unfollow(
    session: AsyncSession,
    follower_id: uuid.UUID,
    following_id: uuid.UUID,
) -> None:
    if not await _follow_exists(session, follower_id, following_id):
        raise NotFollowing()
    await session.execute(
        sa.delete(Follow).where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id,
        )
    )
    await recompute_counters(session, follower_id)
    await recompute_counters(session, following_id)


# ── Block ──────────────────────────────────────────────────────────────────────

async def block(
    session: AsyncSession,
    blocker_id: uuid.UUID,
    blocked_id: uuid.UUID,
    *,
    reason: str | None = None,
    now: datetime | None = None,
) -> Block:
    if blocker_id == blocked_id:
        raise CannotBlockSelf()
    await accounts_svc.get_account(session, blocker_id)
    await accounts_svc.get_account(session, blocked_id)
    await _lock_pair(session, blocker_id, blocked_id)
    if await _get_block(session, blocker_id, blocked_id) is not None:
        raise AlreadyBlocked()

    edge = Block(
        blocker_id=blocker_id,
        blocked_id=blocked_id,
        reason=reason,
        created_at=now or utcnow(),
    )
    session.add(edge)

    low, high = canonical_pair(blocker_id, blocked_id)
    await session.execute(
        sa.delete(Friendship).where(
            Friendship.user_low_id == low,
            Friendship.user_high_id == high,
        )
    )
    await session.execute(
        sa.delete(Follow).where(
            sa.or_(
                sa.and_(Follow.follower_id == blocker_id, Follow.following_id == blocked_id),
                sa.and_(Follow.follower_id == blocked_id, Follow.following_id == blocker_id),
            )
        )
    )
    await session.flush()
    await recompute_counters(session, blocker_id)
    await recompute_counters(session, blocked_id)
    hidden = await notifications_svc.hide_between(session, blocker_id, blocked_id)
    logger.info(
        "Block %s -> %s created; %d notifications hidden", blocker_id, blocked_id, hidden
    )
    return edge


async def unblock(
    session: AsyncSession,
    caller_id: uuid.UUID,
    other_id: uuid.UUID,
) -> None:
    edge = await _get_block(session, caller_id, other_id)
    if edge is None:
        if await _get_block(session, other_id, caller_id) is not None:
            raise NotBlocker()
        raise BlockNotFound()
    await session.delete(edge)
    await session.flush()


async def block_status(
    session: AsyncSession,
    viewer_id: uuid.UUID,
    other_id: uuid.UUID,
) -> tuple[bool, bool]:
    """Return ``(i_blocked, blocked_me)`` from the viewer's point of view."""
    i_blocked = await _get_block(session, viewer_id, other_id) is not None
    blocked_me = await _get_block(session, other_id, viewer_id) is not None
    return i_blocked, blocked_me


async def list_blocked(
    session: AsyncSession,
    blocker_id: uuid.UUID,
    *,
    page: int,
    size: int,
) -> tuple[list[tuple[Block, Account]], int]:
    total = (
        await session.execute(
            sa.select(sa.func.count()).select_from(Block).where(Block.blocker_id == blocker_id)
        )
    ).scalar_one()
    result = await session.execute(
        sa.select(Block, Account)
        .join(Account, Account.id == Block.blocked_id)
        .where(Block.blocker_id == blocker_id)
        .order_by(Block.created_at.desc(), Block.id.desc())
        .offset(page_offset(page, size))
        .limit(size)
    )
    return [(b, a) for b, a in result.all()], total
