"""
Social graph domain — request orchestration.
"""
from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts import service as accounts_svc
from app.social_graph import service as svc
from app.social_graph.schemas import (
    BlockedListItem,
    BlockedListResponse,
    BlockRequest,
    BlockResponse,
    BlockStatusResponse,
    CounterResponse,
    FollowResponse,
    SocialUserRef,
)


async def block_user(
    session: AsyncSession,
    blocker_id: uuid.UUID,
    blocked_id: uuid.UUID,
    body: BlockRequest | None,
) -> BlockResponse:
    edge = await svc.block(
        session, blocker_id, blocked_id, reason=body.reason if body else None
    )
    return BlockResponse.model_validate(edge)


async def unblock_user(
    session: AsyncSession,
    caller_id: uuid.UUID,
    other_id: uuid.UUID,
) -> None:
    await svc.unblock(session, caller_id, other_id)


async def get_block_status(
    session: AsyncSession,
    viewer_id: uuid.UUID,
    other_id: uuid.UUID,
) -> BlockStatusResponse:
    i_blocked, blocked_me = await svc.block_status(session, viewer_id, other_id)
    return BlockStatusResponse(
        i_blocked=i_blocked,
        blocked_me=blocked_me,
        blocked=i_blocked or blocked_me,
    )


async def list_blocked(
    session: AsyncSession,
    user_id: uuid.UUID,
    page: int,
    size: int,
) -> BlockedListResponse:
    rows, total = await svc.list_blocked(session, user_id, page=page, size=size)
    items = [
        BlockedListItem(
            id=b.id,
            user=SocialUserRef.model_validate(a),
            reason=b.reason,
            created_at=b.created_at,
        )
        for b, a in rows
    ]
    return BlockedListResponse(items=items, total=total, page=page, size=size)


async def follow_user(
    session: AsyncSession,
    follower_id: uuid.UUID,
    following_id: uuid.UUID,
) -> FollowResponse:
    await svc.follow(session, follower_id, following_id)
    target = await accounts_svc.get_account(session, following_id)
    me = await accounts_svc.get_account(session, follower_id)
    return FollowResponse(
        message="Followed successfully.",
        follower_count=target.follower_count,
        following_count=me.following_count,
    )


async def unfollow_user(
    session: AsyncSession,
    follower_id: uuid.UUID,
    following_id: uuid.UUID,
) -> None:
    await svc.unfollow(session, follower_id, following_id)


async def recompute_counters(
    session: AsyncSession,
    account_id: uuid.UUID,
) -> CounterResponse:
    await accounts_svc.get_account(session, account_id)
    followers, following = await svc.recompute_counters(session, account_id)
    return CounterResponse(
        account_id=account_id,
        follower_count=followers,
        following_count=following,
    )
