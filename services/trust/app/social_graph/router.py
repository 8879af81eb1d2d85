"""
Social graph domain — user-facing routes.

All routes prefixed /api/v1/users.

Routes:
  GET    /me/blocked               My block list (paginated)
  POST   /{user_id}/block          Block (tears down friendship + follows, hides notifications)
  DELETE /{user_id}/block          Unblock (only the blocker may)
  GET    /{user_id}/block-status   Block state in both directions
  POST   /{user_id}/follow         Follow a user
  DELETE /{user_id}/follow         Unfollow

Note: /me/... routes must be registered before /{user_id}/... routes of the same
shape so Starlette's literal-path matching takes precedence.
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Body, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts.dependencies import get_current_user
from app.database import get_db
from app.rate_limit import SOCIAL_RATE_LIMIT, limiter
from app.social_graph import controller as ctrl
from app.social_graph.schemas import (
    BlockedListResponse,
    BlockRequest,
    BlockResponse,
    BlockStatusResponse,
    FollowResponse,
)
from shared.models.user import CurrentUser

router = APIRouter(prefix="/users", tags=["social-graph"])


# ── Lists ──────────────────────────────────────────────────────────────────────

@router.get(
    "/me/blocked",
    response_model=BlockedListResponse,
    summary="List users I have blocked",
)
async def list_my_blocked(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> BlockedListResponse:
    return await ctrl.list_blocked(session, current_user.id, page=page, size=size)


# ── Block ──────────────────────────────────────────────────────────────────────

@router.post(
    "/{user_id}/block",
    response_model=BlockResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Block a user",
    description=(
        "Removes any friendship and follow edges between the two users, recounts "
        "both users' follower/following counters and hides notifications exchanged "
        "between them. All of it happens in one transaction."
    ),
)
@limiter.limit(SOCIAL_RATE_LIMIT)
async def block_user(
    request: Request,
    user_id: uuid.UUID,
    body: BlockRequest | None = Body(None),
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> BlockResponse:
    return await ctrl.block_user(session, current_user.id, user_id, body)


@router.delete(
    "/{user_id}/block",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Unblock a user",
    description="Only the user who created the block can remove it.",
)
async def unblock_user(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> None:
    await ctrl.unblock_user(session, current_user.id, user_id)


@router.get(
    "/{user_id}/block-status",
    response_model=BlockStatusResponse,
    summary="Block state between me and another user",
)
async def block_status(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> BlockStatusResponse:
    return await ctrl.get_block_status(session, current_user.id, user_id)


# ── Follow ─────────────────────────────────────────────────────────────────────

@router.post(
    "/{user_id}/follow",
    response_model=FollowResponse,
    status_code=status.HTTP_200_OK,
    summary="Follow a user",
    description="Rejected while a block exists in either direction.",
)
@limiter.limit(SOCIAL_RATE_LIMIT)
async def follow_user(
    request: Request,
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> FollowResponse:
    return await ctrl.follow_user(session, current_user.id, user_id)


@router.delete(
    "/{user_id}/follow",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Unfollow a user",
)
async def unfollow_user(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> None:
    await ctrl.unfollow_user(session, current_user.id, user_id)
