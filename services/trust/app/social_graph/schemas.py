"""
Social graph domain — Pydantic V2 request/response schemas.
"""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from shared.models.pagination import PaginatedResponse
from app.social_graph.constants import BLOCK_REASON_MAX_LENGTH


class _Base(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


# ── Embedded user reference (used inside list items) ───────────────────────────

class SocialUserRef(BaseModel):
    """Minimal account reference embedded in block list items."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    nick: str


# ── Block ──────────────────────────────────────────────────────────────────────

class BlockRequest(_Base):
    reason: str | None = Field(None, max_length=BLOCK_REASON_MAX_LENGTH)


class BlockResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    blocker_id: uuid.UUID
    blocked_id: uuid.UUID
    reason: str | None
    created_at: datetime


class BlockStatusResponse(BaseModel):
    i_blocked: bool
    blocked_me: bool
    blocked: bool  # either direction


class BlockedListItem(BaseModel):
    id: uuid.UUID            # block id
    user: SocialUserRef      # the blocked account
    reason: str | None
    created_at: datetime


BlockedListResponse = PaginatedResponse[BlockedListItem]


# ── Follow / counters ──────────────────────────────────────────────────────────

class FollowResponse(BaseModel):
    message: str
    follower_count: int     # of the followed account, after the change
    following_count: int    # of the caller, after the change


class CounterResponse(BaseModel):
    account_id: uuid.UUID
    follower_count: int
    following_count: int
