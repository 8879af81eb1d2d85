"""
Account standing — Pydantic V2 request/response schemas.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from shared.constants import Role
from app.accounts.constants import MAX_LIVES, MAX_SUSPENSION_DAYS, REASON_MAX_LENGTH, ConductAction


class _Base(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


# ── Requests ───────────────────────────────────────────────────────────────────

class SuspendRequest(_Base):
    days: int = Field(
        0,
        ge=0,
        le=MAX_SUSPENSION_DAYS,
        description="Length of the suspension. 0 suspends until an admin reactivates the account.",
    )
    reason: str = Field(..., min_length=1, max_length=REASON_MAX_LENGTH)


class BanRequest(_Base):
    reason: str = Field(..., min_length=1, max_length=REASON_MAX_LENGTH)


class ReactivateRequest(_Base):
    reason: str | None = Field(None, max_length=REASON_MAX_LENGTH)


class AddLivesRequest(_Base):
    amount: int = Field(..., ge=1, le=MAX_LIVES)
    reason: str | None = Field(None, max_length=REASON_MAX_LENGTH)


class ResetLivesRequest(_Base):
    reason: str | None = Field(None, max_length=REASON_MAX_LENGTH)


# ── Responses ──────────────────────────────────────────────────────────────────

class StandingResponse(BaseModel):
    account_id: uuid.UUID
    nick: str
    role: Role
    standing: Literal["active", "suspended", "banned", "inactive"]
    is_active: bool
    is_banned: bool
    ban_reason: str | None
    zero_lives_ban: bool
    is_suspended: bool
    suspended_until: datetime | None
    suspension_reason: str | None
    lives: int
    can_upload_content: bool


class ConductEntryItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    action: ConductAction
    content_type: str | None
    content_label: str | None
    reason: str | None
    moderator_id: uuid.UUID | None
    lives_remaining: int
    created_at: datetime


class ConductHistoryResponse(BaseModel):
    account_id: uuid.UUID
    lives: int
    entries: list[ConductEntryItem]
