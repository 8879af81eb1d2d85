"""
Reports domain — Pydantic V2 request/response schemas.
"""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from shared.models.pagination import PaginatedResponse
from app.reports.constants import (
    DESCRIPTION_MAX_LENGTH,
    NOTE_MAX_LENGTH,
    ContentType,
    ReportPriority,
    ReportReason,
    ReportStatus,
    ResolutionAction,
)


class _Base(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


# ── Requests ───────────────────────────────────────────────────────────────────

class ReportRequest(_Base):
    content_type: ContentType
    content_id: uuid.UUID
    reason: ReportReason
    description: str | None = Field(None, max_length=DESCRIPTION_MAX_LENGTH)


class PriorityRequest(_Base):
    priority: ReportPriority


class AssigneeRequest(_Base):
    admin_id: uuid.UUID


class RejectRequest(_Base):
    note: str | None = Field(None, max_length=NOTE_MAX_LENGTH)


# ── Responses ──────────────────────────────────────────────────────────────────

class ReportResponse(BaseModel):
    """What a reporter sees about their own report."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    content_type: ContentType
    content_id: uuid.UUID
    reason: ReportReason
    description: str | None
    status: ReportStatus
    created_at: datetime
    resolved_at: datetime | None


class AdminReportItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    reporter_id: uuid.UUID
    content_type: ContentType
    content_id: uuid.UUID
    reason: ReportReason
    description: str | None
    status: ReportStatus
    priority: ReportPriority
    assigned_admin_id: uuid.UUID | None
    resolution_action: ResolutionAction | None
    resolution_note: str | None
    resolved_by: uuid.UUID | None
    resolved_at: datetime | None
    side_effect_error: str | None
    created_at: datetime
    updated_at: datetime


ReportListResponse = PaginatedResponse[ReportResponse]
AdminReportListResponse = PaginatedResponse[AdminReportItem]


class ReportStatsResponse(BaseModel):
    by_status: dict[str, int]
    by_content_type: dict[str, int]
    by_priority: dict[str, int]
    total: int
    active: int
    orphaned: int   # active reports with no assignee; always 0 for plain admins
