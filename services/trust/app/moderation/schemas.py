"""
Resolution engine — Pydantic V2 request/response schemas.
"""
from __future__ import annotations

import uuid

from pydantic import BaseModel, Field

from app.accounts.constants import MAX_SUSPENSION_DAYS
from app.reports.constants import NOTE_MAX_LENGTH, ResolutionAction
from app.reports.schemas import AdminReportItem, _Base


class ResolveRequest(_Base):
    action: ResolutionAction
    note: str | None = Field(None, max_length=NOTE_MAX_LENGTH)
    suspension_days: int = Field(
        0,
        ge=0,
        le=MAX_SUSPENSION_DAYS,
        description="Only used by suspend_user. 0 suspends until reactivated.",
    )


class ResolutionResponse(BaseModel):
    report: AdminReportItem
    # True when the resolution was recorded but a downstream action failed;
    # report.side_effect_error carries the reason.
    degraded: bool
    owner_ids: list[uuid.UUID] = []
