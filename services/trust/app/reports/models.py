"""
Reports domain — SQLAlchemy ORM models.

At most one active (pending / in_review) report may exist per content item.
The partial unique index below enforces it; the service additionally takes a
per-content advisory lock so concurrent submissions fail with a clean conflict.
"""
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from shared.database.postgres import Base
from shared.database.types import UTCDateTime, utcnow
from app.reports.constants import (
    DESCRIPTION_MAX_LENGTH,
    ContentType,
    ReportPriority,
    ReportReason,
    ReportStatus,
    ResolutionAction,
)

_ACTIVE_PREDICATE = "status IN ('pending', 'in_review')"


def _enum(enum_cls, name: str) -> sa.Enum:
    return sa.Enum(enum_cls, name=name, values_callable=lambda cls: [m.value for m in cls])


class Report(Base):
    __tablename__ = "reports"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    reporter_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    content_type: Mapped[ContentType] = mapped_column(
        _enum(ContentType, "report_content_type"), nullable=False
    )
    content_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, nullable=False)
    reason: Mapped[ReportReason] = mapped_column(_enum(ReportReason, "report_reason"), nullable=False)
    description: Mapped[str | None] = mapped_column(sa.String(DESCRIPTION_MAX_LENGTH), nullable=True)
    status: Mapped[ReportStatus] = mapped_column(
        _enum(ReportStatus, "report_status"),
        nullable=False,
        default=ReportStatus.PENDING,
    )
    priority: Mapped[ReportPriority] = mapped_column(
        _enum(ReportPriority, "report_priority"),
        nullable=False,
        default=ReportPriority.MEDIUM,
    )
    # NULL = orphan (no admin existed at submission); visible to super admins.
    assigned_admin_id: Mapped[uuid.UUID | None] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("accounts.id", ondelete="SET NULL"),
        nullable=True,
    )

    # ── Resolution ────────────────────────────────────────────────────────────
    resolution_action: Mapped[ResolutionAction | None] = mapped_column(
        _enum(ResolutionAction, "resolution_action"), nullable=True
    )
    resolution_note: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    resolved_by: Mapped[uuid.UUID | None] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("accounts.id", ondelete="SET NULL"),
        nullable=True,
    )
    resolved_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    # Set when a downstream action (content deletion) failed after resolution.
    side_effect_error: Mapped[str | None] = mapped_column(sa.Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        sa.Index(
            "uq_reports_active_content",
            "content_type",
            "content_id",
            unique=True,
            postgresql_where=sa.text(_ACTIVE_PREDICATE),
            sqlite_where=sa.text(_ACTIVE_PREDICATE),
        ),
        sa.Index("idx_reports_reporter_id", "reporter_id"),
        sa.Index("idx_reports_assignee_status", "assigned_admin_id", "status"),
        sa.Index("idx_reports_content", "content_type", "content_id"),
        sa.Index("idx_reports_status_created", "status", "created_at"),
    )
