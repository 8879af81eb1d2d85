"""
Accounts domain — SQLAlchemy ORM models.

Tables:
  accounts         — platform accounts as seen by trust & moderation
  conduct_entries  — append-only moderation history per account
"""
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.constants import Role
from shared.database.postgres import Base
from shared.database.types import UTCDateTime, utcnow
from app.accounts.constants import DEFAULT_LIVES, MAX_LIVES, ConductAction


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    nick: Mapped[str] = mapped_column(sa.String(50), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(sa.String(255), nullable=False, unique=True)
    role: Mapped[Role] = mapped_column(
        sa.Enum(Role, name="account_role", values_callable=_enum_values),
        nullable=False,
        default=Role.USER,
    )

    # ── Standing ──────────────────────────────────────────────────────────────
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)
    is_banned: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    ban_reason: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    # True only when the ban was issued automatically at zero lives.
    zero_lives_ban: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    is_suspended: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    suspended_until: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    suspension_reason: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    lives: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=DEFAULT_LIVES)
    can_upload_content: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)

    # ── Denormalised counters (recomputed from follows, never incremented) ────
    follower_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    following_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    conduct: Mapped[list["ConductEntry"]] = relationship(
        back_populates="account",
        foreign_keys="ConductEntry.account_id",
        order_by="ConductEntry.seq",
        lazy="raise",
    )

    __table_args__ = (
        sa.CheckConstraint(f"lives >= 0 AND lives <= {MAX_LIVES}", name="lives_range"),
        sa.Index("idx_accounts_role_created", "role", "created_at"),
    )


class ConductEntry(Base):
    __tablename__ = "conduct_entries"

    # Insertion order; entries written in one transaction share created_at.
    seq: Mapped[int] = mapped_column(
        sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, nullable=False, unique=True, default=uuid.uuid4
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    action: Mapped[ConductAction] = mapped_column(
        sa.Enum(ConductAction, name="conduct_action", values_callable=_enum_values),
        nullable=False,
    )
    content_type: Mapped[str | None] = mapped_column(sa.String(20), nullable=True)
    content_label: Mapped[str | None] = mapped_column(sa.String(255), nullable=True)
    reason: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    # NULL = applied by the system (lazy expiry, automatic ban).
    moderator_id: Mapped[uuid.UUID | None] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("accounts.id", ondelete="SET NULL"),
        nullable=True,
    )
    lives_remaining: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)

    account: Mapped[Account] = relationship(
        back_populates="conduct", foreign_keys=[account_id], lazy="raise"
    )

    __table_args__ = (
        sa.Index("idx_conduct_entries_account_seq", "account_id", "seq"),
    )
