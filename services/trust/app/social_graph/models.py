"""
Social graph domain — SQLAlchemy ORM models.

Tables:
  follows      — unidirectional follow edges (follower → following)
  friendships  — one row per unordered pair, stored as (user_low_id, user_high_id)
  blocks       — block edges (blocker blocks blocked), queried in both directions
"""
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.database.postgres import Base
from shared.database.types import UTCDateTime, utcnow
from app.social_graph.constants import BLOCK_REASON_MAX_LENGTH, FriendshipState


def canonical_pair(a: uuid.UUID, b: uuid.UUID) -> tuple[uuid.UUID, uuid.UUID]:
    return (a, b) if a.bytes <= b.bytes else (b, a)


class Follow(Base):
    __tablename__ = "follows"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    follower_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    following_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)

    __table_args__ = (
        sa.UniqueConstraint("follower_id", "following_id", name="uq_follows_pair"),
        sa.CheckConstraint("follower_id != following_id", name="no_self"),
        sa.Index("idx_follows_follower_id", "follower_id"),
        sa.Index("idx_follows_following_id", "following_id"),
    )


class Friendship(Base):
    __tablename__ = "friendships"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    requester_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    receiver_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Canonical ordering of (requester_id, receiver_id) so the unordered pair is unique.
    user_low_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, nullable=False)
    user_high_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, nullable=False)
    state: Mapped[FriendshipState] = mapped_column(
        sa.Enum(
            FriendshipState,
            name="friendship_state",
            values_callable=lambda cls: [m.value for m in cls],
        ),
        nullable=False,
        default=FriendshipState.PENDING,
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        sa.UniqueConstraint("user_low_id", "user_high_id", name="uq_friendships_pair"),
        sa.CheckConstraint("requester_id != receiver_id", name="no_self"),
    )

    @classmethod
    def between(
        cls,
        requester_id: uuid.UUID,
        receiver_id: uuid.UUID,
        state: FriendshipState = FriendshipState.PENDING,
    ) -> "Friendship":
        low, high = canonical_pair(requester_id, receiver_id)
        return cls(
            requester_id=requester_id,
            receiver_id=receiver_id,
            user_low_id=low,
            user_high_id=high,
            state=state,
        )


class Block(Base):
    __tablename__ = "blocks"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    blocker_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    blocked_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    reason: Mapped[str | None] = mapped_column(sa.String(BLOCK_REASON_MAX_LENGTH), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)

    blocked = relationship("Account", foreign_keys=[blocked_id], lazy="raise")

    __table_args__ = (
        sa.UniqueConstraint("blocker_id", "blocked_id", name="uq_blocks_pair"),
        sa.CheckConstraint("blocker_id != blocked_id", name="no_self"),
        sa.Index("idx_blocks_blocker_id", "blocker_id"),
        sa.Index("idx_blocks_blocked_id", "blocked_id"),
    )
