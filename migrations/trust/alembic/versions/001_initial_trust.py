"""Initial trust & moderation schema

Revision ID: 001
Revises:
Create Date: 2026-03-01

Tables created:
  - accounts          Platform accounts with standing, lives and follower counters
  - conduct_entries   Append-only moderation history per account
  - reports           Content / profile reports; one active report per item
  - follows           Unidirectional follow edges (follower → following)
  - friendships       One row per unordered pair (user_low_id, user_high_id)
  - blocks            Block edges (blocker blocks blocked)
  - notifications     Social and moderation notifications; hidden on block

PostgreSQL ENUM types created:
  - account_role, conduct_action, report_content_type, report_reason,
    report_status, report_priority, resolution_action, friendship_state,
    notification_type
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


_ENUMS: dict[str, tuple[str, ...]] = {
    "account_role": ("user", "admin", "super_admin"),
    "conduct_action": (
        "warning",
        "content_removed",
        "suspension",
        "ban",
        "suspension_expired",
        "reactivation",
        "lives_added",
        "lives_reset",
    ),
    "report_content_type": ("song", "album", "playlist", "user", "comment"),
    "report_reason": (
        "spam",
        "inappropriate_content",
        "copyright",
        "hate_speech",
        "harassment",
        "misinformation",
        "other",
    ),
    "report_status": ("pending", "in_review", "resolved", "rejected"),
    "report_priority": ("low", "medium", "high", "urgent"),
    "resolution_action": ("none", "warning", "remove_content", "suspend_user", "ban_user"),
    "friendship_state": ("pending", "accepted", "rejected", "blocked"),
    "notification_type": (
        "follow",
        "friend_request",
        "friend_accepted",
        "comment",
        "mention",
        "moderation_warning",
        "moderation_suspension",
        "moderation_ban",
        "moderation_content_removed",
        "moderation_reactivation",
    ),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*_ENUMS[name], name=name, create_type=False)


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        nullable=False,
        server_default=sa.text("gen_random_uuid()"),
    )


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("NOW()"),
    )


def _account_fk(table: str, column: str, ondelete: str) -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(
        [column],
        ["accounts.id"],
        name=f"fk_{table}_{column}_accounts",
        ondelete=ondelete,
    )


# ─────────────────────────────────────────────────────────────────────────────
#  UPGRADE
# ─────────────────────────────────────────────────────────────────────────────

def upgrade() -> None:
    # ── 1. ENUM types ─────────────────────────────────────────────────────────
    for name, values in _ENUMS.items():
        labels = ", ".join(f"'{v}'" for v in values)
        op.execute(
            f"""
            DO $$ BEGIN
                CREATE TYPE {name} AS ENUM ({labels});
            EXCEPTION WHEN duplicate_object THEN NULL;
            END $$;
            """
        )

    # ── 2. accounts ───────────────────────────────────────────────────────────
    op.create_table(
        "accounts",
        _uuid_pk(),
        sa.Column("nick", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("role", _enum("account_role"), nullable=False, server_default="user"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_banned", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("ban_reason", sa.Text(), nullable=True),
        sa.Column("zero_lives_ban", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_suspended", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("suspended_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("suspension_reason", sa.Text(), nullable=True),
        sa.Column("lives", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("can_upload_content", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("follower_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("following_count", sa.Integer(), nullable=False, server_default="0"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id", name="pk_accounts"),
        sa.UniqueConstraint("nick", name="uq_accounts_nick"),
        sa.UniqueConstraint("email", name="uq_accounts_email"),
        sa.CheckConstraint("lives >= 0 AND lives <= 10", name="ck_accounts_lives_range"),
    )
    op.create_index("idx_accounts_role_created", "accounts", ["role", "created_at"])

    # ── 3. conduct_entries ────────────────────────────────────────────────────
    op.create_table(
        "conduct_entries",
        sa.Column("seq", sa.BigInteger(), sa.Identity(always=False), nullable=False),
        _uuid_pk(),
        sa.Column("account_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("action", _enum("conduct_action"), nullable=False),
        sa.Column("content_type", sa.String(20), nullable=True),
        sa.Column("content_label", sa.String(255), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("moderator_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("lives_remaining", sa.Integer(), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("seq", name="pk_conduct_entries"),
        sa.UniqueConstraint("id", name="uq_conduct_entries_id"),
        _account_fk("conduct_entries", "account_id", "CASCADE"),
        _account_fk("conduct_entries", "moderator_id", "SET NULL"),
    )
    op.create_index(
        "idx_conduct_entries_account_seq", "conduct_entries", ["account_id", "seq"]
    )

    # ── 4. reports ────────────────────────────────────────────────────────────
    op.create_table(
        "reports",
        _uuid_pk(),
        sa.Column("reporter_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("content_type", _enum("report_content_type"), nullable=False),
        sa.Column("content_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("reason", _enum("report_reason"), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("status", _enum("report_status"), nullable=False, server_default="pending"),
        sa.Column(
            "priority", _enum("report_priority"), nullable=False, server_default="medium"
        ),
        sa.Column("assigned_admin_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("resolution_action", _enum("resolution_action"), nullable=True),
        sa.Column("resolution_note", sa.Text(), nullable=True),
        sa.Column("resolved_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("side_effect_error", sa.Text(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id", name="pk_reports"),
        _account_fk("reports", "reporter_id", "CASCADE"),
        _account_fk("reports", "assigned_admin_id", "SET NULL"),
        _account_fk("reports", "resolved_by", "SET NULL"),
    )
    # At most one active report per content item.
    op.create_index(
        "uq_reports_active_content",
        "reports",
        ["content_type", "content_id"],
        unique=True,
        postgresql_where=sa.text("status IN ('pending', 'in_review')"),
    )
    op.create_index("idx_reports_reporter_id", "reports", ["reporter_id"])
    op.create_index("idx_reports_assignee_status", "reports", ["assigned_admin_id", "status"])
    op.create_index("idx_reports_content", "reports", ["content_type", "content_id"])
    op.create_index("idx_reports_status_created", "reports", ["status", "created_at"])

    # ── 5. follows ────────────────────────────────────────────────────────────
    op.create_table(
        "follows",
        _uuid_pk(),
        sa.Column("follower_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("following_id", postgresql.UUID(as_uuid=True), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id", name="pk_follows"),
        _account_fk("follows", "follower_id", "CASCADE"),
        _account_fk("follows", "following_id", "CASCADE"),
        sa.UniqueConstraint("follower_id", "following_id", name="uq_follows_pair"),
        sa.CheckConstraint("follower_id != following_id", name="ck_follows_no_self"),
    )
    op.create_index("idx_follows_follower_id", "follows", ["follower_id"])
    op.create_index("idx_follows_following_id", "follows", ["following_id"])

    # ── 6. friendships ────────────────────────────────────────────────────────
    op.create_table(
        "friendships",
        _uuid_pk(),
        sa.Column("requester_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("receiver_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_low_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_high_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("state", _enum("friendship_state"), nullable=False, server_default="pending"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id", name="pk_friendships"),
        _account_fk("friendships", "requester_id", "CASCADE"),
        _account_fk("friendships", "receiver_id", "CASCADE"),
        sa.UniqueConstraint("user_low_id", "user_high_id", name="uq_friendships_pair"),
        sa.CheckConstraint("requester_id != receiver_id", name="ck_friendships_no_self"),
    )

    # ── 7. blocks ─────────────────────────────────────────────────────────────
    op.create_table(
        "blocks",
        _uuid_pk(),
        sa.Column("blocker_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("blocked_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("reason", sa.String(200), nullable=True),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id", name="pk_blocks"),
        _account_fk("blocks", "blocker_id", "CASCADE"),
        _account_fk("blocks", "blocked_id", "CASCADE"),
        sa.UniqueConstraint("blocker_id", "blocked_id", name="uq_blocks_pair"),
        sa.CheckConstraint("blocker_id != blocked_id", name="ck_blocks_no_self"),
    )
    op.create_index("idx_blocks_blocker_id", "blocks", ["blocker_id"])
    op.create_index("idx_blocks_blocked_id", "blocks", ["blocked_id"])

    # ── 8. notifications ──────────────────────────────────────────────────────
    op.create_table(
        "notifications",
        _uuid_pk(),
        sa.Column("target_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("source_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("type", _enum("notification_type"), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("resource_type", sa.String(20), nullable=True),
        sa.Column("resource_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_hidden", sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id", name="pk_notifications"),
        _account_fk("notifications", "target_id", "CASCADE"),
        _account_fk("notifications", "source_id", "SET NULL"),
    )
    op.create_index(
        "idx_notifications_target_created", "notifications", ["target_id", "created_at"]
    )
    op.create_index("idx_notifications_pair", "notifications", ["target_id", "source_id"])


# ─────────────────────────────────────────────────────────────────────────────
#  DOWNGRADE
# ─────────────────────────────────────────────────────────────────────────────

def downgrade() -> None:
    # Drop tables in reverse FK dependency order
    op.drop_table("notifications")
    op.drop_table("blocks")
    op.drop_table("friendships")
    op.drop_table("follows")
    op.drop_table("reports")
    op.drop_table("conduct_entries")
    op.drop_table("accounts")

    # Drop ENUM types (must happen after tables are gone)
    for name in reversed(list(_ENUMS)):
        op.execute(f"DROP TYPE IF EXISTS {name}")
