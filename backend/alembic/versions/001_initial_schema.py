"""Initial schema

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the tenant hierarchy (churches, branches, positions), the
       identity tables (users, members, permissions, admin_users), plans and
       subscriptions, and the branch activity tables.
How:   Portable column types only; ids are UUID strings generated by the
       application, enums are stored as VARCHAR.

Rollback: downgrade() drops every table in reverse dependency order.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(36), primary_key=True)


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def _updated_at() -> sa.Column:
    return sa.Column(
        "updated_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def upgrade() -> None:
    # ── Identity and billing ──────────────────────────────────────────────
    op.create_table(
        "users",
        _id(),
        sa.Column("name", sa.String(255), nullable=False, server_default=""),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        _created_at(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "plans",
        _id(),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        # NULL = unlimited
        sa.Column("max_members", sa.Integer(), nullable=True),
        sa.Column("max_branches", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    op.create_table(
        "subscriptions",
        _id(),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("plan_id", sa.String(36), sa.ForeignKey("plans.id"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column(
            "started_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    )
    op.create_index("ix_subscriptions_user_id", "subscriptions", ["user_id"])

    op.create_table(
        "admin_users",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("admin_role", sa.String(20), nullable=False, server_default="SUPPORT"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index("ix_admin_users_email", "admin_users", ["email"], unique=True)

    # ── Tenant hierarchy ──────────────────────────────────────────────────
    op.create_table(
        "churches",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("logo_url", sa.String(500), nullable=True),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("website", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_by_user_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        _created_at(),
    )

    op.create_table(
        "branches",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("pastor_name", sa.String(255), nullable=True),
        sa.Column(
            "church_id",
            sa.String(36),
            sa.ForeignKey("churches.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("is_main_branch", sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
    )
    op.create_index("ix_branches_church_id", "branches", ["church_id"])

    op.create_table(
        "church_positions",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column(
            "church_id",
            sa.String(36),
            sa.ForeignKey("churches.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_church_positions_church_id", "church_positions", ["church_id"])

    # ── Members and permissions ───────────────────────────────────────────
    op.create_table(
        "members",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="MEMBER"),
        sa.Column(
            "branch_id",
            sa.String(36),
            sa.ForeignKey("branches.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
            unique=True,
        ),
        sa.Column(
            "position_id",
            sa.String(36),
            sa.ForeignKey("church_positions.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        _created_at(),
    )
    op.create_index("ix_members_email", "members", ["email"], unique=True)
    op.create_index("ix_members_branch_id", "members", ["branch_id"])
    op.create_index("ix_members_position_id", "members", ["position_id"])

    op.create_table(
        "permissions",
        _id(),
        sa.Column(
            "member_id",
            sa.String(36),
            sa.ForeignKey("members.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("type", sa.String(100), nullable=False),
        sa.UniqueConstraint("member_id", "type", name="uq_permissions_member_type"),
    )
    op.create_index("ix_permissions_member_id", "permissions", ["member_id"])

    # ── Branch activity ───────────────────────────────────────────────────
    op.create_table(
        "transactions",
        _id(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("type", sa.String(10), nullable=False),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column(
            "branch_id",
            sa.String(36),
            sa.ForeignKey("branches.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "created_by_user_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
    )
    # Ledger listing: WHERE branch_id = ? ORDER BY created_at DESC
    op.create_index(
        "idx_transactions_branch_created", "transactions", ["branch_id", "created_at"]
    )

    op.create_table(
        "events",
        _id(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("time", sa.String(20), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("has_donation", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("donation_reason", sa.String(255), nullable=True),
        sa.Column("donation_link", sa.String(500), nullable=True),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column(
            "branch_id",
            sa.String(36),
            sa.ForeignKey("branches.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_events_start_date", "events", ["start_date"])
    op.create_index("ix_events_branch_id", "events", ["branch_id"])

    op.create_table(
        "contributions",
        _id(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("goal", sa.Numeric(12, 2), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "branch_id",
            sa.String(36),
            sa.ForeignKey("branches.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _created_at(),
    )
    op.create_index("ix_contributions_branch_id", "contributions", ["branch_id"])

    op.create_table(
        "devotionals",
        _id(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("passage", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column(
            "author_id",
            sa.String(36),
            sa.ForeignKey("members.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "branch_id",
            sa.String(36),
            sa.ForeignKey("branches.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "date",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        _created_at(),
    )
    op.create_index("ix_devotionals_branch_id", "devotionals", ["branch_id"])

    op.create_table(
        "devotional_likes",
        _id(),
        sa.Column(
            "devotional_id",
            sa.String(36),
            sa.ForeignKey("devotionals.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "member_id",
            sa.String(36),
            sa.ForeignKey("members.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.UniqueConstraint("devotional_id", "member_id", name="uq_devotional_likes_member"),
    )


def downgrade() -> None:
    """Drop everything. Destructive: all tenant data is lost."""
    op.drop_table("devotional_likes")
    op.drop_index("ix_devotionals_branch_id", table_name="devotionals")
    op.drop_table("devotionals")
    op.drop_index("ix_contributions_branch_id", table_name="contributions")
    op.drop_table("contributions")
    op.drop_index("ix_events_branch_id", table_name="events")
    op.drop_index("ix_events_start_date", table_name="events")
    op.drop_table("events")
    op.drop_index("idx_transactions_branch_created", table_name="transactions")
    op.drop_table("transactions")
    op.drop_index("ix_permissions_member_id", table_name="permissions")
    op.drop_table("permissions")
    op.drop_index("ix_members_position_id", table_name="members")
    op.drop_index("ix_members_branch_id", table_name="members")
    op.drop_index("ix_members_email", table_name="members")
    op.drop_table("members")
    op.drop_index("ix_church_positions_church_id", table_name="church_positions")
    op.drop_table("church_positions")
    op.drop_index("ix_branches_church_id", table_name="branches")
    op.drop_table("branches")
    op.drop_table("churches")
    op.drop_index("ix_admin_users_email", table_name="admin_users")
    op.drop_table("admin_users")
    op.drop_index("ix_subscriptions_user_id", table_name="subscriptions")
    op.drop_table("subscriptions")
    op.drop_table("plans")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
