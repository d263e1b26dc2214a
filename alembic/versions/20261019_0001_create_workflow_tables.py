# mypy: ignore-errors
"""
Migration initiale du workflow d'approbation.

Crée les projets, utilisateurs, membres, phases, clubs, athlètes, assets (et
leurs étiquettes), chaînes d'approbation, approbations, commentaires et le
journal d'activité.
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(length=36), primary_key=True)


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def _project_fk() -> sa.Column:
    return sa.Column(
        "project_id",
        sa.String(length=36),
        sa.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "projects",
        _id(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("organization", sa.String(length=255), nullable=True),
        sa.Column("avatar_url", sa.String(length=1024), nullable=True),
        _created_at(),
    )
    op.create_table(
        "project_members",
        _id(),
        _project_fk(),
        sa.Column(
            "user_id",
            sa.String(length=36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("role", sa.String(length=32), nullable=False),
        _created_at(),
        sa.UniqueConstraint("project_id", "user_id", name="uq_member_project_user"),
    )
    op.create_table(
        "phases",
        _id(),
        _project_fk(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        _created_at(),
    )
    op.create_table(
        "clubs",
        _id(),
        _project_fk(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("market", sa.String(length=255), nullable=True),
        _created_at(),
    )
    op.create_table(
        "athletes",
        _id(),
        _project_fk(),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column(
            "club_id",
            sa.String(length=36),
            sa.ForeignKey("clubs.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("headshot_url", sa.String(length=1024), nullable=True),
        sa.Column("embargo_until", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_table(
        "assets",
        _id(),
        _project_fk(),
        sa.Column("phase_id", sa.String(length=36), sa.ForeignKey("phases.id"), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("content_category", sa.String(length=32), nullable=False),
        sa.Column("platforms", sa.JSON(), nullable=False),
        sa.Column("format", sa.String(length=32), nullable=False),
        sa.Column("source_station", sa.String(length=32), nullable=True),
        sa.Column("external_url", sa.String(length=1024), nullable=False),
        sa.Column("thumbnail_url", sa.String(length=1024), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="draft"),
        sa.Column("approval_due", sa.DateTime(timezone=True), nullable=True),
        sa.Column("publish_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("version >= 1", name="ck_asset_version_positive"),
    )
    op.create_table(
        "asset_athletes",
        sa.Column(
            "asset_id",
            sa.String(length=36),
            sa.ForeignKey("assets.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "athlete_id",
            sa.String(length=36),
            sa.ForeignKey("athletes.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )
    op.create_table(
        "asset_clubs",
        sa.Column(
            "asset_id",
            sa.String(length=36),
            sa.ForeignKey("assets.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "club_id",
            sa.String(length=36),
            sa.ForeignKey("clubs.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )
    op.create_table(
        "approval_chains",
        _id(),
        _project_fk(),
        sa.Column("content_category", sa.String(length=32), nullable=False),
        sa.Column("required_roles", sa.JSON(), nullable=False),
        sa.Column("chain_type", sa.String(length=16), nullable=False, server_default="parallel"),
        _created_at(),
        sa.UniqueConstraint("project_id", "content_category", name="uq_chain_project_category"),
    )
    op.create_table(
        "approvals",
        _id(),
        sa.Column(
            "asset_id",
            sa.String(length=36),
            sa.ForeignKey("assets.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="pending"),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("version_reviewed", sa.Integer(), nullable=False),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index("ix_approvals_asset_id", "approvals", ["asset_id"])
    op.create_table(
        "comments",
        _id(),
        sa.Column(
            "asset_id",
            sa.String(length=36),
            sa.ForeignKey("assets.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column(
            "parent_id",
            sa.String(length=36),
            sa.ForeignKey("comments.id", ondelete="CASCADE"),
            nullable=True,
        ),
        _created_at(),
    )
    op.create_index("ix_comments_asset_id", "comments", ["asset_id"])
    op.create_table(
        "activity_log",
        _id(),
        _project_fk(),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "asset_id",
            sa.String(length=36),
            sa.ForeignKey("assets.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_activity_log_project_id", "activity_log", ["project_id"])


def downgrade() -> None:
    op.drop_index("ix_activity_log_project_id", table_name="activity_log")
    op.drop_table("activity_log")
    op.drop_index("ix_comments_asset_id", table_name="comments")
    op.drop_table("comments")
    op.drop_index("ix_approvals_asset_id", table_name="approvals")
    op.drop_table("approvals")
    for table in (
        "approval_chains",
        "asset_clubs",
        "asset_athletes",
        "assets",
        "athletes",
        "clubs",
        "phases",
        "project_members",
        "users",
        "projects",
    ):
        op.drop_table(table)
