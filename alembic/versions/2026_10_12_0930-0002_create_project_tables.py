"""create project tables

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-12

Project aggregate:
  - projects (status enum, mutually exclusive terminal dates)
  - project_tags (ordered labels)
  - project_abandonments (one per project, reason enum + JSONB secondary reasons)
  - project_revivals (append-only history)

Every child FK is ON DELETE CASCADE so deleting a user or a project
removes everything beneath it.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

project_status = sa.Enum("ACTIVE", "COMPLETED", "ABANDONED", name="project_status")
abandonment_reason = sa.Enum(
    "TIME",
    "MOTIVATION",
    "TECHNICAL",
    "SCOPE",
    "MARKET",
    "ORGANIZATION",
    "BURNOUT",
    "OTHER",
    name="abandonment_reason",
)


def upgrade() -> None:
    # ── 1. projects ─────────────────────────────────────────
    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("repository_url", sa.Text(), nullable=True),
        sa.Column("live_url", sa.Text(), nullable=True),
        sa.Column("status", project_status, server_default="ACTIVE", nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("abandoned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_public", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            "end_date IS NULL OR abandoned_at IS NULL",
            name="ck_projects_single_terminal_date",
        ),
    )
    op.create_index("ix_projects_user_id_updated_at", "projects", ["user_id", "updated_at"])

    # ── 2. project_tags ─────────────────────────────────────
    op.create_table(
        "project_tags",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("project_id", sa.Uuid(), nullable=False),
        sa.Column("label", sa.String(50), nullable=False),
        sa.Column("position", sa.Integer(), server_default="0", nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_project_tags_project_id", "project_tags", ["project_id"])
    op.create_index("ix_project_tags_label", "project_tags", ["label"])

    # ── 3. project_abandonments ─────────────────────────────
    op.create_table(
        "project_abandonments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("project_id", sa.Uuid(), nullable=False),
        sa.Column("main_reason", abandonment_reason, nullable=False),
        sa.Column(
            "secondary_reasons",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            nullable=True,
        ),
        sa.Column("retrospective", sa.Text(), nullable=True),
        sa.Column("lessons_learned", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("project_id"),
    )

    # ── 4. project_revivals ─────────────────────────────────
    op.create_table(
        "project_revivals",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("project_id", sa.Uuid(), nullable=False),
        sa.Column("revived_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_project_revivals_project_id", "project_revivals", ["project_id"])


def downgrade() -> None:
    op.drop_index("ix_project_revivals_project_id", table_name="project_revivals")
    op.drop_table("project_revivals")
    op.drop_table("project_abandonments")
    op.drop_index("ix_project_tags_label", table_name="project_tags")
    op.drop_index("ix_project_tags_project_id", table_name="project_tags")
    op.drop_table("project_tags")
    op.drop_index("ix_projects_user_id_updated_at", table_name="projects")
    op.drop_table("projects")

    # Enum types outlive their tables on Postgres
    abandonment_reason.drop(op.get_bind(), checkfirst=True)
    project_status.drop(op.get_bind(), checkfirst=True)
