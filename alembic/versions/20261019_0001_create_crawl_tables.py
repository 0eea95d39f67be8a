"""create crawl_targets, chapter_updates and failure_logs tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "crawl_targets",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("adapter", sa.String(length=32), nullable=False),
        sa.Column("target_url", sa.Text(), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False),
        sa.Column("crawl_success", sa.Boolean(), nullable=True),
        sa.Column("last_crawled_on", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_crawl_targets_adapter", "crawl_targets", ["adapter"], unique=False)
    op.create_index("ix_crawl_targets_enabled", "crawl_targets", ["enabled"], unique=False)

    op.create_table(
        "chapter_updates",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("crawl_target_id", sa.Uuid(), nullable=False),
        sa.Column("origin_id", sa.String(length=255), nullable=False),
        sa.Column("chapter", sa.Float(), nullable=False),
        sa.Column("chapter_name", sa.String(length=500), nullable=True),
        sa.Column("observed_on", sa.DateTime(timezone=True), nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["crawl_target_id"], ["crawl_targets.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "crawl_target_id",
            "origin_id",
            "chapter",
            name="uq_chapter_updates_target_origin_chapter",
        ),
    )
    op.create_index(
        "ix_chapter_updates_crawl_target_id",
        "chapter_updates",
        ["crawl_target_id"],
        unique=False,
    )

    op.create_table(
        "failure_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("context", sa.String(length=64), nullable=False),
        sa.Column("error_type", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_failure_logs_context", "failure_logs", ["context"], unique=False)
    op.create_index("ix_failure_logs_created_at", "failure_logs", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_failure_logs_created_at", table_name="failure_logs")
    op.drop_index("ix_failure_logs_context", table_name="failure_logs")
    op.drop_table("failure_logs")
    op.drop_index("ix_chapter_updates_crawl_target_id", table_name="chapter_updates")
    op.drop_table("chapter_updates")
    op.drop_index("ix_crawl_targets_enabled", table_name="crawl_targets")
    op.drop_index("ix_crawl_targets_adapter", table_name="crawl_targets")
    op.drop_table("crawl_targets")
