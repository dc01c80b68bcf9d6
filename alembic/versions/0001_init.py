"""init (users + templates + captures)

Revision ID: 0001_init
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("api_token", sa.String(length=64), nullable=False, unique=True),
        sa.Column("obsidian_vault_path", sa.String(length=1000), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "templates",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("prompt_template", sa.Text(), nullable=False),
        sa.Column("markdown_template", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("user_id", "name", name="uq_templates_user_name"),
    )
    op.create_index("ix_templates_user_id", "templates", ["user_id"])

    op.create_table(
        "captures",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("template_id", sa.String(length=36), sa.ForeignKey("templates.id"), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("content_type", sa.String(length=100), nullable=False),
        sa.Column("context", sa.Text(), nullable=True),
        sa.Column("tags", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("metadata", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("obsidian_folder", sa.String(length=500), nullable=True, server_default="Captures"),
        sa.Column("skip_processing", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("generated_title", sa.String(length=500), nullable=True),
        sa.Column("generated_summary", sa.Text(), nullable=True),
        sa.Column("generated_key_points", sa.Text(), nullable=True),
        sa.Column("generated_content", sa.Text(), nullable=True),
        sa.Column("obsidian_file_path", sa.String(length=1000), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_captures_user_id", "captures", ["user_id"])
    op.create_index("ix_captures_status", "captures", ["status"])
    op.create_index("ix_captures_created_at", "captures", ["created_at"])


def downgrade() -> None:
    op.drop_table("captures")
    op.drop_table("templates")
    op.drop_table("users")
