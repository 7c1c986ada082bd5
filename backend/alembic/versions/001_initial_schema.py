"""Create users, analyses and feedback tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Initial schema: accounts, stored analyses, and ratings on them.
How:   PostgreSQL UUID primary keys and TIMESTAMP WITH TIME ZONE columns;
       analysis list fields are JSONB arrays.

Rollback: downgrade() drops all three tables (all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, comment="Lower-cased login email"),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'user'")),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # ── analyses ──────────────────────────────────────────────────────────
    op.create_table(
        "analyses",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("original_text", sa.Text(), nullable=False),
        sa.Column("improved_text", sa.Text(), nullable=True),
        sa.Column(
            "model_id",
            sa.String(50),
            nullable=False,
            comment="Industry context requested by the caller (unresolved)",
        ),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("tone", sa.String(100), nullable=False),
        sa.Column("sentiment", sa.String(100), nullable=False),
        sa.Column("persuasive_strength", sa.Integer(), nullable=False),
        sa.Column("strengths", postgresql.JSONB(), nullable=False),
        sa.Column("weaknesses", postgresql.JSONB(), nullable=False),
        sa.Column("suggestions", postgresql.JSONB(), nullable=False),
        sa.Column("frameworks_used", postgresql.JSONB(), nullable=True),
        sa.Column("techniques_identified", postgresql.JSONB(), nullable=True),
        sa.Column("power_dynamics", sa.Text(), nullable=True),
        sa.Column("negotiation_phase", sa.String(100), nullable=True),
        sa.Column("is_fallback", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    # History query: WHERE user_id = :uid ORDER BY created_at DESC
    op.create_index(
        "idx_analyses_user_created",
        "analyses",
        ["user_id", sa.text("created_at DESC")],
    )

    # ── feedback ──────────────────────────────────────────────────────────
    op.create_table(
        "feedback",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("analysis_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("model_id", sa.String(50), nullable=False),
        sa.Column("suggestion_type", sa.String(20), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["analysis_id"], ["analyses.id"], ondelete="CASCADE"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_feedback_rating_range"),
        sa.CheckConstraint(
            "suggestion_type IN ('analysis', 'improvement')",
            name="ck_feedback_suggestion_type",
        ),
    )
    op.create_index(
        "idx_feedback_user_created",
        "feedback",
        ["user_id", sa.text("created_at DESC")],
    )


def downgrade() -> None:
    """Drop all tables in reverse dependency order. Destructive."""
    op.drop_index("idx_feedback_user_created", table_name="feedback")
    op.drop_table("feedback")
    op.drop_index("idx_analyses_user_created", table_name="analyses")
    op.drop_table("analyses")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
