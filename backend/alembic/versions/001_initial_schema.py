"""Initial schema with all tables.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18

This migration creates the complete StudyHub database schema:
- Extensions: uuid-ossp
- Tables: users, workspaces, workspace_members, channels, messages, threads,
  bookmarks, study_progress
- Indexes: membership, feed and thread lookups
- Triggers: updated_at auto-update on users
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id", postgresql.UUID(as_uuid=True), server_default=sa.text("uuid_generate_v4()"), nullable=False
    )


def _timestamp_column(name: str) -> sa.Column:
    return sa.Column(name, postgresql.TIMESTAMP(timezone=True), server_default=sa.text("NOW()"), nullable=False)


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ==========================================================================
    # USERS TABLE
    # ==========================================================================
    op.create_table(
        "users",
        _id_column(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("profile_image_url", sa.String(), nullable=True),
        sa.Column("study_goals", sa.Text(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("timezone", sa.String(50), server_default="UTC", nullable=False),
        sa.Column("email_verified", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("reset_token", sa.String(255), nullable=True),
        sa.Column("reset_token_expiry", postgresql.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("last_login_at", postgresql.TIMESTAMP(timezone=True), nullable=True),
        _timestamp_column("created_at"),
        _timestamp_column("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "reset_token IS NULL OR reset_token_expiry IS NOT NULL",
            name="reset_token_has_expiry",
        ),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_reset_token", "users", ["reset_token"])

    # ==========================================================================
    # WORKSPACES TABLE
    # ==========================================================================
    op.create_table(
        "workspaces",
        _id_column(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("owner_id", postgresql.UUID(as_uuid=True), nullable=False),
        _timestamp_column("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"]),
    )
    op.create_index("ix_workspaces_owner_id", "workspaces", ["owner_id"])

    op.create_table(
        "workspace_members",
        _id_column(),
        sa.Column("workspace_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("role", sa.String(50), server_default="member", nullable=False),
        _timestamp_column("joined_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["workspace_id"], ["workspaces.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.UniqueConstraint("workspace_id", "user_id", name="unique_workspace_member"),
        sa.CheckConstraint("role IN ('member', 'admin')", name="valid_member_role"),
    )
    op.create_index("idx_workspace_members_user_id", "workspace_members", ["user_id"])

    # ==========================================================================
    # CHANNELS TABLE
    # ==========================================================================
    op.create_table(
        "channels",
        _id_column(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("workspace_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("type", sa.String(50), server_default="subject", nullable=False),
        _timestamp_column("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["workspace_id"], ["workspaces.id"]),
        sa.CheckConstraint("type IN ('subject', 'general')", name="valid_channel_type"),
    )
    op.create_index("idx_channels_workspace_name", "channels", ["workspace_id", "name"])

    # ==========================================================================
    # MESSAGES / THREADS
    # ==========================================================================
    op.create_table(
        "messages",
        _id_column(),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("channel_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("message_type", sa.String(50), server_default="text", nullable=False),
        sa.Column("metadata", postgresql.JSONB(), nullable=True),
        sa.Column("is_ai", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("ai_prompt", sa.Text(), nullable=True),
        _timestamp_column("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["channel_id"], ["channels.id"]),
        sa.CheckConstraint("NOT is_ai OR author_id IS NULL", name="ai_message_has_no_author"),
        sa.CheckConstraint(
            "message_type IN ('text', 'article', 'quiz', 'image')",
            name="valid_message_type",
        ),
    )
    op.create_index("idx_messages_channel_created", "messages", ["channel_id", "created_at"])

    op.create_table(
        "threads",
        _id_column(),
        sa.Column("parent_message_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("is_ai", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("note_type", sa.String(50), server_default="reply", nullable=True),
        sa.Column("is_rich_text", sa.Boolean(), server_default=sa.false(), nullable=False),
        _timestamp_column("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["parent_message_id"], ["messages.id"]),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"]),
        sa.CheckConstraint("NOT is_ai OR author_id IS NULL", name="ai_thread_has_no_author"),
    )
    op.create_index("idx_threads_parent_created", "threads", ["parent_message_id", "created_at"])

    # ==========================================================================
    # BOOKMARKS / STUDY PROGRESS
    # ==========================================================================
    op.create_table(
        "bookmarks",
        _id_column(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("message_id", postgresql.UUID(as_uuid=True), nullable=False),
        _timestamp_column("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["message_id"], ["messages.id"]),
    )
    op.create_index("idx_bookmarks_user_message", "bookmarks", ["user_id", "message_id"])

    op.create_table(
        "study_progress",
        _id_column(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("channel_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("topics_studied", sa.Integer(), server_default="0", nullable=False),
        sa.Column("daily_goal", sa.Integer(), server_default="5", nullable=False),
        _timestamp_column("last_activity"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["channel_id"], ["channels.id"]),
        # Conflict target of the progress upsert
        sa.UniqueConstraint("user_id", "channel_id", name="unique_user_channel_progress"),
        sa.CheckConstraint("topics_studied >= 0", name="valid_topics_studied"),
    )

    # ==========================================================================
    # UPDATED_AT TRIGGER FUNCTION
    # ==========================================================================
    op.execute("""
        CREATE OR REPLACE FUNCTION update_updated_at_column()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TRIGGER update_users_updated_at
            BEFORE UPDATE ON users
            FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();
    """)


def downgrade() -> None:
    op.execute("DROP TRIGGER IF EXISTS update_users_updated_at ON users")
    op.execute("DROP FUNCTION IF EXISTS update_updated_at_column()")

    # Drop tables in reverse dependency order
    op.drop_table("study_progress")
    op.drop_table("bookmarks")
    op.drop_table("threads")
    op.drop_table("messages")
    op.drop_table("channels")
    op.drop_table("workspace_members")
    op.drop_table("workspaces")
    op.drop_table("users")
