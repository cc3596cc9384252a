"""
SQLAlchemy 2.0 Models for StudyHub.

Uses modern declarative syntax with Mapped[] type annotations.
All models use UUID primary keys and proper relationship definitions.
Column types are portable (Uuid, JSON, DateTime) so the same metadata runs on
PostgreSQL in production and SQLite in tests; JSON becomes JSONB on Postgres.
"""

from datetime import datetime, timezone
from enum import Enum as PyEnum
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    false,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from studyhub.db.base import Base

JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    """Timezone-aware current time, used as the application-side timestamp default."""
    return datetime.now(timezone.utc)


def _timestamp(**kwargs) -> Mapped[datetime]:
    return mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        **kwargs,
    )


# =============================================================================
# ENUMS
# =============================================================================


class MemberRole(str, PyEnum):
    """Role of a user inside a workspace."""

    MEMBER = "member"
    ADMIN = "admin"


class ChannelType(str, PyEnum):
    """Kind of channel."""

    SUBJECT = "subject"
    GENERAL = "general"


class MessageType(str, PyEnum):
    """Payload kind of a channel message."""

    TEXT = "text"
    ARTICLE = "article"
    QUIZ = "quiz"
    IMAGE = "image"


class NoteType(str, PyEnum):
    """Kind of thread entry."""

    REPLY = "reply"
    NOTE = "note"
    HIGHLIGHT = "highlight"


# =============================================================================
# MODELS
# =============================================================================


class User(Base):
    """
    Local-credential user account.

    Passwords are stored as bcrypt hashes only. A password-reset token is
    always paired with an expiry.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "reset_token IS NULL OR reset_token_expiry IS NOT NULL",
            name="reset_token_has_expiry",
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    profile_image_url: Mapped[Optional[str]] = mapped_column(String(), nullable=True)
    study_goals: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    timezone: Mapped[str] = mapped_column(String(50), nullable=False, default="UTC", server_default="UTC")
    email_verified: Mapped[bool] = mapped_column(nullable=False, default=False, server_default=false())
    reset_token: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    reset_token_expiry: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = _timestamp()
    updated_at: Mapped[datetime] = _timestamp()

    # Relationships
    owned_workspaces: Mapped[list["Workspace"]] = relationship("Workspace", back_populates="owner")
    memberships: Mapped[list["WorkspaceMember"]] = relationship("WorkspaceMember", back_populates="user")
    bookmarks: Mapped[list["Bookmark"]] = relationship("Bookmark", back_populates="user")
    study_progress: Mapped[list["StudyProgress"]] = relationship("StudyProgress", back_populates="user")


class Workspace(Base):
    """
    Top-level container owned by a user, grouping channels.

    The owner always holds an admin membership row (created in the same
    unit of work as the workspace, see StudyStorage.create_workspace).
    """

    __tablename__ = "workspaces"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    owner_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = _timestamp()

    # Relationships
    owner: Mapped["User"] = relationship("User", back_populates="owned_workspaces")
    members: Mapped[list["WorkspaceMember"]] = relationship("WorkspaceMember", back_populates="workspace")
    channels: Mapped[list["Channel"]] = relationship("Channel", back_populates="workspace")


class WorkspaceMember(Base):
    """Membership of a user in a workspace (one row per pair)."""

    __tablename__ = "workspace_members"
    __table_args__ = (
        UniqueConstraint("workspace_id", "user_id", name="unique_workspace_member"),
        Index("idx_workspace_members_user_id", "user_id"),
        CheckConstraint("role IN ('member', 'admin')", name="valid_member_role"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    workspace_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("workspaces.id"), nullable=False)
    user_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    role: Mapped[str] = mapped_column(
        String(50), nullable=False, default=MemberRole.MEMBER.value, server_default=MemberRole.MEMBER.value
    )
    joined_at: Mapped[datetime] = _timestamp()

    # Relationships
    workspace: Mapped["Workspace"] = relationship("Workspace", back_populates="members")
    user: Mapped["User"] = relationship("User", back_populates="memberships")


class Channel(Base):
    """Topic-scoped container of messages within a workspace."""

    __tablename__ = "channels"
    __table_args__ = (
        Index("idx_channels_workspace_name", "workspace_id", "name"),
        CheckConstraint("type IN ('subject', 'general')", name="valid_channel_type"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    workspace_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("workspaces.id"), nullable=False)
    type: Mapped[str] = mapped_column(
        String(50), nullable=False, default=ChannelType.SUBJECT.value, server_default=ChannelType.SUBJECT.value
    )
    created_at: Mapped[datetime] = _timestamp()

    # Relationships
    workspace: Mapped["Workspace"] = relationship("Workspace", back_populates="channels")
    messages: Mapped[list["Message"]] = relationship("Message", back_populates="channel")


class Message(Base):
    """
    A post in a channel.

    author_id is NULL for AI-authored messages. For "article" and "quiz"
    messages, content holds the JSON-encoded payload (see schemas/content.py).
    """

    __tablename__ = "messages"
    __table_args__ = (
        Index("idx_messages_channel_created", "channel_id", "created_at"),
        CheckConstraint("NOT is_ai OR author_id IS NULL", name="ai_message_has_no_author"),
        CheckConstraint(
            "message_type IN ('text', 'article', 'quiz', 'image')",
            name="valid_message_type",
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[Optional[UUID]] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)
    channel_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("channels.id"), nullable=False)
    message_type: Mapped[str] = mapped_column(
        String(50), nullable=False, default=MessageType.TEXT.value, server_default=MessageType.TEXT.value
    )
    # "metadata" is reserved on declarative classes
    meta: Mapped[Optional[dict]] = mapped_column("metadata", JSONType, nullable=True)
    is_ai: Mapped[bool] = mapped_column(nullable=False, default=False, server_default=false())
    ai_prompt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = _timestamp()

    # Relationships
    author: Mapped[Optional["User"]] = relationship("User")
    channel: Mapped["Channel"] = relationship("Channel", back_populates="messages")
    threads: Mapped[list["Thread"]] = relationship("Thread", back_populates="parent_message")
    bookmarks: Mapped[list["Bookmark"]] = relationship("Bookmark", back_populates="message")


class Thread(Base):
    """Flat reply attached to a message; author_id is NULL for AI replies."""

    __tablename__ = "threads"
    __table_args__ = (
        Index("idx_threads_parent_created", "parent_message_id", "created_at"),
        CheckConstraint("NOT is_ai OR author_id IS NULL", name="ai_thread_has_no_author"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    parent_message_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("messages.id"), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[Optional[UUID]] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)
    is_ai: Mapped[bool] = mapped_column(nullable=False, default=False, server_default=false())
    note_type: Mapped[Optional[str]] = mapped_column(
        String(50), nullable=True, default=NoteType.REPLY.value, server_default=NoteType.REPLY.value
    )
    is_rich_text: Mapped[bool] = mapped_column(nullable=False, default=False, server_default=false())
    created_at: Mapped[datetime] = _timestamp()

    # Relationships
    parent_message: Mapped["Message"] = relationship("Message", back_populates="threads")
    author: Mapped[Optional["User"]] = relationship("User")


class Bookmark(Base):
    """
    A user's saved message.

    One bookmark per (user, message) is enforced by the storage layer rather
    than by a unique constraint.
    """

    __tablename__ = "bookmarks"
    __table_args__ = (Index("idx_bookmarks_user_message", "user_id", "message_id"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    message_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("messages.id"), nullable=False)
    created_at: Mapped[datetime] = _timestamp()

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="bookmarks")
    message: Mapped["Message"] = relationship("Message", back_populates="bookmarks")


class StudyProgress(Base):
    """Per-user, per-channel counter of topics studied against a daily goal."""

    __tablename__ = "study_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "channel_id", name="unique_user_channel_progress"),
        CheckConstraint("topics_studied >= 0", name="valid_topics_studied"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    channel_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("channels.id"), nullable=False)
    topics_studied: Mapped[int] = mapped_column(nullable=False, default=0, server_default="0")
    daily_goal: Mapped[int] = mapped_column(nullable=False, default=5, server_default="5")
    last_activity: Mapped[datetime] = _timestamp()

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="study_progress")
    channel: Mapped["Channel"] = relationship("Channel")
