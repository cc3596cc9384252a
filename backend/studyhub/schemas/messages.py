"""Message and thread schemas."""

from typing import Any, Literal
from uuid import UUID

from pydantic import AliasChoices, Field

from studyhub.schemas.base import BaseSchema, CreatedAtMixin, IDMixin
from studyhub.schemas.user import UserSummary

MessageTypeType = Literal["text", "article", "quiz", "image"]
NoteTypeType = Literal["reply", "note", "highlight"]


# =============================================================================
# MESSAGES
# =============================================================================


class MessageCreate(BaseSchema):
    """
    Schema for a human-authored channel message.

    Article and quiz messages are only produced by the AI endpoints, so
    they are not accepted here.
    """

    content: str = Field(..., min_length=1, max_length=20000)
    message_type: Literal["text", "image"] = "text"
    meta: dict[str, Any] | None = Field(None, validation_alias=AliasChoices("metadata", "meta"))


class MessageRead(BaseSchema, IDMixin, CreatedAtMixin):
    content: str
    author_id: UUID | None
    channel_id: UUID
    message_type: MessageTypeType
    meta: dict[str, Any] | None = Field(
        None,
        validation_alias=AliasChoices("meta", "metadata"),
        serialization_alias="metadata",
    )
    is_ai: bool
    ai_prompt: str | None


class MessageWithAuthor(MessageRead):
    """Message with its author joined; author is None for AI messages."""

    author: UserSummary | None


# =============================================================================
# THREADS
# =============================================================================


class ThreadCreate(BaseSchema):
    """Schema for a human reply under a message."""

    content: str = Field(..., min_length=1, max_length=20000)
    note_type: NoteTypeType = "reply"
    is_rich_text: bool = False


class ThreadRead(BaseSchema, IDMixin, CreatedAtMixin):
    parent_message_id: UUID
    content: str
    author_id: UUID | None
    is_ai: bool
    note_type: NoteTypeType | None
    is_rich_text: bool


class ThreadWithAuthor(ThreadRead):
    author: UserSummary | None


# =============================================================================
# BOOKMARKS
# =============================================================================


class BookmarkRead(BaseSchema, IDMixin, CreatedAtMixin):
    user_id: UUID
    message_id: UUID


class BookmarkWithMessage(BookmarkRead):
    message: MessageRead
