"""Channel routes: channel detail, the message feed and per-channel progress."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from studyhub.api.deps import CurrentUser, DbSession, get_member_channel_or_404
from studyhub.db.storage import storage
from studyhub.schemas.channels import ChannelRead
from studyhub.schemas.messages import MessageCreate, MessageRead, MessageWithAuthor
from studyhub.schemas.progress import ChannelProgressDefault, StudyProgressRead

router = APIRouter(prefix="/channels", tags=["channels"])


@router.get("/{channel_id}", response_model=ChannelRead)
async def get_channel(
    channel_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
) -> ChannelRead:
    channel = await get_member_channel_or_404(db, channel_id, current_user.id)
    return ChannelRead.model_validate(channel)


@router.get("/{channel_id}/messages", response_model=list[MessageWithAuthor])
async def list_messages(
    channel_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
    limit: int = Query(50, ge=1, le=200),
) -> list[MessageWithAuthor]:
    """
    The latest `limit` messages of a channel in display order.

    Storage returns newest first; the feed is reversed so the oldest of the
    window comes first.
    """
    await get_member_channel_or_404(db, channel_id, current_user.id)
    messages = await storage.get_channel_messages(db, channel_id, limit=limit)
    return [MessageWithAuthor.model_validate(m) for m in reversed(messages)]


@router.post("/{channel_id}/messages", response_model=MessageRead, status_code=status.HTTP_201_CREATED)
async def create_message(
    channel_id: UUID,
    data: MessageCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> MessageRead:
    """Post a human message to the channel."""
    await get_member_channel_or_404(db, channel_id, current_user.id)
    message = await storage.create_message(
        db,
        channel_id=channel_id,
        content=data.content,
        author_id=current_user.id,
        message_type=data.message_type,
        meta=data.meta,
    )
    return MessageRead.model_validate(message)


@router.get("/{channel_id}/progress", response_model=StudyProgressRead | ChannelProgressDefault)
async def get_channel_progress(
    channel_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
) -> StudyProgressRead | ChannelProgressDefault:
    """The user's progress in this channel, or zero progress against the default goal."""
    await get_member_channel_or_404(db, channel_id, current_user.id)
    progress = await storage.get_study_progress(db, current_user.id, channel_id)
    if progress is None:
        return ChannelProgressDefault()
    return StudyProgressRead.model_validate(progress)
