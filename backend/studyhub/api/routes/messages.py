"""Message detail, thread replies and bookmark routes."""

from uuid import UUID

from fastapi import APIRouter, status

from studyhub.api.deps import CurrentUser, DbSession, get_member_message_or_404
from studyhub.db.storage import storage
from studyhub.schemas.messages import (
    BookmarkRead,
    BookmarkWithMessage,
    MessageRead,
    ThreadCreate,
    ThreadRead,
    ThreadWithAuthor,
)

router = APIRouter(tags=["messages"])


@router.get("/messages/{message_id}", response_model=MessageRead)
async def get_message(
    message_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
) -> MessageRead:
    message = await get_member_message_or_404(db, message_id, current_user.id)
    return MessageRead.model_validate(message)


# =============================================================================
# THREADS
# =============================================================================


@router.get("/messages/{message_id}/threads", response_model=list[ThreadWithAuthor])
async def list_threads(
    message_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
) -> list[ThreadWithAuthor]:
    """Replies under a message, oldest first."""
    await get_member_message_or_404(db, message_id, current_user.id)
    threads = await storage.get_message_threads(db, message_id)
    return [ThreadWithAuthor.model_validate(t) for t in threads]


@router.post("/messages/{message_id}/threads", response_model=ThreadRead, status_code=status.HTTP_201_CREATED)
async def create_thread(
    message_id: UUID,
    data: ThreadCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> ThreadRead:
    await get_member_message_or_404(db, message_id, current_user.id)
    thread = await storage.create_thread(
        db,
        parent_message_id=message_id,
        content=data.content,
        author_id=current_user.id,
        note_type=data.note_type,
        is_rich_text=data.is_rich_text,
    )
    return ThreadRead.model_validate(thread)


# =============================================================================
# BOOKMARKS
# =============================================================================


@router.post("/messages/{message_id}/bookmark", response_model=BookmarkRead)
async def bookmark_message(
    message_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
) -> BookmarkRead:
    """Bookmark a message. Bookmarking twice returns the existing bookmark."""
    await get_member_message_or_404(db, message_id, current_user.id)
    bookmark = await storage.create_bookmark(db, current_user.id, message_id)
    return BookmarkRead.model_validate(bookmark)


@router.delete("/messages/{message_id}/bookmark")
async def remove_bookmark(
    message_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
) -> dict[str, bool]:
    """Remove the current user's bookmark. Succeeds even if none exists."""
    await storage.remove_bookmark(db, current_user.id, message_id)
    return {"success": True}


@router.get("/bookmarks", response_model=list[BookmarkWithMessage])
async def list_bookmarks(current_user: CurrentUser, db: DbSession) -> list[BookmarkWithMessage]:
    bookmarks = await storage.get_user_bookmarks(db, current_user.id)
    return [BookmarkWithMessage.model_validate(b) for b in bookmarks]
