"""
Storage/access layer.

The only place that talks to the database. Each method is a narrowly-scoped
query or mutation taking the request's AsyncSession as its first argument and
committing its own writes. The API layer never builds SQL itself.

Query shape rules:
- Lists that need a related row (author, message, channel name) load it in
  the same SELECT via a join, never one query per row.
- Study progress is written with a single INSERT ... ON CONFLICT DO UPDATE so
  concurrent writers cannot produce two rows for one (user, channel) pair or
  lose an increment.
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from studyhub.db.models import (
    Bookmark,
    Channel,
    ChannelType,
    MemberRole,
    Message,
    MessageType,
    NoteType,
    StudyProgress,
    Thread,
    User,
    Workspace,
    WorkspaceMember,
    utcnow,
)
from studyhub.security import hash_password

logger = logging.getLogger(__name__)

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class StudyStorage:
    """Typed CRUD and join queries over the StudyHub schema."""

    # =========================================================================
    # USERS
    # =========================================================================

    async def get_user(self, db: AsyncSession, user_id: UUID) -> User | None:
        return await db.get(User, user_id)

    async def get_user_by_email(self, db: AsyncSession, email: str) -> User | None:
        result = await db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def get_user_by_reset_token(self, db: AsyncSession, token: str) -> User | None:
        result = await db.execute(select(User).where(User.reset_token == token))
        return result.scalar_one_or_none()

    async def create_user(self, db: AsyncSession, *, email: str, password: str, **profile: Any) -> User:
        """Create a user; the plaintext password is hashed before it reaches the row."""
        user = User(email=email.lower(), hashed_password=hash_password(password), **profile)
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user

    async def update_user(self, db: AsyncSession, user: User, **fields: Any) -> User:
        """Apply a partial profile update."""
        for key, value in fields.items():
            setattr(user, key, value)
        user.updated_at = utcnow()
        await db.commit()
        await db.refresh(user)
        return user

    async def update_user_password(self, db: AsyncSession, user: User, password: str) -> None:
        """Store a new password hash and invalidate any outstanding reset token."""
        user.hashed_password = hash_password(password)
        user.reset_token = None
        user.reset_token_expiry = None
        user.updated_at = utcnow()
        await db.commit()

    async def update_user_reset_token(self, db: AsyncSession, user: User, token: str, expiry) -> None:
        user.reset_token = token
        user.reset_token_expiry = expiry
        user.updated_at = utcnow()
        await db.commit()

    async def update_user_last_login(self, db: AsyncSession, user: User) -> None:
        now = utcnow()
        user.last_login_at = now
        user.updated_at = now
        await db.commit()

    # =========================================================================
    # WORKSPACES
    # =========================================================================

    async def create_workspace(
        self,
        db: AsyncSession,
        *,
        owner_id: UUID,
        name: str,
        description: str | None = None,
    ) -> Workspace:
        """
        Create a workspace and its owner's admin membership.

        Both rows go out in one commit; if either insert fails the whole unit
        is rolled back, so a workspace is never observable without its owner.
        """
        workspace = Workspace(owner_id=owner_id, name=name, description=description)
        try:
            db.add(workspace)
            await db.flush()  # Get workspace.id
            db.add(
                WorkspaceMember(
                    workspace_id=workspace.id,
                    user_id=owner_id,
                    role=MemberRole.ADMIN.value,
                )
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(workspace)
        logger.info("Created workspace %s for owner %s", workspace.id, owner_id)
        return workspace

    async def get_user_workspaces(self, db: AsyncSession, user_id: UUID) -> list[tuple[Workspace, int]]:
        """
        Workspaces the user belongs to, newest first, with their member count.

        The count covers every membership of the workspace, not just the
        requesting user's row.
        """
        user_workspace_ids = select(WorkspaceMember.workspace_id).where(WorkspaceMember.user_id == user_id)
        member_count = func.count(WorkspaceMember.id).label("member_count")
        stmt = (
            select(Workspace, member_count)
            .outerjoin(WorkspaceMember, WorkspaceMember.workspace_id == Workspace.id)
            .where(Workspace.id.in_(user_workspace_ids))
            .group_by(Workspace.id)
            .order_by(Workspace.created_at.desc())
        )
        result = await db.execute(stmt)
        return [(workspace, count or 0) for workspace, count in result.all()]

    async def get_workspace(self, db: AsyncSession, workspace_id: UUID) -> Workspace | None:
        return await db.get(Workspace, workspace_id)

    async def add_workspace_member(
        self,
        db: AsyncSession,
        workspace_id: UUID,
        user_id: UUID,
        role: str = MemberRole.MEMBER.value,
    ) -> WorkspaceMember:
        member = WorkspaceMember(workspace_id=workspace_id, user_id=user_id, role=role)
        db.add(member)
        await db.commit()
        await db.refresh(member)
        return member

    async def get_workspace_member(
        self,
        db: AsyncSession,
        workspace_id: UUID,
        user_id: UUID,
    ) -> WorkspaceMember | None:
        result = await db.execute(
            select(WorkspaceMember).where(
                WorkspaceMember.workspace_id == workspace_id,
                WorkspaceMember.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_workspace_members(self, db: AsyncSession, workspace_id: UUID) -> list[WorkspaceMember]:
        """Memberships of a workspace with their user loaded (inner join)."""
        result = await db.execute(
            select(WorkspaceMember)
            .options(joinedload(WorkspaceMember.user, innerjoin=True))
            .where(WorkspaceMember.workspace_id == workspace_id)
            .order_by(WorkspaceMember.joined_at)
        )
        return list(result.scalars().all())

    # =========================================================================
    # CHANNELS
    # =========================================================================

    async def create_channel(
        self,
        db: AsyncSession,
        *,
        workspace_id: UUID,
        name: str,
        description: str | None = None,
        channel_type: str = ChannelType.SUBJECT.value,
    ) -> Channel:
        channel = Channel(
            workspace_id=workspace_id,
            name=name,
            description=description,
            type=channel_type,
        )
        db.add(channel)
        await db.commit()
        await db.refresh(channel)
        return channel

    async def get_workspace_channels(self, db: AsyncSession, workspace_id: UUID) -> list[Channel]:
        result = await db.execute(
            select(Channel).where(Channel.workspace_id == workspace_id).order_by(Channel.name)
        )
        return list(result.scalars().all())

    async def get_channel(self, db: AsyncSession, channel_id: UUID) -> Channel | None:
        return await db.get(Channel, channel_id)

    async def get_member_channel(self, db: AsyncSession, channel_id: UUID, user_id: UUID) -> Channel | None:
        """Channel by id, only if the user belongs to its workspace."""
        result = await db.execute(
            select(Channel)
            .join(WorkspaceMember, WorkspaceMember.workspace_id == Channel.workspace_id)
            .where(Channel.id == channel_id, WorkspaceMember.user_id == user_id)
        )
        return result.scalar_one_or_none()

    # =========================================================================
    # MESSAGES
    # =========================================================================

    async def create_message(
        self,
        db: AsyncSession,
        *,
        channel_id: UUID,
        content: str,
        author_id: UUID | None = None,
        message_type: str = MessageType.TEXT.value,
        meta: dict | None = None,
        is_ai: bool = False,
        ai_prompt: str | None = None,
    ) -> Message:
        """Insert a message. AI messages (is_ai=True) must not carry an author."""
        if is_ai and author_id is not None:
            raise ValueError("AI-authored messages cannot have an author")

        message = Message(
            channel_id=channel_id,
            content=content,
            author_id=author_id,
            message_type=message_type,
            meta=meta,
            is_ai=is_ai,
            ai_prompt=ai_prompt,
        )
        db.add(message)
        await db.commit()
        await db.refresh(message)
        return message

    async def get_channel_messages(self, db: AsyncSession, channel_id: UUID, limit: int = 50) -> list[Message]:
        """
        Up to `limit` messages of a channel, newest first, author joined.

        Callers that display a conversation reverse the list.
        """
        result = await db.execute(
            select(Message)
            .options(joinedload(Message.author))
            .where(Message.channel_id == channel_id)
            .order_by(Message.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_message(self, db: AsyncSession, message_id: UUID) -> Message | None:
        return await db.get(Message, message_id)

    async def get_member_message(self, db: AsyncSession, message_id: UUID, user_id: UUID) -> Message | None:
        """Message by id, only if the user belongs to the workspace of its channel."""
        result = await db.execute(
            select(Message)
            .join(Channel, Channel.id == Message.channel_id)
            .join(WorkspaceMember, WorkspaceMember.workspace_id == Channel.workspace_id)
            .where(Message.id == message_id, WorkspaceMember.user_id == user_id)
        )
        return result.scalar_one_or_none()

    # =========================================================================
    # THREADS
    # =========================================================================

    async def create_thread(
        self,
        db: AsyncSession,
        *,
        parent_message_id: UUID,
        content: str,
        author_id: UUID | None = None,
        is_ai: bool = False,
        note_type: str = NoteType.REPLY.value,
        is_rich_text: bool = False,
    ) -> Thread:
        if is_ai and author_id is not None:
            raise ValueError("AI-authored thread replies cannot have an author")

        thread = Thread(
            parent_message_id=parent_message_id,
            content=content,
            author_id=author_id,
            is_ai=is_ai,
            note_type=note_type,
            is_rich_text=is_rich_text,
        )
        db.add(thread)
        await db.commit()
        await db.refresh(thread)
        return thread

    async def get_message_threads(self, db: AsyncSession, message_id: UUID) -> list[Thread]:
        """Replies to a message in creation order, author joined."""
        result = await db.execute(
            select(Thread)
            .options(joinedload(Thread.author))
            .where(Thread.parent_message_id == message_id)
            .order_by(Thread.created_at)
        )
        return list(result.scalars().all())

    # =========================================================================
    # BOOKMARKS
    # =========================================================================

    async def get_bookmark(self, db: AsyncSession, user_id: UUID, message_id: UUID) -> Bookmark | None:
        result = await db.execute(
            select(Bookmark).where(Bookmark.user_id == user_id, Bookmark.message_id == message_id)
        )
        return result.scalars().first()

    async def create_bookmark(self, db: AsyncSession, user_id: UUID, message_id: UUID) -> Bookmark:
        """Bookmark a message; returns the existing row if the pair is already bookmarked."""
        existing = await self.get_bookmark(db, user_id, message_id)
        if existing is not None:
            return existing

        bookmark = Bookmark(user_id=user_id, message_id=message_id)
        db.add(bookmark)
        await db.commit()
        await db.refresh(bookmark)
        return bookmark

    async def remove_bookmark(self, db: AsyncSession, user_id: UUID, message_id: UUID) -> None:
        """Delete the bookmark for the pair. Deleting a missing bookmark is a no-op."""
        await db.execute(
            delete(Bookmark).where(Bookmark.user_id == user_id, Bookmark.message_id == message_id)
        )
        await db.commit()

    async def get_user_bookmarks(self, db: AsyncSession, user_id: UUID) -> list[Bookmark]:
        """User's bookmarks, newest first, with the bookmarked message joined."""
        result = await db.execute(
            select(Bookmark)
            .options(joinedload(Bookmark.message, innerjoin=True))
            .where(Bookmark.user_id == user_id)
            .order_by(Bookmark.created_at.desc())
        )
        return list(result.scalars().all())

    # =========================================================================
    # STUDY PROGRESS
    # =========================================================================

    async def get_study_progress(self, db: AsyncSession, user_id: UUID, channel_id: UUID) -> StudyProgress | None:
        result = await db.execute(
            select(StudyProgress).where(
                StudyProgress.user_id == user_id,
                StudyProgress.channel_id == channel_id,
            )
        )
        return result.scalar_one_or_none()

    async def update_study_progress(
        self,
        db: AsyncSession,
        user_id: UUID,
        channel_id: UUID,
        **progress: Any,
    ) -> StudyProgress:
        """
        Upsert the (user, channel) progress row with a partial update.

        A missing row is created seeded with the given fields (defaults for
        the rest); an existing row gets the fields applied. last_activity is
        stamped either way.
        """
        return await self._upsert_progress(db, user_id, channel_id, insert_values=progress, update_values=progress)

    async def increment_topics_studied(
        self,
        db: AsyncSession,
        user_id: UUID,
        channel_id: UUID,
        amount: int = 1,
    ) -> StudyProgress:
        """Atomically add `amount` to topics_studied, creating the row if needed."""
        return await self._upsert_progress(
            db,
            user_id,
            channel_id,
            insert_values={"topics_studied": amount},
            update_values={"topics_studied": StudyProgress.topics_studied + amount},
        )

    async def get_user_daily_progress(self, db: AsyncSession, user_id: UUID) -> list[tuple[str, StudyProgress]]:
        """(channel name, progress) pairs for the user, most recent activity first."""
        result = await db.execute(
            select(Channel.name, StudyProgress)
            .join(Channel, Channel.id == StudyProgress.channel_id)
            .where(StudyProgress.user_id == user_id)
            .order_by(StudyProgress.last_activity.desc())
        )
        return [(channel_name, progress) for channel_name, progress in result.all()]

    async def _upsert_progress(
        self,
        db: AsyncSession,
        user_id: UUID,
        channel_id: UUID,
        *,
        insert_values: dict[str, Any],
        update_values: dict[str, Any],
    ) -> StudyProgress:
        dialect = db.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise RuntimeError(f"Progress upsert is not supported on {dialect}")

        now = utcnow()
        stmt = insert(StudyProgress).values(
            user_id=user_id,
            channel_id=channel_id,
            last_activity=now,
            **insert_values,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "channel_id"],
            set_={**update_values, "last_activity": now},
        )
        result = await db.scalars(
            stmt.returning(StudyProgress),
            execution_options={"populate_existing": True},
        )
        progress = result.one()
        await db.commit()
        return progress


# Singleton instance
storage = StudyStorage()
