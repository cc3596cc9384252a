"""Workspace and membership schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import EmailStr, Field

from studyhub.schemas.base import BaseSchema, CreatedAtMixin, IDMixin
from studyhub.schemas.user import UserSummary

MemberRoleType = Literal["member", "admin"]


class WorkspaceCreate(BaseSchema):
    """Schema for creating a workspace. The owner is always the current user."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None


class WorkspaceRead(BaseSchema, IDMixin, CreatedAtMixin):
    name: str
    description: str | None
    owner_id: UUID


class WorkspaceWithMemberCount(WorkspaceRead):
    member_count: int


class WorkspaceMemberAdd(BaseSchema):
    """Add an existing user to a workspace by email."""

    email: EmailStr
    role: MemberRoleType = "member"


class WorkspaceMemberRead(BaseSchema, IDMixin):
    workspace_id: UUID
    user_id: UUID
    role: MemberRoleType
    joined_at: datetime


class WorkspaceMemberWithUser(WorkspaceMemberRead):
    user: UserSummary
