"""Workspace, membership and channel-listing routes."""

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from studyhub.api.deps import CurrentUser, DbSession, get_member_workspace_or_404
from studyhub.db.models import MemberRole
from studyhub.db.storage import storage
from studyhub.schemas.channels import ChannelCreate, ChannelRead
from studyhub.schemas.workspaces import (
    WorkspaceCreate,
    WorkspaceMemberAdd,
    WorkspaceMemberRead,
    WorkspaceMemberWithUser,
    WorkspaceRead,
    WorkspaceWithMemberCount,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workspaces", tags=["workspaces"])


@router.get("", response_model=list[WorkspaceWithMemberCount])
async def list_workspaces(current_user: CurrentUser, db: DbSession) -> list[WorkspaceWithMemberCount]:
    """List the workspaces the current user belongs to."""
    rows = await storage.get_user_workspaces(db, current_user.id)
    return [
        WorkspaceWithMemberCount(**WorkspaceRead.model_validate(workspace).model_dump(), member_count=count)
        for workspace, count in rows
    ]


@router.post("", response_model=WorkspaceRead, status_code=status.HTTP_201_CREATED)
async def create_workspace(
    data: WorkspaceCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> WorkspaceRead:
    """Create a workspace owned by (and administered by) the current user."""
    workspace = await storage.create_workspace(
        db,
        owner_id=current_user.id,  # From auth, NEVER from request
        name=data.name,
        description=data.description,
    )
    return WorkspaceRead.model_validate(workspace)


@router.get("/{workspace_id}", response_model=WorkspaceRead)
async def get_workspace(
    workspace_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
) -> WorkspaceRead:
    workspace, _ = await get_member_workspace_or_404(db, workspace_id, current_user.id)
    return WorkspaceRead.model_validate(workspace)


@router.get("/{workspace_id}/members", response_model=list[WorkspaceMemberWithUser])
async def list_members(
    workspace_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
) -> list[WorkspaceMemberWithUser]:
    await get_member_workspace_or_404(db, workspace_id, current_user.id)
    members = await storage.get_workspace_members(db, workspace_id)
    return [WorkspaceMemberWithUser.model_validate(m) for m in members]


@router.post(
    "/{workspace_id}/members",
    response_model=WorkspaceMemberRead,
    status_code=status.HTTP_201_CREATED,
)
async def add_member(
    workspace_id: UUID,
    data: WorkspaceMemberAdd,
    current_user: CurrentUser,
    db: DbSession,
) -> WorkspaceMemberRead:
    """Add an existing user to the workspace. Admins only."""
    _, membership = await get_member_workspace_or_404(db, workspace_id, current_user.id)
    if membership.role != MemberRole.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only workspace admins can add members",
        )

    user = await storage.get_user_by_email(db, data.email)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if await storage.get_workspace_member(db, workspace_id, user.id) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User is already a member")

    member = await storage.add_workspace_member(db, workspace_id, user.id, role=data.role)
    logger.info("Added user %s to workspace %s as %s", user.id, workspace_id, data.role)
    return WorkspaceMemberRead.model_validate(member)


@router.get("/{workspace_id}/channels", response_model=list[ChannelRead])
async def list_channels(
    workspace_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
) -> list[ChannelRead]:
    """List a workspace's channels by name."""
    await get_member_workspace_or_404(db, workspace_id, current_user.id)
    channels = await storage.get_workspace_channels(db, workspace_id)
    return [ChannelRead.model_validate(c) for c in channels]


@router.post(
    "/{workspace_id}/channels",
    response_model=ChannelRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_channel(
    workspace_id: UUID,
    data: ChannelCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> ChannelRead:
    await get_member_workspace_or_404(db, workspace_id, current_user.id)
    channel = await storage.create_channel(
        db,
        workspace_id=workspace_id,
        name=data.name,
        description=data.description,
        channel_type=data.type,
    )
    return ChannelRead.model_validate(channel)
