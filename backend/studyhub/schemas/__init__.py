"""Pydantic schemas for API request/response validation."""

from studyhub.schemas.user import UserRead, UserSummary, UserUpdate
from studyhub.schemas.auth import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
)
from studyhub.schemas.workspaces import (
    WorkspaceCreate,
    WorkspaceMemberAdd,
    WorkspaceMemberRead,
    WorkspaceMemberWithUser,
    WorkspaceRead,
    WorkspaceWithMemberCount,
)
from studyhub.schemas.channels import ChannelCreate, ChannelRead
from studyhub.schemas.messages import (
    BookmarkRead,
    BookmarkWithMessage,
    MessageCreate,
    MessageRead,
    MessageWithAuthor,
    ThreadCreate,
    ThreadRead,
    ThreadWithAuthor,
)
from studyhub.schemas.progress import ChannelProgressDefault, DailyProgressEntry, StudyProgressRead
from studyhub.schemas.content import (
    ArticleSection,
    Quiz,
    QuizQuestion,
    StudyArticle,
    StudyPlan,
    StudyPlanWeek,
)

__all__ = [
    # User
    "UserRead",
    "UserSummary",
    "UserUpdate",
    # Auth
    "ChangePasswordRequest",
    "ForgotPasswordRequest",
    "LoginRequest",
    "RegisterRequest",
    "ResetPasswordRequest",
    "TokenResponse",
    # Workspaces
    "WorkspaceCreate",
    "WorkspaceMemberAdd",
    "WorkspaceMemberRead",
    "WorkspaceMemberWithUser",
    "WorkspaceRead",
    "WorkspaceWithMemberCount",
    # Channels
    "ChannelCreate",
    "ChannelRead",
    # Messages / threads / bookmarks
    "BookmarkRead",
    "BookmarkWithMessage",
    "MessageCreate",
    "MessageRead",
    "MessageWithAuthor",
    "ThreadCreate",
    "ThreadRead",
    "ThreadWithAuthor",
    # Progress
    "ChannelProgressDefault",
    "DailyProgressEntry",
    "StudyProgressRead",
    # Generated content
    "ArticleSection",
    "Quiz",
    "QuizQuestion",
    "StudyArticle",
    "StudyPlan",
    "StudyPlanWeek",
]
