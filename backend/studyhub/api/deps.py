"""
FastAPI Dependencies for Authentication and Authorization.

Key patterns:
1. get_current_user: Extracts and validates JWT, returns User object
2. Workspace-scoped lookups: channel/message/workspace fetches join through
   workspace_members so a non-member sees 404, never another group's data
3. No global "current user" state - always pass user explicitly

Security model:
- JWT stored in HttpOnly cookie (recommended) or Authorization header
- Membership checks happen at the SQL level in the storage layer
"""

from datetime import datetime, timedelta, timezone
from typing import Annotated
from uuid import UUID

from fastapi import Cookie, Depends, Header, HTTPException, Response, status
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from studyhub.config import get_settings
from studyhub.db.models import Channel, Message, User, Workspace, WorkspaceMember
from studyhub.db.session import get_db
from studyhub.db.storage import storage
from studyhub.services.content_generator import ContentGenerator, get_content_generator

settings = get_settings()

ACCESS_TOKEN_COOKIE = "access_token"


# =============================================================================
# JWT UTILITIES
# =============================================================================


def create_access_token(user_id: UUID) -> str:
    """
    Create a JWT access token for a user.

    Token payload contains:
    - sub: user_id as string (standard JWT subject claim)
    - exp: expiration timestamp

    We do NOT store sensitive data in the JWT (email, name, etc.).
    """
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {
        "sub": str(user_id),
        "exp": expire,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> UUID | None:
    """
    Decode and validate a JWT access token.

    Returns user_id if valid, None if invalid/expired.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
        user_id_str = payload.get("sub")
        if user_id_str is None:
            return None
        return UUID(user_id_str)
    except (JWTError, ValueError):
        return None


def _cookie_options() -> dict:
    # Cross-domain deployments (e.g., separate frontend host) need samesite="none" + secure
    return {
        "httponly": True,
        "secure": settings.cookie_cross_domain or settings.environment != "development",
        "samesite": "none" if settings.cookie_cross_domain else "lax",
    }


def set_session_cookie(response: Response, user_id: UUID) -> tuple[str, int]:
    """Issue a JWT for the user and set it as the HttpOnly session cookie."""
    access_token = create_access_token(user_id)
    expires_in = settings.jwt_expire_minutes * 60
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=access_token,
        max_age=expires_in,
        **_cookie_options(),
    )
    return access_token, expires_in


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=ACCESS_TOKEN_COOKIE, **_cookie_options())


# =============================================================================
# AUTHENTICATION DEPENDENCIES
# =============================================================================


async def get_token_from_request(
    authorization: Annotated[str | None, Header()] = None,
    access_token: Annotated[str | None, Cookie()] = None,
) -> str:
    """
    Extract JWT token from request.

    Supports two methods (in order of preference):
    1. HttpOnly cookie named 'access_token' (recommended for web apps)
    2. Authorization header: 'Bearer <token>'
    """
    # Try cookie first
    if access_token:
        return access_token

    # Fall back to Authorization header
    if authorization:
        parts = authorization.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    token: Annotated[str, Depends(get_token_from_request)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Validate JWT and return the current authenticated user.

    Raises 401 if:
    - Token is missing, invalid, or expired
    - User no longer exists in database
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    user_id = decode_access_token(token)
    if user_id is None:
        raise credentials_exception

    user = await storage.get_user(db, user_id)
    if user is None:
        raise credentials_exception

    return user


# Type alias for dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
ContentGen = Annotated[ContentGenerator, Depends(get_content_generator)]


# =============================================================================
# MEMBERSHIP HELPERS
# =============================================================================
# Non-members get 404 for workspaces, channels and messages alike, so
# resource existence is not revealed outside the workspace.


async def get_member_workspace_or_404(
    db: AsyncSession,
    workspace_id: UUID,
    user_id: UUID,
) -> tuple[Workspace, WorkspaceMember]:
    """Fetch a workspace together with the caller's membership row."""
    membership = await storage.get_workspace_member(db, workspace_id, user_id)
    workspace = await storage.get_workspace(db, workspace_id) if membership else None
    if workspace is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workspace not found")
    return workspace, membership


async def get_member_channel_or_404(db: AsyncSession, channel_id: UUID, user_id: UUID) -> Channel:
    channel = await storage.get_member_channel(db, channel_id, user_id)
    if channel is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Channel not found")
    return channel


async def get_member_message_or_404(db: AsyncSession, message_id: UUID, user_id: UUID) -> Message:
    message = await storage.get_member_message(db, message_id, user_id)
    if message is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    return message
