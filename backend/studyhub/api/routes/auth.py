"""
Authentication Routes

Endpoints:
- POST /register - Create a local account and start a session
- POST /login - Exchange email/password for a session
- POST /logout - Clear session
- GET /user - Get current user profile
- PATCH /profile - Update profile fields
- POST /change-password - Change password (requires the current one)
- POST /forgot-password - Issue a password-reset token
- POST /reset-password - Set a new password with a reset token

Security:
- Passwords are bcrypt-hashed; plaintext never reaches the database
- JWT is HttpOnly cookie + response body (client chooses how to use)
- forgot-password answers identically whether or not the email exists
"""

import logging

from fastapi import APIRouter, HTTPException, Response, status
from sqlalchemy.exc import IntegrityError

from studyhub.api.deps import CurrentUser, DbSession, clear_session_cookie, set_session_cookie
from studyhub.config import get_settings
from studyhub.db.storage import storage
from studyhub.schemas.auth import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
)
from studyhub.schemas.base import StatusResponse
from studyhub.schemas.user import UserRead, UserUpdate
from studyhub.security import generate_reset_token, is_expired, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

FORGOT_PASSWORD_MESSAGE = "If an account exists for that email, a password reset link has been sent."


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    response: Response,
    db: DbSession,
) -> TokenResponse:
    """Create a local account and log it in."""
    if await storage.get_user_by_email(db, request.email) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    try:
        user = await storage.create_user(
            db,
            email=request.email,
            password=request.password,
            first_name=request.first_name,
            last_name=request.last_name,
        )
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    logger.info("Registered user %s", user.id)
    access_token, expires_in = set_session_cookie(response, user.id)
    return TokenResponse(access_token=access_token, expires_in=expires_in)


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    response: Response,
    db: DbSession,
) -> TokenResponse:
    """Exchange email/password for a session JWT."""
    user = await storage.get_user_by_email(db, request.email)
    if user is None or not verify_password(request.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    await storage.update_user_last_login(db, user)
    access_token, expires_in = set_session_cookie(response, user.id)
    return TokenResponse(access_token=access_token, expires_in=expires_in)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(response: Response) -> None:
    """
    Clear the authentication session.

    Note: This only clears the cookie. If the client stored the JWT
    elsewhere, it remains valid until expiry.
    """
    clear_session_cookie(response)


@router.get("/user", response_model=UserRead)
async def get_user(current_user: CurrentUser) -> UserRead:
    """Get the current authenticated user's profile."""
    return UserRead.model_validate(current_user)


@router.patch("/profile", response_model=UserRead)
async def update_profile(
    data: UserUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> UserRead:
    """Update the current user's profile. Only provided fields change."""
    user = await storage.update_user(db, current_user, **data.model_dump(exclude_unset=True))
    return UserRead.model_validate(user)


@router.post("/change-password", response_model=StatusResponse)
async def change_password(
    data: ChangePasswordRequest,
    current_user: CurrentUser,
    db: DbSession,
) -> StatusResponse:
    if not verify_password(data.current_password, current_user.hashed_password):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")

    await storage.update_user_password(db, current_user, data.new_password)
    return StatusResponse(message="Password updated")


@router.post("/forgot-password", response_model=StatusResponse)
async def forgot_password(data: ForgotPasswordRequest, db: DbSession) -> StatusResponse:
    """
    Issue a password-reset token.

    There is no mail delivery. In development the token is written to the
    server log; elsewhere only its issuance is logged. The response is the
    same whether or not the account exists.
    """
    user = await storage.get_user_by_email(db, data.email)
    if user is not None:
        token, expiry = generate_reset_token()
        await storage.update_user_reset_token(db, user, token, expiry)
        if get_settings().environment == "development":
            logger.info("Password reset token for user %s: %s (expires %s)", user.id, token, expiry.isoformat())
        else:
            logger.info("Password reset token issued for user %s", user.id)

    return StatusResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password", response_model=StatusResponse)
async def reset_password(data: ResetPasswordRequest, db: DbSession) -> StatusResponse:
    user = await storage.get_user_by_reset_token(db, data.token)
    if user is None or is_expired(user.reset_token_expiry):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired reset token")

    # Clears the token, so it cannot be used twice
    await storage.update_user_password(db, user, data.password)
    return StatusResponse(message="Password has been reset")
