"""
Password hashing and reset-token helpers.

Passwords are hashed with bcrypt directly. bcrypt only looks at the first
72 bytes of its input (and newer releases reject longer input), so the
encoded password is truncated to that length before hashing and checking.
"""

import secrets
from datetime import datetime, timedelta, timezone

import bcrypt

from studyhub.config import get_settings

BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a plaintext password with a fresh salt."""
    salt = bcrypt.gensalt(rounds=get_settings().bcrypt_rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database
        return False


def generate_reset_token() -> tuple[str, datetime]:
    """Create a URL-safe password-reset token and its expiry time."""
    expiry = datetime.now(timezone.utc) + timedelta(minutes=get_settings().password_reset_expire_minutes)
    return secrets.token_urlsafe(32), expiry


def is_expired(expiry: datetime | None) -> bool:
    """
    True if expiry is missing or in the past.

    Naive datetimes (SQLite drops tzinfo on the way back) are read as UTC.
    """
    if expiry is None:
        return True
    if expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=timezone.utc)
    return expiry <= datetime.now(timezone.utc)
