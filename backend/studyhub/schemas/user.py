"""User schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from studyhub.schemas.base import BaseSchema


class UserSummary(BaseSchema):
    """Author/member view of a user embedded in other responses."""

    id: UUID
    email: str
    first_name: str | None
    last_name: str | None
    profile_image_url: str | None


class UserRead(UserSummary):
    """Full profile of the current user. Never exposes the password hash or reset token."""

    study_goals: str | None
    bio: str | None
    timezone: str
    email_verified: bool
    last_login_at: datetime | None
    created_at: datetime
    updated_at: datetime


class UserUpdate(BaseSchema):
    """Schema for updating user profile. All fields optional."""

    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    profile_image_url: str | None = None
    study_goals: str | None = None
    bio: str | None = None
    timezone: str | None = Field(None, min_length=1, max_length=50)

    @field_validator("timezone")
    @classmethod
    def timezone_not_null(cls, value: str | None) -> str:
        # May be omitted, but users.timezone is NOT NULL
        if value is None:
            raise ValueError("timezone cannot be null")
        return value
