"""Channel schemas."""

from typing import Literal
from uuid import UUID

from pydantic import Field

from studyhub.schemas.base import BaseSchema, CreatedAtMixin, IDMixin

ChannelTypeType = Literal["subject", "general"]


class ChannelCreate(BaseSchema):
    """Schema for creating a channel; the workspace comes from the URL."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    type: ChannelTypeType = "subject"


class ChannelRead(BaseSchema, IDMixin, CreatedAtMixin):
    name: str
    description: str | None
    workspace_id: UUID
    type: ChannelTypeType
