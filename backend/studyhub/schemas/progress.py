"""Study progress schemas."""

from datetime import datetime
from uuid import UUID

from studyhub.schemas.base import BaseSchema, IDMixin


class StudyProgressRead(BaseSchema, IDMixin):
    user_id: UUID
    channel_id: UUID
    topics_studied: int
    daily_goal: int
    last_activity: datetime


class ChannelProgressDefault(BaseSchema):
    """Returned for a channel the user has no progress row for yet."""

    topics_studied: int = 0
    daily_goal: int = 5


class DailyProgressEntry(BaseSchema):
    channel_name: str
    progress: StudyProgressRead
