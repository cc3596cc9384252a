"""Cross-channel study progress route."""

from fastapi import APIRouter

from studyhub.api.deps import CurrentUser, DbSession
from studyhub.db.storage import storage
from studyhub.schemas.progress import DailyProgressEntry, StudyProgressRead

router = APIRouter(tags=["progress"])


@router.get("/study-progress", response_model=list[DailyProgressEntry])
async def get_study_progress(current_user: CurrentUser, db: DbSession) -> list[DailyProgressEntry]:
    """The user's progress in every channel, most recently active first."""
    rows = await storage.get_user_daily_progress(db, current_user.id)
    return [
        DailyProgressEntry(channel_name=channel_name, progress=StudyProgressRead.model_validate(progress))
        for channel_name, progress in rows
    ]
