"""
Progress endpoint - upsert a learner's subtopic progress.
"""

from fastapi import APIRouter

from cryptotutor.api.deps import DbSession
from cryptotutor.engines.content.progress_store import ProgressStore
from cryptotutor.schemas.progress import ProgressResponse, ProgressUpsertRequest

router = APIRouter()


@router.post("/progress", response_model=ProgressResponse)
async def upsert_progress(body: ProgressUpsertRequest, db: DbSession):
    """Create or update progress for (user_id, subtopic_id). Completion is never cleared."""
    row = await ProgressStore(db).upsert_progress(
        body.user_id,
        body.subtopic_id,
        completed=body.completed,
        db_quiz_score=body.db_quiz_score,
        ai_quiz_score=body.ai_quiz_score,
    )
    await db.refresh(row)
    return ProgressResponse.model_validate(row)
