"""
Progress Store - durable record of subtopic completion and quiz scores.

Every write is an upsert keyed by (user_id, subtopic_id). Completion is
sticky: once a row is completed, a later write with completed=False keeps it
completed.
"""

from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from cryptotutor.kernel.models.progress import FinalTestResult, QuizResult, UserProgress
from cryptotutor.logging_config import get_logger

logger = get_logger(__name__)


def progress_upsert(
    dialect_name: str,
    user_id: int,
    subtopic_id: int,
    completed: bool = False,
    db_quiz_score: Optional[int] = None,
    ai_quiz_score: Optional[int] = None,
):
    """INSERT .. ON CONFLICT DO UPDATE for one progress row (PostgreSQL or SQLite)."""
    insert = sqlite_insert if dialect_name == "sqlite" else pg_insert
    stmt = insert(UserProgress).values(
        user_id=user_id,
        subtopic_id=subtopic_id,
        completed=completed,
        db_quiz_score=db_quiz_score,
        ai_quiz_score=ai_quiz_score,
    )
    return stmt.on_conflict_do_update(
        index_elements=[UserProgress.user_id, UserProgress.subtopic_id],
        set_={
            "completed": or_(UserProgress.completed, stmt.excluded.completed),
            "db_quiz_score": func.coalesce(stmt.excluded.db_quiz_score, UserProgress.db_quiz_score),
            "ai_quiz_score": func.coalesce(stmt.excluded.ai_quiz_score, UserProgress.ai_quiz_score),
            "updated_at": func.now(),
        },
    )


class ProgressStore:
    """Reads and upserts learner progress within one database session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(
        self,
        user_id: int,
        subtopic_id: int,
        refresh: bool = False,
    ) -> Optional[UserProgress]:
        query = select(UserProgress).where(
            and_(
                UserProgress.user_id == user_id,
                UserProgress.subtopic_id == subtopic_id,
            )
        )
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def upsert_progress(
        self,
        user_id: int,
        subtopic_id: int,
        completed: bool = False,
        db_quiz_score: Optional[int] = None,
        ai_quiz_score: Optional[int] = None,
    ) -> UserProgress:
        """
        Create or update the progress row for (user, subtopic).

        Scores are only overwritten when a new value is given. A single
        INSERT .. ON CONFLICT DO UPDATE, so concurrent writers for a new row
        both land.
        """
        stmt = progress_upsert(
            self.session.get_bind().dialect.name,
            user_id,
            subtopic_id,
            completed=completed,
            db_quiz_score=db_quiz_score,
            ai_quiz_score=ai_quiz_score,
        )
        await self.session.execute(stmt)
        row = await self.get(user_id, subtopic_id, refresh=True)
        logger.debug(
            "Progress upserted",
            extra={"user_id": user_id, "subtopic_id": subtopic_id, "completed": row.completed},
        )
        return row

    async def record_quiz_result(
        self,
        user_id: int,
        subtopic_id: int,
        score: int,
        quiz_type: str,
        answers: List[Optional[int]],
        questions: List[Dict[str, Any]],
        completed: bool = False,
    ) -> UserProgress:
        """Append a quiz history row and upsert the matching score field."""
        self.session.add(
            QuizResult(
                user_id=user_id,
                subtopic_id=subtopic_id,
                score=score,
                quiz_type=quiz_type,
                answers=list(answers),
                questions=list(questions),
            )
        )
        if quiz_type == "ai":
            return await self.upsert_progress(
                user_id, subtopic_id, completed=completed, ai_quiz_score=score
            )
        return await self.upsert_progress(
            user_id, subtopic_id, completed=completed, db_quiz_score=score
        )

    async def save_final_test_result(
        self,
        user_id: int,
        lesson_id: int,
        score: int,
        feedback: Optional[str] = None,
    ) -> FinalTestResult:
        result = FinalTestResult(
            user_id=user_id,
            lesson_id=lesson_id,
            score=score,
            feedback=feedback,
        )
        self.session.add(result)
        await self.session.flush()
        await self.session.refresh(result)
        return result

    async def get_progress_by_user(
        self,
        user_id: int,
        subtopic_ids: Optional[Iterable[int]] = None,
    ) -> Dict[int, UserProgress]:
        """Map subtopic_id -> progress row for a user."""
        query = select(UserProgress).where(UserProgress.user_id == user_id)
        if subtopic_ids is not None:
            ids = list(subtopic_ids)
            if not ids:
                return {}
            query = query.where(UserProgress.subtopic_id.in_(ids))
        result = await self.session.execute(query)
        return {row.subtopic_id: row for row in result.scalars().all()}

