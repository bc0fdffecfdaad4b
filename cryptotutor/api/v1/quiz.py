"""
Quiz endpoints - practice questions, final tests and result submission.
"""

from fastapi import APIRouter, HTTPException, status

from cryptotutor.api.deps import AppSettings, DbSession
from cryptotutor.engines.content.lesson_repository import LessonRepository
from cryptotutor.engines.content.progress_store import ProgressStore
from cryptotutor.engines.progression.scoring import is_passing
from cryptotutor.logging_config import get_logger
from cryptotutor.schemas.progress import ProgressResponse
from cryptotutor.schemas.quiz import (
    FinalTestResultResponse,
    FinalTestSubmitRequest,
    QuizQuestionSchema,
    QuizResponse,
    QuizSubmitRequest,
)

logger = get_logger(__name__)
router = APIRouter()


@router.get("/subtopic/{subtopic_id}", response_model=QuizResponse)
async def get_subtopic_quiz(subtopic_id: int, db: DbSession):
    """Practice questions for a subtopic."""
    rows = await LessonRepository(db).get_practice_questions(subtopic_id)
    if not rows:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No quiz found for this subtopic",
        )
    return QuizResponse(questions=[QuizQuestionSchema.model_validate(r) for r in rows])


@router.get("/lesson/{lesson_id}/final", response_model=QuizResponse)
async def get_final_test(lesson_id: int, db: DbSession):
    rows = await LessonRepository(db).get_final_test_questions(lesson_id)
    if not rows:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No final test found for this lesson",
        )
    return QuizResponse(questions=[QuizQuestionSchema.model_validate(r) for r in rows])


@router.post("/submit", response_model=ProgressResponse)
async def submit_quiz(body: QuizSubmitRequest, db: DbSession, settings: AppSettings):
    """
    Record a quiz result and upsert progress.
    A passing challenge ("ai") quiz completes the subtopic.
    """
    completed = body.quiz_type == "ai" and is_passing(body.score, settings.passing_score)
    row = await ProgressStore(db).record_quiz_result(
        body.user_id,
        body.subtopic_id,
        score=body.score,
        quiz_type=body.quiz_type,
        answers=body.answers,
        questions=[q.model_dump() for q in body.questions],
        completed=completed,
    )
    await db.refresh(row)
    logger.info(
        "Quiz submitted",
        extra={
            "user_id": body.user_id,
            "subtopic_id": body.subtopic_id,
            "quiz_type": body.quiz_type,
            "score": body.score,
        },
    )
    return ProgressResponse.model_validate(row)


@router.post("/final/submit", response_model=FinalTestResultResponse, status_code=status.HTTP_201_CREATED)
async def submit_final_test(body: FinalTestSubmitRequest, db: DbSession):
    result = await ProgressStore(db).save_final_test_result(
        body.user_id,
        body.lesson_id,
        body.score,
        feedback=body.feedback,
    )
    return FinalTestResultResponse.model_validate(result)
