"""
Lesson content endpoints - lesson list, lesson tree, subtopics, resources and
AI-generated custom lessons.
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, status

from cryptotutor.ai.tutor import TutorError
from cryptotutor.api.deps import DbSession, Tutor
from cryptotutor.engines.content.lesson_repository import (
    LessonRepository,
    annotate_lesson,
    subtopic_ids,
    summarize_lesson,
)
from cryptotutor.engines.content.progress_store import ProgressStore
from cryptotutor.logging_config import get_logger
from cryptotutor.schemas.common import ErrorResponse
from cryptotutor.schemas.lesson import (
    CustomLessonRequest,
    LessonSummary,
    LessonTree,
    ResourceSchema,
    SubtopicDetail,
)

logger = get_logger(__name__)
router = APIRouter()


@router.get("/lessons", response_model=List[LessonSummary])
async def list_lessons(db: DbSession, user_id: Optional[int] = None):
    """
    Active lessons, with the user's overall progress when user_id is given.

    Custom lessons are listed for their owner only.
    """
    lessons = await LessonRepository(db).list_active_lessons(user_id)
    progress = {}
    if user_id is not None:
        progress = await ProgressStore(db).get_progress_by_user(user_id)
    return [summarize_lesson(lesson, progress) for lesson in lessons]


@router.get("/lessons/{lesson_id}", response_model=LessonTree)
async def get_lesson(lesson_id: int, db: DbSession, user_id: Optional[int] = None):
    """Lesson tree with each subtopic annotated with the user's progress."""
    lesson = await LessonRepository(db).get_lesson(lesson_id)
    if lesson is None or not lesson.is_active:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Lesson not found",
        )
    progress = {}
    if user_id is not None:
        progress = await ProgressStore(db).get_progress_by_user(user_id, subtopic_ids(lesson))
    return annotate_lesson(lesson, progress)


@router.get("/subtopics/{subtopic_id}", response_model=SubtopicDetail)
async def get_subtopic(subtopic_id: int, db: DbSession):
    subtopic = await LessonRepository(db).get_subtopic(subtopic_id)
    if subtopic is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Subtopic not found",
        )
    return SubtopicDetail.model_validate(subtopic)


@router.get("/resources/{resource_id}", response_model=ResourceSchema)
async def get_resource(resource_id: int, db: DbSession):
    resource = await LessonRepository(db).get_resource(resource_id)
    if resource is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Resource not found",
        )
    return ResourceSchema.model_validate(resource)


@router.post(
    "/lessons/custom",
    response_model=LessonTree,
    status_code=status.HTTP_201_CREATED,
    responses={502: {"model": ErrorResponse, "description": "Lesson generation failed"}},
)
async def create_custom_lesson(body: CustomLessonRequest, db: DbSession, tutor: Tutor):
    """Generate a lesson on the learner's topic and store it as theirs."""
    try:
        payload = await tutor.generate_custom_lesson(body.topic, body.difficulty)
    except TutorError as exc:
        logger.warning("Custom lesson rejected: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(exc),
        )
    lesson = await LessonRepository(db).add_generated_lesson(payload, body.user_id, body.difficulty)
    logger.info(
        "Custom lesson stored",
        extra={"lesson_id": lesson.id, "user_id": body.user_id},
    )
    return annotate_lesson(lesson, {})
