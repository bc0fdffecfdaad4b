"""
Database-backed ContentProvider.

Each call opens its own short-lived session, so the provider can be shared
by every live LessonSession in the process.
"""

from typing import List, Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cryptotutor.ai.quiz_generator import QuizGenerator
from cryptotutor.engines.content.lesson_repository import (
    LessonRepository,
    annotate_lesson,
    subtopic_ids,
)
from cryptotutor.engines.content.progress_store import ProgressStore
from cryptotutor.engines.progression.contracts import ContentProvider
from cryptotutor.engines.progression.errors import LessonUnavailableError
from cryptotutor.schemas.lesson import LessonTree, SubtopicNode
from cryptotutor.schemas.quiz import QuizQuestionSchema


class DatabaseContentProvider(ContentProvider):
    """Authored content from the database, generated quizzes from OpenAI."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        quiz_generator: QuizGenerator,
    ):
        self.session_maker = session_maker
        self.quiz_generator = quiz_generator

    async def get_lesson(self, lesson_id: int, user_id: int) -> LessonTree:
        async with self.session_maker() as session:
            lesson = await LessonRepository(session).get_lesson(lesson_id)
            if lesson is None or not lesson.is_active:
                raise LessonUnavailableError(f"Lesson {lesson_id} not found", missing=True)
            progress = await ProgressStore(session).get_progress_by_user(
                user_id, subtopic_ids(lesson)
            )
            return annotate_lesson(lesson, progress)

    async def get_practice_quiz(self, subtopic_id: int) -> List[QuizQuestionSchema]:
        async with self.session_maker() as session:
            rows = await LessonRepository(session).get_practice_questions(subtopic_id)
            return [QuizQuestionSchema.model_validate(r) for r in rows]

    async def get_final_test(self, lesson_id: int) -> List[QuizQuestionSchema]:
        async with self.session_maker() as session:
            rows = await LessonRepository(session).get_final_test_questions(lesson_id)
            return [QuizQuestionSchema.model_validate(r) for r in rows]

    async def generate_quiz(
        self,
        subtopic: SubtopicNode,
        existing_questions: Sequence[str] = (),
    ) -> List[QuizQuestionSchema]:
        return await self.quiz_generator.generate(
            subtopic.title,
            subtopic.objective or "",
            subtopic.key_concepts,
            existing_questions,
        )
