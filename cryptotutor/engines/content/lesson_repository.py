"""
Lesson Repository - queries over lesson content, plus storing AI-generated
custom lessons.
"""

from typing import Dict, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cryptotutor.engines.progression.scoring import percentage
from cryptotutor.kernel.models.lesson import (
    FinalTestQuestion,
    Lesson,
    QuizQuestion,
    Resource,
    Subtopic,
    Topic,
)
from cryptotutor.kernel.models.progress import UserProgress
from cryptotutor.schemas.lesson import (
    GeneratedLessonPayload,
    LessonSummary,
    LessonTree,
    ResourceSchema,
    SubtopicNode,
    TopicNode,
)


class LessonRepository:
    """Loads lessons with their topic/subtopic tree eagerly."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _tree_query(self):
        return select(Lesson).options(
            selectinload(Lesson.topics)
            .selectinload(Topic.subtopics)
            .selectinload(Subtopic.resources)
        )

    async def get_lesson(self, lesson_id: int) -> Optional[Lesson]:
        result = await self.session.execute(self._tree_query().where(Lesson.id == lesson_id))
        return result.scalar_one_or_none()

    async def list_active_lessons(self, user_id: Optional[int] = None) -> List[Lesson]:
        """Shared lessons, plus the custom lessons owned by user_id."""
        visible = Lesson.owner_id.is_(None)
        if user_id is not None:
            visible = or_(visible, Lesson.owner_id == user_id)
        result = await self.session.execute(
            self._tree_query()
            .where(Lesson.is_active.is_(True), visible)
            .order_by(Lesson.id)
        )
        return list(result.scalars().all())

    async def add_generated_lesson(
        self,
        payload: GeneratedLessonPayload,
        owner_id: int,
        difficulty: str,
    ) -> Lesson:
        """Store a generated lesson tree as a custom lesson owned by owner_id."""
        lesson = Lesson(
            title=payload.title,
            description=payload.description,
            level=difficulty,
            language="en",
            icon="sparkles",
            is_active=True,
            owner_id=owner_id,
        )
        for t_order, gen_topic in enumerate(payload.topics, start=1):
            topic = Topic(title=gen_topic.title, order=t_order)
            for s_order, gen_sub in enumerate(gen_topic.subtopics, start=1):
                subtopic = Subtopic(
                    title=gen_sub.title,
                    objective=gen_sub.objective,
                    key_concepts=list(gen_sub.key_concepts),
                    order=s_order,
                )
                subtopic.resources = [
                    Resource(
                        type=r.type,
                        title=r.title,
                        url=r.url,
                        description=r.description,
                        content_tags=[],
                        is_optional=True,
                    )
                    for r in gen_sub.resources
                ]
                subtopic.quiz_questions = [
                    QuizQuestion(**q.model_dump()) for q in gen_sub.quiz_questions
                ]
                topic.subtopics.append(subtopic)
            lesson.topics.append(topic)
        lesson.final_test_questions = [
            FinalTestQuestion(**q.model_dump()) for q in payload.final_test
        ]

        self.session.add(lesson)
        await self.session.flush()
        return lesson

    async def get_subtopic(self, subtopic_id: int) -> Optional[Subtopic]:
        result = await self.session.execute(
            select(Subtopic)
            .options(selectinload(Subtopic.resources))
            .where(Subtopic.id == subtopic_id)
        )
        return result.scalar_one_or_none()

    async def get_resource(self, resource_id: int) -> Optional[Resource]:
        return await self.session.get(Resource, resource_id)

    async def get_practice_questions(self, subtopic_id: int) -> List[QuizQuestion]:
        result = await self.session.execute(
            select(QuizQuestion)
            .where(QuizQuestion.subtopic_id == subtopic_id)
            .order_by(QuizQuestion.id)
        )
        return list(result.scalars().all())

    async def get_final_test_questions(self, lesson_id: int) -> List[FinalTestQuestion]:
        result = await self.session.execute(
            select(FinalTestQuestion)
            .where(FinalTestQuestion.lesson_id == lesson_id)
            .order_by(FinalTestQuestion.id)
        )
        return list(result.scalars().all())


def subtopic_ids(lesson: Lesson) -> List[int]:
    return [sub.id for topic in lesson.topics for sub in topic.subtopics]


def annotate_lesson(lesson: Lesson, progress: Dict[int, UserProgress]) -> LessonTree:
    """Build the learner-facing tree with each subtopic's progress attached."""
    topics = []
    for topic in lesson.topics:
        subtopics = []
        for sub in topic.subtopics:
            row = progress.get(sub.id)
            subtopics.append(
                SubtopicNode(
                    id=sub.id,
                    title=sub.title,
                    objective=sub.objective,
                    key_concepts=list(sub.key_concepts or []),
                    resources=[ResourceSchema.model_validate(r) for r in sub.resources],
                    completed=bool(row and row.completed),
                    db_quiz_score=row.db_quiz_score if row else None,
                    ai_quiz_score=row.ai_quiz_score if row else None,
                )
            )
        topics.append(TopicNode(id=topic.id, title=topic.title, order=topic.order, subtopics=subtopics))

    return LessonTree(
        id=lesson.id,
        title=lesson.title,
        description=lesson.description,
        level=lesson.level,
        language=lesson.language,
        icon=lesson.icon,
        owner_id=lesson.owner_id,
        topics=topics,
    )


def summarize_lesson(lesson: Lesson, progress: Dict[int, UserProgress]) -> LessonSummary:
    ids = subtopic_ids(lesson)
    completed = sum(1 for sid in ids if sid in progress and progress[sid].completed)
    return LessonSummary(
        id=lesson.id,
        title=lesson.title,
        description=lesson.description,
        level=lesson.level,
        language=lesson.language,
        icon=lesson.icon,
        topic_count=len(lesson.topics),
        subtopic_count=len(ids),
        completed_subtopics=completed,
        progress=percentage(completed, len(ids)),
    )
