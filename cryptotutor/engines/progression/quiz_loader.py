"""
Quiz Loader - builds quiz attempts with fallbacks so the flow never stalls.

Fallback order:
- practice quiz missing or failing to load -> AI-generated quiz (still the
  practice step, source labelled "ai")
- AI generation failing -> one built-in backup question with a notice
- final test missing or failing to load -> the same backup question
"""

from typing import List, Optional

from cryptotutor.engines.progression.contracts import ContentProvider
from cryptotutor.engines.progression.scoring import QuizAttempt, QuizSource
from cryptotutor.logging_config import get_logger
from cryptotutor.schemas.lesson import LessonTree, SubtopicNode
from cryptotutor.schemas.quiz import QuizQuestionSchema

logger = get_logger(__name__)

FALLBACK_OPTIONS = ["Option A", "Option B", "Option C", "Option D"]
FALLBACK_EXPLANATION = "This is the correct answer based on the content."
FALLBACK_NOTICE = (
    "We couldn't load the quiz questions right now, so here is a backup question instead."
)


def fallback_question(title: str) -> QuizQuestionSchema:
    """Single placeholder question about a subtopic or lesson."""
    return QuizQuestionSchema(
        question=f"What is the main focus of {title}?",
        options=list(FALLBACK_OPTIONS),
        answer=0,
        explanation=FALLBACK_EXPLANATION,
    )


def fallback_attempt(title: str) -> QuizAttempt:
    return QuizAttempt([fallback_question(title)], source=QuizSource.FALLBACK, notice=FALLBACK_NOTICE)


class QuizLoader:
    """Loads practice, challenge and final test attempts from a ContentProvider."""

    def __init__(self, content: ContentProvider):
        self.content = content

    async def _practice_questions(self, subtopic: SubtopicNode) -> List[QuizQuestionSchema]:
        try:
            return list(await self.content.get_practice_quiz(subtopic.id))
        except Exception as exc:
            logger.warning(
                "Practice quiz fetch failed: %s",
                exc,
                extra={"subtopic_id": subtopic.id},
            )
            return []

    async def _generated(
        self,
        subtopic: SubtopicNode,
        existing: Optional[List[QuizQuestionSchema]] = None,
    ) -> QuizAttempt:
        existing_texts = [q.question for q in existing or []]
        try:
            questions = await self.content.generate_quiz(subtopic, existing_texts)
        except Exception as exc:
            logger.warning(
                "Quiz generation failed, using backup question: %s",
                exc,
                extra={"subtopic_id": subtopic.id},
            )
            return fallback_attempt(subtopic.title)
        if not questions:
            logger.warning("Quiz generation returned no questions", extra={"subtopic_id": subtopic.id})
            return fallback_attempt(subtopic.title)
        return QuizAttempt(questions, source=QuizSource.AI)

    async def load_practice(self, subtopic: SubtopicNode) -> QuizAttempt:
        questions = await self._practice_questions(subtopic)
        if questions:
            return QuizAttempt(questions, source=QuizSource.DATABASE)
        logger.info(
            "No practice questions, generating a quiz instead",
            extra={"subtopic_id": subtopic.id},
        )
        return await self._generated(subtopic)

    async def load_challenge(self, subtopic: SubtopicNode) -> QuizAttempt:
        # Practice questions are passed along so the model avoids repeating them
        practice = await self._practice_questions(subtopic)
        return await self._generated(subtopic, practice)

    async def load_final_test(self, lesson: LessonTree) -> QuizAttempt:
        try:
            questions = list(await self.content.get_final_test(lesson.id))
        except Exception as exc:
            logger.warning("Final test fetch failed: %s", exc, extra={"lesson_id": lesson.id})
            questions = []
        if not questions:
            return fallback_attempt(lesson.title)
        return QuizAttempt(questions, source=QuizSource.DATABASE)
