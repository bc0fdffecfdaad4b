"""
Collaborator contracts for a LessonSession.

The session only talks to content, persistence and the tutor through these
interfaces. Implementations live in engines.content and cryptotutor.ai.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from cryptotutor.schemas.ai import ChatMessage
from cryptotutor.schemas.lesson import LessonTree, SubtopicNode
from cryptotutor.schemas.quiz import QuizQuestionSchema


@dataclass(frozen=True)
class ProgressWrite:
    """Completion (and optionally scores) for one (user, subtopic)."""
    user_id: int
    subtopic_id: int
    completed: bool
    db_quiz_score: Optional[int] = None
    ai_quiz_score: Optional[int] = None


@dataclass(frozen=True)
class QuizResultWrite:
    user_id: int
    subtopic_id: int
    score: int
    quiz_type: str
    completed: bool = False
    answers: List[Optional[int]] = field(default_factory=list)
    questions: List[Dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class FinalTestWrite:
    user_id: int
    lesson_id: int
    score: int
    feedback: Optional[str] = None


class ProgressSink(ABC):
    """
    Fire-and-forget persistence of progress events.

    Methods return immediately. Implementations must never raise a storage
    failure back into the caller.
    """

    @abstractmethod
    def record_progress(self, write: ProgressWrite) -> None:
        ...

    @abstractmethod
    def record_quiz_result(self, write: QuizResultWrite) -> None:
        ...

    @abstractmethod
    def record_final_test(self, write: FinalTestWrite) -> None:
        ...

    async def drain(self) -> None:
        """Wait for outstanding writes. No-op for synchronous sinks."""
        return None


class ContentProvider(ABC):
    """Source of lesson trees and quiz questions."""

    @abstractmethod
    async def get_lesson(self, lesson_id: int, user_id: int) -> LessonTree:
        """Lesson annotated with the user's progress. Raises LessonUnavailableError."""

    @abstractmethod
    async def get_practice_quiz(self, subtopic_id: int) -> List[QuizQuestionSchema]:
        """Pre-authored questions for a subtopic, possibly empty."""

    @abstractmethod
    async def get_final_test(self, lesson_id: int) -> List[QuizQuestionSchema]:
        """Pre-authored final test questions, possibly empty."""

    @abstractmethod
    async def generate_quiz(
        self,
        subtopic: SubtopicNode,
        existing_questions: Sequence[str] = (),
    ) -> List[QuizQuestionSchema]:
        """AI-generated, validated questions. Raises on failure."""


class TutorClient(ABC):
    """Conversational tutor used in chat mode."""

    @abstractmethod
    async def chat(
        self,
        topic: str,
        subtopics: Sequence[str],
        messages: Sequence[ChatMessage],
    ) -> str:
        ...
