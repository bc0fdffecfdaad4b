"""
Pytest fixtures for Crypto Tutor tests.
"""

import os
import tempfile
from typing import AsyncGenerator, Dict, List, Optional, Sequence

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cryptotutor.engines.progression.contracts import (
    ContentProvider,
    FinalTestWrite,
    ProgressSink,
    ProgressWrite,
    QuizResultWrite,
    TutorClient,
)
from cryptotutor.engines.progression.errors import LessonUnavailableError
from cryptotutor.kernel.models.base import Base
from cryptotutor.schemas.ai import ChatMessage
from cryptotutor.schemas.lesson import LessonTree, SubtopicNode, TopicNode
from cryptotutor.schemas.quiz import QuizQuestionSchema


# ── Builders ─────────────────────────────────────────────────────────────

def make_lesson(
    topic_sizes: Sequence[int] = (2,),
    completed: Sequence[tuple] = (),
    lesson_id: int = 1,
) -> LessonTree:
    """
    Lesson with len(topic_sizes) topics; topic t has topic_sizes[t] subtopics.
    `completed` lists (topic, subtopic) positions already completed.
    Subtopic ids are 100*(t+1) + s.
    """
    done = set(completed)
    topics = []
    for t, size in enumerate(topic_sizes):
        subtopics = [
            SubtopicNode(
                id=100 * (t + 1) + s,
                title=f"Subtopic {t}.{s}",
                objective=f"Objective {t}.{s}",
                key_concepts=["blocks", "hashes"],
                completed=(t, s) in done,
            )
            for s in range(size)
        ]
        topics.append(TopicNode(id=t + 1, title=f"Topic {t}", order=t, subtopics=subtopics))
    return LessonTree(id=lesson_id, title="Crypto Basics", topics=topics)


def make_questions(n: int, answer: int = 0, prefix: str = "Q") -> List[QuizQuestionSchema]:
    return [
        QuizQuestionSchema(
            question=f"{prefix}{i}?",
            options=["A", "B", "C", "D"],
            answer=answer,
            explanation=f"Because {answer}",
        )
        for i in range(n)
    ]


def make_generated_lesson(title: str = "Staking Basics", topics: int = 2, subtopics: int = 2) -> Dict:
    """A lesson object in the shape the model is asked to return."""

    def question(label: str) -> Dict:
        return {
            "question": f"{label}?",
            "options": ["Yes", "No", "Maybe", "Never"],
            "answer": 0,
            "explanation": f"About {label}",
        }

    return {
        "title": title,
        "description": "How proof-of-stake networks reward validators.",
        "topics": [
            {
                "title": f"Topic {t}",
                "subtopics": [
                    {
                        "title": f"Subtopic {t}.{s}",
                        "objective": f"Understand {t}.{s}",
                        "key_concepts": ["validators", "rewards"],
                        "resources": [
                            {"title": "Docs", "url": "https://ethereum.org/staking", "type": "link"},
                        ],
                        "quiz_questions": [question(f"Q{t}.{s}.{i}") for i in range(3)],
                    }
                    for s in range(subtopics)
                ],
            }
            for t in range(topics)
        ],
        "final_test": [question(f"F{i}") for i in range(10)],
    }


# ── Fakes ────────────────────────────────────────────────────────────────

class RecordingSink(ProgressSink):
    """Keeps every write in memory."""

    def __init__(self):
        self.progress: List[ProgressWrite] = []
        self.quiz_results: List[QuizResultWrite] = []
        self.final_tests: List[FinalTestWrite] = []

    def record_progress(self, write: ProgressWrite) -> None:
        self.progress.append(write)

    def record_quiz_result(self, write: QuizResultWrite) -> None:
        self.quiz_results.append(write)

    def record_final_test(self, write: FinalTestWrite) -> None:
        self.final_tests.append(write)


class FakeContentProvider(ContentProvider):
    """In-memory content; set `generation_error` to make generation fail."""

    def __init__(
        self,
        lesson: Optional[LessonTree] = None,
        practice: Optional[Dict[int, List[QuizQuestionSchema]]] = None,
        final_test: Optional[List[QuizQuestionSchema]] = None,
        generated: Optional[List[QuizQuestionSchema]] = None,
    ):
        self.lesson = lesson
        self.practice = practice or {}
        self.final_test = final_test or []
        self.generated = generated if generated is not None else make_questions(5, prefix="AI")
        self.generation_error: Optional[Exception] = None
        self.practice_error: Optional[Exception] = None
        self.generate_calls: List[tuple] = []

    async def get_lesson(self, lesson_id: int, user_id: int) -> LessonTree:
        if self.lesson is None or self.lesson.id != lesson_id:
            raise LessonUnavailableError(f"Lesson {lesson_id} not found", missing=True)
        return self.lesson

    async def get_practice_quiz(self, subtopic_id: int) -> List[QuizQuestionSchema]:
        if self.practice_error is not None:
            raise self.practice_error
        return list(self.practice.get(subtopic_id, []))

    async def get_final_test(self, lesson_id: int) -> List[QuizQuestionSchema]:
        return list(self.final_test)

    async def generate_quiz(
        self,
        subtopic: SubtopicNode,
        existing_questions: Sequence[str] = (),
    ) -> List[QuizQuestionSchema]:
        self.generate_calls.append((subtopic.id, list(existing_questions)))
        if self.generation_error is not None:
            raise self.generation_error
        return list(self.generated)


class FakeTutor(TutorClient):
    def __init__(self, reply: str = "Blocks are linked by hashes."):
        self.reply = reply
        self.error: Optional[Exception] = None
        self.calls: List[tuple] = []

    async def chat(self, topic: str, subtopics: Sequence[str], messages: Sequence[ChatMessage]) -> str:
        self.calls.append((topic, list(subtopics), list(messages)))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def fake_tutor() -> FakeTutor:
    return FakeTutor()


# ── Database ─────────────────────────────────────────────────────────────

@pytest_asyncio.fixture(scope="function")
async def sqlite_session_maker() -> AsyncGenerator[async_sessionmaker, None]:
    """Session factory over a fresh temp-file SQLite database."""
    tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
    tmp.close()
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp.name}",
        echo=False,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()
    if os.path.exists(tmp.name):
        os.unlink(tmp.name)


@pytest_asyncio.fixture(scope="function")
async def db_session(sqlite_session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with sqlite_session_maker() as session:
        yield session
        await session.rollback()
