"""
Background progress sink.

Each write runs as its own asyncio task with its own database session. The
caller never waits; failures are logged at WARNING and dropped, with no
retry. Outstanding tasks are tracked so shutdown and tests can drain them.
"""

import asyncio
from typing import Awaitable, Callable, Set

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cryptotutor.engines.content.progress_store import ProgressStore
from cryptotutor.engines.progression.contracts import (
    FinalTestWrite,
    ProgressSink,
    ProgressWrite,
    QuizResultWrite,
)
from cryptotutor.logging_config import get_logger

logger = get_logger(__name__)

StoreOperation = Callable[[ProgressStore], Awaitable[object]]


class BackgroundProgressSink(ProgressSink):
    """Fire-and-forget writes into the ProgressStore."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def record_progress(self, write: ProgressWrite) -> None:
        self._spawn(
            "progress",
            lambda store: store.upsert_progress(
                write.user_id,
                write.subtopic_id,
                completed=write.completed,
                db_quiz_score=write.db_quiz_score,
                ai_quiz_score=write.ai_quiz_score,
            ),
        )

    def record_quiz_result(self, write: QuizResultWrite) -> None:
        self._spawn(
            "quiz_result",
            lambda store: store.record_quiz_result(
                write.user_id,
                write.subtopic_id,
                score=write.score,
                quiz_type=write.quiz_type,
                answers=write.answers,
                questions=write.questions,
                completed=write.completed,
            ),
        )

    def record_final_test(self, write: FinalTestWrite) -> None:
        self._spawn(
            "final_test",
            lambda store: store.save_final_test_result(
                write.user_id,
                write.lesson_id,
                write.score,
                feedback=write.feedback,
            ),
        )

    def _spawn(self, kind: str, operation: StoreOperation) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; dropping %s write", kind)
            return
        task = loop.create_task(self._run(kind, operation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, kind: str, operation: StoreOperation) -> None:
        try:
            async with self.session_maker() as session:
                await operation(ProgressStore(session))
                await session.commit()
        except Exception as exc:
            logger.warning("Background %s write failed: %s", kind, exc)

    async def drain(self) -> None:
        """Wait until every scheduled write has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
