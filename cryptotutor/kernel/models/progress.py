"""
Progress models - per-user subtopic progress, quiz history and final test results.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from cryptotutor.kernel.models.base import Base, TimestampMixin


class UserProgress(Base, TimestampMixin):
    """
    Per-user, per-subtopic progress.
    One row per (user_id, subtopic_id); written with upsert semantics.
    """

    __tablename__ = "user_progress"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    subtopic_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    db_quiz_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    ai_quiz_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "subtopic_id", name="uq_user_progress_user_subtopic"),
    )


class QuizResult(Base):
    """Record of a single submitted quiz (practice or challenge)."""

    __tablename__ = "quiz_results"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    subtopic_id: Mapped[int] = mapped_column(Integer, nullable=False)

    quiz_type: Mapped[str] = mapped_column(String(10), nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    answers: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    questions: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_quiz_results_user_subtopic_type", "user_id", "subtopic_id", "quiz_type"),
    )


class FinalTestResult(Base):
    """Lesson-level final test outcome."""

    __tablename__ = "user_final_test_results"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    lesson_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    feedback: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
