"""
Kernel Data Models

SQLAlchemy models for lesson content and learner progress.
"""

from cryptotutor.kernel.models.base import Base, TimestampMixin
from cryptotutor.kernel.models.lesson import (
    Lesson,
    Topic,
    Subtopic,
    Resource,
    ResourceType,
    QuizQuestion,
    FinalTestQuestion,
)
from cryptotutor.kernel.models.progress import UserProgress, QuizResult, FinalTestResult

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Content
    "Lesson",
    "Topic",
    "Subtopic",
    "Resource",
    "ResourceType",
    "QuizQuestion",
    "FinalTestQuestion",
    # Progress
    "UserProgress",
    "QuizResult",
    "FinalTestResult",
]
