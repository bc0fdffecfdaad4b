"""
Kernel Layer

Persistent data model shared by every engine:
- Lesson content (lessons, topics, subtopics, resources, questions)
- Learner progress (per-subtopic completion and scores, quiz history,
  final test results)

Content is authored elsewhere and read-only here; progress is written only
through engines.content.progress_store.
"""

from cryptotutor.kernel.models import (
    Lesson,
    Topic,
    Subtopic,
    Resource,
    ResourceType,
    QuizQuestion,
    FinalTestQuestion,
    UserProgress,
    QuizResult,
    FinalTestResult,
)

__all__ = [
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
