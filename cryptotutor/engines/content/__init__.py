"""
Content Engine - authored lessons, learner progress and the background sink.
"""

from cryptotutor.engines.content.progress_store import ProgressStore
from cryptotutor.engines.content.lesson_repository import (
    LessonRepository,
    annotate_lesson,
    summarize_lesson,
)
from cryptotutor.engines.content.provider import DatabaseContentProvider
from cryptotutor.engines.content.sinks import BackgroundProgressSink

__all__ = [
    "ProgressStore",
    "LessonRepository",
    "annotate_lesson",
    "summarize_lesson",
    "DatabaseContentProvider",
    "BackgroundProgressSink",
]
