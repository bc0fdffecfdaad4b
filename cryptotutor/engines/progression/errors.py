"""
Lesson progression errors.

All inherit from ProgressionError so route handlers can translate the family
in one place. Raising any of them leaves the session state untouched.
"""

from typing import Optional


class ProgressionError(Exception):
    """Base class for lesson progression failures."""


class InvalidTransitionError(ProgressionError):
    """Event is not accepted in the session's current mode."""

    def __init__(self, mode: str, event: str, reason: Optional[str] = None):
        self.mode = mode
        self.event = event
        self.reason = reason
        message = f"Invalid transition: event '{event}' in mode '{mode}'"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class SubtopicUnavailableError(ProgressionError):
    """Navigation target is locked behind an earlier subtopic or topic."""

    def __init__(self, topic_index: int, subtopic_index: int):
        self.topic_index = topic_index
        self.subtopic_index = subtopic_index
        super().__init__(
            f"Subtopic ({topic_index}, {subtopic_index}) is not available yet"
        )


class IncompleteAttemptError(ProgressionError):
    """Submit requested before every question has a selection."""

    def __init__(self, answered: int, total: int):
        self.answered = answered
        self.total = total
        super().__init__(f"Only {answered} of {total} questions answered")


class EmptyQuizError(ProgressionError):
    """A quiz attempt cannot be built from zero questions."""


class LessonUnavailableError(ProgressionError):
    """Lesson is missing (missing=True) or has no playable content."""

    def __init__(self, message: str, missing: bool = False):
        self.missing = missing
        super().__init__(message)
