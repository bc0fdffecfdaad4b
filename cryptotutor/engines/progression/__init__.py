"""
Progression Engine - lesson state machine, sidebar projection and scoring.

Flow per topic:
- learning through each subtopic
- chat with the tutor
- practice quiz (db), informational only
- challenge quiz (ai), 70% to complete the subtopic
After the last topic: final test, then final results.
"""

from cryptotutor.engines.progression.contracts import (
    ContentProvider,
    FinalTestWrite,
    ProgressSink,
    ProgressWrite,
    QuizResultWrite,
    TutorClient,
)
from cryptotutor.engines.progression.errors import (
    EmptyQuizError,
    IncompleteAttemptError,
    InvalidTransitionError,
    LessonUnavailableError,
    ProgressionError,
    SubtopicUnavailableError,
)
from cryptotutor.engines.progression.navigator import SidebarNavigator, SidebarView
from cryptotutor.engines.progression.quiz_loader import QuizLoader, fallback_question
from cryptotutor.engines.progression.registry import SessionRegistry
from cryptotutor.engines.progression.scoring import (
    PASSING_SCORE,
    QuizAttempt,
    QuizSource,
    is_passing,
    percentage,
)
from cryptotutor.engines.progression.state_machine import (
    LessonMode,
    LessonSession,
    QuizType,
    SessionEvent,
    SessionEventType,
    SessionState,
    allowed_events,
)

__all__ = [
    "ContentProvider",
    "FinalTestWrite",
    "ProgressSink",
    "ProgressWrite",
    "QuizResultWrite",
    "TutorClient",
    "EmptyQuizError",
    "IncompleteAttemptError",
    "InvalidTransitionError",
    "LessonUnavailableError",
    "ProgressionError",
    "SubtopicUnavailableError",
    "SidebarNavigator",
    "SidebarView",
    "QuizLoader",
    "fallback_question",
    "SessionRegistry",
    "PASSING_SCORE",
    "QuizAttempt",
    "QuizSource",
    "is_passing",
    "percentage",
    "LessonMode",
    "LessonSession",
    "QuizType",
    "SessionEvent",
    "SessionEventType",
    "SessionState",
    "allowed_events",
]
