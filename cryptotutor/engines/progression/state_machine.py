"""
Lesson progression state machine.

A LessonSession walks one learner through a lesson:

    learning -> chat -> quiz(db) -> quiz-results -> quiz(ai) -> quiz-results
             -> learning (next subtopic, or same one on a fail)
             -> final-test -> final-results

Transitions are synchronous and go through a single dispatch() backed by the
_TRANSITIONS table. Anything not in the table is rejected with
InvalidTransitionError and the state is left exactly as it was. Quiz content
is loaded separately with `await session.load_assessment()`; a load that
finishes after the session has moved on (or was closed) is dropped.
Persistence is handed to a ProgressSink and never awaited here.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel

from cryptotutor.engines.progression.contracts import (
    ContentProvider,
    FinalTestWrite,
    ProgressSink,
    ProgressWrite,
    QuizResultWrite,
    TutorClient,
)
from cryptotutor.engines.progression.errors import (
    InvalidTransitionError,
    LessonUnavailableError,
    SubtopicUnavailableError,
)
from cryptotutor.engines.progression.navigator import SidebarNavigator
from cryptotutor.engines.progression.quiz_loader import QuizLoader
from cryptotutor.engines.progression.scoring import PASSING_SCORE, QuizAttempt, is_passing
from cryptotutor.logging_config import get_logger
from cryptotutor.schemas.ai import ChatMessage
from cryptotutor.schemas.lesson import LessonTree, SubtopicNode, TopicNode

logger = get_logger(__name__)

READY_MESSAGES = frozenset({"ready", "i'm ready", "im ready"})
QUIZ_START_REPLY = "Great! I'll start the quiz now. Good luck!"
CHAT_ERROR_REPLY = "I'm sorry, I couldn't process your message. Please try again."


class LessonMode(str, Enum):
    """What the learner is currently doing."""
    LEARNING = "learning"
    CHAT = "chat"
    QUIZ = "quiz"
    QUIZ_RESULTS = "quiz-results"
    FINAL_TEST = "final-test"
    FINAL_RESULTS = "final-results"  # terminal


class QuizType(str, Enum):
    DB = "db"  # practice
    AI = "ai"  # challenge, gates completion


class SessionEventType(str, Enum):
    FINISH_SUBTOPIC = "finish-subtopic"
    REQUEST_QUIZ = "request-quiz"
    SUBMIT_QUIZ = "submit-quiz"
    CONTINUE = "continue"
    SUBMIT_FINAL_TEST = "submit-final-test"
    SELECT_SUBTOPIC = "select-subtopic"


class SessionEvent(BaseModel):
    """An event sent to dispatch(). Position fields are used by select-subtopic."""

    type: SessionEventType
    topic_index: Optional[int] = None
    subtopic_index: Optional[int] = None


# (mode, event) -> handler method name
_TRANSITIONS: Dict[Tuple[LessonMode, SessionEventType], str] = {
    (LessonMode.LEARNING, SessionEventType.FINISH_SUBTOPIC): "_on_finish_subtopic",
    (LessonMode.LEARNING, SessionEventType.SELECT_SUBTOPIC): "_on_select_subtopic",
    (LessonMode.CHAT, SessionEventType.REQUEST_QUIZ): "_on_request_quiz",
    (LessonMode.QUIZ, SessionEventType.SUBMIT_QUIZ): "_on_submit_quiz",
    (LessonMode.QUIZ_RESULTS, SessionEventType.CONTINUE): "_on_continue",
    (LessonMode.FINAL_TEST, SessionEventType.SUBMIT_FINAL_TEST): "_on_submit_final_test",
}


def allowed_events(mode: LessonMode) -> List[SessionEventType]:
    """Events accepted in the given mode."""
    return [event for (m, event) in _TRANSITIONS if m == mode]


@dataclass
class SessionState:
    """Volatile per-visit state. Never persisted."""
    topic_index: int = 0
    subtopic_index: int = 0
    mode: LessonMode = LessonMode.LEARNING
    quiz_type: QuizType = QuizType.DB
    last_quiz_score: Optional[int] = None
    final_score: Optional[int] = None
    attempt: Optional[QuizAttempt] = None
    chat: List[ChatMessage] = field(default_factory=list)


class LessonSession:
    """One learner's pass through one lesson."""

    def __init__(
        self,
        lesson: LessonTree,
        user_id: int,
        content: ContentProvider,
        sink: ProgressSink,
        tutor: TutorClient,
        passing_score: int = PASSING_SCORE,
        session_id: Optional[str] = None,
    ):
        if not lesson.topics:
            raise LessonUnavailableError(f"Lesson {lesson.id} has no topics")
        for topic in lesson.topics:
            if not topic.subtopics:
                raise LessonUnavailableError(
                    f"Topic {topic.id} of lesson {lesson.id} has no subtopics"
                )

        self.id = session_id or uuid.uuid4().hex
        self.lesson = lesson
        self.user_id = user_id
        self.sink = sink
        self.tutor = tutor
        self.passing_score = passing_score
        self.navigator = SidebarNavigator(lesson)
        self.state = SessionState()
        self._loader = QuizLoader(content)
        self._epoch = 0
        self._closed = False

    @classmethod
    async def open(
        cls,
        lesson_id: int,
        user_id: int,
        content: ContentProvider,
        sink: ProgressSink,
        tutor: TutorClient,
        passing_score: int = PASSING_SCORE,
    ) -> "LessonSession":
        """Fetch the lesson (with progress) once and start at (0, 0)."""
        lesson = await content.get_lesson(lesson_id, user_id)
        return cls(lesson, user_id, content, sink, tutor, passing_score=passing_score)

    # ── Position helpers ────────────────────────────────────────────────

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def current_topic(self) -> TopicNode:
        return self.lesson.topics[self.state.topic_index]

    @property
    def current_subtopic(self) -> SubtopicNode:
        return self.current_topic.subtopics[self.state.subtopic_index]

    def _is_last_in_topic(self) -> bool:
        return self.state.subtopic_index == len(self.current_topic.subtopics) - 1

    def _is_last_topic(self) -> bool:
        return self.state.topic_index == len(self.lesson.topics) - 1

    # ── Dispatch ────────────────────────────────────────────────────────

    def dispatch(self, event: SessionEvent) -> SessionState:
        """Apply one event. Raises a ProgressionError and changes nothing on rejection."""
        mode = self.state.mode
        if self._closed:
            raise InvalidTransitionError(mode.value, event.type.value, "session is closed")
        handler_name = _TRANSITIONS.get((mode, event.type))
        if handler_name is None:
            raise InvalidTransitionError(mode.value, event.type.value)

        getattr(self, handler_name)(event)

        logger.info(
            "Lesson transition %s --%s--> %s",
            mode.value,
            event.type.value,
            self.state.mode.value,
            extra={
                "lesson_id": self.lesson.id,
                "topic_index": self.state.topic_index,
                "subtopic_index": self.state.subtopic_index,
            },
        )
        return self.state

    def _on_finish_subtopic(self, event: SessionEvent) -> None:
        if self._is_last_in_topic():
            self.state.mode = LessonMode.CHAT
            self.state.chat = [ChatMessage(role="assistant", content=self._chat_greeting())]
            return

        self._mark_completed(self.current_subtopic)
        self.sink.record_progress(
            ProgressWrite(user_id=self.user_id, subtopic_id=self.current_subtopic.id, completed=True)
        )
        self.state.subtopic_index += 1

    def _on_select_subtopic(self, event: SessionEvent) -> None:
        if event.topic_index is None or event.subtopic_index is None:
            raise InvalidTransitionError(
                self.state.mode.value, event.type.value, "topic_index and subtopic_index are required"
            )
        if not self.navigator.is_subtopic_available(event.topic_index, event.subtopic_index):
            raise SubtopicUnavailableError(event.topic_index, event.subtopic_index)
        self.state.topic_index = event.topic_index
        self.state.subtopic_index = event.subtopic_index

    def _on_request_quiz(self, event: SessionEvent) -> None:
        self.state.quiz_type = QuizType.DB
        self._enter_assessment(LessonMode.QUIZ)

    def _on_submit_quiz(self, event: SessionEvent) -> None:
        attempt = self._require_attempt(event)
        score = attempt.score()  # raises IncompleteAttemptError before any change

        subtopic = self.current_subtopic
        quiz_type = self.state.quiz_type
        completed = quiz_type == QuizType.AI and is_passing(score, self.passing_score)

        if quiz_type == QuizType.AI:
            subtopic.ai_quiz_score = score
        else:
            subtopic.db_quiz_score = score
        if completed:
            self._mark_completed(subtopic)

        self.sink.record_quiz_result(
            QuizResultWrite(
                user_id=self.user_id,
                subtopic_id=subtopic.id,
                score=score,
                quiz_type=quiz_type.value,
                completed=completed,
                answers=list(attempt.selections),
                questions=[q.model_dump() for q in attempt.questions],
            )
        )
        self.state.last_quiz_score = score
        self.state.mode = LessonMode.QUIZ_RESULTS

    def _on_continue(self, event: SessionEvent) -> None:
        if self.state.quiz_type == QuizType.DB:
            # Practice never gates: always on to the challenge quiz
            self.state.quiz_type = QuizType.AI
            self._enter_assessment(LessonMode.QUIZ)
            return

        if not is_passing(self.state.last_quiz_score, self.passing_score):
            self.state.mode = LessonMode.LEARNING
            return

        if self._is_last_in_topic() and self._is_last_topic():
            self._enter_assessment(LessonMode.FINAL_TEST)
        elif self._is_last_in_topic():
            self.state.topic_index += 1
            self.state.subtopic_index = 0
            self.state.mode = LessonMode.LEARNING
        else:
            self.state.subtopic_index += 1
            self.state.mode = LessonMode.LEARNING

    def _on_submit_final_test(self, event: SessionEvent) -> None:
        attempt = self._require_attempt(event)
        score = attempt.score()
        self.sink.record_final_test(
            FinalTestWrite(user_id=self.user_id, lesson_id=self.lesson.id, score=score)
        )
        self.state.final_score = score
        self.state.last_quiz_score = score
        self.state.mode = LessonMode.FINAL_RESULTS

    # ── Assessment loading ──────────────────────────────────────────────

    def _enter_assessment(self, mode: LessonMode) -> None:
        """Every entry starts a fresh attempt and invalidates in-flight loads."""
        self._epoch += 1
        self.state.attempt = None
        self.state.last_quiz_score = None
        self.state.mode = mode

    def _require_attempt(self, event: SessionEvent) -> QuizAttempt:
        if self.state.attempt is None:
            raise InvalidTransitionError(
                self.state.mode.value, event.type.value, "questions have not been loaded"
            )
        return self.state.attempt

    async def load_assessment(self) -> Optional[QuizAttempt]:
        """
        Load questions for the current quiz or final test.

        Returns the active attempt, or None when the result arrived after the
        session moved on and was discarded.
        """
        mode = self.state.mode
        if self._closed or mode not in (LessonMode.QUIZ, LessonMode.FINAL_TEST):
            raise InvalidTransitionError(mode.value, "load-assessment")
        if self.state.attempt is not None:
            return self.state.attempt

        epoch = self._epoch
        if mode == LessonMode.FINAL_TEST:
            attempt = await self._loader.load_final_test(self.lesson)
        elif self.state.quiz_type == QuizType.DB:
            attempt = await self._loader.load_practice(self.current_subtopic)
        else:
            attempt = await self._loader.load_challenge(self.current_subtopic)

        if self._closed or epoch != self._epoch:
            logger.info("Discarding stale assessment load", extra={"lesson_id": self.lesson.id})
            return None
        if self.state.attempt is None:
            self.state.attempt = attempt
        return self.state.attempt

    def select_answer(self, question_index: int, option_index: int) -> QuizAttempt:
        """Record a selection in the active attempt."""
        if self._closed or self.state.mode not in (LessonMode.QUIZ, LessonMode.FINAL_TEST):
            raise InvalidTransitionError(self.state.mode.value, "select-answer")
        if self.state.attempt is None:
            raise InvalidTransitionError(
                self.state.mode.value, "select-answer", "questions have not been loaded"
            )
        self.state.attempt.select_answer(question_index, option_index)
        return self.state.attempt

    # ── Chat ────────────────────────────────────────────────────────────

    def _chat_greeting(self) -> str:
        return (
            f"You've completed all the subtopics on {self.current_topic.title}. "
            "Before we proceed to the quiz, do you have any questions about what "
            "we've covered so far?"
        )

    async def send_chat(self, message: str) -> Tuple[str, bool]:
        """
        Send a learner message to the tutor.

        Returns (reply, quiz_started). "ready" skips the tutor and starts the
        practice quiz.
        """
        if self._closed or self.state.mode != LessonMode.CHAT:
            raise InvalidTransitionError(self.state.mode.value, "chat-message")
        text = (message or "").strip()
        if not text:
            raise ValueError("Chat message must not be empty")

        self.state.chat.append(ChatMessage(role="user", content=text))

        if text.lower().rstrip("!.") in READY_MESSAGES:
            self.state.chat.append(ChatMessage(role="assistant", content=QUIZ_START_REPLY))
            self.dispatch(SessionEvent(type=SessionEventType.REQUEST_QUIZ))
            return QUIZ_START_REPLY, True

        epoch = self._epoch
        topic = self.current_topic
        try:
            reply = await self.tutor.chat(
                topic.title,
                [s.title for s in topic.subtopics or []],
                list(self.state.chat),
            )
        except Exception as exc:
            logger.warning("Tutor chat failed: %s", exc, extra={"lesson_id": self.lesson.id})
            reply = CHAT_ERROR_REPLY
        reply = reply or CHAT_ERROR_REPLY

        if not self._closed and epoch == self._epoch and self.state.mode == LessonMode.CHAT:
            self.state.chat.append(ChatMessage(role="assistant", content=reply))
        return reply, False

    # ── Lifecycle ───────────────────────────────────────────────────────

    def _mark_completed(self, subtopic: SubtopicNode) -> None:
        # Optimistic: local state moves on without waiting for the sink
        subtopic.completed = True

    def close(self) -> None:
        """Stop accepting events and drop any in-flight loads."""
        self._closed = True
        self._epoch += 1
