"""
Lesson session endpoints - drive a learner through a lesson.

Sessions live in memory in the app's SessionRegistry. Entering a quiz or the
final test (by event or by typing "ready" in chat) loads its questions
before the response is returned.
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Response, status

from cryptotutor.api.deps import (
    AppSettings,
    Content,
    CurrentSession,
    Sessions,
    Sink,
    Tutor,
    progression_http_error,
)
from cryptotutor.engines.progression.errors import ProgressionError
from cryptotutor.engines.progression.navigator import SidebarView
from cryptotutor.engines.progression.scoring import is_passing
from cryptotutor.engines.progression.state_machine import (
    LessonMode,
    LessonSession,
    SessionEvent,
    SessionEventType,
    allowed_events,
)
from cryptotutor.logging_config import get_logger
from cryptotutor.schemas.common import ErrorResponse
from cryptotutor.schemas.session import (
    AnswerSelectRequest,
    QuizQuestionView,
    QuizView,
    SessionChatRequest,
    SessionChatResponse,
    SessionCreateRequest,
    SessionEventRequest,
    SessionView,
)

logger = get_logger(__name__)
router = APIRouter(
    responses={
        404: {"model": ErrorResponse, "description": "Unknown session or lesson"},
        409: {"model": ErrorResponse, "description": "Event not allowed in the current mode"},
    },
)

_ASSESSMENT_MODES = (LessonMode.QUIZ, LessonMode.FINAL_TEST)
_RESULT_MODES = (LessonMode.QUIZ_RESULTS, LessonMode.FINAL_RESULTS)


def _quiz_view(session: LessonSession) -> Optional[QuizView]:
    attempt = session.state.attempt
    if attempt is None:
        return None
    submitted = session.state.mode in _RESULT_MODES
    questions = []
    for question, selected in zip(attempt.questions, attempt.selections):
        view = QuizQuestionView(question=question.question, options=question.options, selected=selected)
        if submitted:
            view.answer = question.answer
            view.explanation = question.explanation
            view.correct = selected == question.answer
        questions.append(view)
    return QuizView(
        source=attempt.source.value,
        notice=attempt.notice,
        current_index=attempt.current_index,
        total=attempt.total,
        answered=attempt.answered_count,
        submitted=submitted,
        score=session.state.last_quiz_score if submitted else None,
        questions=questions,
    )


def _session_view(session: LessonSession) -> SessionView:
    state = session.state
    passed = None
    if state.mode in _RESULT_MODES:
        passed = is_passing(state.last_quiz_score, session.passing_score)
    return SessionView(
        id=session.id,
        lesson_id=session.lesson.id,
        lesson_title=session.lesson.title,
        user_id=session.user_id,
        mode=state.mode.value,
        quiz_type=state.quiz_type.value,
        topic_index=state.topic_index,
        subtopic_index=state.subtopic_index,
        topic_title=session.current_topic.title,
        subtopic_title=session.current_subtopic.title,
        last_quiz_score=state.last_quiz_score,
        final_score=state.final_score,
        passed=passed,
        overall_progress=session.navigator.overall_progress(),
        allowed_events=[e.value for e in allowed_events(state.mode)],
        quiz=_quiz_view(session),
        chat=list(state.chat),
    )


async def _load_if_needed(session: LessonSession) -> None:
    if session.state.mode in _ASSESSMENT_MODES and session.state.attempt is None:
        await session.load_assessment()


@router.post("", response_model=SessionView, status_code=status.HTTP_201_CREATED)
async def create_session(
    body: SessionCreateRequest,
    sessions: Sessions,
    content: Content,
    sink: Sink,
    tutor: Tutor,
    settings: AppSettings,
):
    """Start a lesson at the first subtopic, with completion loaded from progress."""
    try:
        session = await LessonSession.open(
            body.lesson_id,
            body.user_id,
            content,
            sink,
            tutor,
            passing_score=settings.passing_score,
        )
    except ProgressionError as exc:
        raise progression_http_error(exc)
    sessions.add(session)
    return _session_view(session)


@router.get("", response_model=List[SessionView])
async def list_sessions(user_id: int, sessions: Sessions):
    """Live sessions of one learner, for resuming in another tab."""
    return [_session_view(s) for s in sessions.for_user(user_id)]


@router.get("/{session_id}", response_model=SessionView)
async def get_session(session: CurrentSession):
    return _session_view(session)


@router.get("/{session_id}/sidebar", response_model=SidebarView)
async def get_sidebar(session: CurrentSession):
    return session.navigator.build(session.state.topic_index, session.state.subtopic_index)


@router.post("/{session_id}/events", response_model=SessionView)
async def dispatch_event(body: SessionEventRequest, session: CurrentSession):
    """Apply one state machine event. 409 when the event is not allowed."""
    event = SessionEvent(
        type=SessionEventType(body.type),
        topic_index=body.topic_index,
        subtopic_index=body.subtopic_index,
    )
    try:
        session.dispatch(event)
        await _load_if_needed(session)
    except ProgressionError as exc:
        raise progression_http_error(exc)
    return _session_view(session)


@router.post("/{session_id}/quiz/answers", response_model=SessionView)
async def select_answer(body: AnswerSelectRequest, session: CurrentSession):
    try:
        session.select_answer(body.question_index, body.option_index)
    except ProgressionError as exc:
        raise progression_http_error(exc)
    except IndexError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        )
    return _session_view(session)


@router.post("/{session_id}/quiz/submit", response_model=SessionView)
async def submit_quiz(session: CurrentSession):
    """Submit the active quiz or final test. 409 until every question is answered."""
    if session.state.mode == LessonMode.FINAL_TEST:
        event = SessionEvent(type=SessionEventType.SUBMIT_FINAL_TEST)
    else:
        event = SessionEvent(type=SessionEventType.SUBMIT_QUIZ)
    try:
        session.dispatch(event)
    except ProgressionError as exc:
        raise progression_http_error(exc)
    return _session_view(session)


@router.post("/{session_id}/chat", response_model=SessionChatResponse)
async def send_chat(body: SessionChatRequest, session: CurrentSession):
    try:
        reply, quiz_started = await session.send_chat(body.message)
        if quiz_started:
            await _load_if_needed(session)
    except ProgressionError as exc:
        raise progression_http_error(exc)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return SessionChatResponse(reply=reply, quiz_started=quiz_started, session=_session_view(session))


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(session_id: str, sessions: Sessions):
    if not sessions.remove(session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
