"""
FastAPI dependencies for database sessions and app-scoped services.

Services (session registry, content provider, progress sink, AI clients) are
created once per application and stored on app.state; routes receive them
through the Annotated aliases below.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from cryptotutor.ai.quiz_generator import QuizGenerator
from cryptotutor.ai.tutor import AITutor
from cryptotutor.config import Settings, get_settings
from cryptotutor.database import get_db
from cryptotutor.engines.progression.contracts import ContentProvider, ProgressSink
from cryptotutor.engines.progression.errors import (
    EmptyQuizError,
    LessonUnavailableError,
    ProgressionError,
)
from cryptotutor.engines.progression.registry import SessionRegistry
from cryptotutor.engines.progression.state_machine import LessonSession
from cryptotutor.logging_config import session_id_var


DbSession = Annotated[AsyncSession, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]


def get_session_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def get_content_provider(request: Request) -> ContentProvider:
    return request.app.state.content_provider


def get_progress_sink(request: Request) -> ProgressSink:
    return request.app.state.progress_sink


def get_tutor(request: Request) -> AITutor:
    return request.app.state.tutor


def get_quiz_generator(request: Request) -> QuizGenerator:
    return request.app.state.quiz_generator


Sessions = Annotated[SessionRegistry, Depends(get_session_registry)]
Content = Annotated[ContentProvider, Depends(get_content_provider)]
Sink = Annotated[ProgressSink, Depends(get_progress_sink)]
Tutor = Annotated[AITutor, Depends(get_tutor)]
Generator = Annotated[QuizGenerator, Depends(get_quiz_generator)]


async def get_lesson_session(session_id: str, sessions: Sessions) -> LessonSession:
    """Resolve a live session from the path, 404 if unknown."""
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )
    # Each request runs in its own context copy, so no reset is needed
    session_id_var.set(session_id)
    return session


CurrentSession = Annotated[LessonSession, Depends(get_lesson_session)]


def progression_http_error(exc: ProgressionError) -> HTTPException:
    """Map a progression error onto an HTTP status."""
    if isinstance(exc, LessonUnavailableError):
        code = status.HTTP_404_NOT_FOUND if exc.missing else status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(exc, EmptyQuizError):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    else:
        code = status.HTTP_409_CONFLICT
    return HTTPException(status_code=code, detail=str(exc))
