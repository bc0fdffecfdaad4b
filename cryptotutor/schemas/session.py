"""
Pydantic schemas for learner lesson sessions.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from cryptotutor.schemas.ai import ChatMessage


class SessionCreateRequest(BaseModel):
    lesson_id: int
    user_id: int


class SessionEventRequest(BaseModel):
    """A state machine event. Position fields only apply to select-subtopic."""

    type: Literal[
        "finish-subtopic",
        "request-quiz",
        "submit-quiz",
        "continue",
        "submit-final-test",
        "select-subtopic",
    ]
    topic_index: Optional[int] = Field(default=None, ge=0)
    subtopic_index: Optional[int] = Field(default=None, ge=0)


class AnswerSelectRequest(BaseModel):
    question_index: int = Field(..., ge=0)
    option_index: int = Field(..., ge=0, le=3)


class SessionChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=4000)


class QuizQuestionView(BaseModel):
    """Question as shown during a quiz; answer and explanation only after submit."""

    question: str
    options: List[str]
    selected: Optional[int] = None
    answer: Optional[int] = None
    explanation: Optional[str] = None
    correct: Optional[bool] = None


class QuizView(BaseModel):
    source: str
    notice: Optional[str] = None
    current_index: int
    total: int
    answered: int
    submitted: bool
    score: Optional[int] = None
    questions: List[QuizQuestionView]


class SessionView(BaseModel):
    """Snapshot of a lesson session."""

    id: str
    lesson_id: int
    lesson_title: str
    user_id: int
    mode: str
    quiz_type: str
    topic_index: int
    subtopic_index: int
    topic_title: str
    subtopic_title: str
    last_quiz_score: Optional[int] = None
    final_score: Optional[int] = None
    passed: Optional[bool] = None
    overall_progress: int
    allowed_events: List[str]
    quiz: Optional[QuizView] = None
    chat: List[ChatMessage] = Field(default_factory=list)


class SessionChatResponse(BaseModel):
    reply: str
    quiz_started: bool = False
    session: SessionView
