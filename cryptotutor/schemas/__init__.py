"""
Pydantic schemas for API request/response validation.
"""

from cryptotutor.schemas.common import ErrorResponse, HealthResponse
from cryptotutor.schemas.lesson import (
    CustomLessonRequest,
    GeneratedLessonPayload,
    LessonSummary,
    LessonTree,
    ResourceSchema,
    SubtopicDetail,
    SubtopicNode,
    TopicNode,
)
from cryptotutor.schemas.quiz import (
    AIQuizRequest,
    FinalTestResultResponse,
    FinalTestSubmitRequest,
    GeneratedQuestion,
    GeneratedQuizPayload,
    QuizQuestionSchema,
    QuizResponse,
    QuizSubmitRequest,
)
from cryptotutor.schemas.progress import ProgressResponse, ProgressUpsertRequest
from cryptotutor.schemas.ai import (
    AssessedQuiz,
    ChatMessage,
    ChatRequest,
    ChatResponse,
    FeedbackRequest,
    FinalAssessment,
    FinalAssessmentRequest,
    FinalAssessmentResponse,
    SimplifyRequest,
    SubtopicContentRequest,
    TextResponse,
    TopicValidationRequest,
    TopicValidationResponse,
)
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

__all__ = [
    # Common
    "ErrorResponse",
    "HealthResponse",
    # Lessons
    "CustomLessonRequest",
    "GeneratedLessonPayload",
    "LessonSummary",
    "LessonTree",
    "ResourceSchema",
    "SubtopicDetail",
    "SubtopicNode",
    "TopicNode",
    # Quiz
    "AIQuizRequest",
    "FinalTestResultResponse",
    "FinalTestSubmitRequest",
    "GeneratedQuestion",
    "GeneratedQuizPayload",
    "QuizQuestionSchema",
    "QuizResponse",
    "QuizSubmitRequest",
    # Progress
    "ProgressResponse",
    "ProgressUpsertRequest",
    # AI
    "AssessedQuiz",
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "FeedbackRequest",
    "FinalAssessment",
    "FinalAssessmentRequest",
    "FinalAssessmentResponse",
    "SimplifyRequest",
    "SubtopicContentRequest",
    "TextResponse",
    "TopicValidationRequest",
    "TopicValidationResponse",
    # Sessions
    "AnswerSelectRequest",
    "QuizQuestionView",
    "QuizView",
    "SessionChatRequest",
    "SessionChatResponse",
    "SessionCreateRequest",
    "SessionEventRequest",
    "SessionView",
]
