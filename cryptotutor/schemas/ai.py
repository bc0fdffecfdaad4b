"""
Pydantic schemas for the AI tutor endpoints.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(..., min_length=1)


class ChatRequest(BaseModel):
    """Stateless tutor chat: the caller sends the transcript."""

    topic: str = Field(..., min_length=1)
    subtopics: List[str] = Field(default_factory=list)
    messages: List[ChatMessage] = Field(..., min_length=1)


class ChatResponse(BaseModel):
    reply: str
    model_used: str = "stub"


class SimplifyRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=8000)


class FeedbackRequest(BaseModel):
    """Quiz results to comment on; the shape is passed through to the model."""

    quiz_results: Dict[str, Any]


class SubtopicContentRequest(BaseModel):
    subtopic_title: str = Field(..., min_length=1)
    objective: str = ""
    key_concepts: List[str] = Field(default_factory=list)


class TextResponse(BaseModel):
    text: str
    model_used: str = "stub"


class TopicValidationRequest(BaseModel):
    topic: str = Field(..., min_length=1, max_length=200)


class TopicValidationResponse(BaseModel):
    is_valid: bool
    message: str
    details: str = ""
    model_used: str = "stub"


class AssessedQuiz(BaseModel):
    """One quiz outcome fed into the final assessment."""

    subtopic: str = Field(..., min_length=1)
    quiz_type: Literal["db", "ai"] = "ai"
    score: int = Field(..., ge=0, le=100)


class FinalAssessmentRequest(BaseModel):
    lesson_title: str = Field(..., min_length=1)
    quiz_results: List[AssessedQuiz] = Field(default_factory=list)
    final_test_score: Optional[int] = Field(default=None, ge=0, le=100)


class FinalAssessment(BaseModel):
    """Overall assessment; also the shape the model must return."""

    score: int = Field(..., ge=0, le=100)
    strengths: List[str] = Field(default_factory=list)
    improvement_areas: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    encouragement: str = Field(..., min_length=1)


class FinalAssessmentResponse(FinalAssessment):
    model_used: str = "stub"
