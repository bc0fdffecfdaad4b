"""
Pydantic schemas for quizzes and final tests.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class QuizQuestionSchema(BaseModel):
    """Multiple-choice question as delivered to the learner."""

    model_config = ConfigDict(from_attributes=True)

    question: str
    options: List[str]
    answer: int
    explanation: Optional[str] = None


class QuizResponse(BaseModel):
    questions: List[QuizQuestionSchema]


class GeneratedQuestion(BaseModel):
    """
    A single AI-generated question.

    Stricter than QuizQuestionSchema: generated payloads are untrusted, so
    every field is checked before the question reaches a learner.
    """

    question: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=4, max_length=4)
    answer: int = Field(..., ge=0, le=3)
    explanation: str = Field(..., min_length=1)

    @field_validator("options")
    @classmethod
    def options_not_blank(cls, v: List[str]) -> List[str]:
        if any(not (opt or "").strip() for opt in v):
            raise ValueError("options must be non-empty strings")
        return v


class GeneratedQuizPayload(BaseModel):
    """Top-level object the model is asked to return."""

    questions: List[GeneratedQuestion] = Field(..., min_length=1)


class AIQuizRequest(BaseModel):
    """Body for POST /ai/quiz."""

    subtopic_title: str = Field(..., min_length=1)
    objective: str = ""
    key_concepts: List[str] = Field(default_factory=list)
    existing_questions: List[str] = Field(default_factory=list)


class QuizSubmitRequest(BaseModel):
    """Body for POST /quiz/submit."""

    user_id: int
    subtopic_id: int
    score: int = Field(..., ge=0, le=100)
    quiz_type: Literal["db", "ai"]
    answers: List[Optional[int]] = Field(default_factory=list)
    questions: List[QuizQuestionSchema] = Field(default_factory=list)


class FinalTestSubmitRequest(BaseModel):
    """Body for POST /quiz/final/submit."""

    user_id: int
    lesson_id: int
    score: int = Field(..., ge=0, le=100)
    feedback: Optional[str] = None


class FinalTestResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    lesson_id: int
    score: int
    feedback: Optional[str] = None
    completed_at: Optional[datetime] = None
