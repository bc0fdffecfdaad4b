"""
AI endpoints - quiz generation, topic validation, the end-of-lesson assessment
and the stateless tutor helpers.
"""

from fastapi import APIRouter, HTTPException, status

from cryptotutor.ai.quiz_generator import QuizGenerationError
from cryptotutor.ai.tutor import TutorError
from cryptotutor.api.deps import Generator, Tutor
from cryptotutor.logging_config import get_logger
from cryptotutor.schemas.ai import (
    ChatRequest,
    ChatResponse,
    FeedbackRequest,
    FinalAssessmentRequest,
    FinalAssessmentResponse,
    SimplifyRequest,
    SubtopicContentRequest,
    TextResponse,
    TopicValidationRequest,
    TopicValidationResponse,
)
from cryptotutor.schemas.common import ErrorResponse
from cryptotutor.schemas.quiz import AIQuizRequest, QuizResponse

logger = get_logger(__name__)
router = APIRouter(
    responses={502: {"model": ErrorResponse, "description": "AI provider failed or returned unusable output"}},
)


def _bad_gateway(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


@router.post("/quiz", response_model=QuizResponse)
async def generate_quiz(body: AIQuizRequest, generator: Generator):
    """Generate a validated quiz. 502 when the model output is unusable."""
    try:
        questions = await generator.generate(
            body.subtopic_title,
            body.objective,
            body.key_concepts,
            body.existing_questions,
        )
    except QuizGenerationError as exc:
        logger.warning("AI quiz rejected: %s", exc)
        raise _bad_gateway(exc)
    return QuizResponse(questions=questions)


@router.post("/chat", response_model=ChatResponse)
async def chat(body: ChatRequest, tutor: Tutor):
    try:
        reply = await tutor.chat(body.topic, body.subtopics, body.messages)
    except TutorError as exc:
        raise _bad_gateway(exc)
    return ChatResponse(reply=reply, model_used=tutor.model_used)


@router.post("/simplify", response_model=TextResponse)
async def simplify(body: SimplifyRequest, tutor: Tutor):
    try:
        text = await tutor.simplify(body.content)
    except TutorError as exc:
        raise _bad_gateway(exc)
    return TextResponse(text=text, model_used=tutor.model_used)


@router.post("/feedback", response_model=TextResponse)
async def feedback(body: FeedbackRequest, tutor: Tutor):
    try:
        text = await tutor.feedback(body.quiz_results)
    except TutorError as exc:
        raise _bad_gateway(exc)
    return TextResponse(text=text, model_used=tutor.model_used)


@router.post("/subtopic-content", response_model=TextResponse)
async def subtopic_content(body: SubtopicContentRequest, tutor: Tutor):
    try:
        text = await tutor.subtopic_content(body.subtopic_title, body.objective, body.key_concepts)
    except TutorError as exc:
        raise _bad_gateway(exc)
    return TextResponse(text=text, model_used=tutor.model_used)


@router.post("/validate-topic", response_model=TopicValidationResponse)
async def validate_topic(body: TopicValidationRequest, tutor: Tutor):
    """Check that a custom lesson topic is crypto-related before generating it."""
    return await tutor.validate_topic(body.topic)


@router.post("/final-assessment", response_model=FinalAssessmentResponse)
async def final_assessment(body: FinalAssessmentRequest, tutor: Tutor):
    try:
        assessment = await tutor.final_assessment(
            body.lesson_title,
            body.quiz_results,
            body.final_test_score,
        )
    except TutorError as exc:
        logger.warning("Final assessment rejected: %s", exc)
        raise _bad_gateway(exc)
    return FinalAssessmentResponse(**assessment.model_dump(), model_used=tutor.model_used)
