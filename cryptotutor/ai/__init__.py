"""
AI collaborators - quiz generation, custom lessons and the conversational tutor.

Every generated payload is validated before it reaches a learner; every
call degrades to a stub when no OpenAI key is configured.
"""

from cryptotutor.ai.quiz_generator import (
    QuizGenerationError,
    QuizGenerator,
    extract_json_object,
    parse_quiz_payload,
)
from cryptotutor.ai.tutor import AITutor, TutorError, parse_json_reply

__all__ = [
    "QuizGenerationError",
    "QuizGenerator",
    "extract_json_object",
    "parse_quiz_payload",
    "AITutor",
    "TutorError",
    "parse_json_reply",
]
