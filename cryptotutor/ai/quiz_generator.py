"""
AI quiz generation with strict validation of the model's output.

Generated payloads are untrusted: the JSON object is pulled out of the raw
reply, validated against GeneratedQuizPayload, and rejected as a whole on
any problem (wrong option count, answer index out of range, missing
explanation). Callers decide what to fall back to.
"""

import json
import re
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from cryptotutor.config import Settings, ai_key_configured, get_settings
from cryptotutor.logging_config import get_logger
from cryptotutor.ai.prompts import QUIZ_SYSTEM_PROMPT, quiz_prompt
from cryptotutor.schemas.quiz import GeneratedQuizPayload, QuizQuestionSchema

logger = get_logger(__name__)

# Models sometimes wrap the JSON in prose or code fences
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class QuizGenerationError(Exception):
    """Quiz could not be generated or failed validation."""


def extract_json_object(raw: str) -> Dict[str, Any]:
    """Decode the JSON object in a model reply. Raises ValueError."""
    match = _JSON_OBJECT.search(raw or "")
    if not match:
        raise ValueError("No JSON object found in model output")
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Model output is not valid JSON: {exc.msg}") from exc


def parse_quiz_payload(raw: str) -> List[QuizQuestionSchema]:
    """Extract, decode and validate a generated quiz."""
    try:
        data = extract_json_object(raw)
    except ValueError as exc:
        raise QuizGenerationError(str(exc)) from exc
    try:
        payload = GeneratedQuizPayload.model_validate(data)
    except ValidationError as exc:
        raise QuizGenerationError(
            f"Generated quiz failed validation ({exc.error_count()} errors)"
        ) from exc
    return [QuizQuestionSchema(**q.model_dump()) for q in payload.questions]


class QuizGenerator:
    """Generates multiple-choice quizzes through OpenAI chat completions."""

    def __init__(self, settings: Optional[Settings] = None, client=None):
        self.settings = settings or get_settings()
        self._client = client

    @property
    def configured(self) -> bool:
        return self._client is not None or ai_key_configured(self.settings)

    def _get_client(self):
        if self._client is None:
            if not ai_key_configured(self.settings):
                raise QuizGenerationError("OpenAI API key is not configured")
            from openai import AsyncOpenAI
            self._client = AsyncOpenAI(api_key=self.settings.openai_api_key.strip())
        return self._client

    async def generate(
        self,
        subtopic_title: str,
        objective: str = "",
        key_concepts: Sequence[str] = (),
        existing_questions: Sequence[str] = (),
    ) -> List[QuizQuestionSchema]:
        """Return validated questions or raise QuizGenerationError."""
        client = self._get_client()
        prompt = quiz_prompt(
            subtopic_title,
            objective,
            key_concepts,
            existing_questions,
            question_count=self.settings.ai_quiz_question_count,
        )
        try:
            response = await client.chat.completions.create(
                model=self.settings.openai_model,
                messages=[
                    {"role": "system", "content": QUIZ_SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=2048,
                temperature=0.7,
                response_format={"type": "json_object"},
            )
        except Exception as exc:
            logger.error("Quiz generation request failed: %s", exc)
            raise QuizGenerationError("Quiz generation request failed") from exc

        raw_text = (response.choices[0].message.content or "").strip()
        questions = parse_quiz_payload(raw_text)
        logger.info(
            "Quiz generated: %d questions for %r",
            len(questions),
            subtopic_title,
        )
        return questions
