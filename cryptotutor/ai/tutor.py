"""
AI Tutor - chat, explanation simplification, quiz feedback, subtopic content,
custom lessons and the end-of-lesson assessment.

Without a configured OpenAI key most calls return a short stub so the
learner flow keeps working in development. Custom lesson generation has no
stub and raises TutorError instead.
"""

from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from cryptotutor.ai.prompts import (
    CUSTOM_LESSON_SYSTEM_PROMPT,
    TOPIC_VALIDATION_SYSTEM_PROMPT,
    custom_lesson_prompt,
    feedback_prompt,
    final_assessment_prompt,
    simplify_prompt,
    subtopic_content_prompt,
    topic_validation_prompt,
    tutor_system_prompt,
)
from cryptotutor.ai.quiz_generator import extract_json_object
from cryptotutor.config import Settings, ai_key_configured, get_settings
from cryptotutor.engines.progression.contracts import TutorClient
from cryptotutor.engines.progression.scoring import is_passing, percentage
from cryptotutor.logging_config import get_logger
from cryptotutor.schemas.ai import AssessedQuiz, ChatMessage, FinalAssessment, TopicValidationResponse
from cryptotutor.schemas.lesson import GeneratedLessonPayload

logger = get_logger(__name__)

# Most recent transcript messages sent with each chat turn
MAX_HISTORY_MESSAGES = 20

# Topic check used when no API key is configured
CRYPTO_KEYWORDS = ("crypto", "bitcoin", "ethereum", "blockchain", "token", "defi", "wallet", "mining")

ModelT = TypeVar("ModelT", bound=BaseModel)


class TutorError(Exception):
    """The AI provider failed to produce a reply."""


def parse_json_reply(raw: str, schema: Type[ModelT], what: str) -> ModelT:
    """Decode and validate a JSON reply, raising TutorError on any problem."""
    try:
        return schema.model_validate(extract_json_object(raw))
    except ValidationError as exc:
        raise TutorError(f"Generated {what} failed validation ({exc.error_count()} errors)") from exc
    except ValueError as exc:
        raise TutorError(f"Generated {what} is unusable: {exc}") from exc


class AITutor(TutorClient):
    """OpenAI-backed tutor."""

    def __init__(self, settings: Optional[Settings] = None, client=None):
        self.settings = settings or get_settings()
        self._client = client

    @property
    def configured(self) -> bool:
        return self._client is not None or ai_key_configured(self.settings)

    @property
    def model_used(self) -> str:
        return self.settings.openai_chat_model if self.configured else "stub"

    def _get_client(self):
        if self._client is None:
            from openai import AsyncOpenAI
            self._client = AsyncOpenAI(api_key=self.settings.openai_api_key.strip())
        return self._client

    async def _complete(
        self,
        messages: List[Dict[str, str]],
        max_tokens: int = 800,
        temperature: float = 0.7,
        json_mode: bool = False,
    ) -> str:
        client = self._get_client()
        options: Dict[str, Any] = {}
        if json_mode:
            options["response_format"] = {"type": "json_object"}
        try:
            response = await client.chat.completions.create(
                model=self.settings.openai_chat_model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
                **options,
            )
        except Exception as exc:
            logger.error("Tutor completion failed: %s", exc)
            raise TutorError("AI tutor request failed") from exc
        text = (response.choices[0].message.content or "").strip()
        if not text:
            raise TutorError("AI tutor returned an empty reply")
        return text

    async def chat(
        self,
        topic: str,
        subtopics: Sequence[str],
        messages: Sequence[ChatMessage],
    ) -> str:
        """Reply to the last learner message, with the transcript as context."""
        if not self.configured:
            logger.warning("No API key; returning stub tutor reply")
            return (
                f"Good question! Take another look at the key concepts of {topic}. "
                "When you feel confident, type 'ready' to start the quiz."
            )

        history = list(messages)[-MAX_HISTORY_MESSAGES:]
        payload = [{"role": "system", "content": tutor_system_prompt(topic, subtopics)}]
        payload.extend({"role": m.role, "content": m.content} for m in history)
        return await self._complete(payload, max_tokens=600)

    async def simplify(self, content: str) -> str:
        if not self.configured:
            logger.warning("No API key; returning stub simplification")
            return content
        return await self._complete([{"role": "user", "content": simplify_prompt(content)}])

    async def feedback(self, quiz_results: Dict[str, Any]) -> str:
        if not self.configured:
            logger.warning("No API key; returning stub feedback")
            score = quiz_results.get("score")
            if isinstance(score, (int, float)):
                return f"You scored {score}%. Review the explanations for any questions you missed, then try again."
            return "Review the explanations for any questions you missed, then try again."
        return await self._complete(
            [{"role": "user", "content": feedback_prompt(quiz_results)}],
            max_tokens=400,
        )

    async def subtopic_content(
        self,
        subtopic_title: str,
        objective: str = "",
        key_concepts: Sequence[str] = (),
    ) -> str:
        if not self.configured:
            logger.warning("No API key; returning stub subtopic content")
            concepts = ", ".join(key_concepts) if key_concepts else "the key ideas"
            return f"{subtopic_title}: {objective}\n\nThis section covers {concepts}."
        return await self._complete(
            [{"role": "user", "content": subtopic_content_prompt(subtopic_title, objective, key_concepts)}],
            max_tokens=1200,
        )

    async def validate_topic(self, topic: str) -> TopicValidationResponse:
        """
        Decide whether a custom lesson topic is about crypto.

        Without a key the topic is matched against CRYPTO_KEYWORDS. When the
        provider fails the topic is accepted so the learner is not blocked.
        """
        if not self.configured:
            matched = any(word in topic.lower() for word in CRYPTO_KEYWORDS)
            return TopicValidationResponse(
                is_valid=matched,
                message=(
                    "Topic validated. Creating custom lesson..."
                    if matched
                    else "This topic doesn't appear to be related to cryptocurrency. "
                    "Please enter a crypto-related topic."
                ),
                details="Checked with basic keyword matching.",
            )

        try:
            verdict = await self._complete(
                [
                    {"role": "system", "content": TOPIC_VALIDATION_SYSTEM_PROMPT},
                    {"role": "user", "content": topic_validation_prompt(topic)},
                ],
                max_tokens=200,
                temperature=0.0,
            )
        except TutorError as exc:
            logger.warning("Topic validation unavailable, accepting %r: %s", topic, exc)
            return TopicValidationResponse(
                is_valid=True,
                message="Unable to validate with AI. Creating custom lesson anyway...",
                details="Validation failed. Proceeding with your topic.",
                model_used=self.model_used,
            )

        head = verdict.upper()
        is_valid = head.startswith("YES")
        prefix = 3 if is_valid else 2 if head.startswith("NO") else 0
        logger.info("Topic validation: %r valid=%s", topic, is_valid)
        return TopicValidationResponse(
            is_valid=is_valid,
            message=(
                "Topic validated successfully. Creating custom lesson..."
                if is_valid
                else "This topic doesn't appear to be related to cryptocurrency. "
                "Please enter a crypto-related topic."
            ),
            details=verdict[prefix:].lstrip(" .,:-").strip(),
            model_used=self.model_used,
        )

    async def generate_custom_lesson(self, topic: str, difficulty: str) -> GeneratedLessonPayload:
        """Generate a whole lesson tree. Raises TutorError when unavailable or invalid."""
        if not self.configured:
            raise TutorError("OpenAI API key is not configured")
        raw = await self._complete(
            [
                {"role": "system", "content": CUSTOM_LESSON_SYSTEM_PROMPT},
                {"role": "user", "content": custom_lesson_prompt(topic, difficulty)},
            ],
            max_tokens=6000,
            json_mode=True,
        )
        lesson = parse_json_reply(raw, GeneratedLessonPayload, "lesson")
        logger.info(
            "Custom lesson generated: %r (%d topics)",
            lesson.title,
            len(lesson.topics),
        )
        return lesson

    async def final_assessment(
        self,
        lesson_title: str,
        quiz_results: Sequence[AssessedQuiz],
        final_test_score: Optional[int] = None,
    ) -> FinalAssessment:
        """Overall score, strengths, weak areas and next steps for a finished lesson."""
        if not self.configured:
            logger.warning("No API key; building assessment from the scores")
            return self._scored_assessment(lesson_title, quiz_results, final_test_score)
        raw = await self._complete(
            [{
                "role": "user",
                "content": final_assessment_prompt(
                    lesson_title,
                    [q.model_dump() for q in quiz_results],
                    final_test_score,
                ),
            }],
            max_tokens=800,
            json_mode=True,
        )
        return parse_json_reply(raw, FinalAssessment, "assessment")

    def _scored_assessment(
        self,
        lesson_title: str,
        quiz_results: Sequence[AssessedQuiz],
        final_test_score: Optional[int],
    ) -> FinalAssessment:
        passing = self.settings.passing_score
        if final_test_score is not None:
            score = final_test_score
        elif quiz_results:
            score = percentage(sum(q.score for q in quiz_results), 100 * len(quiz_results))
        else:
            score = 0

        # Best score per subtopic, in first-seen order
        best: Dict[str, int] = {}
        for q in quiz_results:
            best[q.subtopic] = max(best.get(q.subtopic, 0), q.score)
        strengths = [s for s, v in best.items() if is_passing(v, passing)]
        weak = [s for s, v in best.items() if not is_passing(v, passing)]

        recommendations = [f"Review {s} and retake its challenge quiz." for s in weak]
        if not recommendations:
            recommendations = ["Pick a new crypto topic and create a custom lesson to keep going."]
        if is_passing(score, passing):
            encouragement = f"Great work finishing {lesson_title}! You scored {score}%."
        else:
            encouragement = (
                f"You scored {score}% on {lesson_title}. Revisit the weaker areas and try again, "
                "you are closer than you think."
            )
        return FinalAssessment(
            score=score,
            strengths=strengths,
            improvement_areas=weak,
            recommendations=recommendations,
            encouragement=encouragement,
        )
