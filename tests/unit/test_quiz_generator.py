"""Unit tests for AI quiz generation and payload validation."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from cryptotutor.ai.quiz_generator import QuizGenerationError, QuizGenerator, parse_quiz_payload
from cryptotutor.config import Settings


def _question(**overrides):
    data = {
        "question": "What links blocks together?",
        "options": ["Hashes", "Names", "Dates", "Colors"],
        "answer": 0,
        "explanation": "Each block stores the previous block's hash.",
    }
    data.update(overrides)
    return data


def _completion(content: str):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _client(content: str = "", error: Exception = None):
    create = AsyncMock(side_effect=error) if error else AsyncMock(return_value=_completion(content))
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def _settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **{"openai_api_key": "", **kwargs})


class TestParseQuizPayload:
    """Validation of model output."""

    def test_valid_payload(self):
        questions = parse_quiz_payload(json.dumps({"questions": [_question(), _question(answer=3)]}))
        assert len(questions) == 2
        assert questions[1].answer == 3

    def test_json_wrapped_in_prose(self):
        raw = "Here is your quiz:\n```json\n" + json.dumps({"questions": [_question()]}) + "\n```"
        assert len(parse_quiz_payload(raw)) == 1

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "no json here",
            "{not valid json}",
            json.dumps({"questions": []}),
            json.dumps({"items": [_question()]}),
        ],
    )
    def test_rejects_malformed_output(self, raw):
        with pytest.raises(QuizGenerationError):
            parse_quiz_payload(raw)

    @pytest.mark.parametrize(
        "bad",
        [
            _question(options=["A", "B", "C"]),
            _question(options=["A", "B", "C", "D", "E"]),
            _question(options=["A", "B", "  ", "D"]),
            _question(answer=4),
            _question(answer=-1),
            _question(explanation=""),
            _question(question=""),
        ],
    )
    def test_one_bad_question_rejects_whole_quiz(self, bad):
        raw = json.dumps({"questions": [_question(), bad]})
        with pytest.raises(QuizGenerationError):
            parse_quiz_payload(raw)


class TestQuizGenerator:
    @pytest.mark.asyncio
    async def test_generate_with_client(self):
        client = _client(json.dumps({"questions": [_question()] * 5}))
        generator = QuizGenerator(_settings(), client=client)

        questions = await generator.generate(
            "Blocks, Hashes and Immutability",
            objective="Understand hashing",
            key_concepts=["hash"],
            existing_questions=["What is a hash?"],
        )

        assert len(questions) == 5
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        prompt = kwargs["messages"][-1]["content"]
        assert "Blocks, Hashes and Immutability" in prompt
        assert "What is a hash?" in prompt

    @pytest.mark.asyncio
    async def test_request_failure_raises(self):
        generator = QuizGenerator(_settings(), client=_client(error=RuntimeError("timeout")))
        with pytest.raises(QuizGenerationError):
            await generator.generate("Hashing")

    @pytest.mark.asyncio
    async def test_invalid_reply_raises(self):
        generator = QuizGenerator(_settings(), client=_client("I cannot help with that."))
        with pytest.raises(QuizGenerationError):
            await generator.generate("Hashing")

    @pytest.mark.asyncio
    async def test_without_key_raises(self):
        generator = QuizGenerator(_settings())
        assert generator.configured is False
        with pytest.raises(QuizGenerationError):
            await generator.generate("Hashing")

    def test_placeholder_key_is_not_configured(self):
        assert QuizGenerator(_settings(openai_api_key="sk-your-openai-api-key")).configured is False
        assert QuizGenerator(_settings(openai_api_key="sk-real")).configured is True
