"""Unit tests for the AI tutor, with and without a configured key."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from cryptotutor.ai.tutor import MAX_HISTORY_MESSAGES, AITutor, TutorError
from cryptotutor.config import Settings
from cryptotutor.schemas.ai import AssessedQuiz, ChatMessage

from conftest import make_generated_lesson


def _client(content="Sure, here is an explanation.", error=None):
    if error:
        create = AsyncMock(side_effect=error)
    else:
        create = AsyncMock(
            return_value=SimpleNamespace(
                choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
            )
        )
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


@pytest.fixture
def no_key_settings():
    return Settings(_env_file=None, openai_api_key="")


class TestStubTutor:
    """Without an API key the tutor answers with fixed text."""

    @pytest.mark.asyncio
    async def test_chat_stub_mentions_topic(self, no_key_settings):
        tutor = AITutor(no_key_settings)
        reply = await tutor.chat("Blockchain", ["Blocks"], [ChatMessage(role="user", content="hi")])
        assert "Blockchain" in reply
        assert "ready" in reply
        assert tutor.model_used == "stub"

    @pytest.mark.asyncio
    async def test_simplify_returns_input(self, no_key_settings):
        assert await AITutor(no_key_settings).simplify("Merkle trees") == "Merkle trees"

    @pytest.mark.asyncio
    async def test_feedback_mentions_score(self, no_key_settings):
        text = await AITutor(no_key_settings).feedback({"score": 80})
        assert "80%" in text

    @pytest.mark.asyncio
    async def test_subtopic_content_lists_concepts(self, no_key_settings):
        text = await AITutor(no_key_settings).subtopic_content("Hashing", "Learn hashing", ["SHA-256"])
        assert "SHA-256" in text


class TestOpenAITutor:
    @pytest.mark.asyncio
    async def test_chat_sends_system_prompt_and_recent_history(self, no_key_settings):
        client = _client("Nodes keep copies of the ledger.")
        tutor = AITutor(no_key_settings, client=client)
        history = [
            ChatMessage(role="user" if i % 2 else "assistant", content=f"m{i}")
            for i in range(MAX_HISTORY_MESSAGES + 5)
        ]

        reply = await tutor.chat("Blockchain", ["Nodes", "Blocks"], history)

        assert reply == "Nodes keep copies of the ledger."
        messages = client.chat.completions.create.call_args.kwargs["messages"]
        assert messages[0]["role"] == "system"
        assert "Blockchain" in messages[0]["content"]
        assert len(messages) == MAX_HISTORY_MESSAGES + 1
        assert messages[-1]["content"] == history[-1].content

    @pytest.mark.asyncio
    async def test_provider_error_raises_tutor_error(self, no_key_settings):
        tutor = AITutor(no_key_settings, client=_client(error=RuntimeError("rate limited")))
        with pytest.raises(TutorError):
            await tutor.simplify("text")

    @pytest.mark.asyncio
    async def test_empty_reply_raises_tutor_error(self, no_key_settings):
        tutor = AITutor(no_key_settings, client=_client(content="   "))
        with pytest.raises(TutorError):
            await tutor.feedback({"score": 40})


class TestCustomLessonsWithoutKey:
    """Topic checks, lesson generation and assessment with no API key."""

    @pytest.mark.asyncio
    async def test_crypto_topic_passes_keyword_check(self, no_key_settings):
        result = await AITutor(no_key_settings).validate_topic("Bitcoin halving cycles")
        assert result.is_valid is True
        assert result.model_used == "stub"

    @pytest.mark.asyncio
    async def test_unrelated_topic_fails_keyword_check(self, no_key_settings):
        result = await AITutor(no_key_settings).validate_topic("Sourdough baking")
        assert result.is_valid is False
        assert "cryptocurrency" in result.message

    @pytest.mark.asyncio
    async def test_lesson_generation_needs_key(self, no_key_settings):
        with pytest.raises(TutorError):
            await AITutor(no_key_settings).generate_custom_lesson("DeFi lending", "beginner")

    @pytest.mark.asyncio
    async def test_assessment_uses_final_test_score(self, no_key_settings):
        assessment = await AITutor(no_key_settings).final_assessment(
            "Crypto Basics",
            [
                AssessedQuiz(subtopic="Hashing", score=40),
                AssessedQuiz(subtopic="Hashing", score=90),
                AssessedQuiz(subtopic="Wallets", score=50),
            ],
            final_test_score=70,
        )
        assert assessment.score == 70
        assert assessment.strengths == ["Hashing"]
        assert assessment.improvement_areas == ["Wallets"]
        assert "Wallets" in assessment.recommendations[0]
        assert "Crypto Basics" in assessment.encouragement

    @pytest.mark.asyncio
    async def test_assessment_averages_quizzes_without_final_test(self, no_key_settings):
        assessment = await AITutor(no_key_settings).final_assessment(
            "Crypto Basics",
            [AssessedQuiz(subtopic="Hashing", score=80), AssessedQuiz(subtopic="Nodes", score=55)],
        )
        # 67.5 rounds half-up
        assert assessment.score == 68
        assert assessment.improvement_areas == ["Nodes"]

    @pytest.mark.asyncio
    async def test_assessment_with_no_results(self, no_key_settings):
        assessment = await AITutor(no_key_settings).final_assessment("Crypto Basics", [])
        assert assessment.score == 0
        assert assessment.strengths == []
        assert assessment.recommendations


class TestCustomLessonsWithOpenAI:
    @pytest.mark.asyncio
    async def test_yes_verdict_is_valid(self, no_key_settings):
        tutor = AITutor(no_key_settings, client=_client("YES. Staking secures proof-of-stake chains."))
        result = await tutor.validate_topic("Staking")
        assert result.is_valid is True
        assert result.details == "Staking secures proof-of-stake chains."
        assert result.model_used == no_key_settings.openai_chat_model

    @pytest.mark.asyncio
    async def test_no_verdict_is_invalid(self, no_key_settings):
        tutor = AITutor(no_key_settings, client=_client("NO - this is about cooking."))
        result = await tutor.validate_topic("Pasta")
        assert result.is_valid is False
        assert result.details == "this is about cooking."

    @pytest.mark.asyncio
    async def test_provider_error_accepts_topic(self, no_key_settings):
        tutor = AITutor(no_key_settings, client=_client(error=RuntimeError("timeout")))
        result = await tutor.validate_topic("Layer 2 rollups")
        assert result.is_valid is True
        assert "anyway" in result.message

    @pytest.mark.asyncio
    async def test_generated_lesson_is_validated(self, no_key_settings):
        raw = "```json\n" + json.dumps(make_generated_lesson()) + "\n```"
        client = _client(raw)
        tutor = AITutor(no_key_settings, client=client)

        lesson = await tutor.generate_custom_lesson("Staking", "intermediate")

        assert lesson.title == "Staking Basics"
        assert [len(t.subtopics) for t in lesson.topics] == [2, 2]
        assert len(lesson.topics[0].subtopics[0].quiz_questions) == 3
        assert len(lesson.final_test) == 10
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert "intermediate" in kwargs["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_malformed_lesson_rejected(self, no_key_settings):
        data = make_generated_lesson()
        data["topics"][1]["subtopics"][0]["quiz_questions"][0]["options"] = ["A", "B", "C"]
        tutor = AITutor(no_key_settings, client=_client(json.dumps(data)))
        with pytest.raises(TutorError, match="failed validation"):
            await tutor.generate_custom_lesson("Staking", "beginner")

    @pytest.mark.asyncio
    async def test_lesson_without_topics_rejected(self, no_key_settings):
        data = make_generated_lesson()
        data["topics"] = []
        tutor = AITutor(no_key_settings, client=_client(json.dumps(data)))
        with pytest.raises(TutorError):
            await tutor.generate_custom_lesson("Staking", "beginner")

    @pytest.mark.asyncio
    async def test_non_json_lesson_rejected(self, no_key_settings):
        tutor = AITutor(no_key_settings, client=_client("Here is your lesson about staking!"))
        with pytest.raises(TutorError, match="unusable"):
            await tutor.generate_custom_lesson("Staking", "beginner")

    @pytest.mark.asyncio
    async def test_assessment_parsed(self, no_key_settings):
        reply = json.dumps({
            "score": 85,
            "strengths": ["Hashing"],
            "improvement_areas": ["Consensus"],
            "recommendations": ["Re-read the consensus subtopic"],
            "encouragement": "Well done!",
        })
        client = _client(reply)
        tutor = AITutor(no_key_settings, client=client)

        assessment = await tutor.final_assessment(
            "Crypto Basics", [AssessedQuiz(subtopic="Hashing", score=90)], final_test_score=80
        )

        assert assessment.score == 85
        assert assessment.improvement_areas == ["Consensus"]
        prompt = client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
        assert "Crypto Basics" in prompt
        assert "80%" in prompt

    @pytest.mark.asyncio
    async def test_out_of_range_assessment_rejected(self, no_key_settings):
        reply = json.dumps({"score": 150, "encouragement": "Wow"})
        tutor = AITutor(no_key_settings, client=_client(reply))
        with pytest.raises(TutorError):
            await tutor.final_assessment("Crypto Basics", [])
