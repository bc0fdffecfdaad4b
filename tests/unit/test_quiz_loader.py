"""Unit tests for QuizLoader fallbacks."""

import pytest

from cryptotutor.engines.progression.quiz_loader import (
    FALLBACK_EXPLANATION,
    FALLBACK_OPTIONS,
    QuizLoader,
    fallback_question,
)
from cryptotutor.engines.progression.scoring import QuizSource

from conftest import FakeContentProvider, make_lesson, make_questions


@pytest.fixture
def lesson():
    return make_lesson((1,))


class TestFallbackQuestion:
    def test_shape(self):
        q = fallback_question("Hashing")
        assert q.question == "What is the main focus of Hashing?"
        assert q.options == FALLBACK_OPTIONS
        assert q.answer == 0
        assert q.explanation == FALLBACK_EXPLANATION


class TestPractice:
    @pytest.mark.asyncio
    async def test_uses_stored_questions(self, lesson):
        content = FakeContentProvider(lesson, practice={100: make_questions(2)})
        attempt = await QuizLoader(content).load_practice(lesson.topics[0].subtopics[0])
        assert attempt.source == QuizSource.DATABASE
        assert attempt.total == 2
        assert content.generate_calls == []

    @pytest.mark.asyncio
    async def test_generates_when_none_stored(self, lesson):
        content = FakeContentProvider(lesson)
        attempt = await QuizLoader(content).load_practice(lesson.topics[0].subtopics[0])
        assert attempt.source == QuizSource.AI
        assert attempt.total == 5
        assert content.generate_calls == [(100, [])]

    @pytest.mark.asyncio
    async def test_generates_when_fetch_fails(self, lesson):
        content = FakeContentProvider(lesson, practice={100: make_questions(2)})
        content.practice_error = RuntimeError("db down")
        attempt = await QuizLoader(content).load_practice(lesson.topics[0].subtopics[0])
        assert attempt.source == QuizSource.AI

    @pytest.mark.asyncio
    async def test_backup_question_when_everything_fails(self, lesson, caplog):
        content = FakeContentProvider(lesson)
        content.generation_error = RuntimeError("no key")
        with caplog.at_level("WARNING"):
            attempt = await QuizLoader(content).load_practice(lesson.topics[0].subtopics[0])
        assert attempt.source == QuizSource.FALLBACK
        assert attempt.total == 1
        assert attempt.questions[0].question == "What is the main focus of Subtopic 0.0?"
        assert attempt.notice
        assert "Quiz generation failed" in caplog.text


class TestChallenge:
    @pytest.mark.asyncio
    async def test_passes_practice_questions_as_existing(self, lesson):
        content = FakeContentProvider(lesson, practice={100: make_questions(2, prefix="P")})
        attempt = await QuizLoader(content).load_challenge(lesson.topics[0].subtopics[0])
        assert attempt.source == QuizSource.AI
        assert content.generate_calls == [(100, ["P0?", "P1?"])]

    @pytest.mark.asyncio
    async def test_empty_generation_falls_back(self, lesson):
        content = FakeContentProvider(lesson, generated=[])
        attempt = await QuizLoader(content).load_challenge(lesson.topics[0].subtopics[0])
        assert attempt.source == QuizSource.FALLBACK


class TestFinalTest:
    @pytest.mark.asyncio
    async def test_stored_final_test(self, lesson):
        content = FakeContentProvider(lesson, final_test=make_questions(10))
        attempt = await QuizLoader(content).load_final_test(lesson)
        assert attempt.source == QuizSource.DATABASE
        assert attempt.total == 10

    @pytest.mark.asyncio
    async def test_missing_final_test_uses_lesson_title(self, lesson):
        attempt = await QuizLoader(FakeContentProvider(lesson)).load_final_test(lesson)
        assert attempt.source == QuizSource.FALLBACK
        assert attempt.questions[0].question == "What is the main focus of Crypto Basics?"
