"""Unit tests for quiz scoring and QuizAttempt."""

import pytest

from cryptotutor.engines.progression.errors import EmptyQuizError, IncompleteAttemptError
from cryptotutor.engines.progression.scoring import (
    PASSING_SCORE,
    QuizAttempt,
    QuizSource,
    is_passing,
    percentage,
)

from conftest import make_questions


class TestPercentage:
    """percentage() rounds half-up and never divides by zero."""

    def test_exact_values(self):
        assert percentage(7, 10) == 70
        assert percentage(4, 5) == 80
        assert percentage(0, 3) == 0
        assert percentage(3, 3) == 100

    def test_rounds_half_up(self):
        # 12.5 -> 13 and 62.5 -> 63; banker's rounding would give 12 and 62
        assert percentage(1, 8) == 13
        assert percentage(5, 8) == 63
        assert percentage(2, 3) == 67
        assert percentage(1, 3) == 33

    def test_zero_denominator_is_zero(self):
        assert percentage(0, 0) == 0
        assert percentage(5, 0) == 0

    def test_bounds_for_every_quiz_size(self):
        for total in range(1, 21):
            for correct in range(total + 1):
                assert 0 <= percentage(correct, total) <= 100

    def test_passing_threshold(self):
        assert PASSING_SCORE == 70
        assert is_passing(70) is True
        assert is_passing(69) is False
        assert is_passing(None) is False
        assert is_passing(60, passing_score=60) is True


class TestQuizAttempt:
    """QuizAttempt selection, navigation and scoring."""

    def test_empty_quiz_rejected(self):
        with pytest.raises(EmptyQuizError):
            QuizAttempt([])

    def test_starts_clean(self):
        attempt = QuizAttempt(make_questions(3))
        assert attempt.current_index == 0
        assert attempt.selections == [None, None, None]
        assert attempt.answered_count == 0
        assert attempt.source == QuizSource.DATABASE

    def test_score_requires_all_answers(self):
        attempt = QuizAttempt(make_questions(2))
        attempt.select_answer(0, 0)
        with pytest.raises(IncompleteAttemptError) as exc_info:
            attempt.score()
        assert exc_info.value.answered == 1
        assert exc_info.value.total == 2

    def test_score_counts_correct_answers(self):
        attempt = QuizAttempt(make_questions(10, answer=2))
        for i in range(10):
            attempt.select_answer(i, 2 if i < 7 else 0)
        assert attempt.correct_count() == 7
        assert attempt.score() == 70

    def test_changing_a_selection(self):
        attempt = QuizAttempt(make_questions(1, answer=1))
        attempt.select_answer(0, 0)
        attempt.select_answer(0, 1)
        assert attempt.score() == 100

    def test_out_of_range_selection(self):
        attempt = QuizAttempt(make_questions(2))
        with pytest.raises(IndexError):
            attempt.select_answer(2, 0)
        with pytest.raises(IndexError):
            attempt.select_answer(0, 4)
        assert attempt.selections == [None, None]

    def test_navigation_is_clamped(self):
        attempt = QuizAttempt(make_questions(3))
        assert attempt.previous_question() == 0
        assert attempt.next_question() == 1
        assert attempt.next_question() == 2
        assert attempt.next_question() == 2
        assert attempt.previous_question() == 1
