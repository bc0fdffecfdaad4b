"""
Quiz scoring and the in-progress quiz attempt.
"""

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import List, Optional, Sequence

from cryptotutor.engines.progression.errors import EmptyQuizError, IncompleteAttemptError
from cryptotutor.schemas.quiz import QuizQuestionSchema

PASSING_SCORE = 70


def percentage(part: int, whole: int) -> int:
    """
    Integer percentage rounded half-up (12.5 -> 13, not banker's 12).

    Returns 0 when whole is 0.
    """
    if whole <= 0:
        return 0
    value = Decimal(100 * part) / Decimal(whole)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def is_passing(score: Optional[int], passing_score: int = PASSING_SCORE) -> bool:
    return score is not None and score >= passing_score


class QuizSource(str, Enum):
    """Where an attempt's questions came from."""
    DATABASE = "db"
    AI = "ai"
    FALLBACK = "fallback"


class QuizAttempt:
    """
    One pass through a list of questions.

    Holds the learner's selection per question and a cursor. A new attempt is
    created on every entry into a quiz, so retries always start clean.
    """

    def __init__(
        self,
        questions: Sequence[QuizQuestionSchema],
        source: QuizSource = QuizSource.DATABASE,
        notice: Optional[str] = None,
    ):
        if not questions:
            raise EmptyQuizError("A quiz needs at least one question")
        self.questions: List[QuizQuestionSchema] = list(questions)
        self.selections: List[Optional[int]] = [None] * len(self.questions)
        self.current_index = 0
        self.source = source
        self.notice = notice

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def answered_count(self) -> int:
        return sum(1 for s in self.selections if s is not None)

    def all_answered(self) -> bool:
        return self.answered_count == self.total

    def select_answer(self, question_index: int, option_index: int) -> None:
        """Record (or change) the selection for a question."""
        if not 0 <= question_index < self.total:
            raise IndexError(f"Question index {question_index} out of range")
        options = self.questions[question_index].options
        if not 0 <= option_index < len(options):
            raise IndexError(f"Option index {option_index} out of range")
        self.selections[question_index] = option_index
        self.current_index = question_index

    def next_question(self) -> int:
        if self.current_index < self.total - 1:
            self.current_index += 1
        return self.current_index

    def previous_question(self) -> int:
        if self.current_index > 0:
            self.current_index -= 1
        return self.current_index

    def correct_count(self) -> int:
        return sum(
            1
            for q, s in zip(self.questions, self.selections)
            if s is not None and s == q.answer
        )

    def score(self) -> int:
        """Score in percent. Requires every question to be answered."""
        if not self.all_answered():
            raise IncompleteAttemptError(self.answered_count, self.total)
        return percentage(self.correct_count(), self.total)
