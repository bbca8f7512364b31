"""Essay evaluator: reserves the slot for a manual score."""

from __future__ import annotations

from typing import Any, ClassVar

from ...models.domain import QuestionType
from ...models.results import ItemResult
from ...normalizers import unwrap_student_answer
from ..evaluator import QuestionEvaluator


class EssayEvaluator(QuestionEvaluator):
    """Essays are never auto-graded; the verdict stays None."""

    question_types: ClassVar[tuple[QuestionType, ...]] = (QuestionType.ESSAY,)

    def evaluate(self, student_answer: Any) -> ItemResult:
        raw = unwrap_student_answer(student_answer)
        return ItemResult(
            question_number=self.question.number,
            type=self.question.type,
            correct=None,
            score=0,
            max_points=self.question.points,
            student_answer=raw if isinstance(raw, str) else "",
            correct_answer=None,
            computed_correct=None,
            computed_score=0,
        )
