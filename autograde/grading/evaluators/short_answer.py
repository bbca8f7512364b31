"""
Short answer evaluator.

Handles text comparison against the accepted synonyms of a question.
"""

from __future__ import annotations

from typing import Any, ClassVar

from ...models.domain import AnswerLogic, QuestionType
from ...models.results import ItemResult
from ...normalizers import normalize_text, student_text
from ..evaluator import QuestionEvaluator


class ShortAnswerEvaluator(QuestionEvaluator):
    """
    Evaluator for short answers.

    Matching is case-sensitive after trimming; with ``ignore_space`` all
    whitespace is removed from both sides first. Any accepted text matches,
    whatever the stored answer logic.
    """

    question_types: ClassVar[tuple[QuestionType, ...]] = (QuestionType.SHORT,)

    def compare(self, student_value: str) -> bool:
        """Compare against every accepted text."""
        ignore_space = self.question.ignore_space
        normalized = normalize_text(student_value, ignore_space)
        if not normalized:
            return False
        return any(
            normalize_text(answer.value, ignore_space) == normalized
            for answer in self.question.correct_answers or ()
        )

    def evaluate(self, student_answer: Any) -> ItemResult:
        """Evaluate a short answer."""
        text = student_text(student_answer)
        is_correct = text is not None and self.compare(text)

        return ItemResult.graded(
            question_number=self.question.number,
            question_type=self.question.type,
            correct=is_correct,
            points=self.question.points,
            student_answer=text.strip() if text is not None else None,
            correct_answer=self.correct_answer_display(),
            metadata={
                "ignore_space": self.question.ignore_space,
                # Stored AND logic is not applied to short answers
                "answer_logic_applied": AnswerLogic.OR.value,
            },
        )
