"""
Choice and O/X evaluator.

Compares the student's selection set against the correct set using the
question's AND/OR answer logic.
"""

from __future__ import annotations

from typing import Any, ClassVar

from ...models.domain import AnswerLogic, OrSelectionPolicy, QuestionType
from ...models.results import ItemResult
from ...normalizers import display_value, student_choice_set
from ..evaluator import QuestionEvaluator


class SelectionEvaluator(QuestionEvaluator):
    """
    Evaluator for multiple choice and true/false questions.

    Supports:
    - AND logic: the selection must equal the correct set
    - OR logic: any correct option selected; extra wrong selections are
      accepted or rejected according to ``or_policy``
    """

    question_types: ClassVar[tuple[QuestionType, ...]] = (
        QuestionType.CHOICE4,
        QuestionType.CHOICE5,
        QuestionType.OX,
    )

    def compare(self, selected: frozenset, correct: frozenset) -> bool:
        """Compare selection sets."""
        if not selected or not correct:
            return False

        if self.question.answer_logic is AnswerLogic.AND:
            return selected == correct

        if not selected & correct:
            return False
        if self.or_policy is OrSelectionPolicy.NO_WRONG_SELECTION:
            return selected <= correct
        return True

    def evaluate(self, student_answer: Any) -> ItemResult:
        """Evaluate a choice / O-X selection."""
        selected = student_choice_set(student_answer, self.question.type)
        is_correct = self.compare(selected, self.question.answer_set())

        shown = sorted(
            (display_value(value) for value in selected),
            key=lambda v: (isinstance(v, str), v),
        )
        if len(shown) == 1:
            shown = shown[0]
        elif not shown:
            shown = None

        return ItemResult.graded(
            question_number=self.question.number,
            question_type=self.question.type,
            correct=is_correct,
            points=self.question.points,
            student_answer=shown,
            correct_answer=self.correct_answer_display(),
            metadata={
                "answer_logic": self.question.answer_logic.value,
                "or_policy": self.or_policy.value,
            },
        )
