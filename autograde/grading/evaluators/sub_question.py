"""
Sub-question evaluator.

Scores a question decomposed into independently marked parts.
"""

from __future__ import annotations

from typing import Any

from ...models.domain import SubQuestion
from ...models.results import ItemResult, SubResult
from ...normalizers import normalize_text, student_sub_answers
from ..evaluator import QuestionEvaluator


class SubQuestionEvaluator(QuestionEvaluator):
    """
    Evaluator for questions with sub-questions.

    Each part is correct when the student's text matches any of its accepted
    answers (case-sensitive, trimmed, whitespace removed with
    ``ignore_space``). The parent earns the sum of its correct parts' points,
    capped at its own points: sub-question points need not sum to the
    parent's, and an item score never exceeds its max points. The parent
    is correct only when every part is.
    """

    def compare(self, sub: SubQuestion, student_value: str) -> bool:
        ignore_space = self.question.ignore_space
        normalized = normalize_text(student_value, ignore_space)
        if not normalized:
            return False
        return any(
            normalize_text(answer, ignore_space) == normalized
            for answer in sub.correct_answers
        )

    def evaluate(self, student_answer: Any) -> ItemResult:
        """Evaluate every sub-question and aggregate."""
        answers = student_sub_answers(student_answer)

        sub_results = []
        for sub in self.question.sub_questions:
            value = answers.get(sub.sub_number, "")
            is_correct = self.compare(sub, value)
            sub_results.append(
                SubResult(
                    sub_number=sub.sub_number,
                    correct=is_correct,
                    score=sub.points if is_correct else 0,
                    max_points=sub.points,
                    student_answer=value.strip(),
                    correct_answer=list(sub.correct_answers),
                )
            )

        all_correct = bool(sub_results) and all(sub.correct for sub in sub_results)
        earned = sum(sub.score for sub in sub_results)
        # Sub-question points may exceed the parent's when not enforced
        score = min(earned, self.question.points)

        return ItemResult(
            question_number=self.question.number,
            type=self.question.type,
            correct=all_correct,
            score=score,
            max_points=self.question.points,
            student_answer={sub.sub_number: sub.student_answer for sub in sub_results},
            correct_answer={sub.sub_number: sub.correct_answer for sub in sub_results},
            sub_results=sub_results,
            computed_correct=all_correct,
            computed_score=score,
            metadata={"sub_points_earned": earned},
        )
