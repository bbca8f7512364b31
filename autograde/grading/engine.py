"""
Submission grading.

Grades one student's raw answers against an exam definition, applying
teacher overrides and manual essay scores, and reports answers that no
longer match the exam (exam edited after submission).
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

from ..core.config import get_settings
from ..core.logging import get_logger
from ..models.domain import Exam, OrSelectionPolicy, Question, QuestionType, Submission
from ..models.results import Discrepancy, GradedResult, ItemResult
from ..validation import validate_exam
from .evaluator import EvaluatorRegistry
from .evaluators import (
    EssayEvaluator,
    SelectionEvaluator,
    ShortAnswerEvaluator,
    SubQuestionEvaluator,
)

logger = get_logger(__name__)

RawAnswers = Union[Sequence[Any], Mapping[Any, Any]]


def default_registry() -> EvaluatorRegistry:
    """Registry with the built-in evaluators."""
    registry = EvaluatorRegistry()
    for evaluator_class in (SelectionEvaluator, ShortAnswerEvaluator, EssayEvaluator):
        for question_type in evaluator_class.question_types:
            registry.register(question_type, evaluator_class)
    registry.register_sub_question_evaluator(SubQuestionEvaluator)
    return registry


_default_registry = default_registry()


def _is_blank(raw: Any) -> bool:
    if raw is None:
        return True
    if isinstance(raw, Mapping) and "value" in raw:
        return _is_blank(raw["value"])
    if isinstance(raw, str):
        return not raw.strip()
    if isinstance(raw, (list, tuple, set, Mapping)):
        return len(raw) == 0
    return False


def _answer_for(answers: RawAnswers, number: int) -> Any:
    if isinstance(answers, Mapping):
        if number in answers:
            return answers[number]
        return answers.get(str(number))
    if 1 <= number <= len(answers):
        return answers[number - 1]
    return None


def _recorded_numbers(answers: RawAnswers, question_count: Optional[int]) -> set[int]:
    """Question numbers the submission holds a non-blank answer for."""
    numbers: set[int] = set()
    if isinstance(answers, Mapping):
        for key, value in answers.items():
            try:
                number = int(key)
            except (TypeError, ValueError):
                continue
            if not _is_blank(value):
                numbers.add(number)
    else:
        numbers.update(idx + 1 for idx, value in enumerate(answers) if not _is_blank(value))
    if question_count:
        numbers.update(range(1, question_count + 1))
    return numbers


class SubmissionGrader(BaseModel):
    """
    Grades submissions against an exam definition.

    Pure over its inputs: the same exam, answers, overrides and manual scores
    always produce the same ``GradedResult``.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    registry: EvaluatorRegistry = Field(default_factory=lambda: _default_registry)
    or_policy: OrSelectionPolicy = OrSelectionPolicy.ANY_OVERLAP
    enforce_sub_question_points: Optional[bool] = None

    @classmethod
    def from_settings(cls) -> SubmissionGrader:
        settings = get_settings()
        return cls(
            or_policy=OrSelectionPolicy(settings.OR_SELECTION_POLICY),
            enforce_sub_question_points=settings.ENFORCE_SUB_QUESTION_POINTS,
        )

    def grade_question(self, question: Question, student_answer: Any) -> ItemResult:
        """Computed (pre-override) result for one question."""
        evaluator = self.registry.create_evaluator(question, or_policy=self.or_policy)
        return evaluator.evaluate(student_answer)

    def grade(
        self,
        exam: Union[Exam, Sequence[Question]],
        answers: Union[Submission, RawAnswers],
        overrides: Optional[Mapping[int, bool]] = None,
        manual_scores: Optional[Mapping[int, int]] = None,
    ) -> GradedResult:
        """
        Grade one submission.

        Args:
            exam: Exam or its question array
            answers: Submission, or raw answers (list indexed by question
                number - 1, or mapping keyed by question number)
            overrides: Forced verdicts by question number
            manual_scores: Essay scores by question number

        Returns:
            GradedResult with per-question items and aggregate scores

        Raises:
            ExamStructureError: If the exam definition is invalid
        """
        questions = exam.questions if isinstance(exam, Exam) else list(exam)
        validate_exam(exam, self.enforce_sub_question_points)

        submission_id = ""
        question_count = None
        if isinstance(answers, Submission):
            submission_id = answers.submission_id
            question_count = answers.question_count
            if overrides is None:
                overrides = answers.overrides
            if manual_scores is None:
                manual_scores = answers.manual_scores
            answers = answers.answers
        overrides = {int(k): bool(v) for k, v in (overrides or {}).items()}
        manual_scores = {int(k): int(v) for k, v in (manual_scores or {}).items()}

        current_numbers = {q.number for q in questions}
        discrepancies = self._find_discrepancies(
            answers, question_count, current_numbers, overrides, manual_scores, questions
        )

        items: list[ItemResult] = []
        for question in questions:
            item = self.grade_question(question, _answer_for(answers, question.number))
            items.append(self._finalize(item, question, overrides, manual_scores))

        result = self._aggregate(submission_id, questions, items, discrepancies)

        if discrepancies:
            logger.warning(
                "Submission does not match current exam definition",
                extra_data={
                    "submission_id": submission_id,
                    "discrepancies": [d.model_dump() for d in discrepancies],
                }
            )
        logger.debug(
            "Submission graded",
            extra_data={
                "submission_id": submission_id,
                "score": result.score,
                "auto_score": result.auto_score,
                "correct_count": result.correct_count,
            }
        )
        return result

    def _finalize(
        self,
        item: ItemResult,
        question: Question,
        overrides: Mapping[int, bool],
        manual_scores: Mapping[int, int],
    ) -> ItemResult:
        """Apply manual essay scores and overrides, keeping computed values."""
        number = question.number
        if question.is_essay:
            if number in manual_scores:
                manual = max(0, min(question.points, manual_scores[number]))
                return item.model_copy(update={"manual_score": manual, "score": manual})
            return item

        if number in overrides:
            forced = overrides[number]
            return item.model_copy(
                update={
                    "correct": forced,
                    "score": question.points if forced else 0,
                    "overridden": True,
                }
            )
        return item

    def _find_discrepancies(
        self,
        answers: RawAnswers,
        question_count: Optional[int],
        current_numbers: set[int],
        overrides: Mapping[int, bool],
        manual_scores: Mapping[int, int],
        questions: Sequence[Question],
    ) -> list[Discrepancy]:
        discrepancies = [
            Discrepancy(
                question_number=number,
                reason="answer recorded for a question that is no longer in the exam",
                detail=_answer_for(answers, number),
            )
            for number in sorted(_recorded_numbers(answers, question_count) - current_numbers)
        ]

        essay_numbers = {q.number for q in questions if q.is_essay}
        for number in sorted(overrides):
            if number not in current_numbers:
                discrepancies.append(
                    Discrepancy(question_number=number, reason="override for unknown question")
                )
            elif number in essay_numbers:
                discrepancies.append(
                    Discrepancy(question_number=number, reason="override ignored for essay question")
                )
        for number in sorted(manual_scores):
            if number not in current_numbers:
                discrepancies.append(
                    Discrepancy(question_number=number, reason="manual score for unknown question")
                )
            elif number not in essay_numbers:
                discrepancies.append(
                    Discrepancy(question_number=number, reason="manual score ignored for auto-graded question")
                )
        return discrepancies

    def _aggregate(
        self,
        submission_id: str,
        questions: Sequence[Question],
        items: list[ItemResult],
        discrepancies: list[Discrepancy],
    ) -> GradedResult:
        essays = [item for item in items if item.type is QuestionType.ESSAY]
        auto_items = [item for item in items if item.type is not QuestionType.ESSAY]

        return GradedResult(
            submission_id=submission_id,
            score=sum(item.score for item in items),
            correct_count=sum(1 for item in items if item.correct is True),
            auto_score=sum(item.computed_score for item in auto_items),
            total_points=sum(q.points for q in questions),
            auto_gradable_points=sum(q.points for q in questions if not q.is_essay),
            manual_gradable_points=sum(q.points for q in questions if q.is_essay),
            items=items,
            discrepancies=discrepancies,
            has_essay=bool(essays),
            essay_count=len(essays),
            manual_grading_complete=all(item.manual_score is not None for item in essays),
        )


def grade_submission(
    exam: Union[Exam, Sequence[Question]],
    answers: Union[Submission, RawAnswers],
    overrides: Optional[Mapping[int, bool]] = None,
    manual_scores: Optional[Mapping[int, int]] = None,
    or_policy: Optional[OrSelectionPolicy] = None,
) -> GradedResult:
    """
    Grade one submission with the configured grader.

    Args:
        exam: Exam or its question array
        answers: Submission or raw answers
        overrides: Forced verdicts by question number
        manual_scores: Essay scores by question number
        or_policy: OR-logic policy (default from settings)

    Returns:
        GradedResult
    """
    grader = SubmissionGrader.from_settings()
    if or_policy is not None:
        grader = grader.model_copy(update={"or_policy": OrSelectionPolicy(or_policy)})
    return grader.grade(exam, answers, overrides, manual_scores)
