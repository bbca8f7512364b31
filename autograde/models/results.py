"""
Grading result data structures.

This module provides the per-question ``ItemResult`` (with sub-question
results and audit fields for overrides), the ``Discrepancy`` signal used to
report exam drift, and the aggregate ``GradedResult``.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .domain import QuestionType


class SubResult(BaseModel):
    """Verdict for one sub-question"""
    sub_number: int
    correct: bool
    score: int = 0
    max_points: int = 0
    student_answer: str = ""
    correct_answer: list[str] = Field(default_factory=list)


class ItemResult(BaseModel):
    """
    Result of grading one question.

    Attributes:
        question_number: Question number in the current exam
        type: Question type
        correct: Final verdict; None for essay items awaiting a manual score
        score: Points contributing to the aggregate score
        max_points: Question points
        student_answer: Normalized student answer for display
        correct_answer: Correct answers for display
        sub_results: Per sub-question verdicts, when decomposed
        computed_correct: Verdict computed by the evaluator before overrides
        computed_score: Score computed by the evaluator before overrides
        overridden: Whether a teacher override replaced the verdict
        manual_score: Manually entered essay score
        metadata: Evaluator details for debugging
    """

    model_config = ConfigDict(validate_assignment=True)

    question_number: int
    type: QuestionType
    correct: Optional[bool] = None
    score: int = Field(default=0, ge=0)
    max_points: int = Field(default=0, ge=0)
    student_answer: Any = None
    correct_answer: Any = None
    sub_results: Optional[list[SubResult]] = None
    computed_correct: Optional[bool] = None
    computed_score: int = Field(default=0, ge=0)
    overridden: bool = False
    manual_score: Optional[int] = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_score_range(self) -> ItemResult:
        """Score can never exceed the question's points"""
        if self.score > self.max_points:
            raise ValueError(
                f"score {self.score} exceeds max_points {self.max_points}"
            )
        return self

    @property
    def is_pending(self) -> bool:
        """Essay item with no manual score yet"""
        return self.type is QuestionType.ESSAY and self.manual_score is None

    @classmethod
    def graded(
        cls,
        question_number: int,
        question_type: QuestionType,
        correct: bool,
        points: int,
        student_answer: Any,
        correct_answer: Any,
        **fields: Any,
    ) -> ItemResult:
        """
        Create an all-or-nothing result (convenience factory).

        Args:
            question_number: Question number
            question_type: Question type
            correct: Computed verdict
            points: Question points, awarded in full when correct
            student_answer: Normalized student answer
            correct_answer: Correct answers for display
            **fields: Additional ItemResult fields

        Returns:
            ItemResult with computed and final verdicts set
        """
        score = points if correct else 0
        return cls(
            question_number=question_number,
            type=question_type,
            correct=correct,
            score=score,
            max_points=points,
            student_answer=student_answer,
            correct_answer=correct_answer,
            computed_correct=correct,
            computed_score=score,
            **fields,
        )


class Discrepancy(BaseModel):
    """Something in the submission that no longer fits the exam definition"""
    question_number: Optional[int] = None
    reason: str
    detail: Any = None


class GradedResult(BaseModel):
    """Aggregate grading result for one submission"""
    submission_id: str = ""
    score: int = 0
    correct_count: int = 0
    auto_score: int = 0
    total_points: int = 0
    auto_gradable_points: int = 0
    manual_gradable_points: int = 0
    items: list[ItemResult] = Field(default_factory=list)
    discrepancies: list[Discrepancy] = Field(default_factory=list)
    has_essay: bool = False
    essay_count: int = 0
    manual_grading_complete: bool = True

    def item(self, question_number: int) -> Optional[ItemResult]:
        for item in self.items:
            if item.question_number == question_number:
                return item
        return None

    def to_document(self) -> dict[str, Any]:
        """
        Convert to the stored submission-score shape.

        Returns:
            Dictionary with camelCase keys suitable for a submission update
        """
        return {
            "score": self.score,
            "correctCount": self.correct_count,
            "autoScore": self.auto_score,
            "hasEssay": self.has_essay,
            "essayCount": self.essay_count,
            "manualGradingComplete": self.manual_grading_complete,
            "manualScores": {
                str(item.question_number): item.manual_score
                for item in self.items
                if item.manual_score is not None
            },
            "itemResults": [
                {
                    "questionNum": item.question_number,
                    "type": item.type.value,
                    "correct": item.correct,
                    "points": item.score,
                    "maxPoints": item.max_points,
                    "studentAnswer": item.student_answer,
                    "correctAnswer": item.correct_answer,
                    **(
                        {
                            "hasSubQuestions": True,
                            "subResults": [
                                {
                                    "subNum": sub.sub_number,
                                    "correct": sub.correct,
                                    "studentAnswer": sub.student_answer,
                                    "correctAnswer": sub.correct_answer,
                                }
                                for sub in item.sub_results
                            ],
                        }
                        if item.sub_results is not None
                        else {}
                    ),
                }
                for item in self.items
            ],
            "graded": True,
        }
