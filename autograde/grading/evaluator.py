"""
Base question evaluator framework.

Provides the abstract base class for per-question evaluators and a registry
for dispatch on question type.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import OrSelectionPolicy, Question, QuestionType
from ..models.results import ItemResult


class QuestionEvaluator(BaseModel, ABC):
    """
    Abstract base class for question evaluators.

    Each evaluator checks a student's raw answer for one question against
    that question's correct answers.

    Subclasses must implement:
    - evaluate(): Core evaluation logic
    - question_types: Types this evaluator handles
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    question_types: ClassVar[tuple[QuestionType, ...]] = ()

    question: Question = Field(description="The question definition to grade against")
    or_policy: OrSelectionPolicy = Field(
        default=OrSelectionPolicy.ANY_OVERLAP,
        description="Treatment of wrong extra selections under OR logic",
    )

    @abstractmethod
    def evaluate(self, student_answer: Any) -> ItemResult:
        """
        Evaluate the student's raw answer.

        Args:
            student_answer: Raw answer as stored with the submission, None
                when the student left the question blank

        Returns:
            ItemResult with the computed verdict and score
        """
        pass

    def correct_answer_display(self) -> Any:
        """Correct answers as plain values for display"""
        if self.question.correct_answers is None:
            return None
        return [answer.value for answer in self.question.correct_answers]


class EvaluatorRegistry(BaseModel):
    """
    Registry for question evaluators.

    Provides type-based dispatch to the appropriate evaluator. Questions
    decomposed into sub-questions are dispatched to a dedicated evaluator
    regardless of type.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def __init__(self) -> None:
        """Initialize empty registry."""
        super().__init__()
        self._evaluators: dict[QuestionType, type[QuestionEvaluator]] = {}
        self._sub_question_evaluator: Optional[type[QuestionEvaluator]] = None

    def register(
        self, question_type: QuestionType, evaluator_class: type[QuestionEvaluator]
    ) -> None:
        """
        Register an evaluator for a question type.

        Raises:
            TypeError: If evaluator_class is not a QuestionEvaluator subclass
        """
        if not (isinstance(evaluator_class, type) and issubclass(evaluator_class, QuestionEvaluator)):
            raise TypeError(f"evaluator_class must be a subclass of QuestionEvaluator, got {evaluator_class}")
        self._evaluators[question_type] = evaluator_class

    def register_sub_question_evaluator(self, evaluator_class: type[QuestionEvaluator]) -> None:
        """Register the evaluator used for questions with sub-questions."""
        if not (isinstance(evaluator_class, type) and issubclass(evaluator_class, QuestionEvaluator)):
            raise TypeError(f"evaluator_class must be a subclass of QuestionEvaluator, got {evaluator_class}")
        self._sub_question_evaluator = evaluator_class

    def get_evaluator(self, question: Question) -> type[QuestionEvaluator] | None:
        """Evaluator class for a question, or None if not found"""
        if question.has_sub_questions:
            return self._sub_question_evaluator
        return self._evaluators.get(question.type)

    def create_evaluator(self, question: Question, **options: Any) -> QuestionEvaluator:
        """
        Create an evaluator instance for a question.

        Raises:
            ValueError: If no evaluator is registered for the question
        """
        evaluator_class = self.get_evaluator(question)
        if evaluator_class is None:
            raise ValueError(f"No evaluator registered for type: {question.type.value}")

        return evaluator_class(question=question, **options)

    def get_registered_types(self) -> list[QuestionType]:
        return list(self._evaluators.keys())
