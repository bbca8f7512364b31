"""Domain models package"""

from .domain import (
    QuestionType,
    AnswerLogic,
    OrSelectionPolicy,
    NumericChoice,
    BooleanMark,
    TextAnswer,
    AnswerValue,
    SubQuestion,
    Question,
    Exam,
    Submission,
)
from .results import SubResult, ItemResult, Discrepancy, GradedResult

__all__ = [
    "QuestionType",
    "AnswerLogic",
    "OrSelectionPolicy",
    "NumericChoice",
    "BooleanMark",
    "TextAnswer",
    "AnswerValue",
    "SubQuestion",
    "Question",
    "Exam",
    "Submission",
    "SubResult",
    "ItemResult",
    "Discrepancy",
    "GradedResult",
]
