"""
autograde - answer classification and auto-grading for teacher exams

Provides:
- Classification of teacher answer cells into question types
- Structural validation of exam definitions
- Submission grading with AND/OR logic, sub-questions, overrides and
  manual essay scores
- Bulk regrade of all submissions after an exam edit
"""

from .classifier import AnswerClassifier, classify, format_answers
from .grading import (
    RegradeReport,
    SubmissionGrader,
    changed_questions,
    grade_submission,
    regrade_submissions,
)
from .models import (
    AnswerLogic,
    BooleanMark,
    Exam,
    GradedResult,
    ItemResult,
    NumericChoice,
    OrSelectionPolicy,
    Question,
    QuestionType,
    SubQuestion,
    Submission,
    TextAnswer,
)
from .validation import validate_exam

__version__ = "1.0.0"

__all__ = [
    "AnswerClassifier",
    "classify",
    "format_answers",
    "validate_exam",
    "SubmissionGrader",
    "grade_submission",
    "regrade_submissions",
    "changed_questions",
    "RegradeReport",
    "QuestionType",
    "AnswerLogic",
    "OrSelectionPolicy",
    "NumericChoice",
    "BooleanMark",
    "TextAnswer",
    "SubQuestion",
    "Question",
    "Exam",
    "Submission",
    "ItemResult",
    "GradedResult",
]
