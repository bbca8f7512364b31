"""
Grading engine.

Provides pluggable per-question evaluation with:
- Type-specific evaluators behind a registry
- AND/OR selection logic with a configurable OR policy
- Sub-question decomposition with per-part points
- Teacher overrides and manual essay scores
- Bulk regrade over many submissions
"""

from .engine import SubmissionGrader, default_registry, grade_submission
from .evaluator import EvaluatorRegistry, QuestionEvaluator
from .regrade import RegradeFailure, RegradeReport, changed_questions, regrade_submissions

__all__ = [
    "QuestionEvaluator",
    "EvaluatorRegistry",
    "SubmissionGrader",
    "default_registry",
    "grade_submission",
    "RegradeFailure",
    "RegradeReport",
    "changed_questions",
    "regrade_submissions",
]
