"""
Type-specific question evaluators.

Each module implements an evaluator for one family of question types.
"""

from .essay import EssayEvaluator
from .selection import SelectionEvaluator
from .short_answer import ShortAnswerEvaluator
from .sub_question import SubQuestionEvaluator

__all__ = [
    "SelectionEvaluator",
    "ShortAnswerEvaluator",
    "SubQuestionEvaluator",
    "EssayEvaluator",
]
