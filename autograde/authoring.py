"""
Exam authoring helpers.

Builds and edits the question array a teacher fills in before an exam is
stored: default point distribution, answer-cell edits through the
classifier, type changes, question-count changes, bulk paste import and
conversion of the older flat answer-key format.
"""

from __future__ import annotations

import re
from typing import Optional, Sequence

from .classifier import AnswerClassifier, get_classifier
from .core.config import get_settings
from .core.errors import AuthoringError
from .core.logging import get_logger
from .models.domain import (
    AnswerLogic,
    BooleanMark,
    NumericChoice,
    Question,
    QuestionType,
)
from .normalizers import coerce_answer_value

logger = get_logger(__name__)

CELL_SPLIT_PATTERN = re.compile(r"\t|\r?\n")


def _empty_answers(question_type: QuestionType) -> Optional[list]:
    return None if question_type is QuestionType.ESSAY else []


def _check_count(count: int) -> None:
    max_count = get_settings().MAX_QUESTION_COUNT
    if count < 1 or count > max_count:
        raise AuthoringError(
            f"Question count must be between 1 and {max_count}, got {count}",
            field="count",
        )


def distribute_points(count: int, total: Optional[int] = None) -> list[int]:
    """
    Split ``total`` points over ``count`` questions.

    Every question gets ``total // count``; the remainder goes one point at a
    time to the earliest questions.

    Args:
        count: Number of questions
        total: Points to distribute (default ``DEFAULT_TOTAL_POINTS``)

    Returns:
        Points per question, summing to ``total``
    """
    _check_count(count)
    if total is None:
        total = get_settings().DEFAULT_TOTAL_POINTS
    if total < count:
        raise AuthoringError(
            f"Cannot give {count} questions positive points from a total of {total}",
            field="total",
        )

    base, remainder = divmod(total, count)
    return [base + (1 if idx < remainder else 0) for idx in range(count)]


def generate_questions(
    count: int,
    default_type: QuestionType,
    total_points: Optional[int] = None,
) -> list[Question]:
    """
    Create an empty question array for a new exam.

    Args:
        count: Number of questions (1..MAX_QUESTION_COUNT)
        default_type: Type given to every question
        total_points: Exam total (default ``DEFAULT_TOTAL_POINTS``)

    Returns:
        Questions numbered from 1 with distributed points and no answers
    """
    points = distribute_points(count, total_points)
    questions = [
        Question(
            number=idx + 1,
            type=default_type,
            correct_answers=_empty_answers(default_type),
            answer_logic=AnswerLogic.AND,
            points=points[idx],
        )
        for idx in range(count)
    ]

    logger.debug(
        "Generated questions",
        extra_data={"count": count, "default_type": default_type.value, "total": sum(points)}
    )
    return questions


def apply_cell_edit(
    question: Question,
    raw_text: str,
    classifier: Optional[AnswerClassifier] = None,
) -> Question:
    """
    Classify an edited answer cell and update the question.

    The question's current type is the classification default, so numeric
    input stays on a choice question. Sub-question questions keep their
    decomposition and are returned unchanged.
    """
    if question.has_sub_questions:
        return question

    classifier = classifier or get_classifier()
    question_type, answers = classifier.classify(raw_text, question.type)
    return question.model_copy(update={"type": question_type, "correct_answers": answers})


def change_question_type(question: Question, new_type: QuestionType) -> Question:
    """Switch a question's type, clearing answers that no longer apply."""
    if new_type is question.type:
        return question
    return question.model_copy(
        update={
            "type": new_type,
            "correct_answers": _empty_answers(new_type),
            "answer_logic": AnswerLogic.AND,
            "ignore_space": False,
        }
    )


def _default_answers(question_type: QuestionType) -> Optional[list]:
    if question_type.is_choice:
        return [NumericChoice(value=1)]
    if question_type is QuestionType.OX:
        return [BooleanMark(value="O")]
    return _empty_answers(question_type)


def resize_questions(
    questions: Sequence[Question],
    new_count: int,
    default_type: QuestionType,
) -> list[Question]:
    """
    Grow or shrink an existing question array.

    Removed questions are dropped from the end. Added questions get
    ``round(DEFAULT_TOTAL_POINTS / new_count)`` points and a placeholder
    answer; existing questions keep their points, so the exam total can move.
    """
    _check_count(new_count)
    current = list(questions[:new_count])
    default_points = max(1, round(get_settings().DEFAULT_TOTAL_POINTS / new_count))

    for idx in range(len(current), new_count):
        current.append(
            Question(
                number=idx + 1,
                type=default_type,
                correct_answers=_default_answers(default_type),
                points=default_points,
            )
        )

    if len(questions) > new_count:
        logger.info(
            "Questions removed from exam",
            extra_data={"removed": [q.number for q in questions[new_count:]]}
        )
    return current


def split_pasted_cells(text: str) -> list[str]:
    """Split spreadsheet-style pasted text into cells (tabs and newlines)."""
    cells = CELL_SPLIT_PATTERN.split(text.strip("\r\n"))
    return [cell.strip() for cell in cells]


def import_pasted_answers(
    questions: Sequence[Question],
    text: str,
    start_number: int = 1,
    classifier: Optional[AnswerClassifier] = None,
) -> list[Question]:
    """
    Apply a pasted block of answer cells to consecutive questions.

    Args:
        questions: Current question array
        text: Pasted cells separated by tabs or newlines
        start_number: Question number receiving the first cell
        classifier: Classification table (default from settings)

    Returns:
        Updated question array; cells beyond the last question are ignored
    """
    classifier = classifier or get_classifier()
    cells = split_pasted_cells(text)
    updated = list(questions)
    start = start_number - 1

    for offset, cell in enumerate(cells):
        idx = start + offset
        if idx >= len(updated):
            logger.warning(
                "Pasted cells exceed question count",
                extra_data={"ignored_cells": len(cells) - offset, "question_count": len(updated)}
            )
            break
        updated[idx] = apply_cell_edit(updated[idx], cell, classifier)

    return updated


def convert_legacy_answer_key(
    answers: Sequence[object],
    points_per_question: int = 4,
) -> list[Question]:
    """
    Convert the older exam format (one choice number per question).

    Args:
        answers: Correct option per question, e.g. ``[1, 3, 2, 4]``
        points_per_question: Points for every question

    Returns:
        Four-option choice questions with AND logic
    """
    if points_per_question <= 0:
        raise AuthoringError("points_per_question must be positive", field="points_per_question")

    questions = []
    for idx, raw in enumerate(answers):
        value = coerce_answer_value(raw, QuestionType.CHOICE4)
        questions.append(
            Question(
                number=idx + 1,
                type=QuestionType.CHOICE4,
                correct_answers=[value] if value is not None else [],
                answer_logic=AnswerLogic.AND,
                points=points_per_question,
            )
        )
    return questions


def summarize_points(questions: Sequence[Question]) -> dict[str, int]:
    """Total, auto-gradable and manual (essay) points of a question array."""
    auto = sum(q.points for q in questions if not q.is_essay)
    manual = sum(q.points for q in questions if q.is_essay)
    return {
        "total_points": auto + manual,
        "auto_gradable_points": auto,
        "manual_gradable_points": manual,
    }
