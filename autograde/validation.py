"""
Structural validation of exam definitions.

Runs before grading. A failure here means the authoring flow produced an
inconsistent exam, so it is reported as ``ExamStructureError`` naming the
offending question instead of being tolerated.
"""

from __future__ import annotations

from typing import Optional, Sequence, Union

from .core.config import get_settings
from .core.errors import ExamStructureError
from .models.domain import EXPECTED_ANSWER_KIND, Exam, Question


def _validate_numbers(questions: Sequence[Question]) -> None:
    seen: set[int] = set()
    for position, question in enumerate(questions, start=1):
        if question.number in seen:
            raise ExamStructureError(question.number, "duplicate question number")
        seen.add(question.number)
        if question.number != position:
            raise ExamStructureError(
                question.number,
                f"question numbers must be contiguous from 1 (expected {position})",
            )


def _validate_sub_questions(question: Question, enforce_points: bool) -> None:
    if question.is_essay:
        raise ExamStructureError(question.number, "essay question cannot have sub-questions")
    if not question.sub_questions:
        raise ExamStructureError(question.number, "has_sub_questions is set but no sub-questions are defined")

    sub_numbers: set[int] = set()
    for sub in question.sub_questions:
        if sub.sub_number in sub_numbers:
            raise ExamStructureError(question.number, f"duplicate sub-question number {sub.sub_number}")
        sub_numbers.add(sub.sub_number)
        if not [answer for answer in sub.correct_answers if answer.strip()]:
            raise ExamStructureError(
                question.number, f"sub-question {sub.sub_number} has no correct answer"
            )

    if enforce_points:
        sub_total = sum(sub.points for sub in question.sub_questions)
        if sub_total != question.points:
            raise ExamStructureError(
                question.number,
                f"sub-question points sum to {sub_total}, question is worth {question.points}",
            )


def _validate_answers(question: Question) -> None:
    if question.is_essay:
        if question.correct_answers:
            raise ExamStructureError(question.number, "essay question cannot have correct answers")
        return

    if not question.correct_answers:
        raise ExamStructureError(question.number, "no correct answer entered")

    expected_kind = EXPECTED_ANSWER_KIND[question.type]
    for answer in question.correct_answers:
        if answer.kind != expected_kind:
            raise ExamStructureError(
                question.number,
                f"answer {answer.value!r} does not fit question type {question.type.value}",
            )
        if question.type.is_choice and answer.value > question.type.max_choice:
            raise ExamStructureError(
                question.number,
                f"option {answer.value} is out of range for {question.type.value}",
            )
        if expected_kind == "text" and not answer.value.strip():
            raise ExamStructureError(question.number, "short answer cannot be blank")


def validate_question(question: Question, enforce_sub_question_points: Optional[bool] = None) -> None:
    """
    Validate a single question definition.

    Raises:
        ExamStructureError: On the first violated invariant
    """
    if enforce_sub_question_points is None:
        enforce_sub_question_points = get_settings().ENFORCE_SUB_QUESTION_POINTS

    if question.has_sub_questions:
        _validate_sub_questions(question, enforce_sub_question_points)
    else:
        _validate_answers(question)


def validate_exam(
    exam: Union[Exam, Sequence[Question]],
    enforce_sub_question_points: Optional[bool] = None,
) -> None:
    """
    Validate an exam before grading.

    Args:
        exam: Exam or its question array
        enforce_sub_question_points: Require sub-question points to sum to
            the parent's points (default from settings)

    Raises:
        ExamStructureError: Naming the offending question number, or None
            for exam-level problems
    """
    questions = exam.questions if isinstance(exam, Exam) else list(exam)

    if not questions:
        raise ExamStructureError(None, "exam has no questions")

    _validate_numbers(questions)
    for question in questions:
        validate_question(question, enforce_sub_question_points)

    if isinstance(exam, Exam) and exam.declared_total_points is not None:
        if exam.declared_total_points != exam.total_points:
            raise ExamStructureError(
                None,
                f"declared total {exam.declared_total_points} does not match question points {exam.total_points}",
            )
