"""
Bulk grading and regrade-all.

Grades many submissions of one exam as an order-independent map. The exam
is validated once up front; a failure for one submission is recorded and
the rest are still graded, so callers can report "N succeeded, M failed".
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence, Union

from pydantic import BaseModel, Field, ValidationError

from ..core.config import get_settings
from ..core.errors import AutogradeError, SubmissionGradingError
from ..core.logging import get_context_logger
from ..models.domain import Exam, Question, Submission
from ..models.results import GradedResult
from ..validation import validate_exam
from .engine import SubmissionGrader


class RegradeFailure(BaseModel):
    """A submission that could not be graded"""
    submission_id: str
    error: str


class RegradeReport(BaseModel):
    """Outcome of a bulk grading run"""
    exam_id: str = ""
    results: list[GradedResult] = Field(default_factory=list)
    failures: list[RegradeFailure] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return len(self.failures)

    def summary(self) -> str:
        return f"{self.succeeded} succeeded, {self.failed} failed, {len(self.skipped)} skipped"


def changed_questions(
    old_exam: Union[Exam, Sequence[Question]],
    new_exam: Union[Exam, Sequence[Question]],
) -> set[int]:
    """
    Question numbers whose grading can differ between two exam versions.

    Covers edits to type, answers, logic, points, whitespace policy and
    sub-questions, plus added and removed questions.
    """
    old_questions = old_exam.questions if isinstance(old_exam, Exam) else list(old_exam)
    new_questions = new_exam.questions if isinstance(new_exam, Exam) else list(new_exam)
    old_keys = {q.number: q.grading_key() for q in old_questions}
    new_keys = {q.number: q.grading_key() for q in new_questions}

    return {
        number
        for number in old_keys.keys() | new_keys.keys()
        if old_keys.get(number) != new_keys.get(number)
    }


def _grade_one(grader: SubmissionGrader, exam: Exam, submission: Submission) -> GradedResult:
    try:
        return grader.grade(exam, submission)
    except (AutogradeError, ValidationError, LookupError, TypeError, ValueError) as e:
        raise SubmissionGradingError(submission.submission_id, str(e)) from e


def regrade_submissions(
    exam: Union[Exam, Sequence[Question]],
    submissions: Sequence[Submission],
    skip_graded: bool = False,
    max_workers: Optional[int] = None,
    grader: Optional[SubmissionGrader] = None,
) -> RegradeReport:
    """
    Grade every submission of an exam.

    Args:
        exam: Current exam definition
        submissions: Submissions to grade; each uses its own overrides and
            manual scores
        skip_graded: Leave already graded submissions alone (automatic
            grading of new submissions) instead of regrading all
        max_workers: Thread pool size (default ``REGRADE_MAX_WORKERS``)
        grader: Grader to use (default from settings)

    Returns:
        RegradeReport with results in submission order

    Raises:
        ExamStructureError: If the exam definition is invalid
    """
    if not isinstance(exam, Exam):
        exam = Exam(questions=list(exam))
    grader = grader or SubmissionGrader.from_settings()
    if max_workers is None:
        max_workers = get_settings().REGRADE_MAX_WORKERS

    logger = get_context_logger(__name__, exam_id=exam.exam_id)

    validate_exam(exam, grader.enforce_sub_question_points)

    report = RegradeReport(exam_id=exam.exam_id)
    pending = []
    for submission in submissions:
        if skip_graded and submission.graded:
            report.skipped.append(submission.submission_id)
        else:
            pending.append(submission)

    logger.info(
        "Grading submissions",
        extra_data={"count": len(pending), "skipped": len(report.skipped), "max_workers": max_workers}
    )

    def run(submission: Submission) -> Union[GradedResult, SubmissionGradingError]:
        try:
            return _grade_one(grader, exam, submission)
        except SubmissionGradingError as e:
            return e

    if max_workers > 1 and len(pending) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as ex:
            outcomes = list(ex.map(run, pending))
    else:
        outcomes = [run(submission) for submission in pending]

    for outcome in outcomes:
        if isinstance(outcome, SubmissionGradingError):
            logger.error(
                "Failed to grade submission",
                extra_data=outcome.details
            )
            report.failures.append(
                RegradeFailure(submission_id=outcome.submission_id, error=outcome.details["error"])
            )
        else:
            report.results.append(outcome)

    logger.info(
        "Grading completed",
        extra_data={"succeeded": report.succeeded, "failed": report.failed}
    )
    return report
