"""
Domain models for exam grading.

These are the core exam entities: question types, the tagged answer values
resolved once at classification time, questions with optional sub-question
decomposition, exams and student submissions.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.errors import ExamStructureError


class QuestionType(str, Enum):
    """Closed set of question types (values match stored documents)"""
    CHOICE4 = "choice4"
    CHOICE5 = "choice5"
    OX = "ox"
    SHORT = "short"
    ESSAY = "essay"

    @property
    def is_choice(self) -> bool:
        return self in (QuestionType.CHOICE4, QuestionType.CHOICE5)

    @property
    def max_choice(self) -> int:
        """Highest option number for choice types, 0 otherwise"""
        if self is QuestionType.CHOICE4:
            return 4
        if self is QuestionType.CHOICE5:
            return 5
        return 0

    @property
    def is_auto_gradable(self) -> bool:
        return self is not QuestionType.ESSAY


class AnswerLogic(str, Enum):
    """Multi-answer matching policy for choice questions"""
    AND = "and"
    OR = "or"


class OrSelectionPolicy(str, Enum):
    """How OR logic treats a wrong option selected next to a right one"""
    ANY_OVERLAP = "any_overlap"
    NO_WRONG_SELECTION = "no_wrong_selection"


class NumericChoice(BaseModel):
    """Selected option of a multiple choice question"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["choice"] = "choice"
    value: int = Field(..., ge=1, le=5)

    def __str__(self) -> str:
        return str(self.value)


class BooleanMark(BaseModel):
    """Canonical O/X mark"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["ox"] = "ox"
    value: Literal["O", "X"]

    def __str__(self) -> str:
        return self.value


class TextAnswer(BaseModel):
    """Accepted short answer text"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    value: str

    def __str__(self) -> str:
        return self.value


AnswerValue = Annotated[
    Union[NumericChoice, BooleanMark, TextAnswer],
    Field(discriminator="kind"),
]

EXPECTED_ANSWER_KIND = {
    QuestionType.CHOICE4: "choice",
    QuestionType.CHOICE5: "choice",
    QuestionType.OX: "ox",
    QuestionType.SHORT: "text",
}


class SubQuestion(BaseModel):
    """Independently scored part of a parent question"""
    sub_number: int = Field(..., ge=1)
    correct_answers: list[str] = Field(default_factory=list)
    points: int = Field(default=0, ge=0, description="Points earned when this part is correct")

    @field_validator("correct_answers", mode="before")
    @classmethod
    def coerce_answers(cls, v: Any) -> list[str]:
        """Accept a single string or numbers for the accepted answers"""
        if v is None:
            return []
        if isinstance(v, (str, int, float)):
            v = [v]
        return [str(item) for item in v]


class Question(BaseModel):
    """
    A single exam question definition.

    Cross-field invariants (essay without answers, non-empty sub-questions,
    at least one correct answer) are checked by ``validate_exam`` so that an
    invalid definition can still be loaded and reported by question number.
    """

    number: int = Field(..., ge=1, description="1-based position in the exam")
    type: QuestionType
    correct_answers: Optional[list[AnswerValue]] = Field(default_factory=list)
    answer_logic: AnswerLogic = AnswerLogic.AND
    points: int = Field(..., gt=0)
    category: str = ""
    explanation: str = ""
    ignore_space: bool = False
    has_sub_questions: bool = False
    sub_questions: list[SubQuestion] = Field(default_factory=list)

    @property
    def is_essay(self) -> bool:
        return self.type is QuestionType.ESSAY

    def answer_set(self) -> frozenset:
        """Correct answers as an order-independent set"""
        return frozenset(self.correct_answers or ())

    def grading_key(self) -> tuple:
        """Everything that can change this question's verdict"""
        return (
            self.type,
            tuple(self.correct_answers) if self.correct_answers is not None else None,
            self.answer_logic,
            self.points,
            self.ignore_space,
            self.has_sub_questions,
            tuple(
                (sub.sub_number, tuple(sub.correct_answers), sub.points)
                for sub in self.sub_questions
            ),
        )

    @classmethod
    def from_document(cls, data: dict[str, Any], number: Optional[int] = None) -> Question:
        """
        Create a Question from a stored exam document entry.

        Stored documents use camelCase keys and loosely typed answers
        (``[1, 3]``, ``["O"]``, ``["서울"]``); they are resolved into tagged
        answer values here, once, according to the question type.

        Args:
            data: Question document
            number: Fallback question number when the document has none

        Returns:
            Question instance

        Raises:
            ExamStructureError: If a stored answer cannot be resolved for the
                question type, or an essay stores correct answers
        """
        from ..normalizers import coerce_answer_value, parse_choice_token

        question_number = data.get("num", data.get("number", number))
        qtype = QuestionType(data.get("type", QuestionType.CHOICE4.value))
        raw_answers = data.get("correctAnswers", data.get("correct_answers"))

        if raw_answers is None:
            raw_answers = []
        elif not isinstance(raw_answers, (list, tuple)):
            raw_answers = [raw_answers]
        # Blank cells carry no answer
        raw_answers = [
            raw for raw in raw_answers
            if raw is not None and not (isinstance(raw, str) and not raw.strip())
        ]

        if qtype is QuestionType.ESSAY:
            if raw_answers:
                raise ExamStructureError(question_number, "essay question cannot have correct answers")
            correct_answers = None
        else:
            correct_answers = []
            for raw in raw_answers:
                value = coerce_answer_value(raw, qtype)
                if value is None:
                    option = parse_choice_token(raw) if qtype.is_choice else None
                    if option is not None:
                        reason = f"option {option} is out of range for {qtype.value}"
                    else:
                        reason = f"answer {raw!r} does not fit question type {qtype.value}"
                    raise ExamStructureError(question_number, reason)
                correct_answers.append(value)

        sub_questions = [
            SubQuestion(
                sub_number=sub.get("subNum", sub.get("sub_number", idx + 1)),
                correct_answers=sub.get("correctAnswers", sub.get("correct_answers")),
                points=sub.get("points", sub.get("subPoints", 0)),
            )
            for idx, sub in enumerate(data.get("subQuestions", data.get("sub_questions")) or [])
        ]

        return cls(
            number=question_number,
            type=qtype,
            correct_answers=correct_answers,
            answer_logic=data.get("answerLogic", data.get("answer_logic", AnswerLogic.AND)),
            points=data.get("points", 1),
            category=data.get("category") or "",
            explanation=data.get("explanation") or "",
            ignore_space=bool(data.get("ignoreSpace", data.get("ignore_space", False))),
            has_sub_questions=bool(data.get("hasSubQuestions", data.get("has_sub_questions", False))),
            sub_questions=sub_questions,
        )


class Exam(BaseModel):
    """Exam definition with its question array"""
    exam_id: str = ""
    title: str = ""
    subject: str = ""
    questions: list[Question] = Field(default_factory=list)
    declared_total_points: Optional[int] = Field(
        None, description="Total stored alongside the exam, checked against the question sum"
    )

    @property
    def total_points(self) -> int:
        return sum(q.points for q in self.questions)

    @property
    def auto_gradable_points(self) -> int:
        return sum(q.points for q in self.questions if not q.is_essay)

    @property
    def manual_gradable_points(self) -> int:
        return sum(q.points for q in self.questions if q.is_essay)

    def question(self, number: int) -> Optional[Question]:
        for q in self.questions:
            if q.number == number:
                return q
        return None

    @classmethod
    def from_document(cls, data: dict[str, Any], exam_id: str = "") -> Exam:
        """Create an Exam from a stored exam/answer-key document"""
        questions = [
            Question.from_document(q, number=idx + 1)
            for idx, q in enumerate(data.get("questions") or [])
        ]
        return cls(
            exam_id=data.get("id", exam_id),
            title=data.get("title", ""),
            subject=data.get("subject", ""),
            questions=questions,
            declared_total_points=data.get("totalPoints"),
        )


class Submission(BaseModel):
    """
    Student submission as recorded by the answer sheet.

    ``answers`` is either a list indexed by question number - 1 or a mapping
    keyed by question number. Entries are raw student input and may be
    wrapped as ``{"value": ...}``.
    """
    submission_id: str = ""
    student_id: str = ""
    exam_id: str = ""
    answers: Union[list[Any], dict[Any, Any]] = Field(default_factory=list)
    question_count: Optional[int] = Field(
        None, ge=0, description="Number of questions the submission was recorded against"
    )
    graded: bool = False
    manual_scores: dict[int, int] = Field(default_factory=dict)
    overrides: dict[int, bool] = Field(default_factory=dict)

    @classmethod
    def from_document(cls, data: dict[str, Any], submission_id: str = "") -> Submission:
        """Create a Submission from a stored submission document"""
        return cls(
            submission_id=data.get("id", submission_id),
            student_id=str(data.get("studentId", data.get("studentNumber", ""))),
            exam_id=data.get("examId", ""),
            answers=data.get("answers") or [],
            question_count=data.get("questionCount"),
            graded=bool(data.get("graded", False)),
            manual_scores=data.get("manualScores") or {},
            overrides=data.get("overrides") or {},
        )
