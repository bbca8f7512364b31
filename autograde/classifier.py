"""
Answer classifier for teacher-entered answer cells.

Turns one free-text cell (plus the exam's default question type) into a
question type and a canonical answer list. Classification runs an ordered
table of rules; the first rule that matches wins, so the table order is the
precedence order:

1. essay keywords
2. circled-digit notation
3. a single O/X token
4. a pure numeric list (only for a choice default type)
5. short-answer fallback

The classifier never raises: anything unrecognized degrades to a short
answer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

from .core.config import get_settings
from .models.domain import (
    AnswerValue,
    BooleanMark,
    NumericChoice,
    Question,
    QuestionType,
    TextAnswer,
)
from .normalizers import (
    CIRCLED_DIGITS,
    COMMA_PATTERN,
    DIGIT_CIRCLES,
    NUMERIC_LIST_PATTERN,
    OX_VARIANTS,
    SEPARATOR_PATTERN,
    strip_separators,
)

Classification = tuple[QuestionType, Optional[list[AnswerValue]]]

DEFAULT_ESSAY_KEYWORDS: tuple[str, ...] = (
    "풀이 참조",
    "풀이참조",
    "해설",
    "서술",
    "논술",
    "채점 기준",
    "채점기준",
    "모범 답안",
    "모범답안",
    "개요",
    "설명",
    "solution",
    "reference",
    "refer to",
    "essay",
    "discuss",
    "grading criteria",
    "rubric",
    "outline",
    "explain",
)


class ClassificationRule(BaseModel, ABC):
    """
    One row of the classification table.

    Subclasses implement ``apply`` and return None when the rule does not
    match so the next rule is tried.
    """

    model_config = ConfigDict(frozen=True)

    name: ClassVar[str] = "unknown"

    @abstractmethod
    def apply(self, text: str, default_type: QuestionType) -> Optional[Classification]:
        """
        Try to classify trimmed, non-empty text.

        Args:
            text: Trimmed teacher input
            default_type: Exam default question type

        Returns:
            (type, answers) on match, None otherwise
        """
        pass


class EssayKeywordRule(ClassificationRule):
    """Grading notes instead of an answer mark the question as an essay."""

    name: ClassVar[str] = "essay_keyword"

    keywords: tuple[str, ...] = DEFAULT_ESSAY_KEYWORDS

    def apply(self, text: str, default_type: QuestionType) -> Optional[Classification]:
        lowered = text.lower()
        if any(keyword.lower() in lowered for keyword in self.keywords):
            return QuestionType.ESSAY, None
        return None


class CircledDigitRule(ClassificationRule):
    """'①③' or '①, ③' as multiple choice options, input order kept."""

    name: ClassVar[str] = "circled_digits"

    def apply(self, text: str, default_type: QuestionType) -> Optional[Classification]:
        compact = strip_separators(text)
        if not compact or not all(ch in CIRCLED_DIGITS for ch in compact):
            return None

        numbers = [CIRCLED_DIGITS[ch] for ch in compact]
        if default_type.is_choice and max(numbers) <= default_type.max_choice:
            question_type = default_type
        else:
            question_type = QuestionType.CHOICE5
        return question_type, [NumericChoice(value=n) for n in numbers]


class TrueFalseRule(ClassificationRule):
    """A single O/X glyph."""

    name: ClassVar[str] = "true_false"

    def apply(self, text: str, default_type: QuestionType) -> Optional[Classification]:
        mark = OX_VARIANTS.get(text)
        if mark is None:
            return None
        return QuestionType.OX, [BooleanMark(value=mark)]


class NumericListRule(ClassificationRule):
    """'1, 3' or '1 3' when the exam default is a choice type."""

    name: ClassVar[str] = "numeric_list"

    def apply(self, text: str, default_type: QuestionType) -> Optional[Classification]:
        if not default_type.is_choice or not NUMERIC_LIST_PATTERN.match(text):
            return None

        answers = [
            NumericChoice(value=int(part))
            for part in SEPARATOR_PATTERN.split(text)
            if part and 1 <= int(part) <= default_type.max_choice
        ]
        return default_type, answers


class ShortAnswerRule(ClassificationRule):
    """Catch-all: comma separated accepted texts."""

    name: ClassVar[str] = "short_answer"

    def apply(self, text: str, default_type: QuestionType) -> Optional[Classification]:
        parts = [part.strip() for part in COMMA_PATTERN.split(text)]
        return QuestionType.SHORT, [TextAnswer(value=part) for part in parts if part]


class AnswerClassifier(BaseModel):
    """
    Ordered classification table.

    Pure function of ``(raw_text, default_type)``: the table is immutable
    after construction.
    """

    model_config = ConfigDict(frozen=True)

    rules: tuple[ClassificationRule, ...] = Field(
        default_factory=lambda: (
            EssayKeywordRule(),
            CircledDigitRule(),
            TrueFalseRule(),
            NumericListRule(),
            ShortAnswerRule(),
        )
    )

    @classmethod
    def with_extra_keywords(cls, keywords: Iterable[str]) -> AnswerClassifier:
        """Default table with additional essay keywords."""
        extra = tuple(k for k in keywords if k and k.strip())
        if not extra:
            return cls()
        return cls(
            rules=(
                EssayKeywordRule(keywords=DEFAULT_ESSAY_KEYWORDS + extra),
                CircledDigitRule(),
                TrueFalseRule(),
                NumericListRule(),
                ShortAnswerRule(),
            )
        )

    def rule_names(self) -> list[str]:
        return [rule.name for rule in self.rules]

    def classify(self, raw_text: str, default_type: QuestionType) -> Classification:
        """
        Classify one answer cell.

        Args:
            raw_text: Teacher input, may be empty
            default_type: Exam default question type

        Returns:
            (question type, answers); answers is None for essays and [] for
            an empty cell
        """
        text = (raw_text or "").strip()
        if not text:
            return default_type, None if default_type is QuestionType.ESSAY else []

        for rule in self.rules:
            result = rule.apply(text, default_type)
            if result is not None:
                return result

        # Only reachable with a custom table lacking a catch-all
        return ShortAnswerRule().apply(text, default_type)


_default_classifier = AnswerClassifier()


def get_classifier() -> AnswerClassifier:
    """Classifier configured with ``EXTRA_ESSAY_KEYWORDS`` from settings."""
    extra = get_settings().EXTRA_ESSAY_KEYWORDS
    if not extra:
        return _default_classifier
    return AnswerClassifier.with_extra_keywords(extra)


def classify(raw_text: str, default_type: QuestionType) -> Classification:
    """Classify with the configured classification table (``EXTRA_ESSAY_KEYWORDS`` included)."""
    return get_classifier().classify(raw_text, default_type)


def format_answers(question: Question) -> str:
    """
    Render a question's correct answers back to editable cell text.

    Choice answers become circled digits, O/X the canonical mark, short
    answers a comma-joined list. Sub-question questions render every part
    for display.
    """
    if question.has_sub_questions:
        return " / ".join(
            f"({sub.sub_number}) {', '.join(sub.correct_answers)}"
            for sub in question.sub_questions
        )
    if question.is_essay or not question.correct_answers:
        return ""
    if question.type.is_choice:
        return ", ".join(
            DIGIT_CIRCLES.get(answer.value, str(answer.value))
            for answer in question.correct_answers
        )
    return ", ".join(str(answer) for answer in question.correct_answers)
