"""Normalize teacher and student answer input into tagged answer values."""

import re
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from .models.domain import (
    AnswerValue,
    BooleanMark,
    NumericChoice,
    QuestionType,
    TextAnswer,
)

CIRCLED_DIGITS: dict[str, int] = {
    "①": 1,
    "②": 2,
    "③": 3,
    "④": 4,
    "⑤": 5,
}

DIGIT_CIRCLES: dict[int, str] = {v: k for k, v in CIRCLED_DIGITS.items()}

TAGGED_ANSWER_TYPES = {
    "choice": NumericChoice,
    "ox": BooleanMark,
    "text": TextAnswer,
}

OX_VARIANTS: dict[str, str] = {
    "O": "O",
    "o": "O",
    "Ｏ": "O",
    "○": "O",
    "◯": "O",
    "〇": "O",
    "⭕": "O",
    "X": "X",
    "x": "X",
    "Ｘ": "X",
    "×": "X",
    "✕": "X",
    "✗": "X",
    "❌": "X",
}

# ASCII comma and the full-width variant
COMMA_PATTERN = re.compile(r"[,，]")
SEPARATOR_PATTERN = re.compile(r"[,，\s]+")
WHITESPACE_PATTERN = re.compile(r"\s+")
NUMERIC_LIST_PATTERN = re.compile(r"^[0-9]+(?:[,，\s]+[0-9]+)*$")


def strip_separators(text: str) -> str:
    """Remove commas and whitespace."""
    return SEPARATOR_PATTERN.sub("", text)


def remove_whitespace(text: str) -> str:
    """Remove all whitespace, including inner spaces."""
    return WHITESPACE_PATTERN.sub("", text)


def normalize_text(text: str, ignore_space: bool = False) -> str:
    """Trim, and drop every whitespace character when ``ignore_space``."""
    text = text.strip()
    return remove_whitespace(text) if ignore_space else text


def normalize_ox(token: Any) -> Optional[str]:
    """Map an O/X glyph or boolean to canonical 'O' / 'X'. None if unrecognized."""
    if isinstance(token, bool):
        return "O" if token else "X"
    if not isinstance(token, str):
        return None
    return OX_VARIANTS.get(token.strip())


def parse_choice_token(token: Any) -> Optional[int]:
    """Extract an option number from an int, numeric string or circled digit."""
    if isinstance(token, bool):
        return None
    if isinstance(token, int):
        return token
    if isinstance(token, float) and token.is_integer():
        return int(token)
    if isinstance(token, str):
        s = token.strip()
        if s in CIRCLED_DIGITS:
            return CIRCLED_DIGITS[s]
        if s.isascii() and s.isdigit():
            return int(s)
    return None


def split_choice_tokens(raw: str) -> list[str]:
    """Split '1, 3', '1 3' or '①③' into single tokens."""
    stripped = strip_separators(raw)
    if stripped and all(ch in CIRCLED_DIGITS for ch in stripped):
        return list(stripped)
    return [part for part in SEPARATOR_PATTERN.split(raw.strip()) if part]


def coerce_answer_value(raw: Any, question_type: QuestionType) -> Optional[AnswerValue]:
    """
    Resolve one loosely typed stored answer into a tagged value.

    Returns None when the value does not fit the question type.
    """
    if isinstance(raw, (NumericChoice, BooleanMark, TextAnswer)):
        return raw
    if isinstance(raw, Mapping) and "kind" in raw:
        kind = raw.get("kind")
        answer_type = TAGGED_ANSWER_TYPES.get(kind) if isinstance(kind, str) else None
        if answer_type is None:
            return None
        try:
            return answer_type(value=raw.get("value"))
        except ValidationError:
            return None

    if question_type.is_choice:
        number = parse_choice_token(raw)
        if number is None or not 1 <= number <= question_type.max_choice:
            return None
        return NumericChoice(value=number)
    if question_type is QuestionType.OX:
        mark = normalize_ox(raw)
        return BooleanMark(value=mark) if mark else None
    if question_type is QuestionType.SHORT:
        if raw is None:
            return None
        text = str(raw).strip()
        return TextAnswer(value=text) if text else None
    return None


def unwrap_student_answer(raw: Any) -> Any:
    """Student answers may be stored as ``{"value": ...}``."""
    if isinstance(raw, Mapping) and "value" in raw and len(raw) <= 2:
        return raw["value"]
    return raw


def student_choice_set(raw: Any, question_type: QuestionType) -> frozenset:
    """
    Normalize a student's choice / O-X submission to a set of tagged values.

    Unrecognized tokens are dropped; an empty set means "no answer".
    """
    raw = unwrap_student_answer(raw)
    if raw is None:
        return frozenset()
    if isinstance(raw, str):
        tokens: list[Any] = (
            [raw.strip()] if question_type is QuestionType.OX else split_choice_tokens(raw)
        )
    elif isinstance(raw, (list, tuple, set, frozenset)):
        tokens = list(raw)
    else:
        tokens = [raw]

    values = set()
    for token in tokens:
        value = coerce_answer_value(token, question_type)
        if value is not None:
            values.add(value)
    return frozenset(values)


def student_text(raw: Any) -> Optional[str]:
    """Student short-answer text, None when missing or not text."""
    raw = unwrap_student_answer(raw)
    if not isinstance(raw, str):
        return None
    return raw


def student_sub_answers(raw: Any) -> dict[int, str]:
    """
    Normalize a sub-question answer map.

    Accepts a mapping keyed by sub number (int or numeric string) or a list
    indexed by sub number - 1.
    """
    raw = unwrap_student_answer(raw)
    answers: dict[int, str] = {}
    if isinstance(raw, Mapping):
        for key, value in raw.items():
            number = parse_choice_token(key) if not isinstance(key, int) else key
            if number is not None and isinstance(value, str):
                answers[number] = value
    elif isinstance(raw, (list, tuple)):
        for idx, value in enumerate(raw):
            if isinstance(value, str):
                answers[idx + 1] = value
    return answers


def display_value(value: Union[AnswerValue, None]) -> Any:
    """Plain value for result display (int, 'O'/'X' or text)."""
    if value is None:
        return None
    return value.value
