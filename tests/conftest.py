"""
Shared pytest fixtures for the grading tests.

This module provides:
- Question and exam builders
- A mixed exam covering every question type
- Isolation of cached settings between tests
"""

from typing import Any, Type

import pytest
from pydantic import BaseModel, ValidationError

from autograde.core.config import get_settings
from autograde.models import (
    AnswerLogic,
    BooleanMark,
    Exam,
    NumericChoice,
    Question,
    QuestionType,
    SubQuestion,
    TextAnswer,
)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Each test sees settings built from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def assert_validation_error():
    """Helper to assert that a ValidationError is raised for a given field."""
    def _assert_validation(
        model_class: Type[BaseModel],
        data: dict[str, Any],
        expected_field: str | None = None,
    ) -> ValidationError:
        with pytest.raises(ValidationError) as exc_info:
            model_class(**data)

        error = exc_info.value
        if expected_field:
            field_errors = [e for e in error.errors() if e['loc'] and e['loc'][0] == expected_field]
            assert field_errors, f"Expected error for field '{expected_field}' not found"
        return error

    return _assert_validation


@pytest.fixture
def choice_question():
    """Factory for choice questions."""
    def _factory(number=1, answers=(1,), logic=AnswerLogic.AND, points=10, qtype=QuestionType.CHOICE5):
        return Question(
            number=number,
            type=qtype,
            correct_answers=[NumericChoice(value=a) for a in answers],
            answer_logic=logic,
            points=points,
        )
    return _factory


@pytest.fixture
def short_question():
    """Factory for short-answer questions."""
    def _factory(number=1, answers=("서울",), ignore_space=False, points=10, logic=AnswerLogic.AND):
        return Question(
            number=number,
            type=QuestionType.SHORT,
            correct_answers=[TextAnswer(value=a) for a in answers],
            ignore_space=ignore_space,
            answer_logic=logic,
            points=points,
        )
    return _factory


@pytest.fixture
def mixed_exam():
    """One question of every kind, 100 points in total."""
    return Exam(
        exam_id="exam-1",
        title="1단원 평가",
        subject="사회",
        questions=[
            Question(
                number=1,
                type=QuestionType.CHOICE4,
                correct_answers=[NumericChoice(value=2)],
                points=20,
            ),
            Question(
                number=2,
                type=QuestionType.CHOICE5,
                correct_answers=[NumericChoice(value=1), NumericChoice(value=3)],
                answer_logic=AnswerLogic.OR,
                points=20,
            ),
            Question(
                number=3,
                type=QuestionType.OX,
                correct_answers=[BooleanMark(value="X")],
                points=10,
            ),
            Question(
                number=4,
                type=QuestionType.SHORT,
                correct_answers=[TextAnswer(value="seoul city"), TextAnswer(value="서울")],
                ignore_space=True,
                points=15,
            ),
            Question(
                number=5,
                type=QuestionType.SHORT,
                correct_answers=[],
                has_sub_questions=True,
                sub_questions=[
                    SubQuestion(sub_number=1, correct_answers=["ㄱ"], points=3),
                    SubQuestion(sub_number=2, correct_answers=["ㄴ", "ㄷ"], points=2),
                ],
                points=5,
            ),
            Question(
                number=6,
                type=QuestionType.ESSAY,
                correct_answers=None,
                points=30,
            ),
        ],
    )


@pytest.fixture
def perfect_answers():
    """Answers earning every auto-gradable point of ``mixed_exam``."""
    return [2, [1], "X", "seoulcity", {"1": "ㄱ", "2": "ㄷ"}, "임진왜란의 원인은..."]
