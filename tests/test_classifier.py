"""
Test suite for the answer classifier.

Covers every row of the classification table, the precedence between rows,
and the display round-trip through ``format_answers``.
"""

import pytest

from autograde.classifier import (
    AnswerClassifier,
    ClassificationRule,
    EssayKeywordRule,
    classify,
    format_answers,
    get_classifier,
)
from autograde.models import (
    AnswerLogic,
    BooleanMark,
    NumericChoice,
    Question,
    QuestionType,
    SubQuestion,
    TextAnswer,
)


class TestEmptyInput:
    """Empty cells mean 'unanswered'."""

    def test_empty_string_returns_default_type(self):
        assert classify("", QuestionType.CHOICE4) == (QuestionType.CHOICE4, [])

    def test_whitespace_only_returns_default_type(self):
        assert classify("   \t ", QuestionType.SHORT) == (QuestionType.SHORT, [])

    def test_empty_essay_default_has_no_answer_list(self):
        assert classify("", QuestionType.ESSAY) == (QuestionType.ESSAY, None)


class TestEssayKeywords:
    """Grading notes classify as essay regardless of the default type."""

    @pytest.mark.parametrize("text", ["풀이 참조", "풀이참조", "해설 참고", "서술형", "채점 기준 별도"])
    def test_korean_keywords(self, text):
        assert classify(text, QuestionType.CHOICE5) == (QuestionType.ESSAY, None)

    @pytest.mark.parametrize("text", ["See solution", "ESSAY", "Discuss with rubric", "explain why"])
    def test_english_keywords_case_insensitive(self, text):
        assert classify(text, QuestionType.SHORT) == (QuestionType.ESSAY, None)

    def test_keyword_precedes_numeric_list(self):
        """'refer to solution, 1' never reaches the numeric-list rule."""
        assert classify("refer to solution, 1", QuestionType.CHOICE4) == (QuestionType.ESSAY, None)

    def test_extra_keywords(self):
        classifier = AnswerClassifier.with_extra_keywords(["채점요소"])
        assert classifier.classify("채점요소 3개", QuestionType.SHORT) == (QuestionType.ESSAY, None)
        assert classify("채점요소 3개", QuestionType.SHORT)[0] is QuestionType.SHORT

    def test_extra_keywords_from_settings(self, monkeypatch):
        monkeypatch.setenv("EXTRA_ESSAY_KEYWORDS", '["자유 응답"]')
        classifier = get_classifier()
        assert classifier.classify("자유 응답", QuestionType.CHOICE4)[0] is QuestionType.ESSAY

    def test_module_classify_uses_settings(self, monkeypatch):
        monkeypatch.setenv("EXTRA_ESSAY_KEYWORDS", '["자유 응답"]')
        assert classify("자유 응답", QuestionType.SHORT) == (QuestionType.ESSAY, None)


class TestCircledDigits:
    """Circled-digit notation for choice answers."""

    def test_single_digit_keeps_choice_default(self):
        assert classify("③", QuestionType.CHOICE4) == (
            QuestionType.CHOICE4,
            [NumericChoice(value=3)],
        )

    def test_multiple_digits_with_separators(self):
        qtype, answers = classify("①, ③", QuestionType.CHOICE5)
        assert qtype is QuestionType.CHOICE5
        assert answers == [NumericChoice(value=1), NumericChoice(value=3)]

    def test_input_order_kept_without_dedupe(self):
        _, answers = classify("③①③", QuestionType.CHOICE5)
        assert [a.value for a in answers] == [3, 1, 3]

    def test_fifth_option_upgrades_choice4(self):
        qtype, _ = classify("⑤", QuestionType.CHOICE4)
        assert qtype is QuestionType.CHOICE5

    def test_non_choice_default_becomes_choice5(self):
        qtype, answers = classify("②", QuestionType.SHORT)
        assert qtype is QuestionType.CHOICE5
        assert answers == [NumericChoice(value=2)]

    def test_mixed_with_text_falls_back(self):
        qtype, answers = classify("①번", QuestionType.CHOICE4)
        assert qtype is QuestionType.SHORT
        assert answers == [TextAnswer(value="①번")]


class TestTrueFalse:
    """A single O/X token."""

    @pytest.mark.parametrize("token", ["O", "o", "○", "◯", "Ｏ"])
    def test_o_variants(self, token):
        assert classify(token, QuestionType.CHOICE4) == (QuestionType.OX, [BooleanMark(value="O")])

    @pytest.mark.parametrize("token", ["X", "x", "×", "✕", "Ｘ"])
    def test_x_variants(self, token):
        assert classify(f" {token} ", QuestionType.SHORT) == (QuestionType.OX, [BooleanMark(value="X")])

    def test_two_tokens_are_not_true_false(self):
        qtype, answers = classify("O, X", QuestionType.OX)
        assert qtype is QuestionType.SHORT
        assert answers == [TextAnswer(value="O"), TextAnswer(value="X")]


class TestNumericList:
    """Plain numbers on a choice default type."""

    def test_comma_separated(self):
        assert classify("1, 3", QuestionType.CHOICE4) == (
            QuestionType.CHOICE4,
            [NumericChoice(value=1), NumericChoice(value=3)],
        )

    def test_space_and_fullwidth_comma(self):
        _, answers = classify("2 4，5", QuestionType.CHOICE5)
        assert [a.value for a in answers] == [2, 4, 5]

    def test_out_of_range_values_dropped(self):
        _, answers = classify("1, 5, 9, 0", QuestionType.CHOICE4)
        assert answers == [NumericChoice(value=1)]

    def test_all_out_of_range_is_unanswered(self):
        assert classify("7", QuestionType.CHOICE5) == (QuestionType.CHOICE5, [])

    def test_numbers_on_short_default_are_text(self):
        assert classify("1, 3", QuestionType.SHORT) == (
            QuestionType.SHORT,
            [TextAnswer(value="1"), TextAnswer(value="3")],
        )


class TestShortAnswerFallback:
    """Everything else is a short answer."""

    def test_single_word(self):
        assert classify("서울", QuestionType.CHOICE4) == (QuestionType.SHORT, [TextAnswer(value="서울")])

    def test_phrase_keeps_inner_spaces(self):
        _, answers = classify("  seoul city ", QuestionType.SHORT)
        assert answers == [TextAnswer(value="seoul city")]

    def test_synonyms_split_on_both_commas(self):
        _, answers = classify("ㄴ, ㄷ，ㄹ,,", QuestionType.SHORT)
        assert [a.value for a in answers] == ["ㄴ", "ㄷ", "ㄹ"]

    def test_never_raises_on_odd_input(self):
        qtype, answers = classify("%%% ,, @", QuestionType.OX)
        assert qtype is QuestionType.SHORT
        assert answers == [TextAnswer(value="%%%"), TextAnswer(value="@")]


class TestClassifierTable:
    """The classification table is ordered data."""

    def test_rule_order(self):
        assert AnswerClassifier().rule_names() == [
            "essay_keyword",
            "circled_digits",
            "true_false",
            "numeric_list",
            "short_answer",
        ]

    def test_deterministic(self):
        classifier = AnswerClassifier()
        first = classifier.classify("①, ②", QuestionType.CHOICE4)
        assert all(classifier.classify("①, ②", QuestionType.CHOICE4) == first for _ in range(5))

    def test_custom_table_without_catch_all(self):
        classifier = AnswerClassifier(rules=(EssayKeywordRule(),))
        assert classifier.classify("서울", QuestionType.CHOICE4) == (
            QuestionType.SHORT,
            [TextAnswer(value="서울")],
        )

    def test_rule_is_abstract(self):
        with pytest.raises(TypeError):
            ClassificationRule()


class TestFormatAnswers:
    """Rendering answers back to editable text."""

    def test_choice_uses_circled_digits(self):
        q = Question(
            number=1,
            type=QuestionType.CHOICE5,
            correct_answers=[NumericChoice(value=1), NumericChoice(value=4)],
            points=5,
        )
        assert format_answers(q) == "①, ④"

    def test_ox(self):
        q = Question(number=1, type=QuestionType.OX, correct_answers=[BooleanMark(value="O")], points=5)
        assert format_answers(q) == "O"

    def test_short_answers_comma_joined(self):
        q = Question(
            number=1,
            type=QuestionType.SHORT,
            correct_answers=[TextAnswer(value="ㄴ"), TextAnswer(value="ㄷ")],
            points=5,
        )
        assert format_answers(q) == "ㄴ, ㄷ"

    def test_essay_is_empty(self):
        q = Question(number=1, type=QuestionType.ESSAY, correct_answers=None, points=5)
        assert format_answers(q) == ""

    def test_sub_questions_for_display(self):
        q = Question(
            number=1,
            type=QuestionType.SHORT,
            has_sub_questions=True,
            sub_questions=[
                SubQuestion(sub_number=1, correct_answers=["a", "b"], points=1),
                SubQuestion(sub_number=2, correct_answers=["c"], points=1),
            ],
            points=2,
        )
        assert format_answers(q) == "(1) a, b / (2) c"


ROUND_TRIP_CASES = [
    (QuestionType.CHOICE4, [NumericChoice(value=2)]),
    (QuestionType.CHOICE4, [NumericChoice(value=1), NumericChoice(value=3), NumericChoice(value=4)]),
    (QuestionType.CHOICE5, [NumericChoice(value=5)]),
    (QuestionType.CHOICE5, [NumericChoice(value=2), NumericChoice(value=5)]),
    (QuestionType.OX, [BooleanMark(value="O")]),
    (QuestionType.OX, [BooleanMark(value="X")]),
    (QuestionType.SHORT, [TextAnswer(value="서울")]),
    (QuestionType.SHORT, [TextAnswer(value="seoul city"), TextAnswer(value="서울특별시")]),
    (QuestionType.SHORT, [TextAnswer(value="ㄴ"), TextAnswer(value="ㄷ"), TextAnswer(value="ㄹ")]),
]


@pytest.mark.parametrize("qtype,answers", ROUND_TRIP_CASES)
def test_format_classify_round_trip(qtype, answers):
    """Formatting then classifying reproduces the answer set and type."""
    question = Question(
        number=1,
        type=qtype,
        correct_answers=answers,
        answer_logic=AnswerLogic.OR,
        points=5,
    )
    new_type, new_answers = classify(format_answers(question), question.type)

    assert new_type is qtype
    assert set(new_answers) == set(answers)
