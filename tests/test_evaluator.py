"""Tests for rule evaluation."""

import math
import re

import pytest

from formvalid.evaluator import RuleEvaluator
from formvalid.messages import MessageCatalog
from formvalid.types import (
    ArrayRules,
    Constraint,
    FieldKind,
    NumberRules,
    RuleSet,
    StringRules,
)


@pytest.fixture
def evaluator():
    return RuleEvaluator(MessageCatalog())


@pytest.fixture
def en_evaluator():
    return RuleEvaluator(MessageCatalog(locale="en"))


# =============================================================================
# Text Rules
# =============================================================================


class TestTextRules:
    """Checks for single-valued text fields."""

    def test_no_rules_no_errors(self, evaluator):
        assert evaluator.evaluate(FieldKind.TEXT, "", StringRules()) == []

    def test_required_empty(self, evaluator):
        errors = evaluator.evaluate(FieldKind.TEXT, "", StringRules(required=True))
        assert errors == ["Поле обязательно"]

    def test_required_string_is_message(self, evaluator):
        errors = evaluator.evaluate(FieldKind.TEXT, "", StringRules(required="Enter a name"))
        assert errors == ["Enter a name"]

    def test_required_false_skipped(self, evaluator):
        assert evaluator.evaluate(FieldKind.TEXT, "", StringRules(required=False)) == []

    def test_required_present(self, evaluator):
        assert evaluator.evaluate(FieldKind.TEXT, "x", StringRules(required=True)) == []

    @pytest.mark.parametrize("value,fails", [("abcd", True), ("abcde", False), ("abcdef", False)])
    def test_min_length_boundary(self, evaluator, value, fails):
        errors = evaluator.evaluate(FieldKind.TEXT, value, StringRules(min_length=5))
        assert errors == (["Минимальная длина 5"] if fails else [])

    @pytest.mark.parametrize("value,fails", [("abc", False), ("abcd", True)])
    def test_max_length_boundary(self, evaluator, value, fails):
        errors = evaluator.evaluate(FieldKind.TEXT, value, StringRules(max_length=3))
        assert errors == (["Максимальная длина 3"] if fails else [])

    def test_min_length_override_message(self, evaluator):
        rules = StringRules(min_length={"value": 5, "message": "Too short!"})
        assert evaluator.evaluate(FieldKind.TEXT, "ab", rules) == ["Too short!"]

    def test_min_length_tuple_override(self, evaluator):
        rules = StringRules(min_length=(5, "Too short!"))
        assert evaluator.evaluate(FieldKind.TEXT, "ab", rules) == ["Too short!"]

    def test_min_length_zero_is_active(self, evaluator):
        assert StringRules(min_length=0).min_length == Constraint(0)
        assert evaluator.evaluate(FieldKind.TEXT, "", StringRules(min_length=0)) == []

    def test_pattern_requires_full_match(self, evaluator):
        rules = StringRules(pattern=r"\d+")
        assert evaluator.evaluate(FieldKind.TEXT, "123", rules) == []
        assert evaluator.evaluate(FieldKind.TEXT, "123abc", rules) == ["Неверный формат"]

    def test_pattern_accepts_compiled_regex(self, evaluator):
        rules = StringRules(pattern=re.compile(r"[a-z]+", re.IGNORECASE))
        assert evaluator.evaluate(FieldKind.TEXT, "ABC", rules) == []

    def test_pattern_override_message(self, evaluator):
        rules = StringRules(pattern=Constraint(re.compile(r"\d+"), "Digits only"))
        assert evaluator.evaluate(FieldKind.TEXT, "x", rules) == ["Digits only"]

    def test_pattern_checked_on_empty_value(self, evaluator):
        rules = StringRules(pattern=r"\d+")
        assert evaluator.evaluate(FieldKind.TEXT, "", rules) == ["Неверный формат"]

    def test_custom_true_passes(self, evaluator):
        rules = StringRules(custom=lambda v: True)
        assert evaluator.evaluate(FieldKind.TEXT, "x", rules) == []

    def test_custom_string_is_error(self, evaluator):
        rules = StringRules(custom=lambda v: "taken" if v == "admin" else True)
        assert evaluator.evaluate(FieldKind.TEXT, "admin", rules) == ["taken"]

    def test_custom_receives_normalized_value(self, evaluator):
        seen = []
        rules = StringRules(custom=lambda v: seen.append(v) or True)
        evaluator.evaluate(FieldKind.TEXT, "trimmed", rules)
        assert seen == ["trimmed"]

    def test_custom_exception_propagates(self, evaluator):
        def broken(value):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            evaluator.evaluate(FieldKind.TEXT, "x", StringRules(custom=broken))

    def test_all_checks_accumulate_in_order(self, evaluator):
        rules = StringRules(
            required="req",
            min_length=(3, "min"),
            max_length=(0, "max"),
            pattern=(r"\d+", "pattern"),
            custom=lambda v: "custom",
        )
        # Only required is skipped; every other check fails on "ab"
        assert evaluator.evaluate(FieldKind.TEXT, "ab", rules) == ["min", "max", "pattern", "custom"]

    def test_username_scenario(self, evaluator):
        rules = StringRules(required=True, min_length=5, pattern=r"^\d+$")
        errors = evaluator.evaluate(FieldKind.TEXT, "ab", rules)
        assert errors == ["Минимальная длина 5", "Неверный формат"]


# =============================================================================
# Number Rules
# =============================================================================


class TestNumberRules:
    """Checks for numeric fields."""

    def test_required_fails_on_none(self, evaluator):
        errors = evaluator.evaluate(FieldKind.NUMBER, None, NumberRules(required=True))
        assert errors == ["Введите число"]

    def test_required_fails_on_nan(self, evaluator):
        errors = evaluator.evaluate(FieldKind.NUMBER, math.nan, NumberRules(required=True))
        assert errors == ["Введите число"]

    @pytest.mark.parametrize("value", [0.0, -5.0, 1e9, math.inf])
    def test_required_passes_on_numbers(self, evaluator, value):
        assert evaluator.evaluate(FieldKind.NUMBER, value, NumberRules(required=True)) == []

    def test_min_and_max(self, evaluator):
        rules = NumberRules(min=18, max=100)
        assert evaluator.evaluate(FieldKind.NUMBER, 17.0, rules) == ["Минимум 18"]
        assert evaluator.evaluate(FieldKind.NUMBER, 18.0, rules) == []
        assert evaluator.evaluate(FieldKind.NUMBER, 100.0, rules) == []
        assert evaluator.evaluate(FieldKind.NUMBER, 101.0, rules) == ["Максимум 100"]

    def test_min_zero_is_active(self, evaluator):
        assert evaluator.evaluate(FieldKind.NUMBER, -1.0, NumberRules(min=0)) == ["Минимум 0"]

    def test_fractional_threshold_in_message(self, evaluator):
        assert evaluator.evaluate(FieldKind.NUMBER, 0.1, NumberRules(min=0.5)) == ["Минимум 0.5"]

    def test_none_skips_range_and_custom(self, evaluator):
        rules = NumberRules(min=18, max=100, custom=lambda v: "never")
        assert evaluator.evaluate(FieldKind.NUMBER, None, rules) == []

    def test_nan_never_fails_range(self, evaluator):
        assert evaluator.evaluate(FieldKind.NUMBER, math.nan, NumberRules(min=1, max=2)) == []

    def test_override_messages(self, evaluator):
        rules = NumberRules(min={"value": 18, "message": "Adults only"})
        assert evaluator.evaluate(FieldKind.NUMBER, 10.0, rules) == ["Adults only"]

    def test_custom(self, evaluator):
        rules = NumberRules(custom=lambda v: True if v % 2 == 0 else "Must be even")
        assert evaluator.evaluate(FieldKind.NUMBER, 3.0, rules) == ["Must be even"]
        assert evaluator.evaluate(FieldKind.NUMBER, 4.0, rules) == []


# =============================================================================
# Multi Rules
# =============================================================================


class TestMultiRules:
    """Checks for option groups."""

    def test_required_empty(self, evaluator):
        errors = evaluator.evaluate(FieldKind.MULTI, [], ArrayRules(required=True))
        assert errors == ["Выберите хотя бы один вариант"]

    def test_required_override(self, evaluator):
        errors = evaluator.evaluate(FieldKind.MULTI, [], ArrayRules(required="Pick one"))
        assert errors == ["Pick one"]

    def test_cardinality_bounds(self, evaluator):
        rules = ArrayRules(array_min=2, array_max=3)
        assert evaluator.evaluate(FieldKind.MULTI, ["a"], rules) == ["Минимум 2 вариантов"]
        assert evaluator.evaluate(FieldKind.MULTI, ["a", "b"], rules) == []
        assert evaluator.evaluate(FieldKind.MULTI, ["a", "b", "c", "d"], rules) == [
            "Максимум 3 вариантов"
        ]

    def test_bound_override(self, evaluator):
        rules = ArrayRules(array_max=(1, "Only one"))
        assert evaluator.evaluate(FieldKind.MULTI, ["a", "b"], rules) == ["Only one"]

    def test_custom_receives_list(self, evaluator):
        rules = ArrayRules(custom=lambda v: True if "red" not in v else "No red")
        assert evaluator.evaluate(FieldKind.MULTI, ["blue", "red"], rules) == ["No red"]

    def test_colors_scenario(self, evaluator):
        assert evaluator.evaluate(FieldKind.MULTI, ["red", "blue"], ArrayRules(array_min=1)) == []


# =============================================================================
# Dispatch
# =============================================================================


class TestDispatch:
    """The field kind selects the branch; only matching variants add checks."""

    def test_plain_ruleset_required_applies_to_every_kind(self, evaluator):
        rules = RuleSet(required=True)
        assert evaluator.evaluate(FieldKind.TEXT, "", rules) == ["Поле обязательно"]
        assert evaluator.evaluate(FieldKind.NUMBER, None, rules) == ["Введите число"]
        assert evaluator.evaluate(FieldKind.MULTI, [], rules) == ["Выберите хотя бы один вариант"]

    def test_mismatched_variant_only_required_and_custom(self, evaluator):
        rules = StringRules(required=True, min_length=5, custom=lambda v: "custom")
        assert evaluator.evaluate(FieldKind.MULTI, [], rules) == [
            "Выберите хотя бы один вариант",
            "custom",
        ]

    def test_english_catalog(self, en_evaluator):
        rules = StringRules(required=True, min_length=5)
        assert en_evaluator.evaluate(FieldKind.TEXT, "", rules) == [
            "This field is required",
            "Minimum length 5",
        ]


# =============================================================================
# Rule Model
# =============================================================================


class TestRuleModel:
    def test_bare_values_coerced_to_constraints(self):
        rules = StringRules(min_length=3, max_length=(10, "long"))
        assert rules.min_length == Constraint(3)
        assert rules.max_length == Constraint(10, "long")

    def test_pattern_string_compiled(self):
        rules = StringRules(pattern=r"\d+")
        assert isinstance(rules.pattern.value, re.Pattern)

    def test_invalid_pattern_rejected(self):
        with pytest.raises(ValueError, match="Invalid pattern"):
            StringRules(pattern="(")

    def test_non_numeric_threshold_rejected(self):
        with pytest.raises(ValueError, match="min_length"):
            StringRules(min_length="5")

    def test_mapping_without_value_rejected(self):
        with pytest.raises(ValueError, match="missing 'value'"):
            NumberRules(min={"message": "x"})

    def test_variant_kinds(self):
        assert RuleSet.kind is None
        assert StringRules.kind == FieldKind.TEXT
        assert NumberRules.kind == FieldKind.NUMBER
        assert ArrayRules.kind == FieldKind.MULTI
