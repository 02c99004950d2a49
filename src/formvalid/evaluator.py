"""Rule evaluation.

The evaluator runs a field's RuleSet against its normalized value and
returns the failing checks' messages in a fixed order:

- TEXT: required, min_length, max_length, pattern, custom
- NUMBER: required, min, max, custom
- MULTI: required, array_min, array_max, custom

Kind-specific checks only run when the RuleSet is the variant for the
field's kind; required and custom run for every variant.

Exceptions raised by custom predicates are not caught here. Callers that
need robustness against faulty predicates must wrap validate()/validate_field().
"""

from typing import Any

from formvalid.messages import MessageCatalog
from formvalid.normalizer import NormalizedValue, is_missing_number
from formvalid.types import (
    ArrayRules,
    Constraint,
    FieldKind,
    NumberRules,
    RuleSet,
    StringRules,
)


class RuleEvaluator:
    """Evaluates RuleSets, resolving messages through a MessageCatalog."""

    def __init__(self, catalog: MessageCatalog):
        self.catalog = catalog

    def evaluate(
        self,
        kind: FieldKind,
        value: NormalizedValue,
        rules: RuleSet,
    ) -> list[str]:
        """Return the messages of every failing check, in evaluation order."""
        if kind == FieldKind.MULTI:
            return self._evaluate_multi(value, rules)
        if kind == FieldKind.NUMBER:
            return self._evaluate_number(value, rules)
        return self._evaluate_text(value, rules)

    def _evaluate_text(self, value: str, rules: RuleSet) -> list[str]:
        errors: list[str] = []

        if rules.required and value == "":
            errors.append(self._required_message(rules.required, "required"))

        if isinstance(rules, StringRules):
            length = len(value)
            if rules.min_length is not None and length < rules.min_length.value:
                errors.append(self._limit_message(rules.min_length, "min_length"))
            if rules.max_length is not None and length > rules.max_length.value:
                errors.append(self._limit_message(rules.max_length, "max_length"))
            if rules.pattern is not None and not rules.pattern.value.fullmatch(value):
                errors.append(rules.pattern.resolve_message(self.catalog.get("pattern")))

        self._run_custom(rules, value, errors)
        return errors

    def _evaluate_number(self, value: float | None, rules: RuleSet) -> list[str]:
        errors: list[str] = []

        if rules.required and is_missing_number(value):
            errors.append(self._required_message(rules.required, "number_required"))

        # Range checks and predicates need a value; nan never compares below/above
        if value is None:
            return errors

        if isinstance(rules, NumberRules):
            if rules.min is not None and value < rules.min.value:
                errors.append(self._limit_message(rules.min, "min"))
            if rules.max is not None and value > rules.max.value:
                errors.append(self._limit_message(rules.max, "max"))

        self._run_custom(rules, value, errors)
        return errors

    def _evaluate_multi(self, value: list[str], rules: RuleSet) -> list[str]:
        errors: list[str] = []
        count = len(value)

        if rules.required and count == 0:
            errors.append(self._required_message(rules.required, "array_required"))

        if isinstance(rules, ArrayRules):
            if rules.array_min is not None and count < rules.array_min.value:
                errors.append(self._limit_message(rules.array_min, "array_min"))
            if rules.array_max is not None and count > rules.array_max.value:
                errors.append(self._limit_message(rules.array_max, "array_max"))

        self._run_custom(rules, value, errors)
        return errors

    def _run_custom(self, rules: RuleSet, value: Any, errors: list[str]) -> None:
        if rules.custom is None:
            return
        outcome = rules.custom(value)
        if outcome is not True:
            errors.append(str(outcome))

    def _required_message(self, required: bool | str, key: str) -> str:
        if isinstance(required, str):
            return required
        return self.catalog.get(key)

    def _limit_message(self, constraint: Constraint, key: str) -> str:
        if constraint.message:
            return constraint.message
        return self.catalog.format(key, value=constraint.value)
