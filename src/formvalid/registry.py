"""Registries for formvalid.

Provides:
- FieldRegistry: per-engine mapping from field name to RuleSet
- PredicateRegistry: named custom predicates referenced from rule files
- find_conflicts: lint for rules duplicating a field's native constraints
"""

import threading
from typing import Callable

from formvalid.accessor import FieldAccessor
from formvalid.types import (
    ConstraintKind,
    FieldHandle,
    NumberRules,
    Predicate,
    RuleSet,
    StringRules,
)


class FieldRegistry:
    """Ordered mapping from field name to its RuleSet.

    Re-registering a name replaces its RuleSet but keeps its position.
    Reads go through snapshot() so a validation pass sees a consistent
    view even if another thread registers fields concurrently.
    """

    def __init__(self) -> None:
        self._rules: dict[str, RuleSet] = {}
        self._lock = threading.Lock()

    def register(self, name: str, rules: RuleSet) -> None:
        with self._lock:
            self._rules[name] = rules

    def get(self, name: str) -> RuleSet | None:
        with self._lock:
            return self._rules.get(name)

    def snapshot(self) -> list[tuple[str, RuleSet]]:
        """Registered (name, rules) pairs in registration order."""
        with self._lock:
            return list(self._rules.items())

    def names(self) -> list[str]:
        with self._lock:
            return list(self._rules)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._rules

    def __len__(self) -> int:
        with self._lock:
            return len(self._rules)


class PredicateRegistry:
    """Registry for named custom predicates.

    Rule files cannot carry code, so their ``custom`` key names a predicate
    registered here at application startup.

    Example:
        @predicate("evenNumber")
        def even_number(value):
            return value is not None and value % 2 == 0 or "Must be even"
    """

    _predicates: dict[str, Predicate] = {}

    @classmethod
    def register(cls, name: str, fn: Predicate) -> None:
        """Register a predicate by name.

        Idempotent - re-registering the same name is a no-op.
        """
        if name in cls._predicates:
            return
        cls._predicates[name] = fn

    @classmethod
    def get(cls, name: str) -> Predicate:
        """Get a registered predicate.

        Raises:
            ValueError: If the predicate is not registered
        """
        if name not in cls._predicates:
            raise ValueError(
                f"Predicate '{name}' is not registered. "
                "Custom predicates must be registered before rules are loaded."
            )
        return cls._predicates[name]

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._predicates

    @classmethod
    def list_registered(cls) -> list[str]:
        return sorted(cls._predicates)

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._predicates.clear()


def predicate(name: str) -> Callable[[Predicate], Predicate]:
    """Decorator to register a custom predicate."""

    def decorator(fn: Predicate) -> Predicate:
        PredicateRegistry.register(name, fn)
        return fn

    return decorator


# =============================================================================
# Conflict Lint
# =============================================================================

# (RuleSet variant, rule attribute, rule label, native constraint)
_DUPLICATES = [
    (StringRules, "min_length", "minLength", ConstraintKind.MIN_LENGTH),
    (StringRules, "max_length", "maxLength", ConstraintKind.MAX_LENGTH),
    (StringRules, "pattern", "pattern", ConstraintKind.PATTERN),
    (NumberRules, "min", "min", ConstraintKind.MIN),
    (NumberRules, "max", "max", ConstraintKind.MAX),
]


def find_conflicts(
    name: str,
    rules: RuleSet,
    handle: FieldHandle,
    accessor: FieldAccessor,
) -> list[str]:
    """Describe every rule that duplicates or contradicts the live field.

    Advisory only; the caller decides how to report the findings.
    """
    findings: list[str] = []

    if rules.kind is not None and rules.kind != handle.kind:
        findings.append(
            f'{type(rules).__name__} registered for field "{name}" '
            f"but the field is {handle.kind.value}; only required and custom apply"
        )

    for variant, attr, label, constraint in _DUPLICATES:
        if not isinstance(rules, variant) or getattr(rules, attr) is None:
            continue
        if accessor.native_constraint(handle, constraint):
            findings.append(
                f'Rule {label} and native {constraint.value} are both set on field "{name}"'
            )

    return findings

