"""Core types for the formvalid engine.

This module defines the foundational types shared by every layer:
- Rule model: RuleSet and its StringRules / NumberRules / ArrayRules variants
- Constraint: a rule option that is either a bare value or a (value, message) pair
- Native validity signals supplied by the host platform
- Field and form validation results
"""

import re
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Callable, ClassVar, Generic, TypeVar

T = TypeVar("T")

# Custom predicate signature: returns True on success, or an error message
Predicate = Callable[[Any], Any]


class FieldKind(Enum):
    """Value shape of a live field.

    TEXT: single-valued field, normalized to a trimmed string
    NUMBER: numeric input, normalized to float or None
    MULTI: group of options sharing a name, normalized to the selected values
    """

    TEXT = "text"
    NUMBER = "number"
    MULTI = "multi"


class Signal(Enum):
    """Native validity categories, declared in reporting order.

    Each value is both the attribute name on NativeValiditySignals and the
    message catalog key.
    """

    VALUE_MISSING = "value_missing"
    TYPE_MISMATCH = "type_mismatch"
    PATTERN_MISMATCH = "pattern_mismatch"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    RANGE_OVERFLOW = "range_overflow"
    RANGE_UNDERFLOW = "range_underflow"


class ConstraintKind(Enum):
    """Native constraint attributes a field may declare."""

    REQUIRED = "required"
    MIN_LENGTH = "minlength"
    MAX_LENGTH = "maxlength"
    PATTERN = "pattern"
    MIN = "min"
    MAX = "max"


@dataclass(frozen=True)
class FieldHandle:
    """Reference to a live field returned by a FieldAccessor.

    Attributes:
        name: Field name (shared by every member of a group)
        kind: Value shape of the field
        id: Element id, used by the label lint; None if the field has none
    """

    name: str
    kind: FieldKind = FieldKind.TEXT
    id: str | None = None


@dataclass(frozen=True)
class NativeValiditySignals:
    """Validity flags computed by the host platform, never by the engine."""

    value_missing: bool = False
    type_mismatch: bool = False
    pattern_mismatch: bool = False
    too_short: bool = False
    too_long: bool = False
    range_overflow: bool = False
    range_underflow: bool = False

    @property
    def valid(self) -> bool:
        return not self.raised()

    def raised(self) -> list[Signal]:
        """Signals that are set, in fixed reporting order."""
        return [signal for signal in Signal if getattr(self, signal.value)]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NativeValiditySignals":
        """Create from a mapping using snake_case or camelCase flag names."""
        known = {f.name for f in fields(cls)}
        values: dict[str, bool] = {}
        for key, flag in data.items():
            name = snake_case(key)
            if name not in known:
                raise ValueError(f"Unknown validity signal '{key}'")
            values[name] = bool(flag)
        return cls(**values)

    def to_dict(self) -> dict[str, bool]:
        return {camel_case(f.name): getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class Constraint(Generic[T]):
    """A rule option with an optional override message.

    A bare option (message is None) reports the catalog default; an annotated
    option reports its own message verbatim.
    """

    value: T
    message: str | None = None

    def resolve_message(self, default: str) -> str:
        return self.message if self.message else default

    @classmethod
    def of(cls, option: Any) -> "Constraint[Any] | None":
        """Coerce a bare value, (value, message) tuple or mapping."""
        if option is None or isinstance(option, Constraint):
            return option
        if isinstance(option, tuple):
            value, message = option
            return cls(value, message)
        if isinstance(option, dict):
            if "value" not in option:
                raise ValueError(f"Rule option {option!r} is missing 'value'")
            return cls(option["value"], option.get("message"))
        return cls(option)


def _limit(option: Any, rule: str) -> "Constraint[float] | None":
    constraint = Constraint.of(option)
    if constraint is None:
        return None
    if isinstance(constraint.value, bool) or not isinstance(constraint.value, (int, float)):
        raise ValueError(f"'{rule}' must be a number, got {constraint.value!r}")
    return constraint


def _pattern(option: Any) -> "Constraint[re.Pattern[str]] | None":
    constraint = Constraint.of(option)
    if constraint is None:
        return None
    regex = constraint.value
    if isinstance(regex, str):
        try:
            regex = re.compile(regex)
        except re.error as e:
            raise ValueError(f"Invalid pattern {constraint.value!r}: {e}") from e
    if not isinstance(regex, re.Pattern):
        raise ValueError(f"'pattern' must be a regex, got {regex!r}")
    return Constraint(regex, constraint.message)


# =============================================================================
# Rule Model
# =============================================================================


@dataclass
class RuleSet:
    """Rules every field kind understands.

    Attributes:
        required: True for the default message, a string to use it as the
            message, False/None to skip the check
        custom: Predicate over the normalized value; returns True or an error
    """

    required: bool | str | None = None
    custom: Predicate | None = None

    # Field kind whose value shape the kind-specific rules expect
    kind: ClassVar[FieldKind | None] = None


@dataclass
class StringRules(RuleSet):
    """Rules for single-valued text fields."""

    kind: ClassVar[FieldKind | None] = FieldKind.TEXT

    min_length: Any = None
    max_length: Any = None
    pattern: Any = None

    def __post_init__(self) -> None:
        self.min_length = _limit(self.min_length, "min_length")
        self.max_length = _limit(self.max_length, "max_length")
        self.pattern = _pattern(self.pattern)


@dataclass
class NumberRules(RuleSet):
    """Rules for numeric fields."""

    kind: ClassVar[FieldKind | None] = FieldKind.NUMBER

    min: Any = None
    max: Any = None

    def __post_init__(self) -> None:
        self.min = _limit(self.min, "min")
        self.max = _limit(self.max, "max")


@dataclass
class ArrayRules(RuleSet):
    """Rules for option groups (checkbox groups, multi-selects)."""

    kind: ClassVar[FieldKind | None] = FieldKind.MULTI

    array_min: Any = None
    array_max: Any = None

    def __post_init__(self) -> None:
        self.array_min = _limit(self.array_min, "array_min")
        self.array_max = _limit(self.array_max, "array_max")


# =============================================================================
# Results
# =============================================================================


@dataclass
class FieldValidity:
    """Native signals plus the messages produced for a field.

    Attributes:
        built_in: Signals reported by the host platform
        custom_errors: Messages from the field's RuleSet, in declaration order
        all_errors: Native-signal messages followed by custom_errors
    """

    built_in: NativeValiditySignals = field(default_factory=NativeValiditySignals)
    custom_errors: list[str] = field(default_factory=list)
    all_errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "builtIn": self.built_in.to_dict(),
            "customErrors": list(self.custom_errors),
            "allErrors": list(self.all_errors),
        }


@dataclass
class FieldValidationResult:
    """Result of validating one field."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    validity: FieldValidity = field(default_factory=FieldValidity)

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "validity": self.validity.to_dict(),
        }


@dataclass
class FormValidationResult:
    """Result of validating every registered field.

    Attributes:
        valid: True only if every field is valid
        fields: Per-field results keyed by name, in registration order
    """

    valid: bool = True
    fields: dict[str, FieldValidationResult] = field(default_factory=dict)

    def errors(self) -> dict[str, list[str]]:
        """Messages of the invalid fields only."""
        return {name: r.errors for name, r in self.fields.items() if not r.valid}

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "fields": {name: r.to_dict() for name, r in self.fields.items()},
        }


def snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)
