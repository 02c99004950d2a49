"""In-memory form: a FieldAccessor and EventSource without a browser.

Holds a snapshot of submitted field state. Native validity signals are
either given explicitly per field or derived from the field's native
constraints the way a browser derives them, so server-side code can
validate submitted data with the same rules as the front end.
"""

import math
import re
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable

from formvalid.normalizer import Option, parse_float, selected_values
from formvalid.types import (
    ConstraintKind,
    FieldHandle,
    FieldKind,
    NativeValiditySignals,
)

# Email: Basic RFC 5322 compliant pattern
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

# URL: Basic URL pattern
URL_PATTERN = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE)

_TYPE_PATTERNS = {"email": EMAIL_PATTERN, "url": URL_PATTERN}


@dataclass
class ErrorSlot:
    """Error display slot; keeps the last text written to it."""

    text: str = ""

    def write(self, text: str) -> None:
        self.text = text


@dataclass
class FormField:
    """State of one named field (or option group).

    Attributes:
        name: Field name
        kind: Value shape (text, number, multi)
        value: Raw text for text and number fields
        options: Option states for multi fields, in group order
        id: Element id; None if the field has no id
        label: Whether a label is associated with the id
        input_type: Platform input type ("text", "email", "url", ...)
        constraints: Native constraint attributes keyed by ConstraintKind
        validity: Explicit native signals; derived from constraints when None
        error_slot: Error display slot, or None if the form has none
    """

    name: str
    kind: FieldKind = FieldKind.TEXT
    value: str | None = ""
    options: list[Option] = field(default_factory=list)
    id: str | None = None
    label: bool = False
    input_type: str = "text"
    constraints: dict[ConstraintKind, str] = field(default_factory=dict)
    validity: NativeValiditySignals | None = None
    error_slot: ErrorSlot | None = field(default_factory=ErrorSlot)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FormField":
        """Create FormField from YAML/JSON dict."""
        kind = FieldKind(data.get("kind", "text"))
        options = [
            Option(value=str(o["value"]), selected=bool(o.get("selected", False)))
            for o in data.get("options", [])
        ]
        validity = data.get("validity")
        value = data.get("value", "")
        return cls(
            name=data["name"],
            kind=kind,
            value=None if value is None else str(value),
            options=options,
            id=data.get("id"),
            label=bool(data.get("label", False)),
            input_type=data.get("type", "number" if kind == FieldKind.NUMBER else "text"),
            constraints={
                ConstraintKind(key): str(attr)
                for key, attr in (data.get("constraints") or {}).items()
                if attr is not None and attr is not False
            },
            validity=NativeValiditySignals.from_dict(validity) if validity is not None else None,
            error_slot=ErrorSlot() if data.get("errorSlot", True) else None,
        )


class InMemoryForm:
    """A form snapshot implementing FieldAccessor and EventSource.

    Example:
        form = InMemoryForm([
            FormField("username", value="ab", constraints={ConstraintKind.MIN_LENGTH: "3"}),
        ])
        validator = FormValidator(form, events=form)
    """

    def __init__(self, fields: list[FormField] | None = None):
        self._fields: dict[str, FormField] = {}
        self._listeners: dict[tuple[str, str], list[Callable[[], None]]] = defaultdict(list)
        for form_field in fields or []:
            self.add(form_field)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InMemoryForm":
        """Create from a mapping with a ``fields`` list."""
        return cls([FormField.from_dict(f) for f in data.get("fields", [])])

    def add(self, form_field: FormField) -> None:
        self._fields[form_field.name] = form_field

    def get(self, name: str) -> FormField:
        return self._fields[name]

    # =========================================================================
    # Mutation
    # =========================================================================

    def set_value(self, name: str, value: str | None, event: str = "input") -> None:
        """Change a text/number field and notify subscribers."""
        self._fields[name].value = value
        self.dispatch(name, event)

    def select(self, name: str, values: list[str], event: str = "input") -> None:
        """Set which options of a multi field are selected and notify subscribers."""
        form_field = self._fields[name]
        chosen = set(values)
        form_field.options = [Option(o.value, o.value in chosen) for o in form_field.options]
        self.dispatch(name, event)

    # =========================================================================
    # FieldAccessor
    # =========================================================================

    def find_field(self, name: str) -> FieldHandle | None:
        form_field = self._fields.get(name)
        if form_field is None:
            return None
        return FieldHandle(name=form_field.name, kind=form_field.kind, id=form_field.id)

    def native_validity(self, handle: FieldHandle) -> NativeValiditySignals:
        form_field = self._fields[handle.name]
        if form_field.validity is not None:
            return form_field.validity
        return derive_validity(form_field)

    def extract_raw_value(self, handle: FieldHandle) -> Any:
        form_field = self._fields[handle.name]
        if form_field.kind == FieldKind.MULTI:
            return list(form_field.options)
        return form_field.value

    def native_constraint(self, handle: FieldHandle, kind: ConstraintKind) -> str | None:
        return self._fields[handle.name].constraints.get(kind)

    def locate_error_slot(self, name: str) -> ErrorSlot | None:
        form_field = self._fields.get(name)
        return form_field.error_slot if form_field else None

    def list_fields(self) -> list[FieldHandle]:
        return [self.find_field(name) for name in self._fields]

    def has_label(self, handle: FieldHandle) -> bool:
        return self._fields[handle.name].label

    # =========================================================================
    # EventSource
    # =========================================================================

    def subscribe(self, name: str, event: str, callback: Callable[[], None]) -> None:
        self._listeners[(name, event)].append(callback)

    def dispatch(self, name: str, event: str) -> None:
        """Run every callback subscribed to the event, one after another."""
        for callback in list(self._listeners.get((name, event), [])):
            callback()


def derive_validity(form_field: FormField) -> NativeValiditySignals:
    """Compute native signals from constraints, as a browser would.

    Only non-empty values are checked against type, pattern, length and
    range; an empty value can only raise value_missing.
    """
    constraints = form_field.constraints

    if form_field.kind == FieldKind.MULTI:
        empty = not selected_values(form_field.options)
        return NativeValiditySignals(
            value_missing=ConstraintKind.REQUIRED in constraints and empty,
        )

    text = form_field.value or ""
    empty = text == ""
    signals: dict[str, bool] = {
        "value_missing": ConstraintKind.REQUIRED in constraints and empty,
    }
    if empty:
        return NativeValiditySignals(**signals)

    type_pattern = _TYPE_PATTERNS.get(form_field.input_type)
    if type_pattern is not None:
        signals["type_mismatch"] = not type_pattern.match(text)

    pattern = constraints.get(ConstraintKind.PATTERN)
    if pattern is not None:
        signals["pattern_mismatch"] = not re.fullmatch(pattern, text)

    if form_field.kind == FieldKind.NUMBER:
        number = parse_float(text)
        if not math.isnan(number):
            low = _bound(constraints, ConstraintKind.MIN)
            high = _bound(constraints, ConstraintKind.MAX)
            signals["range_underflow"] = low is not None and number < low
            signals["range_overflow"] = high is not None and number > high
    else:
        min_length = _bound(constraints, ConstraintKind.MIN_LENGTH)
        max_length = _bound(constraints, ConstraintKind.MAX_LENGTH)
        signals["too_short"] = min_length is not None and len(text) < min_length
        signals["too_long"] = max_length is not None and len(text) > max_length

    return NativeValiditySignals(**signals)


def _bound(constraints: dict[ConstraintKind, str], kind: ConstraintKind) -> float | None:
    raw = constraints.get(kind)
    if raw is None:
        return None
    value = parse_float(raw)
    return None if math.isnan(value) else value
