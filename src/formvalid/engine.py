"""The form validator: registry, aggregation and binding glue.

FormValidator merges the platform's native validity signals with the
results of each field's RuleSet:

    all_errors = [native signal messages, fixed order] + [rule messages]

Usage:
    validator = FormValidator(form, ValidatorOptions(suppress_warnings=True))
    validator.add_field("username", StringRules(required=True, min_length=5))
    result = validator.validate()
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from formvalid.accessor import BOUND_EVENTS, EventSource, FieldAccessor
from formvalid.channel import WarningChannel
from formvalid.evaluator import RuleEvaluator
from formvalid.messages import DEFAULT_LOCALE, MessageCatalog
from formvalid.normalizer import normalize
from formvalid.registry import FieldRegistry, find_conflicts
from formvalid.types import (
    FieldHandle,
    FieldValidationResult,
    FieldValidity,
    FormValidationResult,
    NativeValiditySignals,
    RuleSet,
)

logger = logging.getLogger(__name__)


@dataclass
class ValidatorOptions:
    """Engine configuration.

    Attributes:
        suppress_warnings: Skip the structural and conflict lints
        auto_bind_events: Re-validate fields on input/blur notifications
        messages: Message catalog overrides, merged key by key
        locale: Built-in catalog the overrides apply to
    """

    suppress_warnings: bool = False
    auto_bind_events: bool = False
    messages: dict[str, str] = field(default_factory=dict)
    locale: str = DEFAULT_LOCALE

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ValidatorOptions":
        """Create ValidatorOptions from a YAML/JSON dict (camelCase keys)."""
        return cls(
            suppress_warnings=bool(data.get("suppressWarnings", False)),
            auto_bind_events=bool(data.get("autoBindEvents", False)),
            messages=dict(data.get("messages") or {}),
            locale=data.get("locale", DEFAULT_LOCALE),
        )


class FormValidator:
    """Validates the fields of one form.

    The validator holds no state beyond its registry and bindings; every
    validate()/validate_field() call re-reads live field state through the
    accessor and builds a fresh result.
    """

    def __init__(
        self,
        accessor: FieldAccessor,
        options: ValidatorOptions | None = None,
        *,
        channel: WarningChannel | None = None,
        events: EventSource | None = None,
    ):
        self.accessor = accessor
        self.options = options or ValidatorOptions()
        self.channel = channel or WarningChannel()
        self.events = events
        self.catalog = MessageCatalog(self.options.messages, locale=self.options.locale)
        self.evaluator = RuleEvaluator(self.catalog)
        self.registry = FieldRegistry()
        self._bound: set[str] = set()
        self._bind_lock = threading.Lock()

        if self.options.auto_bind_events and self.events is None:
            raise ValueError("auto_bind_events requires an event source")

        if not self.options.suppress_warnings:
            self.check_form_structure()
        if self.options.auto_bind_events:
            self.auto_bind()

    # =========================================================================
    # Registration
    # =========================================================================

    def add_field(self, name: str, rules: RuleSet) -> None:
        """Register (or replace) the rules for a field.

        Conflicts with the field's native constraints are reported on the
        warning channel but never block registration.
        """
        self.registry.register(name, rules)

        if not self.options.suppress_warnings:
            self.check_conflicts(name, rules)
        if self.options.auto_bind_events:
            self._bind(name)

    def check_conflicts(self, name: str, rules: RuleSet) -> None:
        handle = self.accessor.find_field(name)
        if handle is None:
            return
        for finding in find_conflicts(name, rules, handle, self.accessor):
            self.channel.emit(finding)

    # =========================================================================
    # Validation
    # =========================================================================

    def validate(self) -> FormValidationResult:
        """Validate every registered field, in registration order."""
        result = FormValidationResult(valid=True)
        for name, rules in self.registry.snapshot():
            field_result = self._validate(name, rules)
            result.fields[name] = field_result
            if not field_result.valid:
                result.valid = False
        return result

    def validate_field(self, name: str) -> FieldValidationResult:
        """Validate a single field by name.

        A name with no registered rules is validated against its native
        signals only.
        """
        return self._validate(name, self.registry.get(name) or RuleSet())

    def get_field_validity(self, handle: FieldHandle) -> FieldValidity:
        """Snapshot of a field's native signals, without rule evaluation."""
        return FieldValidity(built_in=self.accessor.native_validity(handle))

    def _validate(self, name: str, rules: RuleSet) -> FieldValidationResult:
        handle = self.accessor.find_field(name)
        if handle is None:
            message = self.catalog.format("field_not_found", name=name)
            return FieldValidationResult(
                valid=False,
                errors=[message],
                validity=FieldValidity(built_in=NativeValiditySignals()),
            )

        built_in = self.accessor.native_validity(handle)
        all_errors = self.catalog.signal_messages(built_in.raised())

        value = normalize(handle.kind, self.accessor.extract_raw_value(handle))
        custom_errors = self.evaluator.evaluate(handle.kind, value, rules)
        all_errors.extend(custom_errors)

        logger.debug("Field '%s' (%s) errors: %s", name, handle.kind.value, all_errors)
        return FieldValidationResult(
            valid=len(all_errors) == 0,
            errors=list(all_errors),
            validity=FieldValidity(
                built_in=built_in,
                custom_errors=custom_errors,
                all_errors=all_errors,
            ),
        )

    # =========================================================================
    # Structural Lint
    # =========================================================================

    def check_form_structure(self) -> None:
        """Warn about fields without a label or without an error slot."""
        for handle in self.accessor.list_fields():
            if handle.id and not self.accessor.has_label(handle):
                self.channel.emit(f'Field "{handle.name}" has no label for id "{handle.id}"')
            if self.accessor.locate_error_slot(handle.name) is None:
                self.channel.emit(f'Field "{handle.name}" has no place to display errors')

    # =========================================================================
    # Event Binding
    # =========================================================================

    def auto_bind(self) -> None:
        """Subscribe every registered field to input/blur notifications."""
        for name in self.registry.names():
            self._bind(name)

    def _bind(self, name: str) -> None:
        # check, subscribe and record as one step so a field is bound once
        with self._bind_lock:
            if name in self._bound or self.events is None:
                return
            if self.accessor.find_field(name) is None:
                return
            for event in BOUND_EVENTS:
                self.events.subscribe(name, event, lambda name=name: self.handle_validation(name))
            self._bound.add(name)

    def handle_validation(self, name: str) -> FieldValidationResult:
        """Validate a field and write its errors into its error slot."""
        result = self.validate_field(name)
        slot = self.accessor.locate_error_slot(name)
        if slot is not None:
            slot.write(", ".join(result.errors))
        return result
