"""formvalid: declarative field validation for structured input forms.

This package merges a host platform's native validity signals with
application rules into one ordered error list per field:
- Rule model: StringRules, NumberRules, ArrayRules (required, lengths,
  ranges, pattern, custom predicates)
- Message catalog: default messages per signal and rule, overridable
- Engine: FormValidator (registration, validation, lint, event binding)
- Collaborators: FieldAccessor / EventSource protocols and InMemoryForm

Usage:
    from formvalid import FormValidator, InMemoryForm, FormField, StringRules

    form = InMemoryForm([FormField("username", value="ab")])
    validator = FormValidator(form)
    validator.add_field("username", StringRules(required=True, min_length=5))
    result = validator.validate()
"""

from formvalid.accessor import ErrorSink, EventSource, FieldAccessor
from formvalid.channel import ValidationWarning, WarningChannel
from formvalid.engine import FormValidator, ValidatorOptions
from formvalid.evaluator import RuleEvaluator
from formvalid.form import ErrorSlot, FormField, InMemoryForm, derive_validity
from formvalid.loader import RulesConfig, RulesFileError, load_rules, rules_from_dict
from formvalid.messages import DEFAULT_MESSAGES, MessageCatalog
from formvalid.normalizer import Option, normalize, parse_float
from formvalid.registry import FieldRegistry, PredicateRegistry, predicate
from formvalid.types import (
    ArrayRules,
    Constraint,
    ConstraintKind,
    FieldHandle,
    FieldKind,
    FieldValidationResult,
    FieldValidity,
    FormValidationResult,
    NativeValiditySignals,
    NumberRules,
    RuleSet,
    Signal,
    StringRules,
)

__all__ = [
    # Types
    "ArrayRules",
    "Constraint",
    "ConstraintKind",
    "FieldHandle",
    "FieldKind",
    "FieldValidationResult",
    "FieldValidity",
    "FormValidationResult",
    "NativeValiditySignals",
    "NumberRules",
    "RuleSet",
    "Signal",
    "StringRules",
    # Messages
    "DEFAULT_MESSAGES",
    "MessageCatalog",
    # Normalization & evaluation
    "Option",
    "normalize",
    "parse_float",
    "RuleEvaluator",
    # Registry
    "FieldRegistry",
    "PredicateRegistry",
    "predicate",
    # Engine
    "FormValidator",
    "ValidatorOptions",
    "ValidationWarning",
    "WarningChannel",
    # Collaborators
    "ErrorSink",
    "EventSource",
    "FieldAccessor",
    "ErrorSlot",
    "FormField",
    "InMemoryForm",
    "derive_validity",
    # Rule files
    "RulesConfig",
    "RulesFileError",
    "load_rules",
    "rules_from_dict",
]
