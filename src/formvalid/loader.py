"""
loader.py: load field rules and engine options from YAML rule files.

Rule files are validated against a bundled JSON Schema before any RuleSet is
built, so every structural problem in a file is reported at once.

Usage:
    from formvalid.loader import load_rules

    config = load_rules(Path("signup.rules.yaml"))
    validator = config.create_validator(form)

Example file:

    options:
      locale: en
    fields:
      username: {required: true, minLength: 5, pattern: '^\\d+$'}
      age: {kind: number, min: 18, max: {value: 100, message: Too old}}
      colors: {arrayMin: 1, custom: notOnlyBlack}

``kind`` is inferred from the rule keys when omitted; ``custom`` names a
predicate registered in PredicateRegistry.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

from formvalid.accessor import EventSource, FieldAccessor
from formvalid.channel import WarningChannel
from formvalid.engine import FormValidator, ValidatorOptions
from formvalid.messages import MessageCatalog
from formvalid.registry import PredicateRegistry
from formvalid.types import ArrayRules, FieldKind, NumberRules, RuleSet, StringRules

logger = logging.getLogger(__name__)

_SCHEMA_PATH = Path(__file__).parent / "schemas" / "rules.schema.json"

# Rule keys owned by each kind, camelCase as written in files
_KIND_KEYS: dict[FieldKind, dict[str, str]] = {
    FieldKind.TEXT: {"minLength": "min_length", "maxLength": "max_length", "pattern": "pattern"},
    FieldKind.NUMBER: {"min": "min", "max": "max"},
    FieldKind.MULTI: {"arrayMin": "array_min", "arrayMax": "array_max"},
}

_VARIANTS: dict[FieldKind, type[RuleSet]] = {
    FieldKind.TEXT: StringRules,
    FieldKind.NUMBER: NumberRules,
    FieldKind.MULTI: ArrayRules,
}


class RulesFileError(ValueError):
    """A rule file or rule mapping could not be turned into RuleSets."""

    def __init__(self, source: str, issues: list[str]):
        self.source = source
        self.issues = issues
        super().__init__(f"{source}: " + "; ".join(issues))


@dataclass
class RulesConfig:
    """Engine options plus the RuleSets of each field, in file order."""

    options: ValidatorOptions = field(default_factory=ValidatorOptions)
    fields: dict[str, RuleSet] = field(default_factory=dict)

    def apply(self, validator: FormValidator) -> None:
        """Register every field's rules on an existing validator."""
        for name, rules in self.fields.items():
            validator.add_field(name, rules)

    def create_validator(
        self,
        accessor: FieldAccessor,
        *,
        channel: WarningChannel | None = None,
        events: EventSource | None = None,
    ) -> FormValidator:
        validator = FormValidator(accessor, self.options, channel=channel, events=events)
        self.apply(validator)
        return validator


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_schema() -> dict[str, Any]:
    with _SCHEMA_PATH.open() as fh:
        return json.load(fh)


def _json_path(error: ValidationError) -> str:
    """Convert a jsonschema ValidationError path to a readable string."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


def _schema_issues(doc: Any) -> list[str]:
    validator = Draft202012Validator(_load_schema())
    issues = []
    for error in sorted(validator.iter_errors(doc), key=_json_path):
        path = _json_path(error)
        issues.append(f"{path}: {error.message}" if path else error.message)
    return issues


def _infer_kind(name: str, data: dict[str, Any]) -> FieldKind | None:
    kinds = [kind for kind, keys in _KIND_KEYS.items() if any(k in data for k in keys)]
    if "kind" in data:
        declared = FieldKind(data["kind"])
        if any(kind != declared for kind in kinds):
            raise ValueError(f"field '{name}' is {declared.value} but uses rules of another kind")
        return declared
    if len(kinds) > 1:
        raise ValueError(
            f"field '{name}' mixes rules of kinds "
            + ", ".join(kind.value for kind in kinds)
        )
    return kinds[0] if kinds else None


def _build_rules(name: str, data: dict[str, Any]) -> RuleSet:
    kind = _infer_kind(name, data)

    params: dict[str, Any] = {"required": data.get("required")}
    if "custom" in data:
        params["custom"] = PredicateRegistry.get(data["custom"])

    if kind is None:
        return RuleSet(**params)

    for key, attr in _KIND_KEYS[kind].items():
        if key in data:
            params[attr] = data[key]
    return _VARIANTS[kind](**params)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def rules_from_dict(data: Any, *, source: str = "<rules>") -> RulesConfig:
    """
    Build a RulesConfig from an already-parsed rule document.

    Raises:
        RulesFileError: If the document violates the schema, names an
            unregistered predicate, or contains an invalid pattern.
    """
    issues = _schema_issues(data)
    if issues:
        raise RulesFileError(source, issues)

    fields: dict[str, RuleSet] = {}
    for name, field_data in data["fields"].items():
        try:
            fields[name] = _build_rules(name, field_data)
        except ValueError as e:
            issues.append(f"fields/{name}: {e}")
    if issues:
        raise RulesFileError(source, issues)

    options = ValidatorOptions.from_dict(data.get("options") or {})
    try:
        MessageCatalog(options.messages, locale=options.locale)
    except ValueError as e:
        raise RulesFileError(source, [f"options/messages: {e}"]) from e

    logger.debug("Loaded rules for %d fields from %s", len(fields), source)
    return RulesConfig(options=options, fields=fields)


def load_rules(path: Path) -> RulesConfig:
    """
    Load a YAML rule file.

    Args:
        path: Path to the YAML file.

    Returns:
        The parsed :class:`RulesConfig`.

    Raises:
        RulesFileError: On YAML syntax errors, empty files or invalid rules.
    """
    try:
        with path.open(encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise RulesFileError(str(path), [f"YAML parse error: {exc}"]) from exc

    if raw is None:
        raise RulesFileError(str(path), ["File is empty or contains only whitespace"])

    return rules_from_dict(raw, source=str(path))
