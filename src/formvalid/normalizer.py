"""Value normalization.

Turns a field's raw platform reading into one of three canonical shapes:
- TEXT: trimmed string ("" when the platform yields nothing)
- NUMBER: float, or None for empty input; unparsable text becomes nan
- MULTI: list of the selected option values, in group order
"""

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Iterable

from formvalid.types import FieldKind

# Longest numeric prefix accepted by the platform's parseFloat (ASCII digits only)
NUMBER_PREFIX = re.compile(
    r"[+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)"
)

# Whitespace and line terminators the platform's trim() and parseFloat skip
WHITESPACE = (
    "\t\n\v\f\r \u00a0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000\ufeff"
)

NormalizedValue = str | float | None | list[str]


@dataclass(frozen=True)
class Option:
    """One member of an option group."""

    value: str
    selected: bool = False


def parse_float(text: str) -> float:
    """Parse the longest numeric prefix of text, like the platform's parseFloat.

    Leading whitespace is skipped; anything after the prefix is ignored.
    Returns nan when no prefix parses.
    """
    match = NUMBER_PREFIX.match(text.lstrip(WHITESPACE))
    if not match:
        return math.nan
    literal = match.group(0)
    if literal.endswith("Infinity"):
        return -math.inf if literal.startswith("-") else math.inf
    return float(literal)


def is_missing_number(value: float | None) -> bool:
    return value is None or math.isnan(value)


def selected_values(options: Iterable[Any]) -> list[str]:
    """Values of the selected options, preserving group order."""
    selected: list[str] = []
    for option in options:
        if isinstance(option, Option):
            value, checked = option.value, option.selected
        elif isinstance(option, Mapping):
            value, checked = option.get("value", ""), option.get("selected", False)
        elif isinstance(option, tuple) and len(option) == 2:
            value, checked = option
        else:
            raise TypeError(
                f"Unsupported option {option!r}; expected Option, mapping or (value, selected) pair"
            )
        if checked:
            selected.append(str(value))
    return selected


def normalize(kind: FieldKind, raw: Any) -> NormalizedValue:
    """Normalize a raw reading for a field of the given kind."""
    if kind == FieldKind.MULTI:
        return selected_values(raw or [])

    if kind == FieldKind.NUMBER:
        if raw is None or raw == "":
            return None
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return float(raw)
        return parse_float(str(raw))

    if raw is None:
        return ""
    return str(raw).strip(WHITESPACE)
