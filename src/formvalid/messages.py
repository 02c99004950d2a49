"""Message catalog for native signals and rule failures.

Default strings ship for two locales. Instance-level overrides merge on top
of the locale defaults key by key; templates use ``{value}`` for the
threshold and ``{name}`` for the field name.
"""

import re
from typing import Any

from formvalid.types import Signal, snake_case

DEFAULT_LOCALE = "ru"

DEFAULT_MESSAGES: dict[str, dict[str, str]] = {
    "ru": {
        # Native validity signals
        "value_missing": "Поле обязательно",
        "type_mismatch": "Неверный тип данных",
        "pattern_mismatch": "Неверный формат",
        "too_short": "Слишком коротко",
        "too_long": "Слишком длинно",
        "range_overflow": "Слишком большое значение",
        "range_underflow": "Слишком маленькое значение",
        # Rules
        "required": "Поле обязательно",
        "min_length": "Минимальная длина {value}",
        "max_length": "Максимальная длина {value}",
        "pattern": "Неверный формат",
        "number_required": "Введите число",
        "min": "Минимум {value}",
        "max": "Максимум {value}",
        "array_required": "Выберите хотя бы один вариант",
        "array_min": "Минимум {value} вариантов",
        "array_max": "Максимум {value} вариантов",
        # Engine
        "field_not_found": 'Поле "{name}" не найдено',
    },
    "en": {
        "value_missing": "This field is required",
        "type_mismatch": "Invalid data type",
        "pattern_mismatch": "Invalid format",
        "too_short": "Too short",
        "too_long": "Too long",
        "range_overflow": "Value is too large",
        "range_underflow": "Value is too small",
        "required": "This field is required",
        "min_length": "Minimum length {value}",
        "max_length": "Maximum length {value}",
        "pattern": "Invalid format",
        "number_required": "Enter a number",
        "min": "Minimum {value}",
        "max": "Maximum {value}",
        "array_required": "Select at least one option",
        "array_min": "Select at least {value} options",
        "array_max": "Select at most {value} options",
        "field_not_found": 'Field "{name}" not found',
    },
}

_PLACEHOLDER = re.compile(r"\{(?P<key>value|name)\}")


class MessageCatalog:
    """Resolves message keys to strings for one engine instance.

    Example:
        catalog = MessageCatalog({"valueMissing": "Fill this in"}, locale="en")
        catalog.format("min_length", value=5)  # "Minimum length 5"
    """

    def __init__(
        self,
        overrides: dict[str, str] | None = None,
        locale: str = DEFAULT_LOCALE,
    ):
        if locale not in DEFAULT_MESSAGES:
            raise ValueError(
                f"Unknown locale '{locale}'. "
                "Available locales: " + ", ".join(sorted(DEFAULT_MESSAGES))
            )
        self.locale = locale
        self._messages = dict(DEFAULT_MESSAGES[locale])

        for key, message in (overrides or {}).items():
            name = snake_case(key)
            if name not in self._messages:
                raise ValueError(f"Unknown message key '{key}'")
            if message:
                self._messages[name] = message

    def get(self, key: str) -> str:
        return self._messages[key]

    def format(self, key: str, **params: Any) -> str:
        """Interpolate ``{value}`` / ``{name}`` placeholders into a message.

        Unknown placeholders and literal braces are left alone so that
        overrides may contain arbitrary text.
        """

        def replace(match: re.Match) -> str:
            placeholder = match.group("key")
            if placeholder not in params:
                return match.group(0)
            return format_value(params[placeholder])

        return _PLACEHOLDER.sub(replace, self._messages[key])

    def signal_messages(self, signals: list[Signal]) -> list[str]:
        return [self._messages[signal.value] for signal in signals]

    def as_dict(self) -> dict[str, str]:
        return dict(self._messages)


def format_value(value: Any) -> str:
    """Render a threshold the way a user typed it (5, not 5.0)."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)

