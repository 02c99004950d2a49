"""Advisory warning channel.

Structural lint findings and rule/native-constraint conflicts are delivered
here. Delivery is fire-and-forget: every warning is logged, then handed to
each subscribed listener; a failing listener is logged and skipped.
Warnings never affect validation results.
"""

import logging
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationWarning:
    """A single advisory finding."""

    message: str


WarningListener = Callable[[ValidationWarning], None]


class WarningChannel:
    """Fans warnings out to listeners.

    Example:
        channel = WarningChannel()
        channel.subscribe(lambda w: print(w.message))
    """

    def __init__(self, listeners: list[WarningListener] | None = None):
        self._listeners: list[WarningListener] = list(listeners or [])

    def subscribe(self, listener: WarningListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: WarningListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, message: str) -> ValidationWarning:
        warning = ValidationWarning(message=message)
        logger.warning("%s", message)

        for listener in list(self._listeners):
            try:
                listener(warning)
            except Exception as e:
                logger.error("Warning listener %r failed: %s", listener, e)

        return warning
