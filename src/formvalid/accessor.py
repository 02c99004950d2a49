"""Protocols for the collaborators the engine is driven by.

The engine never touches a document model directly. It reads live field
state through a FieldAccessor, writes error text into ErrorSinks, and
subscribes to change notifications through an EventSource.
"""

from typing import Any, Callable, Protocol

from formvalid.types import ConstraintKind, FieldHandle, NativeValiditySignals

# Events the auto-bind glue subscribes to
BOUND_EVENTS = ("input", "blur")


class ErrorSink(Protocol):
    """Place where a field's error text is displayed."""

    def write(self, text: str) -> None:
        ...


class FieldAccessor(Protocol):
    """Protocol for reading live field state.

    Implementations must report a stable FieldKind per field name across
    calls; the kind selects both normalization and rule dispatch.
    """

    def find_field(self, name: str) -> FieldHandle | None:
        """Look up a field by name. None if no live field matches."""
        ...

    def native_validity(self, handle: FieldHandle) -> NativeValiditySignals:
        """Validity flags the platform computed for the field."""
        ...

    def extract_raw_value(self, handle: FieldHandle) -> Any:
        """Platform-native reading of the field.

        Returns:
            Text (or None) for TEXT and NUMBER fields; a sequence of options
            with their selection state for MULTI fields
        """
        ...

    def native_constraint(self, handle: FieldHandle, kind: ConstraintKind) -> str | None:
        """Value of a native constraint attribute, or None when absent."""
        ...

    def locate_error_slot(self, name: str) -> ErrorSink | None:
        """Where errors for the named field are shown, if anywhere."""
        ...

    def list_fields(self) -> list[FieldHandle]:
        """Every named field, in document order (structural lint only)."""
        ...

    def has_label(self, handle: FieldHandle) -> bool:
        """Whether a label is associated with the field's id."""
        ...


class EventSource(Protocol):
    """Delivers change notifications for named fields."""

    def subscribe(self, name: str, event: str, callback: Callable[[], None]) -> None:
        ...
