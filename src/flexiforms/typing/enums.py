"""Project enums."""

from __future__ import annotations

from enum import StrEnum


class _EnumMixin(StrEnum):
    """Shared conversion helpers for user-facing enums."""

    @classmethod
    def from_str(cls, value: str) -> _EnumMixin:
        """Parse enum from string.

        Args:
            value: Raw string value.

        Raises:
            ValueError: If the value is not supported.

        Returns:
            _EnumMixin: Parsed enum value.
        """
        try:
            return cls(value)
        except ValueError as exc:
            supported = ", ".join(member.value for member in cls)
            message = f"Unsupported {cls.__name__} value '{value}'. Expected one of: {supported}"
            raise ValueError(message) from exc

    def to_str(self) -> str:
        """Return string representation.

        Returns:
            str: Enum string value.
        """
        return self.value


class FieldType(_EnumMixin):
    """Supported form field types."""

    TEXT = "text"
    EMAIL = "email"
    NUMBER = "number"
    TEXTAREA = "textarea"
    SELECT = "select"
    CHECKBOX = "checkbox"
    DATE = "date"
    PHONE = "phone"

    @property
    def display_label(self) -> str:
        """Label shown in the builder type picker."""
        return self.value.capitalize()


class WidgetKind(_EnumMixin):
    """Input surface produced by the renderer for a field."""

    SINGLE_LINE = "single_line"
    MULTI_LINE = "multi_line"
    CHOICE = "choice"
    TOGGLE = "toggle"


class KeyboardHint(_EnumMixin):
    """Input-method hint attached to single-line widgets."""

    DEFAULT = "default"
    EMAIL = "email-address"
    DECIMAL = "decimal-pad"
    PHONE = "phone-pad"


class BuilderMode(_EnumMixin):
    """Interaction state of the form builder."""

    IDLE = "idle"
    EDITING = "editing"
    CONFIRMING_DELETE = "confirming_delete"


class HistoryAction(_EnumMixin):
    """Audit actions recorded for form definitions."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
