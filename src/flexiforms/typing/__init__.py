"""Typing-centric domain modules."""

from flexiforms.typing.enums import BuilderMode, FieldType, HistoryAction, KeyboardHint, WidgetKind
from flexiforms.typing.models import (
    FieldOption,
    FieldSpec,
    FormDefinition,
    FormDefinitionCreate,
    FormDefinitionUpdate,
    FormDesignHistory,
    FormFieldCreate,
    FormFieldRow,
    FormFieldUpdate,
    RenderedWidget,
    ValidationIssue,
)
from flexiforms.typing.protocol import FormDefinitionStore, Notifier, SubmitHandler

__all__ = [
    "BuilderMode",
    "FieldOption",
    "FieldSpec",
    "FieldType",
    "FormDefinition",
    "FormDefinitionCreate",
    "FormDefinitionStore",
    "FormDefinitionUpdate",
    "FormDesignHistory",
    "FormFieldCreate",
    "FormFieldRow",
    "FormFieldUpdate",
    "HistoryAction",
    "KeyboardHint",
    "Notifier",
    "RenderedWidget",
    "SubmitHandler",
    "ValidationIssue",
    "WidgetKind",
]
