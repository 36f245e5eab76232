"""Core domain model exports."""

from flexiforms.typing.models.definition import (
    FormDefinition,
    FormDefinitionCreate,
    FormDefinitionUpdate,
    FormDesignHistory,
    FormFieldCreate,
    FormFieldRow,
    FormFieldUpdate,
)
from flexiforms.typing.models.field import FieldAttributes, FieldOption, FieldSpec
from flexiforms.typing.models.render import RenderedWidget, ValidationIssue

__all__ = [
    "FieldAttributes",
    "FieldOption",
    "FieldSpec",
    "FormDefinition",
    "FormDefinitionCreate",
    "FormDefinitionUpdate",
    "FormDesignHistory",
    "FormFieldCreate",
    "FormFieldRow",
    "FormFieldUpdate",
    "RenderedWidget",
    "ValidationIssue",
]
