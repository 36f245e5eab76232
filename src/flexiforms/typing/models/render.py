"""Renderer output models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from flexiforms.typing.enums import FieldType, KeyboardHint, WidgetKind
from flexiforms.typing.models.field import FieldOption


class RenderedWidget(BaseModel):
    """Input surface for a single field, in render order."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    field_id: str
    field_name: str
    label: str
    field_type: FieldType
    widget: WidgetKind
    keyboard: KeyboardHint = KeyboardHint.DEFAULT
    value: str = ""
    placeholder: str | None = None
    width: int
    height: int
    min_height: int | None = None
    is_required: bool = False
    label_inline: bool = False
    disabled: bool = False
    choices: list[FieldOption] = Field(default_factory=list)

    @property
    def checked(self) -> bool:
        """Toggle state of a checkbox widget."""
        return self.value == "true"


class ValidationIssue(BaseModel):
    """First validation failure found in a data record."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    field_name: str
    message: str
