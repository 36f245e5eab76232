"""Field specification models."""

from __future__ import annotations

from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from flexiforms.typing.enums import FieldType

MIN_WIDTH = 50
MAX_WIDTH = 100
MIN_HEIGHT = 30
DEFAULT_WIDTH = 100
DEFAULT_HEIGHT = 40


def generate_field_id() -> str:
    """Return a fresh opaque field identifier.

    Returns:
        str: Identifier unique within any form session.
    """
    return f"field_{uuid4().hex}"


def clamp_width(width: int) -> int:
    """Clamp a width percentage into the supported range.

    Args:
        width (int): Requested width percentage.

    Returns:
        int: Width within `[MIN_WIDTH, MAX_WIDTH]`.
    """
    return max(MIN_WIDTH, min(MAX_WIDTH, width))


def clamp_height(height: int) -> int:
    """Apply the height floor.

    Args:
        height (int): Requested height in pixels.

    Returns:
        int: Height no lower than `MIN_HEIGHT`.
    """
    return max(MIN_HEIGHT, height)


class CamelModel(BaseModel):
    """Base model exchanging camelCase JSON with snake_case attributes."""

    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Dump the model in its wire shape.

        Returns:
            dict[str, Any]: JSON-compatible payload keyed by camelCase names.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class FieldOption(CamelModel):
    """Single choice of a select field."""

    value: str
    label: str


class FieldAttributes(CamelModel):
    """Attributes shared by embedded field specs and persisted field rows."""

    field_name: str = Field(min_length=1, max_length=255)
    field_label: str = Field(min_length=1, max_length=255)
    field_type: FieldType = FieldType.TEXT
    position: int = Field(default=0, ge=0)
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    is_required: bool = False
    placeholder: str | None = None
    default_value: str | None = None
    options: list[FieldOption] = Field(default_factory=list)
    validation: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = None

    @field_validator("width")
    @classmethod
    def _clamp_width(cls, value: int) -> int:
        return clamp_width(value)

    @field_validator("height")
    @classmethod
    def _clamp_height(cls, value: int) -> int:
        return clamp_height(value)

    @property
    def choices(self) -> list[FieldOption]:
        """Options that apply to this field, empty unless it is a select."""
        if self.field_type is FieldType.SELECT:
            return list(self.options)
        return []


class FieldSpec(FieldAttributes):
    """One configurable form field embedded in a form definition."""

    id: str = Field(default_factory=generate_field_id, min_length=1)
