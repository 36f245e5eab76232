"""Form definition and persistence models."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import Field

from flexiforms.typing.enums import FieldType, HistoryAction
from flexiforms.typing.models.field import CamelModel, FieldAttributes, FieldOption, FieldSpec


def utc_now() -> datetime:
    """Return the current UTC timestamp."""
    return datetime.now(tz=UTC)


class FormDefinition(CamelModel):
    """Named, persisted collection of field specs for one entity type."""

    id: int
    entity_type: str = Field(min_length=1, max_length=100)
    display_name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    fields: list[FieldSpec] = Field(default_factory=list)
    is_active: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def ordered_fields(self) -> list[FieldSpec]:
        """Return the fields sorted by position."""
        return sorted(self.fields, key=lambda spec: spec.position)


class FormDefinitionCreate(CamelModel):
    """Payload of `formDesigner.createDefinition`."""

    entity_type: str = Field(min_length=1, max_length=100)
    display_name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    fields: list[FieldSpec] = Field(default_factory=list)


class FormDefinitionUpdate(CamelModel):
    """Partial payload of `formDesigner.updateDefinition`."""

    display_name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    fields: list[FieldSpec] | None = None
    is_active: bool | None = None

    def changes(self) -> dict[str, Any]:
        """Return only the attributes that were provided.

        Returns:
            dict[str, Any]: Attribute name to new value.
        """
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None
        }


class FormFieldRow(FieldAttributes):
    """Field persisted as its own row rather than embedded in a definition."""

    id: int
    form_definition_id: int
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class FormFieldCreate(FieldAttributes):
    """Payload of `formDesigner.createField`."""

    form_definition_id: int


class FormFieldUpdate(CamelModel):
    """Partial payload of `formDesigner.updateField`."""

    field_name: str | None = Field(default=None, min_length=1, max_length=255)
    field_label: str | None = Field(default=None, min_length=1, max_length=255)
    field_type: FieldType | None = None
    position: int | None = Field(default=None, ge=0)
    width: int | None = None
    height: int | None = None
    is_required: bool | None = None
    placeholder: str | None = None
    default_value: str | None = None
    options: list[FieldOption] | None = None
    validation: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = None

    def changes(self) -> dict[str, Any]:
        """Return only the attributes that were provided.

        Returns:
            dict[str, Any]: Attribute name to new value.
        """
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None
        }


class FormDesignHistory(CamelModel):
    """Audit entry with before/after snapshots of a definition change."""

    id: int
    form_definition_id: int
    user_id: int | None = None
    action: HistoryAction
    previous_config: dict[str, Any] | None = None
    new_config: dict[str, Any] | None = None
    description: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
