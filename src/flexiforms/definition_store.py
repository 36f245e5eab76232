"""File-backed form definition store."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, cast

from pydantic import BaseModel, ConfigDict, Field

from flexiforms import logger
from flexiforms.exceptions import (
    DefinitionNotFoundError,
    DuplicateEntityTypeError,
    FieldNotFoundError,
    StoreError,
)
from flexiforms.typing.enums import HistoryAction
from flexiforms.typing.models import (
    FormDefinition,
    FormDefinitionCreate,
    FormDefinitionUpdate,
    FormDesignHistory,
    FormFieldCreate,
    FormFieldRow,
    FormFieldUpdate,
)
from flexiforms.typing.models.definition import utc_now

_STORE_FILE_VERSION = 1
_STORE_FILE_NAME = "form_definitions.json"


class _StoreDocument(BaseModel):
    """Whole-store payload written to disk."""

    model_config = ConfigDict(extra="forbid")

    definitions: list[FormDefinition] = Field(default_factory=list)
    fields: list[FormFieldRow] = Field(default_factory=list)
    history: list[FormDesignHistory] = Field(default_factory=list)
    sequences: dict[str, int] = Field(default_factory=dict)

    def next_id(self, table: str) -> int:
        """Allocate the next auto-increment id of a table."""
        value = self.sequences.get(table, 0) + 1
        self.sequences[table] = value
        return value


class JsonFormDefinitionStore(BaseModel):
    """Form definitions, field rows and design history kept in one JSON file."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    root: Path = Field(description="Store directory root.")

    def model_post_init(self, __context: object, /) -> None:
        """Ensure the store directory exists after model initialization.

        Args:
            __context (object): Pydantic model context.
        """
        self.root.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        """Location of the store file."""
        return self.root / _STORE_FILE_NAME

    def _read(self) -> _StoreDocument:
        if not self.path.exists():
            return _StoreDocument()
        payload = json.loads(self.path.read_text(encoding="utf-8"))
        return _StoreDocument.model_validate(_unwrap_store_payload(payload))

    def _write(self, document: _StoreDocument) -> None:
        envelope = {
            "store_file_version": _STORE_FILE_VERSION,
            "store": document.model_dump(mode="json", by_alias=True),
        }
        staging = self.path.with_suffix(".json.tmp")
        staging.write_text(json.dumps(envelope, indent=2, sort_keys=True), encoding="utf-8")
        staging.replace(self.path)

    @staticmethod
    def _find_definition(document: _StoreDocument, definition_id: int) -> int:
        for index, definition in enumerate(document.definitions):
            if definition.id == definition_id:
                return index
        raise DefinitionNotFoundError(
            message=f"Form definition {definition_id} not found",
            definition_id=definition_id,
        )

    @staticmethod
    def _log_change(
        document: _StoreDocument,
        *,
        definition_id: int,
        action: HistoryAction,
        previous: dict[str, Any] | None,
        new: dict[str, Any] | None,
        description: str,
        user_id: int | None,
    ) -> FormDesignHistory:
        entry = FormDesignHistory(
            id=document.next_id("history"),
            form_definition_id=definition_id,
            user_id=user_id,
            action=action,
            previous_config=previous,
            new_config=new,
            description=description,
        )
        document.history.append(entry)
        return entry

    # Definitions

    def list_definitions(self) -> list[FormDefinition]:
        """Return all definitions ordered by id."""
        return sorted(self._read().definitions, key=lambda definition: definition.id)

    def get_definition(self, entity_type: str) -> FormDefinition | None:
        """Return the definition of an entity type, or None."""
        return next(
            (definition for definition in self._read().definitions if definition.entity_type == entity_type),
            None,
        )

    def get_definition_by_id(self, definition_id: int) -> FormDefinition:
        """Return a definition by id.

        Args:
            definition_id (int): Definition id.

        Returns:
            FormDefinition: Stored definition.
        """
        document = self._read()
        return document.definitions[self._find_definition(document, definition_id)]

    def create_definition(self, payload: FormDefinitionCreate, *, user_id: int | None = None) -> FormDefinition:
        """Create an active definition.

        Args:
            payload (FormDefinitionCreate): Creation payload.
            user_id (int | None): Authenticated user performing the change.

        Raises:
            DuplicateEntityTypeError: If the entity type is already defined.

        Returns:
            FormDefinition: Created definition.
        """
        document = self._read()
        if any(definition.entity_type == payload.entity_type for definition in document.definitions):
            raise DuplicateEntityTypeError(
                message=f"Form definition for entity type '{payload.entity_type}' already exists",
                entity_type=payload.entity_type,
            )

        definition = FormDefinition(
            id=document.next_id("definitions"),
            entity_type=payload.entity_type,
            display_name=payload.display_name,
            description=payload.description,
            fields=payload.fields,
            is_active=True,
        )
        document.definitions.append(definition)
        self._log_change(
            document,
            definition_id=definition.id,
            action=HistoryAction.CREATE,
            previous=None,
            new=definition.to_payload(),
            description="Form definition created",
            user_id=user_id,
        )
        self._write(document)
        logger.info("Form definition created", definition_id=definition.id, entity_type=definition.entity_type)
        return definition

    def update_definition(
        self,
        definition_id: int,
        payload: FormDefinitionUpdate,
        *,
        user_id: int | None = None,
    ) -> FormDefinition:
        """Apply a partial update and record a before/after snapshot.

        Args:
            definition_id (int): Definition id.
            payload (FormDefinitionUpdate): Attributes to change.
            user_id (int | None): Authenticated user performing the change.

        Returns:
            FormDefinition: Updated definition.
        """
        document = self._read()
        index = self._find_definition(document, definition_id)
        previous = document.definitions[index]
        updated = previous.model_copy(update={**payload.changes(), "updated_at": utc_now()})
        document.definitions[index] = updated
        self._log_change(
            document,
            definition_id=definition_id,
            action=HistoryAction.UPDATE,
            previous=previous.to_payload(),
            new=updated.to_payload(),
            description="Form definition updated",
            user_id=user_id,
        )
        self._write(document)
        logger.info("Form definition updated", definition_id=definition_id, changed=sorted(payload.changes()))
        return updated

    def delete_definition(self, definition_id: int, *, user_id: int | None = None) -> None:
        """Delete a definition together with its field rows.

        Args:
            definition_id (int): Definition id.
            user_id (int | None): Authenticated user performing the change.
        """
        document = self._read()
        removed = document.definitions.pop(self._find_definition(document, definition_id))
        document.fields = [row for row in document.fields if row.form_definition_id != definition_id]
        self._log_change(
            document,
            definition_id=definition_id,
            action=HistoryAction.DELETE,
            previous=removed.to_payload(),
            new=None,
            description="Form definition deleted",
            user_id=user_id,
        )
        self._write(document)
        logger.info("Form definition deleted", definition_id=definition_id)

    # Field rows

    def get_fields(self, form_definition_id: int) -> list[FormFieldRow]:
        """Return field rows of a definition ordered by position."""
        rows = [row for row in self._read().fields if row.form_definition_id == form_definition_id]
        return sorted(rows, key=lambda row: (row.position, row.id))

    def create_field(self, payload: FormFieldCreate) -> FormFieldRow:
        """Create a field row for an existing definition.

        Args:
            payload (FormFieldCreate): Creation payload.

        Returns:
            FormFieldRow: Created row.
        """
        document = self._read()
        self._find_definition(document, payload.form_definition_id)
        row = FormFieldRow.model_validate({**payload.model_dump(), "id": document.next_id("fields")})
        document.fields.append(row)
        self._write(document)
        logger.debug("Form field created", field_id=row.id, form_definition_id=row.form_definition_id)
        return row

    def update_field(self, field_id: int, payload: FormFieldUpdate) -> FormFieldRow:
        """Apply a partial update to a field row.

        Args:
            field_id (int): Field row id.
            payload (FormFieldUpdate): Attributes to change.

        Returns:
            FormFieldRow: Updated row.
        """
        document = self._read()
        index = _find_field(document, field_id)
        merged = {**document.fields[index].model_dump(), **payload.changes(), "updated_at": utc_now()}
        row = FormFieldRow.model_validate(merged)
        document.fields[index] = row
        self._write(document)
        return row

    def delete_field(self, field_id: int) -> None:
        """Delete a field row.

        Args:
            field_id (int): Field row id.
        """
        document = self._read()
        document.fields.pop(_find_field(document, field_id))
        self._write(document)

    # History

    def list_history(self, form_definition_id: int) -> list[FormDesignHistory]:
        """Return audit entries of a definition, oldest first."""
        entries = [entry for entry in self._read().history if entry.form_definition_id == form_definition_id]
        return sorted(entries, key=lambda entry: entry.id)


def _find_field(document: _StoreDocument, field_id: int) -> int:
    for index, row in enumerate(document.fields):
        if row.id == field_id:
            return index
    raise FieldNotFoundError(message=f"Form field {field_id} not found", field_id=field_id)


def _unwrap_store_payload(payload: object) -> dict[str, object]:
    """Extract the store object from a versioned envelope.

    Args:
        payload (object): Raw JSON payload.

    Raises:
        StoreError: If the payload is not a JSON object or has an unknown version.

    Returns:
        dict[str, object]: Store object payload.
    """
    if not isinstance(payload, dict):
        raise StoreError(message="Store payload must be a JSON object")

    payload_obj = cast("dict[str, object]", payload)
    version = payload_obj.get("store_file_version", _STORE_FILE_VERSION)
    if version != _STORE_FILE_VERSION:
        raise StoreError(message=f"Unsupported store file version: {version}")

    embedded = payload_obj.get("store")
    if isinstance(embedded, dict):
        return cast("dict[str, object]", embedded)
    return {key: value for key, value in payload_obj.items() if key != "store_file_version"}
