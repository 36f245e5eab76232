"""Collaborator interfaces."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from flexiforms.typing.models import (
        FieldSpec,
        FormDefinition,
        FormDefinitionCreate,
        FormDefinitionUpdate,
        FormFieldCreate,
        FormFieldRow,
        FormFieldUpdate,
    )

type SubmitHandler = Callable[[Mapping[str, str]], None | Awaitable[None]]
type FieldsChangeHandler = Callable[[list[FieldSpec]], None]
type SaveHandler = Callable[[list[FieldSpec]], object]


class Notifier(Protocol):
    """Blocking user notice shown by an engine."""

    def alert(self, title: str, message: str) -> None:
        """Surface a message to the user.

        Args:
            title: Notice title.
            message: Notice body.
        """


class FormDefinitionStore(Protocol):
    """Record store owning persisted form definitions."""

    def list_definitions(self) -> list[FormDefinition]:
        """Return all definitions.

        Returns:
            list[FormDefinition]: Stored definitions ordered by id.
        """

    def get_definition(self, entity_type: str) -> FormDefinition | None:
        """Return the definition for an entity type.

        Args:
            entity_type: Entity type key.

        Returns:
            FormDefinition | None: Definition or None when absent.
        """

    def create_definition(self, payload: FormDefinitionCreate, *, user_id: int | None = None) -> FormDefinition:
        """Create a definition.

        Args:
            payload: Creation payload.
            user_id: Authenticated user performing the change.

        Returns:
            FormDefinition: Created definition.
        """

    def update_definition(
        self,
        definition_id: int,
        payload: FormDefinitionUpdate,
        *,
        user_id: int | None = None,
    ) -> FormDefinition:
        """Apply a partial update and log a history entry.

        Args:
            definition_id: Definition id.
            payload: Partial update.
            user_id: Authenticated user performing the change.

        Returns:
            FormDefinition: Updated definition.
        """

    def delete_definition(self, definition_id: int, *, user_id: int | None = None) -> None:
        """Delete a definition and its field rows.

        Args:
            definition_id: Definition id.
            user_id: Authenticated user performing the change.
        """

    def get_fields(self, form_definition_id: int) -> list[FormFieldRow]:
        """Return field rows of a definition ordered by position.

        Args:
            form_definition_id: Owning definition id.

        Returns:
            list[FormFieldRow]: Field rows.
        """

    def create_field(self, payload: FormFieldCreate) -> FormFieldRow:
        """Create a field row.

        Args:
            payload: Creation payload.

        Returns:
            FormFieldRow: Created row.
        """

    def update_field(self, field_id: int, payload: FormFieldUpdate) -> FormFieldRow:
        """Apply a partial update to a field row.

        Args:
            field_id: Field row id.
            payload: Partial update.

        Returns:
            FormFieldRow: Updated row.
        """

    def delete_field(self, field_id: int) -> None:
        """Delete a field row.

        Args:
            field_id: Field row id.
        """
