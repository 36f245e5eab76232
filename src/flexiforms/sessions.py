"""Host-side sessions wiring the engines to a definition store."""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING

from flexiforms import logger as package_logger
from flexiforms.builder import FormBuilder
from flexiforms.exceptions import DefinitionNotFoundError, FormValidationError
from flexiforms.renderer import FormRenderer
from flexiforms.typing.models import FormDefinitionCreate, FormDefinitionUpdate

if TYPE_CHECKING:
    from collections.abc import Awaitable, Iterable, Mapping

    import structlog

    from flexiforms.typing.models import FieldSpec, FormDefinition
    from flexiforms.typing.protocol import FormDefinitionStore, Notifier, SubmitHandler


def create_form_definition(
    store: FormDefinitionStore,
    *,
    entity_type: str,
    display_name: str,
    description: str | None = None,
    fields: Iterable[FieldSpec] = (),
    user_id: int | None = None,
) -> FormDefinition:
    """Create a definition from user-entered values.

    Args:
        store (FormDefinitionStore): Target store.
        entity_type (str): Unique entity type key.
        display_name (str): Human-readable name.
        description (str | None): Optional description.
        fields (Iterable[FieldSpec]): Initial fields, usually none.
        user_id (int | None): Authenticated user performing the change.

    Raises:
        FormValidationError: If the entity type or display name is blank.

    Returns:
        FormDefinition: Created definition.
    """
    if not entity_type.strip() or not display_name.strip():
        raise FormValidationError(field_name="entityType", message="Please fill in all required fields")
    payload = FormDefinitionCreate(
        entity_type=entity_type.strip(),
        display_name=display_name.strip(),
        description=description or None,
        fields=list(fields),
    )
    return store.create_definition(payload, user_id=user_id)


class FormDesignerSession:
    """Builder session whose save writes the field list back to the store.

    ``is_pending`` is set while the store call is outstanding; a save requested
    meanwhile is ignored.
    """

    def __init__(
        self,
        store: FormDefinitionStore,
        definition: FormDefinition,
        *,
        user_id: int | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self._store = store
        self._user_id = user_id
        self._logger = (logger or package_logger).bind(entity_type=definition.entity_type)
        self.definition = definition
        self.is_pending = False
        self.builder = FormBuilder(definition.fields, on_save=self._persist, logger=self._logger)

    @classmethod
    def open(
        cls,
        store: FormDefinitionStore,
        entity_type: str,
        *,
        user_id: int | None = None,
    ) -> FormDesignerSession:
        """Load a definition and open a builder on it.

        Raises:
            DefinitionNotFoundError: If no definition exists for the entity type.
        """
        definition = store.get_definition(entity_type)
        if definition is None:
            raise DefinitionNotFoundError(message=f"No form definition for entity type '{entity_type}'")
        return cls(store, definition, user_id=user_id)

    def _persist(self, fields: list[FieldSpec]) -> None:
        self.is_pending = True
        try:
            self.definition = self._store.update_definition(
                self.definition.id,
                FormDefinitionUpdate(fields=fields),
                user_id=self._user_id,
            )
        finally:
            self.is_pending = False

    def save(self) -> FormDefinition | None:
        """Persist the builder's field list.

        Returns:
            FormDefinition | None: Updated definition, or None when a save was already in flight.
        """
        if self.is_pending:
            self._logger.debug("Save ignored while pending")
            return None
        self.builder.save()
        return self.definition

    def rename(self, *, display_name: str | None = None, description: str | None = None) -> FormDefinition:
        """Update display metadata without touching the fields."""
        changes = FormDefinitionUpdate(display_name=display_name, description=description)
        self.definition = self._store.update_definition(self.definition.id, changes, user_id=self._user_id)
        return self.definition

    def set_active(self, active: bool) -> FormDefinition:  # noqa: FBT001
        """Activate or deactivate the definition."""
        changes = FormDefinitionUpdate(is_active=active)
        self.definition = self._store.update_definition(self.definition.id, changes, user_id=self._user_id)
        return self.definition


class FormEntrySession:
    """Renderer session for one stored definition.

    The renderer is marked loading for as long as the submit handler runs,
    including any awaitable it returns, and released on success or failure.
    """

    def __init__(
        self,
        definition: FormDefinition,
        handler: SubmitHandler,
        *,
        initial_data: Mapping[str, str] | None = None,
        submit_label: str = "Submit",
        notifier: Notifier | None = None,
    ) -> None:
        self.definition = definition
        self._handler = handler
        self.renderer = FormRenderer(
            definition.fields,
            self._handle,
            initial_data=initial_data,
            submit_label=submit_label,
            notifier=notifier,
        )

    @classmethod
    def open(
        cls,
        store: FormDefinitionStore,
        entity_type: str,
        handler: SubmitHandler,
        **options: object,
    ) -> FormEntrySession:
        """Load an active definition and open a renderer on it.

        Raises:
            DefinitionNotFoundError: If the definition is missing or inactive.
        """
        definition = store.get_definition(entity_type)
        if definition is None or not definition.is_active:
            raise DefinitionNotFoundError(message=f"No active form definition for entity type '{entity_type}'")
        return cls(definition, handler, **options)  # type: ignore[arg-type]

    def _handle(self, record: Mapping[str, str]) -> Awaitable[None] | None:
        self.renderer.is_loading = True
        try:
            result = self._handler(record)
        except BaseException:
            self.renderer.is_loading = False
            raise
        if inspect.isawaitable(result):
            return self._release_after(result)
        self.renderer.is_loading = False
        return None

    async def _release_after(self, pending: Awaitable[None]) -> None:
        try:
            await pending
        finally:
            self.renderer.is_loading = False

    def submit(self) -> bool:
        """Validate and submit through the renderer."""
        return self.renderer.submit()

    async def asubmit(self) -> bool:
        """Validate and submit through the renderer from async code."""
        return await self.renderer.asubmit()
