"""Interactive editor over the ordered field list of one form definition."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from flexiforms import logger as package_logger
from flexiforms.async_runner import settle
from flexiforms.exceptions import FormValidationError
from flexiforms.typing.enums import BuilderMode, FieldType
from flexiforms.typing.models import FieldSpec
from flexiforms.typing.models.field import (
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    clamp_height,
    clamp_width,
    generate_field_id,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    import structlog

    from flexiforms.typing.protocol import FieldsChangeHandler, SaveHandler

FIELD_TYPE_CHOICES: tuple[tuple[str, str], ...] = tuple((kind.value, kind.display_label) for kind in FieldType)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_ATTRIBUTE_NAMES: dict[str, str] = {
    info.alias or name: name for name, info in FieldSpec.model_fields.items()
}


def parse_dimension(text: str, fallback: int) -> int:
    """Read a width or height typed into the editor.

    The leading integer of the text is used; text without one, or a zero,
    yields the fallback so a half-typed value never blocks the editor.

    Args:
        text (str): Raw keystrokes.
        fallback (int): Value used when nothing usable was typed.

    Returns:
        int: Parsed value, not yet clamped.
    """
    match = _LEADING_INT.match(text)
    if match is None:
        return fallback
    return int(match.group(1)) or fallback


def renumber(fields: Iterable[FieldSpec]) -> tuple[FieldSpec, ...]:
    """Rewrite positions to the 0-based index of each field.

    Args:
        fields (Iterable[FieldSpec]): Fields in their intended order.

    Returns:
        tuple[FieldSpec, ...]: New field specs with dense positions.
    """
    return tuple(
        spec if spec.position == index else spec.model_copy(update={"position": index})
        for index, spec in enumerate(fields)
    )


class FormBuilder:
    """Working copy of a form's fields with add, edit, delete, reorder and resize.

    Every mutation builds a new tuple and reports it through ``on_fields_change``.
    Nothing reaches the store until ``save`` hands the list to ``on_save``.
    """

    def __init__(
        self,
        fields: Iterable[FieldSpec] = (),
        *,
        on_fields_change: FieldsChangeHandler | None = None,
        on_save: SaveHandler | None = None,
        on_cancel: Callable[[], object] | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        """Open a builder session.

        Args:
            fields: Persisted fields to start from; they are sorted by position.
            on_fields_change: Called with the full list after every change.
            on_save: Receives the final list on `save`.
            on_cancel: Called after `cancel` discards the working copy.
            logger: Structured logger, defaults to the package logger.
        """
        self._initial: tuple[FieldSpec, ...] = tuple(sorted(fields, key=lambda spec: spec.position))
        self._fields = self._initial
        self._issued_ids: set[str] = {spec.id for spec in self._initial}
        self._on_fields_change = on_fields_change
        self._on_save = on_save
        self._on_cancel = on_cancel
        self._logger = (logger or package_logger).bind(component="form_builder")

        self.selected_field_id: str | None = None
        self.editing_field: FieldSpec | None = None
        self.pending_delete_id: str | None = None

    @property
    def fields(self) -> tuple[FieldSpec, ...]:
        """Authoritative ordered field list of this session."""
        return self._fields

    @property
    def mode(self) -> BuilderMode:
        """Current interaction state."""
        if self.pending_delete_id is not None:
            return BuilderMode.CONFIRMING_DELETE
        if self.editing_field is not None:
            return BuilderMode.EDITING
        return BuilderMode.IDLE

    def get_field(self, field_id: str) -> FieldSpec | None:
        """Return the field with the given id, if any."""
        return next((spec for spec in self._fields if spec.id == field_id), None)

    def _index_of(self, field_id: str) -> int | None:
        return next((index for index, spec in enumerate(self._fields) if spec.id == field_id), None)

    def _new_id(self) -> str:
        field_id = generate_field_id()
        while field_id in self._issued_ids:
            field_id = generate_field_id()
        self._issued_ids.add(field_id)
        return field_id

    def _publish(self, fields: Iterable[FieldSpec], *, action: str) -> None:
        self._fields = tuple(fields)
        self._logger.debug("Fields changed", action=action, field_count=len(self._fields))
        if self._on_fields_change is not None:
            self._on_fields_change(list(self._fields))

    # Field lifecycle

    def add_field(self) -> FieldSpec:
        """Append a default text field and open it in the editor.

        Returns:
            FieldSpec: The new field.
        """
        count = len(self._fields)
        spec = FieldSpec(
            id=self._new_id(),
            field_name=f"field_{count + 1}",
            field_label=f"Field {count + 1}",
            field_type=FieldType.TEXT,
            position=count,
            width=DEFAULT_WIDTH,
            height=DEFAULT_HEIGHT,
            is_required=False,
            placeholder="",
        )
        self._publish((*self._fields, spec), action="add")
        self.editing_field = spec
        return spec

    def update_field(self, spec: FieldSpec) -> bool:
        """Replace the field carrying the same id.

        Args:
            spec (FieldSpec): Replacement field.

        Returns:
            bool: False when no field has that id; nothing changes then.
        """
        index = self._index_of(spec.id)
        if index is None:
            return False
        updated = list(self._fields)
        updated[index] = spec
        self._publish(updated, action="update")
        return True

    def delete_field(self, field_id: str) -> bool:
        """Ask for confirmation before deleting a field.

        The field stays in place until `confirm_delete` is called.

        Args:
            field_id (str): Field to delete.

        Returns:
            bool: False when the id is unknown.
        """
        if self._index_of(field_id) is None:
            return False
        self.pending_delete_id = field_id
        return True

    def confirm_delete(self) -> bool:
        """Remove the field awaiting confirmation.

        Positions of the remaining fields are left as they are.

        Returns:
            bool: False when no deletion was pending.
        """
        field_id = self.pending_delete_id
        if field_id is None:
            return False
        self.pending_delete_id = None
        if self.selected_field_id == field_id:
            self.selected_field_id = None
        if self.editing_field is not None and self.editing_field.id == field_id:
            self.editing_field = None
        self._publish((spec for spec in self._fields if spec.id != field_id), action="delete")
        return True

    def cancel_delete(self) -> None:
        """Drop the pending deletion."""
        self.pending_delete_id = None

    # Ordering and layout

    def move_field_up(self, field_id: str) -> bool:
        """Swap a field with its predecessor.

        Args:
            field_id (str): Field to move.

        Returns:
            bool: False at the top boundary or for an unknown id.
        """
        index = self._index_of(field_id)
        if index is None or index == 0:
            return False
        return self._swap(index - 1, index)

    def move_field_down(self, field_id: str) -> bool:
        """Swap a field with its successor.

        Args:
            field_id (str): Field to move.

        Returns:
            bool: False at the bottom boundary or for an unknown id.
        """
        index = self._index_of(field_id)
        if index is None or index == len(self._fields) - 1:
            return False
        return self._swap(index, index + 1)

    def _swap(self, first: int, second: int) -> bool:
        reordered = list(self._fields)
        reordered[first], reordered[second] = reordered[second], reordered[first]
        self._publish(renumber(reordered), action="move")
        return True

    def resize_field(self, field_id: str, width: int, height: int) -> bool:
        """Set a field's layout size, clamped to the supported range.

        Args:
            field_id (str): Field to resize.
            width (int): Width percentage.
            height (int): Height in pixels.

        Returns:
            bool: False for an unknown id.
        """
        spec = self.get_field(field_id)
        if spec is None:
            return False
        return self.update_field(spec.model_copy(update={"width": clamp_width(width), "height": clamp_height(height)}))

    # Selection and editor surface

    def select_field(self, field_id: str | None) -> None:
        """Highlight a field on the canvas, or clear the highlight with None."""
        if field_id is not None and self._index_of(field_id) is None:
            return
        self.selected_field_id = field_id

    def edit_field(self, field_id: str) -> FieldSpec | None:
        """Open the editor on a field.

        Args:
            field_id (str): Field to edit.

        Returns:
            FieldSpec | None: Working copy, or None for an unknown id.
        """
        spec = self.get_field(field_id)
        if spec is None:
            return None
        self.editing_field = spec.model_copy(deep=True)
        return self.editing_field

    def edit_attribute(self, **changes: Any) -> FieldSpec | None:
        """Change attributes of the working copy in the editor.

        Keys may be attribute names or their camelCase aliases. Width and
        height given as text go through `parse_dimension`; every value is
        validated and clamped like a stored field.

        Args:
            **changes: Attribute names and values, e.g. ``field_label="Name"``.

        Raises:
            FormValidationError: If a key is unknown or a value is invalid; the
                working copy is left unchanged.

        Returns:
            FieldSpec | None: Updated working copy, or None when no editor is open.
        """
        if self.editing_field is None:
            return None
        updates = {_ATTRIBUTE_NAMES.get(key, key): value for key, value in changes.items()}
        for name, fallback in (("width", DEFAULT_WIDTH), ("height", DEFAULT_HEIGHT)):
            if isinstance(updates.get(name), str):
                updates[name] = parse_dimension(updates[name], fallback)
        try:
            edited = FieldSpec.model_validate({**self.editing_field.model_dump(), **updates})
        except ValidationError as exc:
            error = exc.errors()[0]
            location = ".".join(str(part) for part in error["loc"]) or self.editing_field.field_name
            raise FormValidationError(field_name=location, message=error["msg"]) from exc
        self.editing_field = edited
        return self.editing_field

    def set_width_text(self, text: str) -> FieldSpec | None:
        """Apply a typed width; unusable input falls back to 100."""
        return self.edit_attribute(width=parse_dimension(text, DEFAULT_WIDTH))

    def set_height_text(self, text: str) -> FieldSpec | None:
        """Apply a typed height; unusable input falls back to 40."""
        return self.edit_attribute(height=parse_dimension(text, DEFAULT_HEIGHT))

    def commit_edit(self) -> FieldSpec | None:
        """Write the working copy back to the list and close the editor.

        Raises:
            FormValidationError: If the field name or label is blank.

        Returns:
            FieldSpec | None: Committed field, or None when no editor is open.
        """
        spec = self.editing_field
        if spec is None:
            return None
        if not spec.field_name.strip():
            raise FormValidationError(field_name=spec.field_name, message="Field name is required")
        if not spec.field_label.strip():
            raise FormValidationError(field_name=spec.field_name, message="Field label is required")
        self.update_field(spec)
        self.editing_field = None
        return spec

    def close_editor(self) -> None:
        """Close the editor without applying the working copy."""
        self.editing_field = None

    # Session end

    def save(self) -> list[FieldSpec]:
        """Hand the current list to the host.

        Positions are renumbered densely first, closing gaps left by deletions.

        Returns:
            list[FieldSpec]: The saved list.
        """
        dense = renumber(self._fields)
        if dense != self._fields:
            self._publish(dense, action="renumber")
        saved = list(self._fields)
        self._logger.info("Form fields saved", field_count=len(saved))
        if self._on_save is not None:
            settle(self._on_save(saved))
        self._initial = self._fields
        return saved

    def cancel(self) -> None:
        """Discard the working copy and notify the host."""
        self._fields = self._initial
        self.selected_field_id = None
        self.editing_field = None
        self.pending_delete_id = None
        self._logger.info("Form edit cancelled")
        if self._on_cancel is not None:
            settle(self._on_cancel())
