"""Data-entry surface rendered from a stored field list."""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING

from flexiforms import logger as package_logger
from flexiforms.async_runner import settle
from flexiforms.typing.enums import FieldType, KeyboardHint, WidgetKind
from flexiforms.typing.models import FieldOption, RenderedWidget
from flexiforms.validation import first_issue

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    import structlog

    from flexiforms.typing.models import FieldAttributes, FieldSpec, ValidationIssue
    from flexiforms.typing.protocol import Notifier, SubmitHandler

DEFAULT_SELECT_PLACEHOLDER = "Select an option"
DATE_PLACEHOLDER = "YYYY-MM-DD"
VALIDATION_TITLE = "Validation Error"

_SINGLE_LINE_HINTS: dict[FieldType, KeyboardHint] = {
    FieldType.TEXT: KeyboardHint.DEFAULT,
    FieldType.EMAIL: KeyboardHint.EMAIL,
    FieldType.NUMBER: KeyboardHint.DECIMAL,
    FieldType.PHONE: KeyboardHint.PHONE,
    FieldType.DATE: KeyboardHint.DEFAULT,
}


class LoggingNotifier:
    """Notifier that records notices in the structured log."""

    def __init__(self, logger: structlog.BoundLogger | None = None) -> None:
        self._logger = logger or package_logger

    def alert(self, title: str, message: str) -> None:
        self._logger.warning(message, title=title)


def seed_record(fields: Iterable[FieldAttributes], initial: Mapping[str, str] | None = None) -> dict[str, str]:
    """Build the starting data record.

    Args:
        fields (Iterable[FieldAttributes]): Fields of the form.
        initial (Mapping[str, str] | None): Existing values, e.g. when editing a record.

    Returns:
        dict[str, str]: Record keyed by field name, defaulting to each field's default value
            or an empty string.
    """
    record = {spec.field_name: spec.default_value or "" for spec in fields}
    if initial:
        record.update({name: str(value) for name, value in initial.items() if name in record})
    return record


def build_widget(field: FieldSpec, value: str, *, disabled: bool = False) -> RenderedWidget:
    """Choose the input widget for a field.

    Args:
        field (FieldSpec): Field to render.
        value (str): Current record value.
        disabled (bool): Whether inputs are locked by a pending submission.

    Returns:
        RenderedWidget: Widget description.
    """
    common = {
        "field_id": field.id,
        "field_name": field.field_name,
        "label": field.field_label,
        "field_type": field.field_type,
        "value": value,
        "width": field.width,
        "height": field.height,
        "is_required": field.is_required,
        "disabled": disabled,
    }
    match field.field_type:
        case FieldType.TEXTAREA:
            return RenderedWidget(
                **common,
                widget=WidgetKind.MULTI_LINE,
                placeholder=field.placeholder,
                min_height=field.height,
            )
        case FieldType.SELECT:
            empty = FieldOption(value="", label=field.placeholder or DEFAULT_SELECT_PLACEHOLDER)
            return RenderedWidget(**common, widget=WidgetKind.CHOICE, choices=[empty, *field.choices])
        case FieldType.CHECKBOX:
            return RenderedWidget(
                **common | {"value": "true" if value == "true" else "false"},
                widget=WidgetKind.TOGGLE,
                label_inline=True,
            )
        case FieldType.DATE:
            return RenderedWidget(
                **common,
                widget=WidgetKind.SINGLE_LINE,
                placeholder=field.placeholder or DATE_PLACEHOLDER,
            )
        case _:
            return RenderedWidget(
                **common,
                widget=WidgetKind.SINGLE_LINE,
                keyboard=_SINGLE_LINE_HINTS.get(field.field_type, KeyboardHint.DEFAULT),
                placeholder=field.placeholder,
            )


class FormRenderer:
    """Collects a flat record for a field list and validates it on submit.

    The caller owns ``is_loading``: while it is true every input and the
    submit action are inert.
    """

    def __init__(
        self,
        fields: Iterable[FieldSpec],
        on_submit: SubmitHandler,
        *,
        initial_data: Mapping[str, str] | None = None,
        submit_label: str = "Submit",
        notifier: Notifier | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        """Prepare a data-entry session.

        Args:
            fields: Field specs in any order.
            on_submit: Receives the full record once validation passes.
            initial_data: Values overriding field defaults.
            submit_label: Text of the submit control.
            notifier: Surface for validation messages; defaults to logging them.
            logger: Structured logger, defaults to the package logger.
        """
        self._fields: tuple[FieldSpec, ...] = tuple(fields)
        self._on_submit = on_submit
        self._logger = (logger or package_logger).bind(component="form_renderer")
        self._notifier = notifier or LoggingNotifier(self._logger)
        self.submit_label = submit_label
        self.is_loading = False
        self._record = seed_record(self._fields, initial_data)

    @property
    def fields(self) -> list[FieldSpec]:
        """Fields in render order (ascending position)."""
        return sorted(self._fields, key=lambda spec: spec.position)

    @property
    def record(self) -> dict[str, str]:
        """Copy of the current data record."""
        return dict(self._record)

    @property
    def submit_caption(self) -> str:
        """Caption of the submit control for the current loading state."""
        return "Submitting..." if self.is_loading else self.submit_label

    def render(self) -> list[RenderedWidget]:
        """Return one widget per field in position order."""
        return [
            build_widget(spec, self._record.get(spec.field_name, ""), disabled=self.is_loading)
            for spec in self.fields
        ]

    def set_value(self, field_name: str, value: str) -> bool:
        """Store a typed value.

        Args:
            field_name (str): Record key.
            value (str): Raw value, kept as typed.

        Returns:
            bool: False while loading; the record is left untouched then.
        """
        if self.is_loading:
            return False
        self._record[field_name] = value
        return True

    def toggle(self, field_name: str, checked: bool) -> bool:  # noqa: FBT001
        """Store a checkbox state as ``"true"`` or ``"false"``."""
        return self.set_value(field_name, "true" if checked else "false")

    def validate(self) -> ValidationIssue | None:
        """Return the first validation failure in field-list order, if any."""
        return first_issue(self._fields, self._record)

    def _check(self) -> bool:
        if self.is_loading:
            self._logger.debug("Submit ignored while loading")
            return False
        issue = self.validate()
        if issue is not None:
            self._logger.info("Form validation failed", field_name=issue.field_name)
            self._notifier.alert(VALIDATION_TITLE, issue.message)
            return False
        return True

    def submit(self) -> bool:
        """Validate and hand the record to the submit handler.

        An awaitable returned by the handler is run to completion.

        Returns:
            bool: True when the handler was called.
        """
        if not self._check():
            return False
        settle(self._on_submit(self.record))
        return True

    async def asubmit(self) -> bool:
        """Validate and hand the record to the submit handler from async code.

        Returns:
            bool: True when the handler was called.
        """
        if not self._check():
            return False
        result = self._on_submit(self.record)
        if inspect.isawaitable(result):
            await result
        return True
