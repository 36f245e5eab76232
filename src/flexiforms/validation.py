"""Field-level validation of form data records."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from flexiforms.exceptions import FormValidationError
from flexiforms.typing.enums import FieldType
from flexiforms.typing.models import ValidationIssue

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from flexiforms.typing.models import FieldAttributes

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[+]?[(]?[0-9]{1,4}[)]?[-\s.]?[(]?[0-9]{1,4}[)]?[-\s.]?[0-9]{1,9}$")
# Leading decimal literal, matched the way a lenient number parser reads user input.
_NUMBER_PREFIX = re.compile(r"^\s*[+-]?(?:Infinity|\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?)")


def is_number(value: str) -> bool:
    """Return whether a string starts with a parseable decimal number.

    Trailing text after the number is tolerated, so ``"12kg"`` passes while
    ``"abc"`` and ``""`` do not.

    Args:
        value (str): Raw user input.

    Returns:
        bool: True when a number can be read from the start of the value.
    """
    return _NUMBER_PREFIX.match(value) is not None


def is_email(value: str) -> bool:
    """Return whether a string looks like `local@domain.tld`."""
    return EMAIL_PATTERN.fullmatch(value) is not None


def is_phone(value: str) -> bool:
    """Return whether a string looks like an international phone number."""
    return PHONE_PATTERN.fullmatch(value) is not None


_FORMAT_RULES: dict[FieldType, tuple[Callable[[str], bool], str]] = {
    FieldType.EMAIL: (is_email, "{label} must be a valid email"),
    FieldType.PHONE: (is_phone, "{label} must be a valid phone number"),
    FieldType.NUMBER: (is_number, "{label} must be a number"),
}


def check_field(field: FieldAttributes, value: str | None) -> ValidationIssue | None:
    """Validate one field value.

    Args:
        field (FieldAttributes): Field specification.
        value (str | None): Current record value.

    Returns:
        ValidationIssue | None: The failure, or None when the value is acceptable.
    """
    if not value:
        if field.is_required:
            return ValidationIssue(field_name=field.field_name, message=f"{field.field_label} is required")
        return None

    rule = _FORMAT_RULES.get(field.field_type)
    if rule is None:
        return None
    predicate, template = rule
    if predicate(value):
        return None
    return ValidationIssue(field_name=field.field_name, message=template.format(label=field.field_label))


def first_issue(fields: Iterable[FieldAttributes], record: Mapping[str, str]) -> ValidationIssue | None:
    """Return the first failing field in iteration order.

    Args:
        fields (Iterable[FieldAttributes]): Fields to check, in order.
        record (Mapping[str, str]): Data record keyed by field name.

    Returns:
        ValidationIssue | None: First failure, or None when the record is valid.
    """
    for field in fields:
        issue = check_field(field, record.get(field.field_name))
        if issue is not None:
            return issue
    return None


def validate_record(fields: Iterable[FieldAttributes], record: Mapping[str, str]) -> None:
    """Validate a record and raise on the first failure.

    Args:
        fields (Iterable[FieldAttributes]): Fields to check, in order.
        record (Mapping[str, str]): Data record keyed by field name.

    Raises:
        FormValidationError: If any field fails validation.
    """
    issue = first_issue(fields, record)
    if issue is not None:
        raise FormValidationError(field_name=issue.field_name, message=issue.message)
