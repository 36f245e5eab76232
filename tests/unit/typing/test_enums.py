from __future__ import annotations

import pytest

from flexiforms.typing.enums import FieldType, HistoryAction, KeyboardHint


def test_field_type_from_str() -> None:
    assert FieldType.from_str("phone") == FieldType.PHONE


def test_field_type_from_str_raises_on_invalid_value() -> None:
    with pytest.raises(ValueError, match="Unsupported FieldType value"):
        FieldType.from_str("radio")


def test_field_type_set_is_closed() -> None:
    assert [kind.to_str() for kind in FieldType] == [
        "text",
        "email",
        "number",
        "textarea",
        "select",
        "checkbox",
        "date",
        "phone",
    ]


def test_display_label() -> None:
    assert FieldType.CHECKBOX.display_label == "Checkbox"


def test_keyboard_hint_values() -> None:
    assert KeyboardHint.DECIMAL.to_str() == "decimal-pad"
    assert HistoryAction.from_str("update") is HistoryAction.UPDATE
