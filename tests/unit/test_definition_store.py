from __future__ import annotations

import json

import pytest

from flexiforms.definition_store import JsonFormDefinitionStore
from flexiforms.exceptions import (
    DefinitionNotFoundError,
    DuplicateEntityTypeError,
    FieldNotFoundError,
    StoreError,
)
from flexiforms.typing.enums import FieldType, HistoryAction
from flexiforms.typing.models import (
    FieldSpec,
    FormDefinitionCreate,
    FormDefinitionUpdate,
    FormFieldCreate,
    FormFieldUpdate,
)


def _create(store: JsonFormDefinitionStore, entity_type: str = "customers", **extra: object):
    return store.create_definition(
        FormDefinitionCreate(entity_type=entity_type, display_name=entity_type.title(), **extra),
        user_id=7,
    )


def test_store_creates_root_directory(tmp_path) -> None:
    root = tmp_path / "nested" / "forms"

    JsonFormDefinitionStore(root=root)

    assert root.is_dir()


def test_empty_store_lists_nothing(tmp_path) -> None:
    store = JsonFormDefinitionStore(root=tmp_path)

    assert store.list_definitions() == []
    assert store.get_definition("customers") is None


def test_create_assigns_incrementing_ids_and_is_active(tmp_path) -> None:
    store = JsonFormDefinitionStore(root=tmp_path)

    first = _create(store, "customers")
    second = _create(store, "products")

    assert (first.id, second.id) == (1, 2)
    assert first.is_active is True
    assert [definition.entity_type for definition in store.list_definitions()] == ["customers", "products"]


def test_create_rejects_duplicate_entity_type(tmp_path) -> None:
    store = JsonFormDefinitionStore(root=tmp_path)
    _create(store, "customers")

    with pytest.raises(DuplicateEntityTypeError, match="already exists") as exc_info:
        _create(store, "customers")

    assert exc_info.value.entity_type == "customers"
    assert len(store.list_definitions()) == 1


def test_definitions_persist_across_instances(tmp_path) -> None:
    fields = [FieldSpec(field_name="email", field_label="Email", field_type=FieldType.EMAIL)]
    _create(JsonFormDefinitionStore(root=tmp_path), fields=fields)

    loaded = JsonFormDefinitionStore(root=tmp_path).get_definition("customers")

    assert loaded is not None
    assert loaded.fields == fields


def test_store_file_uses_versioned_envelope_and_camel_case(tmp_path) -> None:
    store = JsonFormDefinitionStore(root=tmp_path)
    _create(store, fields=[FieldSpec(field_name="name", field_label="Name", is_required=True)])

    payload = json.loads(store.path.read_text(encoding="utf-8"))

    assert payload["store_file_version"] == 1
    definition = payload["store"]["definitions"][0]
    assert definition["entityType"] == "customers"
    assert definition["fields"][0]["fieldName"] == "name"
    assert definition["fields"][0]["isRequired"] is True


def test_update_definition_applies_partial_changes_and_logs_history(tmp_path) -> None:
    store = JsonFormDefinitionStore(root=tmp_path)
    created = _create(store, description="Before")
    fields = [FieldSpec(field_name="name", field_label="Name")]

    updated = store.update_definition(created.id, FormDefinitionUpdate(fields=fields), user_id=3)

    assert updated.fields == fields
    assert updated.description == "Before"
    assert updated.display_name == "Customers"

    history = store.list_history(created.id)
    assert [entry.action for entry in history] == [HistoryAction.CREATE, HistoryAction.UPDATE]
    update_entry = history[-1]
    assert update_entry.user_id == 3
    assert update_entry.previous_config is not None
    assert update_entry.previous_config["fields"] == []
    assert update_entry.new_config is not None
    assert update_entry.new_config["fields"][0]["fieldName"] == "name"


def test_every_update_appends_one_history_entry(tmp_path) -> None:
    store = JsonFormDefinitionStore(root=tmp_path)
    created = _create(store)

    store.update_definition(created.id, FormDefinitionUpdate(is_active=False))
    store.update_definition(created.id, FormDefinitionUpdate(display_name="Clients"))

    updates = [entry for entry in store.list_history(created.id) if entry.action is HistoryAction.UPDATE]
    assert len(updates) == 2
    assert store.get_definition("customers").display_name == "Clients"


def test_update_missing_definition_raises(tmp_path) -> None:
    store = JsonFormDefinitionStore(root=tmp_path)

    with pytest.raises(DefinitionNotFoundError, match="42"):
        store.update_definition(42, FormDefinitionUpdate(display_name="x"))


def test_delete_definition_removes_field_rows(tmp_path) -> None:
    store = JsonFormDefinitionStore(root=tmp_path)
    created = _create(store)
    store.create_field(FormFieldCreate(form_definition_id=created.id, field_name="a", field_label="A"))

    store.delete_definition(created.id)

    assert store.list_definitions() == []
    assert store.get_fields(created.id) == []
    assert store.list_history(created.id)[-1].action is HistoryAction.DELETE


def test_entity_type_can_be_reused_after_delete(tmp_path) -> None:
    store = JsonFormDefinitionStore(root=tmp_path)
    first = _create(store)
    store.delete_definition(first.id)

    second = _create(store)

    assert second.id == first.id + 1


def test_field_row_crud(tmp_path) -> None:
    store = JsonFormDefinitionStore(root=tmp_path)
    definition = _create(store)

    row_b = store.create_field(
        FormFieldCreate(form_definition_id=definition.id, field_name="b", field_label="B", position=1),
    )
    row_a = store.create_field(
        FormFieldCreate(form_definition_id=definition.id, field_name="a", field_label="A", position=0),
    )

    assert [row.field_name for row in store.get_fields(definition.id)] == ["a", "b"]

    updated = store.update_field(row_b.id, FormFieldUpdate(width=10, field_type=FieldType.NUMBER))
    assert updated.width == 50
    assert updated.field_type is FieldType.NUMBER
    assert updated.field_name == "b"

    store.delete_field(row_a.id)
    assert [row.id for row in store.get_fields(definition.id)] == [row_b.id]


def test_field_row_requires_existing_definition(tmp_path) -> None:
    store = JsonFormDefinitionStore(root=tmp_path)

    with pytest.raises(DefinitionNotFoundError):
        store.create_field(FormFieldCreate(form_definition_id=9, field_name="a", field_label="A"))


def test_missing_field_row_raises(tmp_path) -> None:
    store = JsonFormDefinitionStore(root=tmp_path)

    with pytest.raises(FieldNotFoundError):
        store.delete_field(5)


def test_unknown_store_file_version_is_rejected(tmp_path) -> None:
    store = JsonFormDefinitionStore(root=tmp_path)
    store.path.write_text(json.dumps({"store_file_version": 99, "store": {}}), encoding="utf-8")

    with pytest.raises(StoreError, match="Unsupported store file version"):
        store.list_definitions()


def test_non_object_store_file_is_rejected(tmp_path) -> None:
    store = JsonFormDefinitionStore(root=tmp_path)
    store.path.write_text("[]", encoding="utf-8")

    with pytest.raises(StoreError, match="JSON object"):
        store.list_definitions()
