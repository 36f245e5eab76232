from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from flexiforms.backends.rpc_store import RpcFormDefinitionStore
from flexiforms.exceptions import (
    AuthenticationError,
    DefinitionNotFoundError,
    DuplicateEntityTypeError,
    RpcError,
)
from flexiforms.settings import Settings
from flexiforms.typing.models import (
    FieldSpec,
    FormDefinitionCreate,
    FormDefinitionUpdate,
    FormFieldCreate,
    FormFieldUpdate,
)

BASE_URL = "https://forms.example.com/api/trpc"

_DEFINITION = {
    "id": 4,
    "entityType": "customers",
    "displayName": "Kunden",
    "description": None,
    "fields": [
        {"id": "field_email", "fieldName": "email", "fieldLabel": "E-Mail", "fieldType": "email", "position": 0},
    ],
    "isActive": True,
}


def _ok(data: object) -> httpx.Response:
    return httpx.Response(200, json={"result": {"data": data}})


def _store(handler: Callable[[httpx.Request], httpx.Response], monkeypatch) -> RpcFormDefinitionStore:
    monkeypatch.setenv("RPC_BASE_URL", BASE_URL)
    client = httpx.Client(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return RpcFormDefinitionStore(Settings(), client=client)


def test_missing_base_url_is_rejected(monkeypatch) -> None:
    monkeypatch.delenv("RPC_BASE_URL", raising=False)

    with pytest.raises(RpcError, match="RPC_BASE_URL is required"):
        RpcFormDefinitionStore(Settings())


def test_queries_are_sent_as_get_with_json_input(monkeypatch) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _ok(_DEFINITION)

    definition = _store(handler, monkeypatch).get_definition("customers")

    (request,) = seen
    assert request.method == "GET"
    assert request.url.path == "/api/trpc/formDesigner.getDefinition"
    assert json.loads(request.url.params["input"]) == {"entityType": "customers"}
    assert definition is not None
    assert definition.display_name == "Kunden"
    assert definition.fields[0].field_name == "email"


def test_get_definition_accepts_row_lists(monkeypatch) -> None:
    store = _store(lambda request: _ok([_DEFINITION]), monkeypatch)

    assert store.get_definition("customers").id == 4


def test_get_definition_returns_none_for_empty_reply(monkeypatch) -> None:
    store = _store(lambda request: _ok([]), monkeypatch)

    assert store.get_definition("unknown") is None


def test_list_definitions_without_input(monkeypatch) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _ok([{**_DEFINITION, "id": 9, "entityType": "orders"}, _DEFINITION])

    definitions = _store(handler, monkeypatch).list_definitions()

    assert [definition.id for definition in definitions] == [4, 9]
    assert "input" not in seen[0].url.params


def test_mutations_are_posted_as_camel_case_json(monkeypatch) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _ok(_DEFINITION)

    store = _store(handler, monkeypatch)
    store.create_definition(
        FormDefinitionCreate(
            entity_type="customers",
            display_name="Kunden",
            fields=[FieldSpec(id="field_email", field_name="email", field_label="E-Mail")],
        ),
    )

    (request,) = seen
    body = json.loads(request.content)
    assert request.method == "POST"
    assert request.url.path.endswith("/formDesigner.createDefinition")
    assert body["entityType"] == "customers"
    assert body["fields"][0]["fieldLabel"] == "E-Mail"


def test_create_falls_back_to_lookup_when_reply_has_no_row(monkeypatch) -> None:
    procedures: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        procedure = request.url.path.rsplit(".", 1)[-1]
        procedures.append(procedure)
        if procedure == "createDefinition":
            return _ok({"insertId": 4})
        return _ok(_DEFINITION)

    created = _store(handler, monkeypatch).create_definition(
        FormDefinitionCreate(entity_type="customers", display_name="Kunden"),
    )

    assert procedures == ["createDefinition", "getDefinition"]
    assert created.id == 4


def test_update_sends_only_provided_attributes(monkeypatch) -> None:
    bodies: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            bodies.append(json.loads(request.content))
            return _ok({"success": True})
        return _ok([{**_DEFINITION, "isActive": False}])

    updated = _store(handler, monkeypatch).update_definition(4, FormDefinitionUpdate(is_active=False))

    assert bodies == [{"id": 4, "isActive": False}]
    assert updated.is_active is False


def test_update_of_unknown_definition_raises(monkeypatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            return _ok({"success": True})
        return _ok([])

    with pytest.raises(DefinitionNotFoundError):
        _store(handler, monkeypatch).update_definition(99, FormDefinitionUpdate(display_name="x"))


def test_field_row_procedures(monkeypatch) -> None:
    row = {
        "id": 12,
        "formDefinitionId": 4,
        "fieldName": "phone",
        "fieldLabel": "Telefon",
        "fieldType": "phone",
        "position": 1,
    }

    def handler(request: httpx.Request) -> httpx.Response:
        procedure = request.url.path.rsplit(".", 1)[-1]
        if procedure == "getFields":
            assert json.loads(request.url.params["input"]) == {"formDefinitionId": 4}
            return _ok([row, {**row, "id": 11, "fieldName": "name", "position": 0}])
        if procedure == "updateField":
            return _ok({**row, "width": 50})
        if procedure == "createField":
            return _ok(row)
        return _ok({"success": True})

    store = _store(handler, monkeypatch)

    assert [field.field_name for field in store.get_fields(4)] == ["name", "phone"]
    created = store.create_field(FormFieldCreate(form_definition_id=4, field_name="phone", field_label="Telefon"))
    assert created.id == 12
    assert store.update_field(12, FormFieldUpdate(width=20)).width == 50
    store.delete_field(12)


@pytest.mark.parametrize(
    ("status", "code", "expected"),
    [
        (401, "UNAUTHORIZED", AuthenticationError),
        (401, None, AuthenticationError),
        (409, "CONFLICT", DuplicateEntityTypeError),
        (404, "NOT_FOUND", DefinitionNotFoundError),
        (500, "INTERNAL_SERVER_ERROR", RpcError),
    ],
)
def test_error_replies_map_to_package_errors(monkeypatch, status: int, code: str | None, expected: type) -> None:
    error: dict[str, object] = {"message": "procedure rejected"}
    if code:
        error["data"] = {"code": code}

    store = _store(lambda request: httpx.Response(status, json={"error": error}), monkeypatch)

    with pytest.raises(expected, match="procedure rejected"):
        store.delete_definition(4)


def test_non_json_error_reply(monkeypatch) -> None:
    store = _store(lambda request: httpx.Response(502, text="Bad Gateway"), monkeypatch)

    with pytest.raises(RpcError, match="HTTP 502") as exc_info:
        store.list_definitions()

    assert exc_info.value.status_code == 502


def test_transport_failure_is_wrapped(monkeypatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RpcError, match="listDefinitions failed"):
        _store(handler, monkeypatch).list_definitions()


def test_context_manager_closes_client(monkeypatch, mocker) -> None:
    monkeypatch.setenv("RPC_BASE_URL", BASE_URL)
    client = mocker.Mock()

    with RpcFormDefinitionStore(Settings(), client=client):
        pass

    client.close.assert_called_once_with()
