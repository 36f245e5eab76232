"""Form definition store reached through the remote `formDesigner.*` procedures."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

try:
    import httpx
except Exception:  # pragma: no cover - optional dependency at runtime
    httpx: Any
    httpx = None

from pydantic import TypeAdapter

from flexiforms import logger
from flexiforms.exceptions import (
    AuthenticationError,
    DefinitionNotFoundError,
    DuplicateEntityTypeError,
    FieldNotFoundError,
    PackageError,
    RpcError,
)
from flexiforms.settings import build_httpx_client_kwargs
from flexiforms.typing.models import (
    FormDefinition,
    FormDefinitionCreate,
    FormDefinitionUpdate,
    FormFieldCreate,
    FormFieldRow,
    FormFieldUpdate,
)

if TYPE_CHECKING:
    from flexiforms.settings import Settings

_ROUTER = "formDesigner"
_DEFINITIONS = TypeAdapter(list[FormDefinition])
_FIELD_ROWS = TypeAdapter(list[FormFieldRow])


class RpcFormDefinitionStore:
    """Store client speaking the JSON-over-HTTP procedure protocol.

    Queries are sent as ``GET {base}/formDesigner.<name>?input=<json>`` and
    mutations as ``POST {base}/formDesigner.<name>`` with a JSON body. Replies
    carry ``{"result": {"data": ...}}`` or ``{"error": {...}}``.
    """

    def __init__(self, settings: Settings, *, client: Any | None = None) -> None:
        """Initialize the client.

        Args:
            settings (Settings): Runtime settings providing base URL, token and transport options.
            client (Any | None): Pre-built `httpx.Client`, mainly for tests.

        Raises:
            RpcError: If no base URL is configured or httpx is unavailable.
        """
        if not settings.rpc_base_url:
            raise RpcError(message="RPC_BASE_URL is required for the remote form store")
        if client is None:
            if httpx is None:
                raise RpcError(message="httpx is required for the remote form store")
            client = httpx.Client(base_url=settings.rpc_base_url, **build_httpx_client_kwargs(settings))
        self._client = client
        self._logger = logger.bind(component="rpc_store", base_url=settings.rpc_base_url)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> RpcFormDefinitionStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _call(self, procedure: str, payload: dict[str, Any] | None = None, *, mutation: bool = False) -> Any:
        """Invoke one procedure and unwrap its result.

        Args:
            procedure (str): Procedure name under the `formDesigner` router.
            payload (dict[str, Any] | None): JSON input.
            mutation (bool): Send as POST instead of GET.

        Raises:
            RpcError: If the transport fails or the procedure reports an error.

        Returns:
            Any: The `result.data` member of the reply.
        """
        path = f"/{_ROUTER}.{procedure}"
        try:
            if mutation:
                response = self._client.post(path, json=payload or {})
            elif payload is None:
                response = self._client.get(path)
            else:
                response = self._client.get(path, params={"input": json.dumps(payload)})
        except Exception as exc:
            self._logger.exception("Procedure call failed", procedure=procedure)
            raise RpcError(message=f"{procedure} failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = {}

        error = body.get("error") if isinstance(body, dict) else None
        if error is not None or response.status_code >= 400:  # noqa: PLR2004
            raise _error_from_reply(procedure, response.status_code, error)

        result = body.get("result", {}) if isinstance(body, dict) else {}
        return result.get("data") if isinstance(result, dict) else None

    # Definitions

    def list_definitions(self) -> list[FormDefinition]:
        """Return all definitions."""
        data = self._call("listDefinitions")
        return sorted(_DEFINITIONS.validate_python(data or []), key=lambda definition: definition.id)

    def get_definition(self, entity_type: str) -> FormDefinition | None:
        """Return the definition of an entity type, or None."""
        data = self._call("getDefinition", {"entityType": entity_type})
        if isinstance(data, list):
            data = data[0] if data else None
        return FormDefinition.model_validate(data) if data else None

    def _get_definition_by_id(self, definition_id: int) -> FormDefinition:
        for definition in self.list_definitions():
            if definition.id == definition_id:
                return definition
        raise DefinitionNotFoundError(
            message=f"Form definition {definition_id} not found",
            definition_id=definition_id,
        )

    def create_definition(self, payload: FormDefinitionCreate, *, user_id: int | None = None) -> FormDefinition:  # noqa: ARG002
        """Create a definition; the remote side identifies the user itself."""
        data = self._call("createDefinition", payload.to_payload(), mutation=True)
        if isinstance(data, dict) and "id" in data:
            return FormDefinition.model_validate(data)
        created = self.get_definition(payload.entity_type)
        if created is None:
            raise RpcError(message=f"createDefinition returned no definition for '{payload.entity_type}'")
        return created

    def update_definition(
        self,
        definition_id: int,
        payload: FormDefinitionUpdate,
        *,
        user_id: int | None = None,  # noqa: ARG002
    ) -> FormDefinition:
        """Apply a partial update; the remote side records the history entry."""
        body = {"id": definition_id, **payload.model_dump(mode="json", by_alias=True, exclude_unset=True)}
        data = self._call("updateDefinition", body, mutation=True)
        if isinstance(data, dict) and "id" in data:
            return FormDefinition.model_validate(data)
        return self._get_definition_by_id(definition_id)

    def delete_definition(self, definition_id: int, *, user_id: int | None = None) -> None:  # noqa: ARG002
        """Delete a definition."""
        self._call("deleteDefinition", {"id": definition_id}, mutation=True)

    # Field rows

    def get_fields(self, form_definition_id: int) -> list[FormFieldRow]:
        """Return field rows of a definition ordered by position."""
        data = self._call("getFields", {"formDefinitionId": form_definition_id})
        return sorted(_FIELD_ROWS.validate_python(data or []), key=lambda row: (row.position, row.id))

    def create_field(self, payload: FormFieldCreate) -> FormFieldRow:
        """Create a field row."""
        data = self._call("createField", payload.to_payload(), mutation=True)
        if isinstance(data, dict) and "id" in data:
            return FormFieldRow.model_validate(data)
        rows = [row for row in self.get_fields(payload.form_definition_id) if row.field_name == payload.field_name]
        if not rows:
            raise RpcError(message=f"createField returned no row for '{payload.field_name}'")
        return max(rows, key=lambda row: row.id)

    def update_field(self, field_id: int, payload: FormFieldUpdate) -> FormFieldRow:
        """Apply a partial update to a field row."""
        body = {"id": field_id, **payload.model_dump(mode="json", by_alias=True, exclude_unset=True)}
        data = self._call("updateField", body, mutation=True)
        if isinstance(data, dict) and "id" in data:
            return FormFieldRow.model_validate(data)
        raise FieldNotFoundError(message=f"updateField returned no row for {field_id}", field_id=field_id)

    def delete_field(self, field_id: int) -> None:
        """Delete a field row."""
        self._call("deleteField", {"id": field_id}, mutation=True)


def _error_from_reply(procedure: str, status_code: int, error: object) -> PackageError:
    """Map an error reply onto the package exception hierarchy.

    Args:
        procedure (str): Procedure that failed.
        status_code (int): HTTP status of the reply.
        error (object): The reply's `error` member, if any.

    Returns:
        PackageError: Exception to raise.
    """
    message = f"{procedure} failed with HTTP {status_code}"
    code: str | None = None
    if isinstance(error, dict):
        message = str(error.get("message") or message)
        data = error.get("data")
        if isinstance(data, dict) and data.get("code"):
            code = str(data["code"])

    if code == "UNAUTHORIZED" or status_code == 401:  # noqa: PLR2004
        return AuthenticationError(message=message, code=code or "UNAUTHORIZED", status_code=status_code)
    if code == "CONFLICT":
        return DuplicateEntityTypeError(message=message)
    if code == "NOT_FOUND":
        return DefinitionNotFoundError(message=message)
    return RpcError(message=message, code=code, status_code=status_code)
