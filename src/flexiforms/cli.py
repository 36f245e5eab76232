"""CLI entry point for FlexiForms."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter, ValidationError

from flexiforms import __version__, logger
from flexiforms.definition_store import JsonFormDefinitionStore
from flexiforms.dependencies import ensure_rpc_dependencies
from flexiforms.exceptions import FormValidationError, PackageError
from flexiforms.logging import configure_logging
from flexiforms.seeds import seed_default_definitions
from flexiforms.sessions import create_form_definition
from flexiforms.settings import get_settings
from flexiforms.typing.models import FieldSpec
from flexiforms.validation import first_issue

if TYPE_CHECKING:
    from flexiforms.settings import Settings
    from flexiforms.typing.protocol import FormDefinitionStore

_FIELD_LIST = TypeAdapter(list[FieldSpec])


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser.

    Returns:
        argparse.ArgumentParser: The configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="flexiforms")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--store-dir", type=Path, default=None, dest="store_dir")
    parser.add_argument("--rpc", action="store_true", help="Use the remote formDesigner procedures")

    subparsers = parser.add_subparsers(dest="command")

    definitions = subparsers.add_parser("definitions", help="Manage form definitions")
    actions = definitions.add_subparsers(dest="action", required=True)

    actions.add_parser("list", help="List form definitions")

    show = actions.add_parser("show", help="Print one definition as JSON")
    show.add_argument("entity_type")

    create = actions.add_parser("create", help="Create a form definition")
    create.add_argument("--entity-type", required=True, dest="entity_type")
    create.add_argument("--display-name", required=True, dest="display_name")
    create.add_argument("--description", default=None)
    create.add_argument("--fields", type=Path, default=None, dest="fields_path")

    delete = actions.add_parser("delete", help="Delete a form definition")
    delete.add_argument("definition_id", type=int)

    history = actions.add_parser("history", help="Show the design history of a definition")
    history.add_argument("definition_id", type=int)

    subparsers.add_parser("seed", help="Create the built-in production-planning definitions")

    validate = subparsers.add_parser("validate", help="Validate a data record against a definition")
    validate.add_argument("--entity-type", required=True, dest="entity_type")
    validate.add_argument("--data", required=True, type=Path, dest="data_path")

    return parser


def _build_store(args: argparse.Namespace, settings: Settings) -> FormDefinitionStore:
    """Select the store backend from CLI arguments.

    Args:
        args (argparse.Namespace): Parsed CLI args.
        settings (Settings): Runtime settings.

    Returns:
        FormDefinitionStore: Store to operate on.
    """
    if args.rpc:
        ensure_rpc_dependencies()
        from flexiforms.backends.rpc_store import RpcFormDefinitionStore  # noqa: PLC0415

        return RpcFormDefinitionStore(settings)
    return JsonFormDefinitionStore(root=args.store_dir or settings.store_path)


def _emit(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False) + "\n")


def _load_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _run_definitions(args: argparse.Namespace, store: FormDefinitionStore) -> int:
    if args.action == "list":
        _emit(
            [
                {
                    "id": definition.id,
                    "entityType": definition.entity_type,
                    "displayName": definition.display_name,
                    "fields": len(definition.fields),
                    "isActive": definition.is_active,
                }
                for definition in store.list_definitions()
            ],
        )
        return 0

    if args.action == "show":
        definition = store.get_definition(args.entity_type)
        if definition is None:
            logger.error("Form definition not found", entity_type=args.entity_type)
            return 1
        _emit(definition.to_payload())
        return 0

    if args.action == "create":
        fields = _FIELD_LIST.validate_python(_load_json(args.fields_path)) if args.fields_path else []
        definition = create_form_definition(
            store,
            entity_type=args.entity_type,
            display_name=args.display_name,
            description=args.description,
            fields=fields,
        )
        _emit(definition.to_payload())
        return 0

    if args.action == "delete":
        store.delete_definition(args.definition_id)
        return 0

    if not isinstance(store, JsonFormDefinitionStore):
        logger.error("Design history is only available for the local store")
        return 1
    _emit([entry.to_payload() for entry in store.list_history(args.definition_id)])
    return 0


def _record_from_json(payload: Any) -> dict[str, str]:
    """Turn a JSON data file into a form record.

    Booleans become ``"true"``/``"false"`` and null becomes an empty string.

    Raises:
        FormValidationError: If the payload is not a JSON object.
    """
    if not isinstance(payload, dict):
        raise FormValidationError(field_name="data", message="Record must be a JSON object")
    record: dict[str, str] = {}
    for key, value in payload.items():
        if isinstance(value, bool):
            record[str(key)] = "true" if value else "false"
        elif value is None:
            record[str(key)] = ""
        else:
            record[str(key)] = str(value)
    return record


def _run_validate(args: argparse.Namespace, store: FormDefinitionStore) -> int:
    definition = store.get_definition(args.entity_type)
    if definition is None:
        logger.error("Form definition not found", entity_type=args.entity_type)
        return 1
    record = _record_from_json(_load_json(args.data_path))
    issue = first_issue(definition.fields, record)
    if issue is not None:
        _emit({"valid": False, "fieldName": issue.field_name, "message": issue.message})
        return 1
    _emit({"valid": True})
    return 0


def _run_command(args: argparse.Namespace, store: FormDefinitionStore) -> int:
    if args.command == "definitions":
        return _run_definitions(args, store)
    if args.command == "seed":
        created = seed_default_definitions(store)
        _emit([definition.entity_type for definition in created])
        return 0
    return _run_validate(args, store)


def main(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Args:
        argv: Arguments to parse instead of `sys.argv`.

    Returns:
        int: Exit code (0 for success, 1 for error).
    """
    settings = get_settings()
    configure_logging(settings=settings)

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        store = _build_store(args, settings)
        try:
            return _run_command(args, store)
        finally:
            close = getattr(store, "close", None)
            if close is not None:
                close()
    except PackageError:
        logger.exception("Command failed", command=args.command)
        return 1
    except (ValidationError, json.JSONDecodeError, OSError):
        logger.exception("Invalid input", command=args.command)
        return 1
    except KeyboardInterrupt:
        logger.info("Command aborted by user")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
