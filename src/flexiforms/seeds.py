"""Default form definitions for the production-planning screens."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flexiforms import logger
from flexiforms.typing.enums import FieldType
from flexiforms.typing.models import FieldOption, FieldSpec, FormDefinitionCreate

if TYPE_CHECKING:
    from flexiforms.typing.models import FormDefinition
    from flexiforms.typing.protocol import FormDefinitionStore

ORDER_STATUSES = ("Neu", "In Bearbeitung", "Fertig")


def _fields(*specs: dict[str, object]) -> list[FieldSpec]:
    return [
        FieldSpec.model_validate({"id": f"field_{spec['field_name']}", "position": index, **spec})
        for index, spec in enumerate(specs)
    ]


def default_definitions() -> list[FormDefinitionCreate]:
    """Return the built-in definitions for customers, products and orders."""
    return [
        FormDefinitionCreate(
            entity_type="customers",
            display_name="Customers",
            description="Customer master data",
            fields=_fields(
                {"field_name": "customerNumber", "field_label": "Customer Number", "is_required": True},
                {"field_name": "name", "field_label": "Name", "is_required": True},
                {"field_name": "address", "field_label": "Address", "field_type": FieldType.TEXTAREA, "height": 80},
                {"field_name": "contactPerson", "field_label": "Contact Person"},
                {"field_name": "email", "field_label": "Email", "field_type": FieldType.EMAIL},
                {"field_name": "phone", "field_label": "Phone", "field_type": FieldType.PHONE},
            ),
        ),
        FormDefinitionCreate(
            entity_type="products",
            display_name="Products",
            description="Article catalogue",
            fields=_fields(
                {"field_name": "articleNumber", "field_label": "Article Number", "is_required": True},
                {"field_name": "name", "field_label": "Name", "is_required": True},
                {
                    "field_name": "description",
                    "field_label": "Description",
                    "field_type": FieldType.TEXTAREA,
                    "height": 100,
                },
                {
                    "field_name": "price",
                    "field_label": "Price",
                    "field_type": FieldType.NUMBER,
                    "is_required": True,
                    "width": 50,
                    "placeholder": "0.00",
                },
                {"field_name": "category", "field_label": "Category", "width": 50},
            ),
        ),
        FormDefinitionCreate(
            entity_type="orders",
            display_name="Orders",
            description="Production orders",
            fields=_fields(
                {"field_name": "orderNumber", "field_label": "Order Number", "is_required": True},
                {"field_name": "customerId", "field_label": "Customer", "field_type": FieldType.NUMBER, "is_required": True},
                {"field_name": "orderDate", "field_label": "Order Date", "field_type": FieldType.DATE, "width": 50},
                {
                    "field_name": "status",
                    "field_label": "Status",
                    "field_type": FieldType.SELECT,
                    "width": 50,
                    "default_value": ORDER_STATUSES[0],
                    "options": [FieldOption(value=status, label=status) for status in ORDER_STATUSES],
                },
            ),
        ),
    ]


def seed_default_definitions(store: FormDefinitionStore, *, user_id: int | None = None) -> list[FormDefinition]:
    """Create the built-in definitions that the store does not have yet.

    Args:
        store (FormDefinitionStore): Target store.
        user_id (int | None): User recorded as author.

    Returns:
        list[FormDefinition]: Definitions created by this call.
    """
    created: list[FormDefinition] = []
    for payload in default_definitions():
        if store.get_definition(payload.entity_type) is not None:
            logger.debug("Seed skipped, definition exists", entity_type=payload.entity_type)
            continue
        created.append(store.create_definition(payload, user_id=user_id))
    return created
