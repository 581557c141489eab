"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.  Amounts are rendered
as plain decimal strings ("50.00"); timestamps as ISO-8601.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import TypeVar

from foodhub.domain.exceptions import ValidationError
from foodhub.domain.model.order import Order
from foodhub.domain.model.product import Product, StockLevel

E = TypeVar("E", bound=Enum)


def parse_choice(enum_cls: type[E], raw: str | E | None, label: str) -> E:
    """Turn caller input into an enum member or raise ValidationError."""
    if isinstance(raw, enum_cls):
        return raw
    if raw is None or not str(raw).strip():
        raise ValidationError(f"{label.capitalize()} is required")
    try:
        return enum_cls(str(raw).strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            f"Invalid {label} '{raw}' (expected one of: {allowed})"
        ) from None


def _iso(value: datetime | date | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: what the shopkeeper asked for (product + quantity)."""

    product_id: str
    quantity: int


@dataclass(frozen=True)
class OrderLineItemDTO:
    product_id: str
    product_name: str
    quantity: int
    price: str
    line_total: str
    returned: int
    return_quantity: int
    return_reason: str | None
    return_status: str | None


@dataclass(frozen=True)
class StatusChangeDTO:
    status: str
    changed_at: str
    changed_by: str


@dataclass(frozen=True)
class DisputeDTO:
    index: int
    description: str
    status: str
    raised_by: str
    raised_at: str
    resolved_by: str | None
    resolved_at: str | None


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order, with every persisted field exposed."""

    id: int
    order_number: str
    shopkeeper_id: str
    supplier_id: str
    status: str
    payment_status: str
    payment_method: str
    notes: str | None
    total_amount: str
    items: list[OrderLineItemDTO]
    history: list[StatusChangeDTO]
    disputes: list[DisputeDTO]
    delivery_date: str | None
    delivered_at: str | None
    created_at: str
    updated_at: str
    version: int
    warnings: list[str] = field(default_factory=list)


def order_to_dto(order: Order, warnings: list[str] | None = None) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        order_number=order.order_number,  # type: ignore[arg-type]
        shopkeeper_id=order.shopkeeper_id,
        supplier_id=order.supplier_id,
        status=order.status.value,
        payment_status=order.payment_status.value,
        payment_method=order.payment_method.value,
        notes=order.notes,
        total_amount=f"{order.total_amount.amount:.2f}",
        items=[
            OrderLineItemDTO(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity.value,
                price=f"{item.unit_price.amount:.2f}",
                line_total=f"{item.line_total.amount:.2f}",
                returned=item.returned,
                return_quantity=item.return_quantity,
                return_reason=item.return_reason,
                return_status=item.return_status.value if item.return_status else None,
            )
            for item in order.items
        ],
        history=[
            StatusChangeDTO(
                status=change.status.value,
                changed_at=change.changed_at.isoformat(),
                changed_by=change.changed_by,
            )
            for change in order.history
        ],
        disputes=[
            DisputeDTO(
                index=index,
                description=dispute.description,
                status=dispute.status.value,
                raised_by=dispute.raised_by,
                raised_at=dispute.raised_at.isoformat(),
                resolved_by=dispute.resolved_by,
                resolved_at=_iso(dispute.resolved_at),
            )
            for index, dispute in enumerate(order.disputes)
        ],
        delivery_date=_iso(order.delivery_date),
        delivered_at=_iso(order.delivered_at),
        created_at=order.created_at.isoformat(),
        updated_at=order.updated_at.isoformat(),
        version=order.version,
        warnings=list(warnings or []),
    )


@dataclass(frozen=True)
class StockLevelDTO:
    product_id: str
    quantity: int
    status: str


def stock_level_to_dto(level: StockLevel) -> StockLevelDTO:
    return StockLevelDTO(
        product_id=level.product_id,
        quantity=level.quantity,
        status=level.status.value,
    )


@dataclass(frozen=True)
class ProductDTO:
    id: str
    supplier_id: str
    location: str
    name: str
    category: str
    unit: str
    price: str
    quantity: int
    min_stock_level: int
    status: str
    batch_number: str | None
    manufacturing_date: str | None
    expiry_date: str | None
    barcode: str | None
    is_active: bool


def product_to_dto(product: Product) -> ProductDTO:
    return ProductDTO(
        id=product.id,
        supplier_id=product.supplier_id,
        location=product.location.value,
        name=product.name,
        category=product.category,
        unit=product.unit,
        price=f"{product.price.amount:.2f}",
        quantity=product.quantity,
        min_stock_level=product.min_stock_level,
        status=product.status.value,
        batch_number=product.batch_number,
        manufacturing_date=_iso(product.manufacturing_date),
        expiry_date=_iso(product.expiry_date),
        barcode=product.barcode,
        is_active=product.is_active,
    )
