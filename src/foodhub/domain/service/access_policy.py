"""Domain service: who may do what.

Every coordinator operation is listed once in ``ACCESS_POLICY`` together
with the relationships between caller and resource that allow it.  The
handlers call ``authorize()`` before touching any state and carry no
role branching of their own.
"""

from __future__ import annotations

from enum import Enum

from foodhub.domain.exceptions import ForbiddenError
from foodhub.domain.model.order import Order
from foodhub.domain.model.principal import Principal, Role
from foodhub.domain.model.product import Product


class Operation(Enum):
    CREATE_ORDER = "create order"
    VIEW_ORDER = "view order"
    CHANGE_ORDER_STATUS = "change order status"
    REQUEST_RETURN = "request return"
    CHANGE_RETURN_STATUS = "change return status"
    ADD_DISPUTE = "add dispute"
    CHANGE_DISPUTE_STATUS = "change dispute status"
    RENDER_INVOICE = "render invoice"
    ADD_PRODUCT = "add product"
    UPDATE_PRODUCT = "update product"
    SET_STOCK = "set stock"
    DEACTIVATE_PRODUCT = "deactivate product"


class Relationship(Enum):
    SHOPKEEPER = "shopkeeper"
    SUPPLIER = "supplier"
    SUPERADMIN = "superadmin"
    ORDER_SHOPKEEPER = "order shopkeeper"
    ORDER_SUPPLIER = "order supplier"
    PRODUCT_OWNER = "product owner"


_ORDER_PARTIES = frozenset(
    {
        Relationship.ORDER_SHOPKEEPER,
        Relationship.ORDER_SUPPLIER,
        Relationship.SUPERADMIN,
    }
)

ACCESS_POLICY: dict[Operation, frozenset[Relationship]] = {
    Operation.CREATE_ORDER: frozenset({Relationship.SHOPKEEPER}),
    Operation.VIEW_ORDER: _ORDER_PARTIES,
    Operation.CHANGE_ORDER_STATUS: _ORDER_PARTIES,
    Operation.REQUEST_RETURN: frozenset({Relationship.ORDER_SHOPKEEPER}),
    Operation.CHANGE_RETURN_STATUS: frozenset({Relationship.ORDER_SUPPLIER}),
    Operation.ADD_DISPUTE: _ORDER_PARTIES,
    Operation.CHANGE_DISPUTE_STATUS: frozenset({Relationship.SUPERADMIN}),
    Operation.RENDER_INVOICE: _ORDER_PARTIES,
    Operation.ADD_PRODUCT: frozenset({Relationship.SUPPLIER, Relationship.SHOPKEEPER}),
    Operation.UPDATE_PRODUCT: frozenset({Relationship.PRODUCT_OWNER}),
    Operation.SET_STOCK: frozenset({Relationship.PRODUCT_OWNER, Relationship.SUPERADMIN}),
    Operation.DEACTIVATE_PRODUCT: frozenset({Relationship.PRODUCT_OWNER}),
}

_ROLE_RELATIONSHIP = {
    Role.SHOPKEEPER: Relationship.SHOPKEEPER,
    Role.SUPPLIER: Relationship.SUPPLIER,
    Role.SUPERADMIN: Relationship.SUPERADMIN,
}


def relationships_of(
    principal: Principal,
    order: Order | None = None,
    product: Product | None = None,
) -> set[Relationship]:
    """Every relationship the caller holds towards the given resources."""
    held = {_ROLE_RELATIONSHIP[principal.role]}
    if order is not None:
        if principal.role is Role.SHOPKEEPER and order.shopkeeper_id == principal.user_id:
            held.add(Relationship.ORDER_SHOPKEEPER)
        if principal.role is Role.SUPPLIER and order.supplier_id == principal.user_id:
            held.add(Relationship.ORDER_SUPPLIER)
    if product is not None and product.supplier_id == principal.user_id:
        held.add(Relationship.PRODUCT_OWNER)
    return held


def authorize(
    operation: Operation,
    principal: Principal,
    *,
    order: Order | None = None,
    product: Product | None = None,
) -> None:
    """Raise ForbiddenError unless the caller may perform *operation*."""
    if ACCESS_POLICY[operation].isdisjoint(relationships_of(principal, order, product)):
        target = ""
        if order is not None:
            target = f" on order {order.order_number}"
        elif product is not None:
            target = f" on product '{product.name}'"
        raise ForbiddenError(
            f"{principal.role.value} {principal.user_id} is not allowed to "
            f"{operation.value}{target}"
        )
