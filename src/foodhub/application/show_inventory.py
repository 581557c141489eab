"""Application service: Show Inventory use case (query).

Suppliers see their own supplier stock; shopkeepers see shop stock;
superadmins see both locations.
"""

from __future__ import annotations

from foodhub.application.dto import ProductDTO, product_to_dto
from foodhub.domain.model.principal import Principal, Role
from foodhub.domain.model.product import StockLocation
from foodhub.domain.repository.unit_of_work import UnitOfWork


def inventory_scope(principal: Principal) -> tuple[StockLocation | None, str | None]:
    """The (location, owner) filter a caller's stock views are limited to."""
    if principal.role is Role.SUPPLIER:
        return StockLocation.SUPPLIER, principal.user_id
    if principal.role is Role.SHOPKEEPER:
        return StockLocation.SHOP, None
    return None, None


class ShowInventoryHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, principal: Principal, low_stock_only: bool = False) -> list[ProductDTO]:
        location, supplier_id = inventory_scope(principal)
        with self._uow:
            products = self._uow.products.list_all(location=location, supplier_id=supplier_id)

        if low_stock_only:
            products = sorted(
                (p for p in products if p.is_low_stock), key=lambda p: p.quantity
            )
        return [product_to_dto(p) for p in products]
