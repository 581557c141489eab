"""Application service: expiry views (queries).

Both views cover the same stock as ``ShowInventoryHandler`` and list the
soonest expiry first.  A product expiring today is still "expiring", not
"expired".
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Callable

from foodhub.application.dto import ProductDTO, product_to_dto
from foodhub.application.show_inventory import inventory_scope
from foodhub.domain.exceptions import ValidationError
from foodhub.domain.model.principal import Principal
from foodhub.domain.repository.unit_of_work import UnitOfWork

DEFAULT_EXPIRY_WINDOW_DAYS = 7


class ShowExpiringProductsHandler:

    def __init__(self, uow: UnitOfWork, today: Callable[[], date] = date.today) -> None:
        self._uow = uow
        self._today = today

    def handle(
        self, principal: Principal, days: int = DEFAULT_EXPIRY_WINDOW_DAYS
    ) -> list[ProductDTO]:
        """Products expiring within the next *days* days, today included."""
        if days < 0:
            raise ValidationError("Days threshold cannot be negative")
        location, supplier_id = inventory_scope(principal)
        today = self._today()
        with self._uow:
            products = self._uow.products.list_expiring(
                latest=today + timedelta(days=days),
                earliest=today,
                location=location,
                supplier_id=supplier_id,
            )
        return [product_to_dto(p) for p in products]


class ShowExpiredProductsHandler:

    def __init__(self, uow: UnitOfWork, today: Callable[[], date] = date.today) -> None:
        self._uow = uow
        self._today = today

    def handle(self, principal: Principal) -> list[ProductDTO]:
        location, supplier_id = inventory_scope(principal)
        with self._uow:
            products = self._uow.products.list_expiring(
                latest=self._today() - timedelta(days=1),
                location=location,
                supplier_id=supplier_id,
            )
        return [product_to_dto(p) for p in products]
