"""Application service: List Orders use case (query).

Shopkeepers see the orders they placed, suppliers the orders placed with
them, superadmins everything.
"""

from __future__ import annotations

from foodhub.application.dto import OrderDTO, order_to_dto, parse_choice
from foodhub.domain.model.order import OrderStatus
from foodhub.domain.model.principal import Principal, Role
from foodhub.domain.repository.unit_of_work import UnitOfWork


class ListOrdersHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, principal: Principal, status: str | None = None) -> list[OrderDTO]:
        wanted = parse_choice(OrderStatus, status, "order status") if status else None

        with self._uow:
            if principal.role is Role.SHOPKEEPER:
                orders = self._uow.orders.list_for(shopkeeper_id=principal.user_id)
            elif principal.role is Role.SUPPLIER:
                orders = self._uow.orders.list_for(supplier_id=principal.user_id)
            else:
                orders = self._uow.orders.list_for()

        return [
            order_to_dto(order)
            for order in orders
            if wanted is None or order.status is wanted
        ]
