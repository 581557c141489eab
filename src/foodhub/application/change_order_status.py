"""Application service: Change Order Status use case.

Moving an order into ``delivered`` is the one transition with a stock
effect: every line item's quantity leaves the product's stock.  The
decrements and the status change commit together or not at all.

Asking for the status the order already has is a no-op.  That is what
keeps a repeated "delivered" request from taking stock out twice; it is
decided from the current status, not from a separate flag.
"""

from __future__ import annotations

import logging

from foodhub.application.dto import OrderDTO, order_to_dto, parse_choice
from foodhub.domain.exceptions import EntityNotFoundError
from foodhub.domain.model.order import OrderStatus
from foodhub.domain.model.principal import Principal
from foodhub.domain.repository.unit_of_work import UnitOfWork
from foodhub.domain.service.access_policy import Operation, authorize
from foodhub.domain.service.stock_ledger import StockLedger

logger = logging.getLogger(__name__)


class ChangeOrderStatusHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self, principal: Principal, order_id: int, new_status: str | OrderStatus
    ) -> OrderDTO:
        status = parse_choice(OrderStatus, new_status, "order status")

        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            authorize(Operation.CHANGE_ORDER_STATUS, principal, order=order)

            previous = order.status
            if not order.change_status(status, principal.user_id):
                logger.info(
                    "Order %s already %s; nothing to do",
                    order.order_number,
                    status.value,
                )
                return order_to_dto(order)

            if order.status is OrderStatus.DELIVERED:
                ledger = StockLedger(self._uow.products)
                ledger.apply(
                    {
                        product_id: -quantity
                        for product_id, quantity in order.units_to_deliver().items()
                    }
                )

            self._uow.orders.save(order)
            self._uow.commit()

        logger.info(
            "Order %s moved from %s to %s by %s",
            order.order_number,
            previous.value,
            order.status.value,
            principal.user_id,
        )
        return order_to_dto(order)
