"""Application service: Change Return Status use case.

The supplier approves, rejects or completes a pending return.  Approval
is the only event that puts stock back: the approved units are added to
the product inside the same unit of work as the order update.  A second
approval fails in the aggregate before the ledger is touched.
"""

from __future__ import annotations

import logging

from foodhub.application.dto import OrderDTO, order_to_dto, parse_choice
from foodhub.domain.exceptions import EntityNotFoundError
from foodhub.domain.model.order import ReturnStatus
from foodhub.domain.model.principal import Principal
from foodhub.domain.repository.unit_of_work import UnitOfWork
from foodhub.domain.service.access_policy import Operation, authorize
from foodhub.domain.service.stock_ledger import StockLedger

logger = logging.getLogger(__name__)


class ChangeReturnStatusHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        principal: Principal,
        order_id: int,
        product_id: str,
        new_status: str | ReturnStatus,
    ) -> OrderDTO:
        status = parse_choice(ReturnStatus, new_status, "return status")

        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            authorize(Operation.CHANGE_RETURN_STATUS, principal, order=order)

            restock = order.change_return_status(product_id, status, principal.user_id)
            if restock:
                StockLedger(self._uow.products).adjust(product_id, restock)

            self._uow.orders.save(order)
            self._uow.commit()

        logger.info(
            "Return of %s on order %s is now %s (order %s)",
            product_id,
            order.order_number,
            status.value,
            order.status.value,
        )
        return order_to_dto(order)
