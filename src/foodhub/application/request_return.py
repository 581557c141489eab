"""Application service: Request Return use case.

A shopkeeper asks to send back part of a delivered line item.  Nothing
moves in stock yet; that happens when the supplier approves.
"""

from __future__ import annotations

import logging

from foodhub.application.dto import OrderDTO, order_to_dto
from foodhub.domain.exceptions import EntityNotFoundError
from foodhub.domain.model.order import ReturnBound
from foodhub.domain.model.principal import Principal
from foodhub.domain.repository.unit_of_work import UnitOfWork
from foodhub.domain.service.access_policy import Operation, authorize

logger = logging.getLogger(__name__)


class RequestReturnHandler:

    def __init__(
        self, uow: UnitOfWork, return_bound: ReturnBound = ReturnBound.REMAINING
    ) -> None:
        self._uow = uow
        self._return_bound = return_bound

    def handle(
        self,
        principal: Principal,
        order_id: int,
        product_id: str,
        quantity: int,
        reason: str | None = None,
    ) -> OrderDTO:
        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            authorize(Operation.REQUEST_RETURN, principal, order=order)

            order.request_return(
                product_id,
                quantity,
                reason.strip() if reason else None,
                bound=self._return_bound,
                actor=principal.user_id,
            )
            self._uow.orders.save(order)
            self._uow.commit()

        logger.info(
            "Return of %d x %s requested on order %s",
            quantity,
            product_id,
            order.order_number,
        )
        return order_to_dto(order)
