"""Application service: Add Dispute use case."""

from __future__ import annotations

import logging

from foodhub.application.dto import OrderDTO, order_to_dto
from foodhub.domain.exceptions import EntityNotFoundError
from foodhub.domain.model.principal import Principal
from foodhub.domain.repository.unit_of_work import UnitOfWork
from foodhub.domain.service.access_policy import Operation, authorize

logger = logging.getLogger(__name__)


class AddDisputeHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, principal: Principal, order_id: int, description: str) -> OrderDTO:
        """Append a dispute to an order, whatever its status."""
        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            authorize(Operation.ADD_DISPUTE, principal, order=order)

            index = order.add_dispute(description, principal.user_id)
            self._uow.orders.save(order)
            self._uow.commit()

        logger.info(
            "Dispute #%d raised on order %s by %s",
            index,
            order.order_number,
            principal.user_id,
        )
        return order_to_dto(order)
