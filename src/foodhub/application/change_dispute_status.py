"""Application service: Change Dispute Status use case."""

from __future__ import annotations

import logging

from foodhub.application.dto import OrderDTO, order_to_dto, parse_choice
from foodhub.domain.exceptions import EntityNotFoundError
from foodhub.domain.model.dispute import DisputeStatus
from foodhub.domain.model.principal import Principal
from foodhub.domain.repository.unit_of_work import UnitOfWork
from foodhub.domain.service.access_policy import Operation, authorize

logger = logging.getLogger(__name__)


class ChangeDisputeStatusHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        principal: Principal,
        order_id: int,
        dispute_index: int,
        new_status: str | DisputeStatus,
    ) -> OrderDTO:
        status = parse_choice(DisputeStatus, new_status, "dispute status")

        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            authorize(Operation.CHANGE_DISPUTE_STATUS, principal, order=order)

            order.change_dispute_status(dispute_index, status, principal.user_id)
            self._uow.orders.save(order)
            self._uow.commit()

        logger.info(
            "Dispute #%d on order %s moved to %s",
            dispute_index,
            order.order_number,
            status.value,
        )
        return order_to_dto(order)
