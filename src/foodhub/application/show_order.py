"""Application service: Show Order use case (query)."""

from __future__ import annotations

from foodhub.application.dto import OrderDTO, order_to_dto
from foodhub.domain.exceptions import EntityNotFoundError
from foodhub.domain.model.principal import Principal
from foodhub.domain.repository.unit_of_work import UnitOfWork
from foodhub.domain.service.access_policy import Operation, authorize


class ShowOrderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, principal: Principal, order_id: int) -> OrderDTO:
        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            authorize(Operation.VIEW_ORDER, principal, order=order)
            return order_to_dto(order)
