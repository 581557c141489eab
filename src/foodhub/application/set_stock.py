"""Application service: Set Stock use case (manual stock-take)."""

from __future__ import annotations

from foodhub.application.dto import StockLevelDTO, stock_level_to_dto
from foodhub.domain.exceptions import EntityNotFoundError
from foodhub.domain.model.principal import Principal
from foodhub.domain.repository.unit_of_work import UnitOfWork
from foodhub.domain.service.access_policy import Operation, authorize
from foodhub.domain.service.stock_ledger import StockLedger


class SetStockHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, principal: Principal, product_id: str, quantity: int) -> StockLevelDTO:
        """Overwrite a product's counted quantity; the status follows."""
        with self._uow:
            product = self._uow.products.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product '{product_id}' not found")
            authorize(Operation.SET_STOCK, principal, product=product)

            level = StockLedger(self._uow.products).set_quantity(product_id, quantity)
            self._uow.commit()

        return stock_level_to_dto(level)
