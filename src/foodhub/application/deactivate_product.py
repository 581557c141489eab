"""Application service: Deactivate Product use case.

Products are never deleted; they are switched off.  A product that an
open order still refers to cannot be switched off.
"""

from __future__ import annotations

import logging

from foodhub.application.dto import ProductDTO, product_to_dto
from foodhub.domain.exceptions import EntityNotFoundError, ValidationError
from foodhub.domain.model.principal import Principal
from foodhub.domain.repository.unit_of_work import UnitOfWork
from foodhub.domain.service.access_policy import Operation, authorize

logger = logging.getLogger(__name__)


class DeactivateProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, principal: Principal, product_id: str) -> ProductDTO:
        with self._uow:
            product = self._uow.products.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product '{product_id}' not found")
            authorize(Operation.DEACTIVATE_PRODUCT, principal, product=product)

            if self._uow.orders.has_open_orders_for(product_id):
                raise ValidationError(
                    f"Product '{product.name}' is referenced by open orders"
                )
            product.deactivate()
            self._uow.products.save(product)
            self._uow.commit()

        logger.info("Product %s deactivated by %s", product_id, principal.user_id)
        return product_to_dto(product)
