"""Application service: Update Product use case.

Only descriptive fields change here; stock goes through the stock
ledger and ``ProductRepository.save`` never writes the quantity.
"""

from __future__ import annotations

import logging
from datetime import date

from foodhub.application.dto import ProductDTO, product_to_dto
from foodhub.domain.exceptions import EntityNotFoundError
from foodhub.domain.model.principal import Principal
from foodhub.domain.model.value_objects import Money
from foodhub.domain.repository.unit_of_work import UnitOfWork
from foodhub.domain.service.access_policy import Operation, authorize

logger = logging.getLogger(__name__)


class UpdateProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        principal: Principal,
        product_id: str,
        *,
        name: str | None = None,
        price: str | None = None,
        unit: str | None = None,
        category: str | None = None,
        min_stock_level: int | None = None,
        batch_number: str | None = None,
        manufacturing_date: date | None = None,
        expiry_date: date | None = None,
        barcode: str | None = None,
    ) -> ProductDTO:
        with self._uow:
            product = self._uow.products.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product '{product_id}' not found")
            authorize(Operation.UPDATE_PRODUCT, principal, product=product)

            product.update_details(
                name=name,
                price=Money.of(price, product.price.currency) if price is not None else None,
                unit=unit,
                category=category,
                min_stock_level=min_stock_level,
                batch_number=batch_number,
                manufacturing_date=manufacturing_date,
                expiry_date=expiry_date,
                barcode=barcode,
            )
            self._uow.products.save(product)
            self._uow.commit()

        logger.info("Product %s updated by %s", product_id, principal.user_id)
        return product_to_dto(product)
