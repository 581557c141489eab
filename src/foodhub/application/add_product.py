"""Application service: Add Product use case."""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Callable

from foodhub.application.dto import ProductDTO, product_to_dto
from foodhub.domain.model.principal import Principal, Role
from foodhub.domain.model.product import Product, StockLocation
from foodhub.domain.model.value_objects import Money
from foodhub.domain.repository.unit_of_work import UnitOfWork
from foodhub.domain.service.access_policy import Operation, authorize

logger = logging.getLogger(__name__)


class AddProductHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ) -> None:
        self._uow = uow
        self._id_factory = id_factory

    def handle(
        self,
        principal: Principal,
        name: str,
        price: str,
        unit: str,
        *,
        category: str = "",
        min_stock_level: int = 0,
        quantity: int = 0,
        batch_number: str | None = None,
        manufacturing_date: date | None = None,
        expiry_date: date | None = None,
        barcode: str | None = None,
    ) -> ProductDTO:
        """List a new product.

        Suppliers list into supplier stock; anyone else lists into shop
        stock.  The caller becomes the product's owner.
        """
        authorize(Operation.ADD_PRODUCT, principal)
        location = (
            StockLocation.SUPPLIER
            if principal.role is Role.SUPPLIER
            else StockLocation.SHOP
        )

        product = Product.create(
            id=self._id_factory(),
            supplier_id=principal.user_id,
            name=name,
            price=Money.of(price),
            location=location,
            category=category,
            unit=unit,
            min_stock_level=min_stock_level,
            quantity=quantity,
            batch_number=batch_number,
            manufacturing_date=manufacturing_date,
            expiry_date=expiry_date,
            barcode=barcode,
        )

        with self._uow:
            self._uow.products.add(product)
            self._uow.commit()

        logger.info(
            "Product %s '%s' added to %s stock by %s",
            product.id,
            product.name,
            location.value,
            principal.user_id,
        )
        return product_to_dto(product)
