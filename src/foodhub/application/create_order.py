"""Application service: Create Order use case.

Resolves every requested product, snapshots its current price into a
line item, lets the Order aggregate validate the business rules and
persists the result under a freshly generated order number.

Order numbers only carry four random digits per month, so a duplicate is
an expected outcome: the whole attempt is rolled back and retried with a
new number.  The supplier is notified after the order is committed;
a failed notification never fails the order.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Callable

from foodhub.application.dto import OrderDTO, OrderItemSpec, order_to_dto, parse_choice
from foodhub.application.ports import Notification, Notifier
from foodhub.domain.exceptions import (
    ConflictError,
    DuplicateOrderNumberError,
    EntityNotFoundError,
    ValidationError,
)
from foodhub.domain.model.order import Order, OrderLineItem, PaymentMethod
from foodhub.domain.model.principal import Principal
from foodhub.domain.model.product import StockLocation
from foodhub.domain.model.value_objects import Quantity
from foodhub.domain.repository.unit_of_work import UnitOfWork
from foodhub.domain.service.access_policy import Operation, authorize
from foodhub.domain.service.order_number import OrderNumberGenerator

logger = logging.getLogger(__name__)

DEFAULT_NUMBER_ATTEMPTS = 5


class CreateOrderHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        notifier: Notifier | None = None,
        number_generator: OrderNumberGenerator | None = None,
        max_attempts: int = DEFAULT_NUMBER_ATTEMPTS,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._uow = uow
        self._notifier = notifier
        self._number_generator = number_generator or OrderNumberGenerator()
        self._max_attempts = max_attempts
        self._clock = clock

    def handle(
        self,
        principal: Principal,
        item_specs: list[OrderItemSpec],
        payment_method: str | PaymentMethod | None,
        supplier_id: str | None = None,
        notes: str | None = None,
        delivery_date: date | None = None,
    ) -> OrderDTO:
        """Place a new order on behalf of the calling shopkeeper."""
        authorize(Operation.CREATE_ORDER, principal)
        method = parse_choice(PaymentMethod, payment_method, "payment method")
        if not item_specs:
            raise ValidationError("Order must contain at least one item")

        for attempt in range(1, self._max_attempts + 1):
            with self._uow:
                order = self._build_order(
                    principal, item_specs, method, supplier_id, notes, delivery_date
                )
                order.order_number = self._number_generator.generate(self._clock())
                try:
                    self._uow.orders.add(order)
                    self._uow.commit()
                except DuplicateOrderNumberError:
                    logger.warning(
                        "Order number %s already taken (attempt %d of %d)",
                        order.order_number,
                        attempt,
                        self._max_attempts,
                    )
                    continue
            break
        else:
            raise ConflictError(
                f"Could not allocate a unique order number after "
                f"{self._max_attempts} attempts"
            )

        logger.info(
            "Order %s created by %s for supplier %s (total %s)",
            order.order_number,
            order.shopkeeper_id,
            order.supplier_id,
            order.total_amount,
        )
        warnings = self._notify_supplier(order)
        return order_to_dto(order, warnings)

    def _build_order(
        self,
        principal: Principal,
        item_specs: list[OrderItemSpec],
        method: PaymentMethod,
        supplier_id: str | None,
        notes: str | None,
        delivery_date: date | None,
    ) -> Order:
        if supplier_id is not None and supplier_id == principal.user_id:
            raise ValidationError("An order cannot be placed with yourself as supplier")

        line_items: list[OrderLineItem] = []
        for spec in item_specs:
            product = self._uow.products.get_by_id(spec.product_id)
            if product is None or not product.is_active:
                raise EntityNotFoundError(f"Product not found: '{spec.product_id}'")
            # only supplier stock can be ordered; shop stock belongs to a shopkeeper
            if product.location is not StockLocation.SUPPLIER:
                raise ValidationError(
                    f"Product '{product.name}' is shop stock and cannot be ordered"
                )

            if supplier_id is None:
                supplier_id = product.supplier_id
            elif product.supplier_id != supplier_id:
                raise ValidationError(
                    f"Product '{product.name}' is not supplied by {supplier_id}"
                )

            line_items.append(
                OrderLineItem(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=Quantity(spec.quantity),
                    unit_price=product.price,  # <-- price snapshot
                )
            )

        return Order.create(
            shopkeeper_id=principal.user_id,
            supplier_id=supplier_id,  # type: ignore[arg-type]
            items=line_items,
            payment_method=method,
            notes=notes,
            delivery_date=delivery_date,
        )

    def _notify_supplier(self, order: Order) -> list[str]:
        if self._notifier is None:
            return []
        notification = Notification(
            recipient_id=order.supplier_id,
            title="New order received",
            message=(
                f"Order {order.order_number} was placed by {order.shopkeeper_id} "
                f"for a total of {order.total_amount}"
            ),
            related_order_id=order.id,
        )
        try:
            self._notifier.notify(notification)
        except Exception:
            logger.exception(
                "Failed to notify supplier %s about order %s",
                order.supplier_id,
                order.order_number,
            )
            return [f"Supplier notification for order {order.order_number} failed"]
        return []
