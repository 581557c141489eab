"""Application service: Render Invoice use case (query).

Builds a read-only projection of an order with product units and party
names resolved, and hands it to the document collaborator.  A rendering
failure is reported as a warning next to the order, never as an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from foodhub.application.dto import OrderDTO, order_to_dto
from foodhub.application.ports import (
    InvoiceDTO,
    InvoiceLine,
    InvoiceRenderer,
    PartyDirectory,
)
from foodhub.domain.exceptions import EntityNotFoundError
from foodhub.domain.model.order import Order
from foodhub.domain.model.principal import Principal
from foodhub.domain.repository.unit_of_work import UnitOfWork
from foodhub.domain.service.access_policy import Operation, authorize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvoiceResult:
    order: OrderDTO
    document: str | None
    warnings: list[str] = field(default_factory=list)


class RenderInvoiceHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        renderer: InvoiceRenderer,
        directory: PartyDirectory,
    ) -> None:
        self._uow = uow
        self._renderer = renderer
        self._directory = directory

    def handle(self, principal: Principal, order_id: int) -> InvoiceResult:
        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            authorize(Operation.RENDER_INVOICE, principal, order=order)
            invoice = self._build_invoice(order)

        try:
            document = self._renderer.render(invoice)
        except Exception:
            logger.exception("Failed to render invoice for order %s", order.order_number)
            return InvoiceResult(
                order=order_to_dto(order),
                document=None,
                warnings=[f"Invoice for order {order.order_number} could not be rendered"],
            )
        return InvoiceResult(order=order_to_dto(order), document=document)

    def _build_invoice(self, order: Order) -> InvoiceDTO:
        lines = []
        for item in order.items:
            product = self._uow.products.get_by_id(item.product_id)
            lines.append(
                InvoiceLine(
                    product_name=item.product_name,
                    unit=product.unit if product is not None else "",
                    quantity=item.quantity.value,
                    price=f"{item.unit_price.amount:.2f}",
                    line_total=f"{item.line_total.amount:.2f}",
                    returned=item.returned,
                )
            )
        return InvoiceDTO(
            order_number=order.order_number,  # type: ignore[arg-type]
            issued_on=order.created_at.strftime("%Y-%m-%d"),
            status=order.status.value,
            shopkeeper_name=self._party_name(order.shopkeeper_id),
            supplier_name=self._party_name(order.supplier_id),
            payment_method=order.payment_method.value,
            payment_status=order.payment_status.value,
            lines=lines,
            total_amount=f"{order.total_amount.amount:.2f}",
            notes=order.notes,
        )

    def _party_name(self, user_id: str) -> str:
        try:
            return self._directory.display_name(user_id)
        except Exception:
            logger.warning("Could not resolve a name for user %s", user_id, exc_info=True)
            return user_id
