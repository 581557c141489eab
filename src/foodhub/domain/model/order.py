"""Order aggregate — the core of the domain.

The Order is an aggregate root that owns its line items, its disputes and
its status history.  All business invariants are enforced here; stock
side effects are *reported* by the aggregate (how many units a transition
moves) and carried out by the application handlers through the stock
ledger, inside the same unit of work.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum

from foodhub.domain.exceptions import (
    EntityNotFoundError,
    InvalidQuantityError,
    InvalidTransitionError,
    ValidationError,
)
from foodhub.domain.model.dispute import Dispute, DisputeStatus
from foodhub.domain.model.value_objects import Money, Quantity


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"


# delivered -> returned is the one move out of a settled state; it is how
# the return workflow closes an order and is intentional.
ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.RETURNED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.RETURNED: frozenset(),
}

# Orders in these states still hold a claim on their products.
OPEN_STATUSES = frozenset(
    {OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PROCESSING}
)


class PaymentStatus(Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETED = "completed"


class PaymentMethod(Enum):
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    CHECK = "check"


class ReturnStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


RETURN_TRANSITIONS: dict[ReturnStatus, frozenset[ReturnStatus]] = {
    ReturnStatus.PENDING: frozenset({ReturnStatus.APPROVED, ReturnStatus.REJECTED}),
    ReturnStatus.APPROVED: frozenset({ReturnStatus.COMPLETED}),
    ReturnStatus.REJECTED: frozenset(),
    ReturnStatus.COMPLETED: frozenset(),
}


class ReturnBound(Enum):
    """How far a return request may reach into a line item.

    ``REMAINING`` bounds a request by what has not been returned yet.
    ``ORDERED`` bounds it by the ordered quantity only and defers the
    ``returned <= quantity`` check to approval time.
    """

    REMAINING = "remaining"
    ORDERED = "ordered"


@dataclass(frozen=True)
class StatusChange:
    status: OrderStatus
    changed_at: datetime
    changed_by: str


@dataclass
class OrderLineItem:
    """One product/quantity/price entry within an order.

    ``quantity`` and ``unit_price`` are a snapshot taken at order creation
    and never change.  ``returned`` counts units whose return has been
    approved; ``return_quantity`` is the size of the latest request.
    """

    product_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time
    returned: int = 0
    return_quantity: int = 0
    return_reason: str | None = None
    return_status: ReturnStatus | None = None

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value

    @property
    def remaining_returnable(self) -> int:
        return self.quantity.value - self.returned

    @property
    def is_fully_returned(self) -> bool:
        return self.returned == self.quantity.value

    def request_return(self, qty: int, reason: str | None, bound: ReturnBound) -> None:
        if self.return_status is ReturnStatus.PENDING:
            raise InvalidTransitionError(
                f"A return request for {self.product_name} is already pending"
            )
        requested = Quantity(qty)
        limit = (
            self.remaining_returnable
            if bound is ReturnBound.REMAINING
            else self.quantity.value
        )
        if requested.value > limit:
            raise InvalidQuantityError(
                f"Cannot return {requested.value} of {self.product_name}; "
                f"at most {limit} can be returned"
            )
        self.return_quantity = requested.value
        self.return_reason = reason
        self.return_status = ReturnStatus.PENDING

    def change_return_status(self, new_status: ReturnStatus) -> int:
        """Move the return sub-state; returns the units to put back in stock."""
        if self.return_status is None:
            raise InvalidTransitionError(
                f"No return has been requested for {self.product_name}"
            )
        if new_status not in RETURN_TRANSITIONS[self.return_status]:
            raise InvalidTransitionError(
                f"Cannot move return of {self.product_name} from "
                f"{self.return_status.value} to {new_status.value}"
            )

        restock = 0
        if new_status is ReturnStatus.APPROVED:
            if self.returned + self.return_quantity > self.quantity.value:
                raise InvalidQuantityError(
                    f"Approving {self.return_quantity} of {self.product_name} would "
                    f"exceed the ordered quantity ({self.returned} already returned "
                    f"of {self.quantity.value})"
                )
            self.returned += self.return_quantity
            restock = self.return_quantity

        self.return_status = new_status
        return restock


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MAX_LINE_ITEMS = 50


@dataclass
class Order:
    """Aggregate root for shop orders.

    Use the ``Order.create()`` factory for new orders — it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: int | None
    order_number: str | None
    shopkeeper_id: str
    supplier_id: str
    items: list[OrderLineItem]
    payment_method: PaymentMethod
    total_amount: Money
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    notes: str | None = None
    delivery_date: date | None = None
    delivered_at: datetime | None = None
    disputes: list[Dispute] = field(default_factory=list)
    history: list[StatusChange] = field(default_factory=list)
    version: int = 0
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        shopkeeper_id: str,
        supplier_id: str,
        items: list[OrderLineItem],
        payment_method: PaymentMethod | None,
        notes: str | None = None,
        delivery_date: date | None = None,
    ) -> Order:
        """Create a new order, enforcing all invariants."""
        if not shopkeeper_id:
            raise ValidationError("Shopkeeper is required")
        if not supplier_id:
            raise ValidationError("Supplier is required")
        if payment_method is None:
            raise ValidationError("Payment method is required")

        if not items:
            raise ValidationError("Order must contain at least one item")
        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")

        seen: set[str] = set()
        for item in items:
            if item.product_id in seen:
                raise ValidationError(
                    f"Product '{item.product_name}' appears more than once"
                )
            seen.add(item.product_id)

        total = Money.zero(items[0].unit_price.currency)
        for item in items:
            total = total + item.line_total

        return Order(
            id=None,
            order_number=None,
            shopkeeper_id=shopkeeper_id,
            supplier_id=supplier_id,
            items=list(items),
            payment_method=payment_method,
            total_amount=total,
            notes=notes.strip() if notes else None,
            delivery_date=delivery_date,
        )

    # --- Status state machine -------------------------------------------------

    def change_status(
        self, new_status: OrderStatus, actor: str, at: datetime | None = None
    ) -> bool:
        """Move the order to *new_status*.

        Returns False, and changes nothing, when the order is already in
        that status.  Stock effects of entering ``delivered`` are the
        caller's job; see ``units_to_deliver``.
        """
        if new_status is self.status:
            return False
        if new_status not in ORDER_TRANSITIONS[self.status]:
            raise InvalidTransitionError(
                f"Cannot change order {self.order_number} from "
                f"{self.status.value} to {new_status.value}"
            )
        self._record_status(new_status, actor, at or _utcnow())
        if new_status is OrderStatus.DELIVERED:
            self.delivered_at = self.history[-1].changed_at
        return True

    def units_to_deliver(self) -> dict[str, int]:
        """Product id -> units that leave stock when this order is delivered."""
        return {item.product_id: item.quantity.value for item in self.items}

    # --- Returns --------------------------------------------------------------

    def request_return(
        self,
        product_id: str,
        quantity: int,
        reason: str | None,
        bound: ReturnBound = ReturnBound.REMAINING,
        actor: str | None = None,
        at: datetime | None = None,
    ) -> OrderLineItem:
        if self.status is not OrderStatus.DELIVERED:
            raise InvalidTransitionError(
                "Can only request returns for delivered orders "
                f"(order {self.order_number} is {self.status.value})"
            )
        item = self.find_item(product_id)
        item.request_return(quantity, reason, bound)
        self._reconcile_returns(actor or self.shopkeeper_id, at or _utcnow())
        return item

    def change_return_status(
        self,
        product_id: str,
        new_status: ReturnStatus,
        actor: str,
        at: datetime | None = None,
    ) -> int:
        """Move a line's return sub-state; returns the units to restock."""
        if self.status not in (OrderStatus.DELIVERED, OrderStatus.RETURNED):
            raise InvalidTransitionError(
                f"Order {self.order_number} has no returns to process "
                f"(status is {self.status.value})"
            )
        item = self.find_item(product_id)
        restock = item.change_return_status(new_status)
        self._reconcile_returns(actor, at or _utcnow())
        return restock

    def _reconcile_returns(self, actor: str, at: datetime) -> None:
        """Derive the order-level ``returned`` status from its line items."""
        if self.status is not OrderStatus.DELIVERED:
            return

        all_returned = all(item.is_fully_returned for item in self.items)

        settled = (None, ReturnStatus.REJECTED, ReturnStatus.COMPLETED)
        all_settled = any(item.returned > 0 for item in self.items) and all(
            item.return_status in settled for item in self.items
        )

        if all_returned or all_settled:
            self._record_status(OrderStatus.RETURNED, actor, at)

    # --- Disputes -------------------------------------------------------------

    def add_dispute(
        self, description: str, raised_by: str, at: datetime | None = None
    ) -> int:
        """Append a dispute; returns its index within the order."""
        dispute = Dispute.raise_new(description, raised_by, at or _utcnow())
        self.disputes.append(dispute)
        return len(self.disputes) - 1

    def change_dispute_status(
        self,
        index: int,
        new_status: DisputeStatus,
        actor: str,
        at: datetime | None = None,
    ) -> Dispute:
        dispute = self.find_dispute(index)
        dispute.transition(new_status, actor, at or _utcnow())
        return dispute

    # --- Lookups --------------------------------------------------------------

    def find_item(self, product_id: str) -> OrderLineItem:
        for item in self.items:
            if item.product_id == product_id:
                return item
        raise EntityNotFoundError(
            f"Product '{product_id}' not found in order {self.order_number}"
        )

    def find_dispute(self, index: int) -> Dispute:
        if index < 0 or index >= len(self.disputes):
            raise EntityNotFoundError(
                f"Dispute #{index} not found in order {self.order_number}"
            )
        return self.disputes[index]

    # --- Internal helpers -----------------------------------------------------

    def _record_status(self, status: OrderStatus, actor: str, at: datetime) -> None:
        self.status = status
        self.history.append(StatusChange(status=status, changed_at=at, changed_by=actor))
        self.updated_at = at

