"""Integration tests for the RequestReturn and ChangeReturnStatus use cases."""

import pytest

from foodhub.application.change_order_status import ChangeOrderStatusHandler
from foodhub.application.change_return_status import ChangeReturnStatusHandler
from foodhub.application.create_order import CreateOrderHandler
from foodhub.application.dto import OrderItemSpec
from foodhub.application.request_return import RequestReturnHandler
from foodhub.domain.exceptions import (
    ForbiddenError,
    InvalidQuantityError,
    InvalidTransitionError,
    ValidationError,
)
from foodhub.domain.model.order import ReturnBound, ReturnStatus
from foodhub.domain.model.principal import Principal, Role
from foodhub.domain.model.product import Product, StockLocation
from foodhub.domain.model.value_objects import Money
from tests.fakes import FakeUnitOfWork

SHOPKEEPER = Principal("shop-1", Role.SHOPKEEPER)
SUPPLIER = Principal("sup-1", Role.SUPPLIER)
ADMIN = Principal("admin", Role.SUPERADMIN)


def _setup(bound: ReturnBound = ReturnBound.REMAINING, items=(("p1", 5),)):
    """A delivered order for *items*, with 20 units of each product on hand before delivery."""
    uow = FakeUnitOfWork(
        [
            Product.create(
                pid, "sup-1", f"Product {pid}", Money.of("10.00"),
                StockLocation.SUPPLIER, unit="kg", quantity=20,
            )
            for pid, _ in items
        ]
    )
    dto = CreateOrderHandler(uow).handle(
        SHOPKEEPER, [OrderItemSpec(pid, qty) for pid, qty in items], "cash"
    )
    change = ChangeOrderStatusHandler(uow)
    for status in ("confirmed", "processing", "delivered"):
        change.handle(SUPPLIER, dto.id, status)
    return RequestReturnHandler(uow, return_bound=bound), ChangeReturnStatusHandler(uow), uow, dto.id


class TestReturnScenarios:

    def test_two_partial_returns_return_the_order(self):
        request, review, uow, order_id = _setup()
        assert uow.stock_of("p1") == 15

        request.handle(SHOPKEEPER, order_id, "p1", 2, "bruised")
        dto = review.handle(SUPPLIER, order_id, "p1", "approved")
        assert dto.status == "delivered"
        assert dto.items[0].returned == 2
        assert uow.stock_of("p1") == 17

        request.handle(SHOPKEEPER, order_id, "p1", 3, "bruised")
        dto = review.handle(SUPPLIER, order_id, "p1", "approved")
        assert dto.items[0].returned == 5
        assert dto.status == "returned"
        assert dto.history[-1].status == "returned"
        assert uow.stock_of("p1") == 20

    def test_request_alone_moves_no_stock(self):
        request, _, uow, order_id = _setup()
        dto = request.handle(SHOPKEEPER, order_id, "p1", 2, "  too ripe  ")
        line = dto.items[0]
        assert line.return_status == "pending"
        assert line.return_quantity == 2
        assert line.return_reason == "too ripe"
        assert uow.stock_of("p1") == 15

    def test_over_return_rejected_without_mutation(self):
        request, _, uow, order_id = _setup()
        commits = uow.commits
        with pytest.raises(InvalidQuantityError):
            request.handle(SHOPKEEPER, order_id, "p1", 6)
        line = uow.stored_order(order_id).items[0]
        assert line.return_status is None
        assert line.return_quantity == 0
        assert uow.commits == commits

    def test_double_approval_rejected_and_stock_restored_once(self):
        request, review, uow, order_id = _setup()
        request.handle(SHOPKEEPER, order_id, "p1", 2)
        review.handle(SUPPLIER, order_id, "p1", "approved")
        with pytest.raises(InvalidTransitionError):
            review.handle(SUPPLIER, order_id, "p1", "approved")
        assert uow.stock_of("p1") == 17
        assert uow.stored_order(order_id).items[0].returned == 2

    def test_rejection_restocks_nothing(self):
        request, review, uow, order_id = _setup()
        request.handle(SHOPKEEPER, order_id, "p1", 2)
        dto = review.handle(SUPPLIER, order_id, "p1", ReturnStatus.REJECTED)
        assert dto.items[0].return_status == "rejected"
        assert dto.status == "delivered"
        assert uow.stock_of("p1") == 15

    def test_completing_the_only_partial_return_returns_order(self):
        request, review, uow, order_id = _setup(items=(("p1", 5), ("p2", 3)))
        request.handle(SHOPKEEPER, order_id, "p1", 1)
        review.handle(SUPPLIER, order_id, "p1", "approved")
        dto = review.handle(SUPPLIER, order_id, "p1", "completed")
        assert dto.status == "returned"
        assert uow.stock_of("p1") == 16
        assert uow.stock_of("p2") == 17

    def test_ordered_bound_checks_at_approval(self):
        request, review, uow, order_id = _setup(bound=ReturnBound.ORDERED)
        request.handle(SHOPKEEPER, order_id, "p1", 3)
        review.handle(SUPPLIER, order_id, "p1", "approved")

        request.handle(SHOPKEEPER, order_id, "p1", 3)
        with pytest.raises(InvalidQuantityError, match="exceed the ordered quantity"):
            review.handle(SUPPLIER, order_id, "p1", "approved")
        assert uow.stock_of("p1") == 18
        assert uow.stored_order(order_id).items[0].returned == 3


class TestReturnGuards:

    def test_return_on_undelivered_order_rejected(self):
        uow = FakeUnitOfWork(
            [Product.create("p1", "sup-1", "Rice", Money.of("1"), StockLocation.SUPPLIER, unit="kg", quantity=9)]
        )
        dto = CreateOrderHandler(uow).handle(SHOPKEEPER, [OrderItemSpec("p1", 1)], "cash")
        with pytest.raises(InvalidTransitionError, match="delivered orders"):
            RequestReturnHandler(uow).handle(SHOPKEEPER, dto.id, "p1", 1)

    def test_only_the_ordering_shopkeeper_requests(self):
        request, _, _, order_id = _setup()
        for principal in (SUPPLIER, ADMIN, Principal("shop-2", Role.SHOPKEEPER)):
            with pytest.raises(ForbiddenError):
                request.handle(principal, order_id, "p1", 1)

    def test_only_the_order_supplier_reviews(self):
        request, review, _, order_id = _setup()
        request.handle(SHOPKEEPER, order_id, "p1", 1)
        for principal in (SHOPKEEPER, ADMIN):
            with pytest.raises(ForbiddenError):
                review.handle(principal, order_id, "p1", "approved")

    def test_unknown_return_status_rejected(self):
        request, review, _, order_id = _setup()
        request.handle(SHOPKEEPER, order_id, "p1", 1)
        with pytest.raises(ValidationError, match="Invalid return status"):
            review.handle(SUPPLIER, order_id, "p1", "refunded")
