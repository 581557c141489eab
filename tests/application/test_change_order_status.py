"""Integration tests for the ChangeOrderStatus use case.

Delivery is where stock leaves the ledger, so most of these tests are
about the decrement happening exactly once and atomically.
"""

import threading

import pytest

from foodhub.application.change_order_status import ChangeOrderStatusHandler
from foodhub.application.create_order import CreateOrderHandler
from foodhub.application.dto import OrderItemSpec
from foodhub.domain.exceptions import (
    EntityNotFoundError,
    ForbiddenError,
    InvalidQuantityError,
    InvalidTransitionError,
    ValidationError,
)
from foodhub.domain.model.order import OrderStatus
from foodhub.domain.model.principal import Principal, Role
from foodhub.domain.model.product import Product, StockLocation, StockStatus
from foodhub.domain.model.value_objects import Money
from tests.fakes import FakeUnitOfWork

SHOPKEEPER = Principal("shop-1", Role.SHOPKEEPER)
SUPPLIER = Principal("sup-1", Role.SUPPLIER)


def _setup(stock: dict[str, int] | None = None):
    stock = stock or {"p1": 10, "p2": 10}
    uow = FakeUnitOfWork(
        [
            Product.create(
                pid, "sup-1", f"Product {pid}", Money.of("10.00"),
                StockLocation.SUPPLIER, unit="kg", quantity=qty, min_stock_level=2,
            )
            for pid, qty in stock.items()
        ]
    )
    return CreateOrderHandler(uow), ChangeOrderStatusHandler(uow), uow


def _advance(handler, order_id, *statuses, principal=SUPPLIER):
    dto = None
    for status in statuses:
        dto = handler.handle(principal, order_id, status)
    return dto


class TestDelivery:

    def test_delivery_decrements_stock(self):
        create, change, uow = _setup()
        dto = create.handle(SHOPKEEPER, [OrderItemSpec("p1", 5), OrderItemSpec("p2", 8)], "cash")

        result = _advance(change, dto.id, "confirmed", "processing", "delivered")

        assert result.status == "delivered"
        assert result.delivered_at is not None
        assert uow.stock_of("p1") == 5
        assert uow.stock_of("p2") == 2
        assert uow.store.products["p2"].status is StockStatus.LOW_STOCK

    def test_redelivery_is_a_noop(self):
        create, change, uow = _setup()
        dto = create.handle(SHOPKEEPER, [OrderItemSpec("p1", 5)], "cash")
        _advance(change, dto.id, "confirmed", "processing", "delivered")
        commits = uow.commits

        again = change.handle(SUPPLIER, dto.id, "delivered")

        assert again.status == "delivered"
        assert len(again.history) == 3
        assert uow.stock_of("p1") == 5
        assert uow.commits == commits

    def test_earlier_transitions_leave_stock_alone(self):
        create, change, uow = _setup()
        dto = create.handle(SHOPKEEPER, [OrderItemSpec("p1", 5)], "cash")
        _advance(change, dto.id, "confirmed", "processing")
        assert uow.stock_of("p1") == 10

    def test_cancellation_leaves_stock_alone(self):
        create, change, uow = _setup()
        dto = create.handle(SHOPKEEPER, [OrderItemSpec("p1", 5)], "cash")
        result = _advance(change, dto.id, "confirmed", "cancelled", principal=SHOPKEEPER)
        assert result.status == "cancelled"
        assert uow.stock_of("p1") == 10

    def test_insufficient_stock_rolls_back_everything(self):
        create, change, uow = _setup({"p1": 10, "p2": 3})
        dto = create.handle(SHOPKEEPER, [OrderItemSpec("p1", 5), OrderItemSpec("p2", 4)], "cash")
        _advance(change, dto.id, "confirmed", "processing")

        with pytest.raises(InvalidQuantityError, match="Insufficient stock"):
            change.handle(SUPPLIER, dto.id, "delivered")

        assert uow.stock_of("p1") == 10
        assert uow.stock_of("p2") == 3
        order = uow.stored_order(dto.id)
        assert order.status is OrderStatus.PROCESSING
        assert order.delivered_at is None
        assert len(order.history) == 2

    def test_history_records_each_step(self):
        create, change, _ = _setup()
        dto = create.handle(SHOPKEEPER, [OrderItemSpec("p1", 1)], "cash")
        result = _advance(change, dto.id, "confirmed", "processing", "delivered")
        assert [h.status for h in result.history] == ["confirmed", "processing", "delivered"]
        assert all(h.changed_by == "sup-1" for h in result.history)


class TestConcurrentDelivery:

    def test_only_one_of_two_competing_deliveries_succeeds(self):
        create, change, uow = _setup({"p1": 6})
        ids = []
        for _ in range(2):
            dto = create.handle(SHOPKEEPER, [OrderItemSpec("p1", 4)], "cash")
            _advance(change, dto.id, "confirmed", "processing")
            ids.append(dto.id)

        barrier = threading.Barrier(2)
        outcomes: list[str] = []

        def deliver(order_id):
            barrier.wait()
            try:
                change.handle(SUPPLIER, order_id, "delivered")
                outcomes.append("ok")
            except InvalidQuantityError:
                outcomes.append("short")

        threads = [threading.Thread(target=deliver, args=(oid,)) for oid in ids]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(outcomes) == ["ok", "short"]
        assert uow.stock_of("p1") == 2
        statuses = sorted(uow.stored_order(oid).status.value for oid in ids)
        assert statuses == ["delivered", "processing"]


class TestStatusValidation:

    def test_skipping_steps_rejected(self):
        create, change, uow = _setup()
        dto = create.handle(SHOPKEEPER, [OrderItemSpec("p1", 1)], "cash")
        with pytest.raises(InvalidTransitionError):
            change.handle(SUPPLIER, dto.id, "delivered")
        assert uow.stock_of("p1") == 10

    def test_cancelled_is_final(self):
        create, change, _ = _setup()
        dto = create.handle(SHOPKEEPER, [OrderItemSpec("p1", 1)], "cash")
        change.handle(SHOPKEEPER, dto.id, "cancelled")
        with pytest.raises(InvalidTransitionError):
            change.handle(SHOPKEEPER, dto.id, "confirmed")

    def test_unknown_status_rejected(self):
        create, change, _ = _setup()
        dto = create.handle(SHOPKEEPER, [OrderItemSpec("p1", 1)], "cash")
        with pytest.raises(ValidationError, match="Invalid order status"):
            change.handle(SUPPLIER, dto.id, "shipped")

    def test_missing_order(self):
        _, change, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="not found"):
            change.handle(SUPPLIER, 999, "confirmed")

    def test_other_supplier_forbidden(self):
        create, change, _ = _setup()
        dto = create.handle(SHOPKEEPER, [OrderItemSpec("p1", 1)], "cash")
        with pytest.raises(ForbiddenError):
            change.handle(Principal("sup-9", Role.SUPPLIER), dto.id, "confirmed")
