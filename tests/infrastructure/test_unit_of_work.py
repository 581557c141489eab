"""End-to-end handler tests on the SQLAlchemy unit of work."""

import threading
from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from foodhub.application.change_order_status import ChangeOrderStatusHandler
from foodhub.application.change_return_status import ChangeReturnStatusHandler
from foodhub.application.create_order import CreateOrderHandler
from foodhub.application.dto import OrderItemSpec
from foodhub.application.request_return import RequestReturnHandler
from foodhub.domain.exceptions import ConflictError, InvalidQuantityError
from foodhub.domain.model.order import OrderStatus
from foodhub.domain.model.principal import Principal, Role
from foodhub.domain.model.product import Product, StockLocation, StockStatus
from foodhub.domain.model.value_objects import Money
from foodhub.domain.service.order_number import OrderNumberGenerator
from foodhub.infrastructure.persistence.unit_of_work import (
    SqlAlchemyUnitOfWork,
    translate_storage_error,
)

SHOPKEEPER = Principal("shop-1", Role.SHOPKEEPER)
SUPPLIER = Principal("sup-1", Role.SUPPLIER)
NOW = datetime(2026, 10, 18, tzinfo=timezone.utc)


def _seed(uow, **stock):
    with uow:
        for pid, qty in stock.items():
            uow.products.add(
                Product.create(
                    pid, "sup-1", f"Product {pid}", Money.of("10.00"),
                    StockLocation.SUPPLIER, unit="kg", quantity=qty, min_stock_level=1,
                )
            )
        uow.commit()


def _stock(uow, pid):
    with uow:
        return uow.products.get_by_id(pid)


class TestOrderNumberRetry:

    def test_collision_is_retried_against_the_database(self, uow):
        _seed(uow, p1=10)
        suffixes = iter([7, 7, 8])
        handler = CreateOrderHandler(
            uow,
            number_generator=OrderNumberGenerator(suffix_source=lambda: next(suffixes)),
            clock=lambda: NOW,
        )
        first = handler.handle(SHOPKEEPER, [OrderItemSpec("p1", 1)], "cash")
        second = handler.handle(SHOPKEEPER, [OrderItemSpec("p1", 1)], "cash")

        assert first.order_number == "ORD26100007"
        assert second.order_number == "ORD26100008"
        with uow:
            assert len(uow.orders.list_for()) == 2


class TestDeliveryAtomicity:

    def test_failed_delivery_leaves_no_trace(self, uow):
        _seed(uow, p1=10, p2=3)
        dto = CreateOrderHandler(uow).handle(
            SHOPKEEPER, [OrderItemSpec("p1", 5), OrderItemSpec("p2", 4)], "cash"
        )
        change = ChangeOrderStatusHandler(uow)
        change.handle(SUPPLIER, dto.id, "confirmed")
        change.handle(SUPPLIER, dto.id, "processing")

        with pytest.raises(InvalidQuantityError):
            change.handle(SUPPLIER, dto.id, "delivered")

        assert _stock(uow, "p1").quantity == 10
        assert _stock(uow, "p2").quantity == 3
        with uow:
            order = uow.orders.get_by_id(dto.id)
        assert order.status is OrderStatus.PROCESSING
        assert len(order.history) == 2

    def test_full_lifecycle(self, uow):
        _seed(uow, p1=10)
        dto = CreateOrderHandler(uow).handle(SHOPKEEPER, [OrderItemSpec("p1", 5)], "cash")
        change = ChangeOrderStatusHandler(uow)
        for status in ("confirmed", "processing", "delivered", "delivered"):
            change.handle(SUPPLIER, dto.id, status)
        assert _stock(uow, "p1").quantity == 5

        request = RequestReturnHandler(uow)
        review = ChangeReturnStatusHandler(uow)
        request.handle(SHOPKEEPER, dto.id, "p1", 2)
        review.handle(SUPPLIER, dto.id, "p1", "approved")
        request.handle(SHOPKEEPER, dto.id, "p1", 3)
        result = review.handle(SUPPLIER, dto.id, "p1", "approved")

        assert result.status == "returned"
        assert [h.status for h in result.history][-1] == "returned"
        product = _stock(uow, "p1")
        assert product.quantity == 10
        assert product.status is StockStatus.IN_STOCK


class TestConcurrentDelivery:

    def test_only_one_of_two_competing_deliveries_succeeds(self, session_factory):
        uow = SqlAlchemyUnitOfWork(session_factory)
        _seed(uow, p1=6)
        create = CreateOrderHandler(uow)
        change = ChangeOrderStatusHandler(uow)
        ids = []
        for _ in range(2):
            dto = create.handle(SHOPKEEPER, [OrderItemSpec("p1", 4)], "cash")
            change.handle(SUPPLIER, dto.id, "confirmed")
            change.handle(SUPPLIER, dto.id, "processing")
            ids.append(dto.id)

        barrier = threading.Barrier(2)
        outcomes: list[str] = []

        def deliver(order_id):
            # one unit of work per worker, each with its own session and connection
            worker = ChangeOrderStatusHandler(SqlAlchemyUnitOfWork(session_factory))
            barrier.wait()
            try:
                worker.handle(SUPPLIER, order_id, "delivered")
                outcomes.append("ok")
            except (InvalidQuantityError, ConflictError):
                outcomes.append("refused")

        threads = [threading.Thread(target=deliver, args=(oid,)) for oid in ids]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(outcomes) == ["ok", "refused"]
        assert _stock(uow, "p1").quantity == 2
        with uow:
            statuses = sorted(uow.orders.get_by_id(oid).status.value for oid in ids)
        assert statuses == ["delivered", "processing"]

class TestStorageErrorTranslation:

    def test_stale_data(self):
        assert isinstance(translate_storage_error(StaleDataError("x")), ConflictError)

    def test_busy_database(self):
        exc = OperationalError("UPDATE products", {}, Exception("database is locked"))
        translated = translate_storage_error(exc)
        assert isinstance(translated, ConflictError)
        assert "busy" in str(translated)
