"""Unit tests for the declarative access policy."""

import pytest

from foodhub.domain.exceptions import ForbiddenError
from foodhub.domain.model.order import Order, OrderLineItem, PaymentMethod
from foodhub.domain.model.principal import Principal, Role
from foodhub.domain.model.product import Product, StockLocation
from foodhub.domain.model.value_objects import Money, Quantity
from foodhub.domain.service.access_policy import (
    ACCESS_POLICY,
    Operation,
    Relationship,
    authorize,
    relationships_of,
)

SHOPKEEPER = Principal("shop-1", Role.SHOPKEEPER)
OTHER_SHOPKEEPER = Principal("shop-2", Role.SHOPKEEPER)
SUPPLIER = Principal("sup-1", Role.SUPPLIER)
OTHER_SUPPLIER = Principal("sup-2", Role.SUPPLIER)
ADMIN = Principal("admin", Role.SUPERADMIN)


def _order() -> Order:
    order = Order.create(
        "shop-1",
        "sup-1",
        [OrderLineItem("p1", "Rice", Quantity(1), Money.of("2.00"))],
        PaymentMethod.CASH,
    )
    order.order_number = "ORD26100001"
    return order


def _product() -> Product:
    return Product.create(
        "p1", "sup-1", "Rice", Money.of("2.00"), StockLocation.SUPPLIER, unit="kg"
    )


class TestPolicyTable:

    def test_every_operation_has_an_entry(self):
        assert set(ACCESS_POLICY) == set(Operation)

    def test_relationships_for_order_parties(self):
        order = _order()
        assert Relationship.ORDER_SHOPKEEPER in relationships_of(SHOPKEEPER, order)
        assert Relationship.ORDER_SUPPLIER in relationships_of(SUPPLIER, order)
        assert relationships_of(OTHER_SUPPLIER, order) == {Relationship.SUPPLIER}


class TestAuthorize:

    @pytest.mark.parametrize("principal", [SHOPKEEPER, SUPPLIER, ADMIN])
    def test_parties_may_view(self, principal):
        authorize(Operation.VIEW_ORDER, principal, order=_order())

    @pytest.mark.parametrize("principal", [OTHER_SHOPKEEPER, OTHER_SUPPLIER])
    def test_outsiders_may_not_view(self, principal):
        with pytest.raises(ForbiddenError, match="not allowed to view order on order ORD"):
            authorize(Operation.VIEW_ORDER, principal, order=_order())

    def test_only_shopkeepers_create_orders(self):
        authorize(Operation.CREATE_ORDER, SHOPKEEPER)
        with pytest.raises(ForbiddenError):
            authorize(Operation.CREATE_ORDER, SUPPLIER)

    def test_only_order_shopkeeper_requests_returns(self):
        authorize(Operation.REQUEST_RETURN, SHOPKEEPER, order=_order())
        for principal in (SUPPLIER, ADMIN, OTHER_SHOPKEEPER):
            with pytest.raises(ForbiddenError):
                authorize(Operation.REQUEST_RETURN, principal, order=_order())

    def test_only_order_supplier_processes_returns(self):
        authorize(Operation.CHANGE_RETURN_STATUS, SUPPLIER, order=_order())
        for principal in (SHOPKEEPER, ADMIN, OTHER_SUPPLIER):
            with pytest.raises(ForbiddenError):
                authorize(Operation.CHANGE_RETURN_STATUS, principal, order=_order())

    def test_only_superadmin_moves_disputes(self):
        authorize(Operation.CHANGE_DISPUTE_STATUS, ADMIN, order=_order())
        for principal in (SHOPKEEPER, SUPPLIER):
            with pytest.raises(ForbiddenError):
                authorize(Operation.CHANGE_DISPUTE_STATUS, principal, order=_order())

    def test_stock_take_by_owner_or_admin(self):
        authorize(Operation.SET_STOCK, SUPPLIER, product=_product())
        authorize(Operation.SET_STOCK, ADMIN, product=_product())
        with pytest.raises(ForbiddenError, match="on product 'Rice'"):
            authorize(Operation.SET_STOCK, OTHER_SUPPLIER, product=_product())

    @pytest.mark.parametrize("principal", [OTHER_SUPPLIER, ADMIN])
    def test_only_owner_edits_product(self, principal):
        authorize(Operation.UPDATE_PRODUCT, SUPPLIER, product=_product())
        with pytest.raises(ForbiddenError):
            authorize(Operation.UPDATE_PRODUCT, principal, product=_product())
