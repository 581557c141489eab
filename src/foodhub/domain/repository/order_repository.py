"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from foodhub.domain.model.order import Order


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def get_by_number(self, order_number: str) -> Order | None:
        """Return an order by its order number, or None if not found."""

    @abstractmethod
    def list_for(
        self,
        shopkeeper_id: str | None = None,
        supplier_id: str | None = None,
    ) -> list[Order]:
        """Return orders, newest first, optionally filtered by party."""

    @abstractmethod
    def add(self, order: Order) -> None:
        """Persist a new order and assign its ID.

        Raises DuplicateOrderNumberError if the order number is taken.
        """

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist an updated order.

        Raises ConflictError if the stored version moved on since the
        order was read.
        """

    @abstractmethod
    def has_open_orders_for(self, product_id: str) -> bool:
        """True if any not-yet-delivered, non-cancelled order references the product."""
