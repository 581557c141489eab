"""Abstract unit of work: the transaction boundary of one coordinator call.

Usage::

    with uow:
        order = uow.orders.get_by_id(order_id)
        ...
        uow.commit()

Leaving the block without ``commit()`` (or through an exception) rolls
back every change made inside it, stock adjustments included.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from foodhub.domain.repository.order_repository import OrderRepository
from foodhub.domain.repository.product_repository import ProductRepository


class UnitOfWork(ABC):

    products: ProductRepository
    orders: OrderRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Make every change in this unit visible to other readers."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard every uncommitted change.  Safe to call after commit."""
