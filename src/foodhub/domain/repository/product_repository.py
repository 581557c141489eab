"""Abstract repository for Product aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (SQLAlchemy, in-memory)
live in the infrastructure layer and in the test fakes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from foodhub.domain.model.product import Product, StockLevel, StockLocation


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def list_all(
        self,
        location: StockLocation | None = None,
        supplier_id: str | None = None,
        include_inactive: bool = False,
    ) -> list[Product]:
        """Return products, optionally filtered by location and owner."""

    @abstractmethod
    def list_expiring(
        self,
        latest: date,
        earliest: date | None = None,
        location: StockLocation | None = None,
        supplier_id: str | None = None,
    ) -> list[Product]:
        """Return active products expiring between *earliest* and *latest*.

        Both bounds are inclusive; products without an expiry date never
        match.  Soonest expiry first.
        """

    @abstractmethod
    def add(self, product: Product) -> None:
        """Persist a new product."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist descriptive changes (never the quantity)."""

    @abstractmethod
    def adjust_quantity(self, product_id: str, delta: int) -> StockLevel:
        """Atomically add *delta* to the stored quantity.

        Must be a single read-modify-write against the store that refuses
        to take the quantity below zero and rewrites the derived status
        in the same step.  Raises EntityNotFoundError or
        InvalidQuantityError.
        """

    @abstractmethod
    def set_quantity(self, product_id: str, quantity: int) -> StockLevel:
        """Overwrite the stored quantity and its derived status."""
