"""Domain service: Stock Ledger.

The ledger is the only sanctioned way to change a product's quantity.
Order-driven events (delivery, approved returns) go through ``adjust``;
manual stock-takes go through ``set_quantity``.  Both delegate the
read-modify-write to the repository so it happens as one atomic step
inside the caller's unit of work.
"""

from __future__ import annotations

import logging

from foodhub.domain.exceptions import InvalidQuantityError, ValidationError
from foodhub.domain.model.product import StockLevel
from foodhub.domain.repository.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class StockLedger:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def adjust(self, product_id: str, delta: int) -> StockLevel:
        """Add *delta* (negative to take stock out) to a product's quantity.

        Raises EntityNotFoundError if the product does not exist and
        InvalidQuantityError if the quantity would go negative.
        """
        if not isinstance(delta, int) or isinstance(delta, bool):
            raise ValidationError(f"Stock delta must be an integer, got {delta!r}")
        if delta == 0:
            raise ValidationError("Stock delta must be non-zero")

        try:
            level = self._product_repo.adjust_quantity(product_id, delta)
        except InvalidQuantityError:
            logger.warning(
                "Rejected stock adjustment of %+d for product %s", delta, product_id
            )
            raise

        logger.info(
            "Stock for product %s adjusted by %+d -> %d (%s)",
            product_id,
            delta,
            level.quantity,
            level.status.value,
        )
        return level

    def set_quantity(self, product_id: str, quantity: int) -> StockLevel:
        """Overwrite a product's quantity after a stock-take."""
        if not isinstance(quantity, int) or isinstance(quantity, bool):
            raise ValidationError(f"Stock quantity must be an integer, got {quantity!r}")
        if quantity < 0:
            raise InvalidQuantityError("Stock quantity cannot be negative")

        level = self._product_repo.set_quantity(product_id, quantity)
        logger.info(
            "Stock for product %s set to %d (%s)",
            product_id,
            level.quantity,
            level.status.value,
        )
        return level

    def apply(self, deltas: dict[str, int]) -> list[StockLevel]:
        """Adjust several products; the first failure stops the batch.

        Partial progress is undone by the caller's unit of work rolling back.
        """
        return [self.adjust(product_id, delta) for product_id, delta in deltas.items()]
