"""Product aggregate.

A product belongs to the supplier that listed it and sits at one of two
locations: supplier stock or shop stock.  Its stock ``status`` is never
stored independently; it is re-derived from ``quantity`` and
``min_stock_level`` every time the quantity changes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum

from foodhub.domain.exceptions import InvalidQuantityError, ValidationError
from foodhub.domain.model.value_objects import Money


class StockStatus(Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class StockLocation(Enum):
    SUPPLIER = "supplier"
    SHOP = "shop"


def derive_stock_status(quantity: int, min_stock_level: int) -> StockStatus:
    """Map a quantity onto its stock status for the given threshold."""
    if quantity <= 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= min_stock_level:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


@dataclass(frozen=True)
class StockLevel:
    """Result of a stock mutation: the new quantity and its derived status."""

    product_id: str
    quantity: int
    status: StockStatus


@dataclass
class Product:
    """A product listed by a supplier.

    Kept as a mutable dataclass; ``quantity`` must only change through
    ``adjust()`` or ``set_quantity()`` so that ``status`` stays in step.
    """

    id: str
    supplier_id: str
    name: str
    price: Money
    location: StockLocation = StockLocation.SUPPLIER
    category: str = ""
    unit: str = "pieces"
    min_stock_level: int = 0
    quantity: int = 0
    batch_number: str | None = None
    manufacturing_date: date | None = None
    expiry_date: date | None = None
    barcode: str | None = None
    is_active: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def status(self) -> StockStatus:
        return derive_stock_status(self.quantity, self.min_stock_level)

    @property
    def is_low_stock(self) -> bool:
        return self.status is not StockStatus.IN_STOCK

    def stock_level(self) -> StockLevel:
        return StockLevel(self.id, self.quantity, self.status)

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def create(
        id: str,
        supplier_id: str,
        name: str,
        price: Money,
        location: StockLocation,
        *,
        category: str = "",
        unit: str = "pieces",
        min_stock_level: int = 0,
        quantity: int = 0,
        batch_number: str | None = None,
        manufacturing_date: date | None = None,
        expiry_date: date | None = None,
        barcode: str | None = None,
    ) -> Product:
        """Create a new product, enforcing all invariants."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        if not unit or not unit.strip():
            raise ValidationError("Product unit is required (e.g. kg, pieces)")
        if price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")
        if min_stock_level < 0:
            raise ValidationError("Minimum stock level cannot be negative")
        if quantity < 0:
            raise InvalidQuantityError("Initial quantity cannot be negative")
        if manufacturing_date and expiry_date and expiry_date < manufacturing_date:
            raise ValidationError("Expiry date cannot precede manufacturing date")

        return Product(
            id=id,
            supplier_id=supplier_id,
            name=name.strip(),
            price=price,
            location=location,
            category=category.strip(),
            unit=unit.strip(),
            min_stock_level=min_stock_level,
            quantity=quantity,
            batch_number=batch_number,
            manufacturing_date=manufacturing_date,
            expiry_date=expiry_date,
            barcode=barcode,
        )

    # --- Stock mutations ------------------------------------------------------

    def adjust(self, delta: int) -> StockLevel:
        """Apply a relative change; the result may never go below zero."""
        new_quantity = self.quantity + delta
        if new_quantity < 0:
            raise InvalidQuantityError(
                f"Insufficient stock for {self.name} "
                f"(need {-delta}, have {self.quantity})"
            )
        self.quantity = new_quantity
        return self.stock_level()

    def set_quantity(self, quantity: int) -> StockLevel:
        """Overwrite the quantity after a manual stock-take."""
        if quantity < 0:
            raise InvalidQuantityError("Stock quantity cannot be negative")
        self.quantity = quantity
        return self.stock_level()

    # --- Descriptive changes --------------------------------------------------

    def update_details(
        self,
        *,
        name: str | None = None,
        price: Money | None = None,
        unit: str | None = None,
        category: str | None = None,
        min_stock_level: int | None = None,
        batch_number: str | None = None,
        manufacturing_date: date | None = None,
        expiry_date: date | None = None,
        barcode: str | None = None,
    ) -> None:
        """Change the given fields; ``None`` leaves a field as it is.

        Quantity, location and owner are not editable here.  Every value
        is checked before any is applied.
        """
        if name is not None and not name.strip():
            raise ValidationError("Product name is required")
        if unit is not None and not unit.strip():
            raise ValidationError("Product unit is required (e.g. kg, pieces)")
        if price is not None and price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")
        if min_stock_level is not None and min_stock_level < 0:
            raise ValidationError("Minimum stock level cannot be negative")
        made = manufacturing_date or self.manufacturing_date
        expires = expiry_date or self.expiry_date
        if made and expires and expires < made:
            raise ValidationError("Expiry date cannot precede manufacturing date")

        if name is not None:
            self.name = name.strip()
        if unit is not None:
            self.unit = unit.strip()
        if category is not None:
            self.category = category.strip()
        if price is not None:
            self.price = price
        if min_stock_level is not None:
            self.min_stock_level = min_stock_level
        if batch_number is not None:
            self.batch_number = batch_number
        if manufacturing_date is not None:
            self.manufacturing_date = manufacturing_date
        if expiry_date is not None:
            self.expiry_date = expiry_date
        if barcode is not None:
            self.barcode = barcode

    def deactivate(self) -> None:
        if not self.is_active:
            raise ValidationError(f"Product '{self.name}' is already inactive")
        self.is_active = False
