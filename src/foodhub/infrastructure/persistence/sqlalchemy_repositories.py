"""SQLAlchemy-backed implementations of the domain repositories.

Both repositories work inside a Session owned by the unit of work; they
flush but never commit.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import case, exists, literal, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from foodhub.domain.exceptions import (
    ConflictError,
    DuplicateOrderNumberError,
    EntityNotFoundError,
    InvalidQuantityError,
    ValidationError,
)
from foodhub.domain.model.dispute import Dispute, DisputeStatus
from foodhub.domain.model.order import (
    OPEN_STATUSES,
    Order,
    OrderLineItem,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    ReturnStatus,
    StatusChange,
)
from foodhub.domain.model.product import (
    Product,
    StockLevel,
    StockLocation,
    StockStatus,
    derive_stock_status,
)
from foodhub.domain.model.value_objects import Money, Quantity
from foodhub.domain.repository.order_repository import OrderRepository
from foodhub.domain.repository.product_repository import ProductRepository
from foodhub.infrastructure.persistence.tables import (
    DisputeRow,
    OrderLineRow,
    OrderRow,
    ProductRow,
    StatusHistoryRow,
)


def _aware(value: datetime | None) -> datetime | None:
    """SQLite hands datetimes back naive; they were stored as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _status_for(quantity):
    """SQL expression mirroring ``derive_stock_status`` for a quantity expression."""
    return case(
        (quantity <= 0, StockStatus.OUT_OF_STOCK.value),
        (quantity <= ProductRow.min_stock_level, StockStatus.LOW_STOCK.value),
        else_=StockStatus.IN_STOCK.value,
    )


class SqlAlchemyProductRepository(ProductRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        row = self._session.get(ProductRow, product_id, populate_existing=True)
        return self._to_domain(row) if row is not None else None

    def list_all(
        self,
        location: StockLocation | None = None,
        supplier_id: str | None = None,
        include_inactive: bool = False,
    ) -> list[Product]:
        stmt = select(ProductRow).order_by(ProductRow.created_at.desc(), ProductRow.id)
        if location is not None:
            stmt = stmt.where(ProductRow.location == location.value)
        if supplier_id is not None:
            stmt = stmt.where(ProductRow.supplier_id == supplier_id)
        if not include_inactive:
            stmt = stmt.where(ProductRow.is_active.is_(True))
        return [self._to_domain(row) for row in self._session.execute(stmt).scalars()]

    def list_expiring(
        self,
        latest: date,
        earliest: date | None = None,
        location: StockLocation | None = None,
        supplier_id: str | None = None,
    ) -> list[Product]:
        stmt = (
            select(ProductRow)
            .where(ProductRow.is_active.is_(True))
            .where(ProductRow.expiry_date <= latest)
            .order_by(ProductRow.expiry_date, ProductRow.name)
        )
        if earliest is not None:
            stmt = stmt.where(ProductRow.expiry_date >= earliest)
        if location is not None:
            stmt = stmt.where(ProductRow.location == location.value)
        if supplier_id is not None:
            stmt = stmt.where(ProductRow.supplier_id == supplier_id)
        return [self._to_domain(row) for row in self._session.execute(stmt).scalars()]

    def add(self, product: Product) -> None:
        self._session.add(self._to_row(product))
        try:
            self._session.flush()
        except IntegrityError as exc:
            raise ValidationError(
                f"Product '{product.name}' clashes with an existing product "
                "(duplicate id or barcode)"
            ) from exc

    def save(self, product: Product) -> None:
        row = self._session.get(ProductRow, product.id, populate_existing=True)
        if row is None:
            raise EntityNotFoundError(f"Product '{product.id}' not found")
        # quantity/status are owned by adjust_quantity/set_quantity
        row.name = product.name
        row.category = product.category
        row.unit = product.unit
        row.price = product.price.amount
        row.min_stock_level = product.min_stock_level
        row.batch_number = product.batch_number
        row.manufacturing_date = product.manufacturing_date
        row.expiry_date = product.expiry_date
        row.barcode = product.barcode
        row.is_active = product.is_active
        row.status = derive_stock_status(row.quantity, product.min_stock_level).value
        try:
            self._session.flush()
        except IntegrityError as exc:
            raise ValidationError(
                f"Product '{product.name}' clashes with an existing product "
                "(duplicate barcode)"
            ) from exc

    def adjust_quantity(self, product_id: str, delta: int) -> StockLevel:
        new_quantity = ProductRow.quantity + delta
        stmt = (
            update(ProductRow)
            .where(ProductRow.id == product_id)
            .where(new_quantity >= 0)
            .values(quantity=new_quantity, status=_status_for(new_quantity))
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(stmt)
        if result.rowcount == 0:
            current = self._session.execute(
                select(ProductRow.quantity, ProductRow.name).where(
                    ProductRow.id == product_id
                )
            ).first()
            if current is None:
                raise EntityNotFoundError(f"Product '{product_id}' not found")
            raise InvalidQuantityError(
                f"Insufficient stock for {current.name} "
                f"(need {-delta}, have {current.quantity})"
            )
        return self._stock_level(product_id)

    def set_quantity(self, product_id: str, quantity: int) -> StockLevel:
        if quantity < 0:
            raise InvalidQuantityError("Stock quantity cannot be negative")
        stmt = (
            update(ProductRow)
            .where(ProductRow.id == product_id)
            .values(quantity=quantity, status=_status_for(literal(quantity)))
            .execution_options(synchronize_session=False)
        )
        if self._session.execute(stmt).rowcount == 0:
            raise EntityNotFoundError(f"Product '{product_id}' not found")
        return self._stock_level(product_id)

    # --- Serialization --------------------------------------------------------

    def _stock_level(self, product_id: str) -> StockLevel:
        row = self._session.execute(
            select(ProductRow.quantity, ProductRow.status).where(
                ProductRow.id == product_id
            )
        ).one()
        return StockLevel(product_id, row.quantity, StockStatus(row.status))

    @staticmethod
    def _to_row(product: Product) -> ProductRow:
        return ProductRow(
            id=product.id,
            supplier_id=product.supplier_id,
            location=product.location.value,
            name=product.name,
            category=product.category,
            unit=product.unit,
            price=product.price.amount,
            currency=product.price.currency,
            quantity=product.quantity,
            min_stock_level=product.min_stock_level,
            status=product.status.value,
            batch_number=product.batch_number,
            manufacturing_date=product.manufacturing_date,
            expiry_date=product.expiry_date,
            barcode=product.barcode,
            is_active=product.is_active,
            created_at=product.created_at,
        )

    @staticmethod
    def _to_domain(row: ProductRow) -> Product:
        return Product(
            id=row.id,
            supplier_id=row.supplier_id,
            name=row.name,
            price=Money.of(row.price, row.currency),
            location=StockLocation(row.location),
            category=row.category,
            unit=row.unit,
            min_stock_level=row.min_stock_level,
            quantity=row.quantity,
            batch_number=row.batch_number,
            manufacturing_date=row.manufacturing_date,
            expiry_date=row.expiry_date,
            barcode=row.barcode,
            is_active=row.is_active,
            created_at=_aware(row.created_at),  # type: ignore[arg-type]
        )


class SqlAlchemyOrderRepository(OrderRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: int) -> Order | None:
        row = self._session.get(OrderRow, order_id)
        return self._to_domain(row) if row is not None else None

    def get_by_number(self, order_number: str) -> Order | None:
        row = self._session.execute(
            select(OrderRow).where(OrderRow.order_number == order_number)
        ).scalar_one_or_none()
        return self._to_domain(row) if row is not None else None

    def list_for(
        self,
        shopkeeper_id: str | None = None,
        supplier_id: str | None = None,
    ) -> list[Order]:
        stmt = select(OrderRow).order_by(OrderRow.created_at.desc(), OrderRow.id.desc())
        if shopkeeper_id is not None:
            stmt = stmt.where(OrderRow.shopkeeper_id == shopkeeper_id)
        if supplier_id is not None:
            stmt = stmt.where(OrderRow.supplier_id == supplier_id)
        return [self._to_domain(row) for row in self._session.execute(stmt).scalars()]

    def add(self, order: Order) -> None:
        row = OrderRow(
            order_number=order.order_number,
            shopkeeper_id=order.shopkeeper_id,
            supplier_id=order.supplier_id,
            total_amount=order.total_amount.amount,
            currency=order.total_amount.currency,
            created_at=order.created_at,
        )
        self._copy_state(order, row)
        self._session.add(row)
        try:
            self._session.flush()
        except IntegrityError as exc:
            if "order_number" in str(exc.orig):
                raise DuplicateOrderNumberError(
                    f"Order number {order.order_number} is already taken"
                ) from exc
            raise ValidationError("Order references an unknown product") from exc
        order.id = row.id
        order.version = row.version

    def save(self, order: Order) -> None:
        row = self._session.get(OrderRow, order.id)
        if row is None:
            raise EntityNotFoundError(f"Order #{order.id} not found")
        if row.version != order.version:
            raise ConflictError(
                f"Order {order.order_number} was modified concurrently; reload and retry"
            )
        # always touch the parent row so the version check runs even when
        # only child rows changed
        order.updated_at = datetime.now(timezone.utc)
        self._copy_state(order, row)
        try:
            self._session.flush()
        except StaleDataError as exc:
            raise ConflictError(
                f"Order {order.order_number} was modified concurrently; reload and retry"
            ) from exc
        order.version = row.version

    def has_open_orders_for(self, product_id: str) -> bool:
        stmt = select(
            exists()
            .where(OrderLineRow.order_id == OrderRow.id)
            .where(OrderLineRow.product_id == product_id)
            .where(OrderRow.status.in_([s.value for s in OPEN_STATUSES]))
        )
        return bool(self._session.execute(stmt).scalar())

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _copy_state(order: Order, row: OrderRow) -> None:
        """Write the mutable parts of the aggregate onto its rows."""
        row.status = order.status.value
        row.payment_status = order.payment_status.value
        row.payment_method = order.payment_method.value
        row.notes = order.notes
        row.delivery_date = order.delivery_date
        row.delivered_at = order.delivered_at
        row.updated_at = order.updated_at

        for position, item in enumerate(order.items):
            if position < len(row.items):
                line = row.items[position]
            else:
                line = OrderLineRow(
                    position=position,
                    product_id=item.product_id,
                    product_name=item.product_name,
                    quantity=item.quantity.value,
                    unit_price=item.unit_price.amount,
                )
                row.items.append(line)
            line.returned = item.returned
            line.return_quantity = item.return_quantity
            line.return_reason = item.return_reason
            line.return_status = item.return_status.value if item.return_status else None

        # history is append-only
        for position in range(len(row.history), len(order.history)):
            change = order.history[position]
            row.history.append(
                StatusHistoryRow(
                    position=position,
                    status=change.status.value,
                    changed_at=change.changed_at,
                    changed_by=change.changed_by,
                )
            )

        for position, dispute in enumerate(order.disputes):
            if position < len(row.disputes):
                dispute_row = row.disputes[position]
            else:
                dispute_row = DisputeRow(
                    position=position,
                    description=dispute.description,
                    raised_by=dispute.raised_by,
                    raised_at=dispute.raised_at,
                )
                row.disputes.append(dispute_row)
            dispute_row.status = dispute.status.value
            dispute_row.resolved_by = dispute.resolved_by
            dispute_row.resolved_at = dispute.resolved_at

    @staticmethod
    def _to_domain(row: OrderRow) -> Order:
        items = [
            OrderLineItem(
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=Quantity(line.quantity),
                unit_price=Money.of(line.unit_price, row.currency),
                returned=line.returned,
                return_quantity=line.return_quantity,
                return_reason=line.return_reason,
                return_status=ReturnStatus(line.return_status) if line.return_status else None,
            )
            for line in row.items
        ]
        history = [
            StatusChange(
                status=OrderStatus(change.status),
                changed_at=_aware(change.changed_at),  # type: ignore[arg-type]
                changed_by=change.changed_by,
            )
            for change in row.history
        ]
        disputes = [
            Dispute(
                description=d.description,
                raised_by=d.raised_by,
                raised_at=_aware(d.raised_at),  # type: ignore[arg-type]
                status=DisputeStatus(d.status),
                resolved_by=d.resolved_by,
                resolved_at=_aware(d.resolved_at),
            )
            for d in row.disputes
        ]
        return Order(
            id=row.id,
            order_number=row.order_number,
            shopkeeper_id=row.shopkeeper_id,
            supplier_id=row.supplier_id,
            items=items,
            payment_method=PaymentMethod(row.payment_method),
            total_amount=Money.of(row.total_amount, row.currency),
            status=OrderStatus(row.status),
            payment_status=PaymentStatus(row.payment_status),
            notes=row.notes,
            delivery_date=row.delivery_date,
            delivered_at=_aware(row.delivered_at),
            disputes=disputes,
            history=history,
            version=row.version,
            created_at=_aware(row.created_at),  # type: ignore[arg-type]
            updated_at=_aware(row.updated_at),  # type: ignore[arg-type]
        )

