"""SQLAlchemy table mappings.

These row classes are a storage detail: repositories translate them to
and from the domain dataclasses.  Line items, status history and
disputes are child rows of an order with no life of their own; they are
addressed by their position within the parent.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


# ---------- PRODUCTS ----------
class ProductRow(Base):
    __tablename__ = "products"
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    supplier_id: Mapped[str] = mapped_column(String(64), nullable=False)
    location: Mapped[str] = mapped_column(String(16), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(120), default="", nullable=False)
    unit: Mapped[str] = mapped_column(String(32), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="USD", nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    min_stock_level: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # Derived from quantity/min_stock_level; rewritten by every quantity update.
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    batch_number: Mapped[str | None] = mapped_column(String(64))
    manufacturing_date: Mapped[date | None] = mapped_column(Date)
    expiry_date: Mapped[date | None] = mapped_column(Date)
    barcode: Mapped[str | None] = mapped_column(String(64), unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_products_quantity_nonneg"),
        CheckConstraint("min_stock_level >= 0", name="ck_products_min_stock_nonneg"),
        Index("ix_products_supplier_location", "supplier_id", "location"),
        Index("ix_products_expiry_date", "expiry_date"),
    )


# ---------- ORDERS ----------
class OrderRow(Base):
    __tablename__ = "orders"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_number: Mapped[str] = mapped_column(String(16), unique=True, nullable=False)
    shopkeeper_id: Mapped[str] = mapped_column(String(64), nullable=False)
    supplier_id: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    payment_status: Mapped[str] = mapped_column(String(16), nullable=False)
    payment_method: Mapped[str] = mapped_column(String(16), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="USD", nullable=False)
    delivery_date: Mapped[date | None] = mapped_column(Date)
    delivered_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    items: Mapped[list[OrderLineRow]] = relationship(
        order_by="OrderLineRow.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    history: Mapped[list[StatusHistoryRow]] = relationship(
        order_by="StatusHistoryRow.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    disputes: Mapped[list[DisputeRow]] = relationship(
        order_by="DisputeRow.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    # Every UPDATE checks and bumps the version; a stale write raises
    # StaleDataError.
    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("ix_orders_shopkeeper_status", "shopkeeper_id", "status"),
        Index("ix_orders_supplier_status", "supplier_id", "status"),
        Index("ix_orders_delivery_date", "delivery_date"),
    )


class OrderLineRow(Base):
    __tablename__ = "order_lines"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    product_id: Mapped[str] = mapped_column(
        ForeignKey("products.id", ondelete="RESTRICT"), nullable=False
    )
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    returned: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    return_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    return_reason: Mapped[str | None] = mapped_column(Text)
    return_status: Mapped[str | None] = mapped_column(String(16))

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_lines_quantity_pos"),
        CheckConstraint(
            "returned >= 0 AND returned <= quantity", name="ck_order_lines_returned_bounds"
        ),
        Index("ix_order_lines_product", "product_id"),
    )


class StatusHistoryRow(Base):
    __tablename__ = "order_status_history"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    changed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    changed_by: Mapped[str] = mapped_column(String(64), nullable=False)


class DisputeRow(Base):
    __tablename__ = "order_disputes"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    raised_by: Mapped[str] = mapped_column(String(64), nullable=False)
    raised_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    resolved_by: Mapped[str | None] = mapped_column(String(64))
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
