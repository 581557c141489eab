"""CLI commands for the Product aggregate and its stock."""

from __future__ import annotations

import click

from foodhub.application.add_product import AddProductHandler
from foodhub.application.deactivate_product import DeactivateProductHandler
from foodhub.application.dto import ProductDTO
from foodhub.application.set_stock import SetStockHandler
from foodhub.application.show_expiring import (
    DEFAULT_EXPIRY_WINDOW_DAYS,
    ShowExpiredProductsHandler,
    ShowExpiringProductsHandler,
)
from foodhub.application.show_inventory import ShowInventoryHandler
from foodhub.application.update_product import UpdateProductHandler
from foodhub.domain.exceptions import DomainException
from foodhub.infrastructure import bootstrap
from foodhub.infrastructure.cli.common import CliContext, fail

_DATE = click.DateTime(["%Y-%m-%d"])


def _print_products(products: list[ProductDTO]) -> None:
    click.echo(
        f"{'ID':<34} {'Name':<20} {'Price':>10} {'Qty':>6} {'Min':>5} {'Status':<12} {'Expiry':<10}"
    )
    click.echo("-" * 103)
    for p in products:
        click.echo(
            f"{p.id:<34} {p.name:<20} {p.price:>10} {p.quantity:>6} "
            f"{p.min_stock_level:>5} {p.status:<12} {p.expiry_date or '-':<10}"
        )


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--unit", required=True, help="Unit of sale (kg, box, crate, ...).")
@click.option("--category", default="", help="Product category.")
@click.option("--quantity", default=0, type=int, help="Opening stock.")
@click.option("--min-stock", "min_stock_level", default=0, type=int, help="Low-stock threshold.")
@click.option("--batch", "batch_number", default=None, help="Batch number.")
@click.option("--mfg-date", "manufacturing_date", type=_DATE, default=None)
@click.option("--expiry-date", type=_DATE, default=None)
@click.option("--barcode", default=None, help="Unique barcode.")
@click.pass_obj
def product_add(
    obj: CliContext,
    name: str,
    price: str,
    unit: str,
    category: str,
    quantity: int,
    min_stock_level: int,
    batch_number,
    manufacturing_date,
    expiry_date,
    barcode,
) -> None:
    """Add a new product to the caller's stock."""
    handler = AddProductHandler(bootstrap.unit_of_work())

    try:
        product = handler.handle(
            obj.principal(),
            name=name,
            price=price,
            unit=unit,
            category=category,
            min_stock_level=min_stock_level,
            quantity=quantity,
            batch_number=batch_number,
            manufacturing_date=manufacturing_date.date() if manufacturing_date else None,
            expiry_date=expiry_date.date() if expiry_date else None,
            barcode=barcode,
        )
    except DomainException as exc:
        raise fail(exc)

    click.echo(
        f"Product {product.id} '{product.name}' added at {product.price} "
        f"({product.quantity} {product.unit}, {product.status})"
    )


@click.command("list")
@click.pass_obj
def product_list(obj: CliContext) -> None:
    """List the products in the caller's stock."""
    handler = ShowInventoryHandler(bootstrap.unit_of_work())

    try:
        products = handler.handle(obj.principal())
    except DomainException as exc:
        raise fail(exc)

    if not products:
        click.echo("No products found.")
        return
    _print_products(products)


@click.command("low-stock")
@click.pass_obj
def product_low_stock(obj: CliContext) -> None:
    """List products at or below their minimum stock level."""
    handler = ShowInventoryHandler(bootstrap.unit_of_work())

    try:
        products = handler.handle(obj.principal(), low_stock_only=True)
    except DomainException as exc:
        raise fail(exc)

    if not products:
        click.echo("No low-stock products.")
        return
    _print_products(products)


@click.command("set-stock")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="Counted quantity.")
@click.pass_obj
def product_set_stock(obj: CliContext, product_id: str, quantity: int) -> None:
    """Overwrite a product's stock after a stock-take."""
    handler = SetStockHandler(bootstrap.unit_of_work())

    try:
        level = handler.handle(obj.principal(), product_id, quantity)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Stock for {level.product_id} set to {level.quantity} ({level.status})")


@click.command("deactivate")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.pass_obj
def product_deactivate(obj: CliContext, product_id: str) -> None:
    """Take a product off sale."""
    handler = DeactivateProductHandler(bootstrap.unit_of_work())

    try:
        product = handler.handle(obj.principal(), product_id)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Product {product.id} '{product.name}' deactivated")


@click.command("update")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--name", default=None, help="New name.")
@click.option("--price", default=None, help="New price (e.g. 15.00).")
@click.option("--unit", default=None, help="New unit of sale.")
@click.option("--category", default=None, help="New category.")
@click.option("--min-stock", "min_stock_level", default=None, type=int, help="New low-stock threshold.")
@click.option("--batch", "batch_number", default=None, help="New batch number.")
@click.option("--mfg-date", "manufacturing_date", type=_DATE, default=None)
@click.option("--expiry-date", type=_DATE, default=None)
@click.option("--barcode", default=None, help="New barcode.")
@click.pass_obj
def product_update(
    obj: CliContext,
    product_id: str,
    name,
    price,
    unit,
    category,
    min_stock_level,
    batch_number,
    manufacturing_date,
    expiry_date,
    barcode,
) -> None:
    """Edit a product's details (not its stock)."""
    handler = UpdateProductHandler(bootstrap.unit_of_work())

    try:
        product = handler.handle(
            obj.principal(),
            product_id,
            name=name,
            price=price,
            unit=unit,
            category=category,
            min_stock_level=min_stock_level,
            batch_number=batch_number,
            manufacturing_date=manufacturing_date.date() if manufacturing_date else None,
            expiry_date=expiry_date.date() if expiry_date else None,
            barcode=barcode,
        )
    except DomainException as exc:
        raise fail(exc)

    click.echo(
        f"Product {product.id} '{product.name}' updated "
        f"({product.price} per {product.unit}, {product.status})"
    )


@click.command("expiring")
@click.option(
    "--days",
    default=DEFAULT_EXPIRY_WINDOW_DAYS,
    show_default=True,
    type=int,
    help="How many days ahead to look.",
)
@click.pass_obj
def product_expiring(obj: CliContext, days: int) -> None:
    """List products that expire soon."""
    handler = ShowExpiringProductsHandler(bootstrap.unit_of_work())

    try:
        products = handler.handle(obj.principal(), days=days)
    except DomainException as exc:
        raise fail(exc)

    if not products:
        click.echo(f"No products expire within {days} days.")
        return
    _print_products(products)


@click.command("expired")
@click.pass_obj
def product_expired(obj: CliContext) -> None:
    """List products past their expiry date."""
    handler = ShowExpiredProductsHandler(bootstrap.unit_of_work())

    try:
        products = handler.handle(obj.principal())
    except DomainException as exc:
        raise fail(exc)

    if not products:
        click.echo("No expired products.")
        return
    _print_products(products)
