"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from foodhub.application.change_order_status import ChangeOrderStatusHandler
from foodhub.application.create_order import CreateOrderHandler
from foodhub.application.dto import OrderItemSpec
from foodhub.application.list_orders import ListOrdersHandler
from foodhub.application.render_invoice import RenderInvoiceHandler
from foodhub.application.show_order import ShowOrderHandler
from foodhub.domain.exceptions import DomainException
from foodhub.domain.model.order import OrderStatus, PaymentMethod
from foodhub.infrastructure import bootstrap
from foodhub.infrastructure.cli.common import (
    CliContext,
    display_order,
    echo_warnings,
    fail,
)


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse 'p1:3,p2:5' into OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductId:Quantity'."
            )
        product_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        specs.append(OrderItemSpec(product_id=product_id.strip(), quantity=qty))
    return specs


@click.command("create")
@click.option("--items", required=True, help="Items as 'ProductId:Qty,ProductId:Qty'.")
@click.option(
    "--payment",
    required=True,
    type=click.Choice([m.value for m in PaymentMethod]),
    help="Payment method.",
)
@click.option("--supplier", default=None, help="Supplier id (defaults to the products' supplier).")
@click.option("--notes", default=None, help="Free-form notes.")
@click.option("--delivery-date", type=click.DateTime(["%Y-%m-%d"]), default=None)
@click.pass_obj
def order_create(obj: CliContext, items, payment, supplier, notes, delivery_date) -> None:
    """Place a new order."""
    settings = bootstrap.settings()
    handler = CreateOrderHandler(
        uow=bootstrap.unit_of_work(),
        notifier=bootstrap.notifier(),
        max_attempts=settings.order_number_attempts,
    )

    try:
        dto = handler.handle(
            obj.principal(),
            _parse_items(items),
            payment,
            supplier_id=supplier,
            notes=notes,
            delivery_date=delivery_date.date() if delivery_date else None,
        )
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Order {dto.order_number} (#{dto.id}) created  (status={dto.status})")
    click.echo(f"Total: {dto.total_amount}")
    echo_warnings(dto.warnings)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
@click.pass_obj
def order_show(obj: CliContext, order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(bootstrap.unit_of_work())

    try:
        dto = handler.handle(obj.principal(), order_id)
    except DomainException as exc:
        raise fail(exc)

    display_order(dto)


@click.command("list")
@click.option(
    "--status",
    type=click.Choice([s.value for s in OrderStatus]),
    default=None,
    help="Only orders in this status.",
)
@click.pass_obj
def order_list(obj: CliContext, status: str | None) -> None:
    """List the orders visible to the caller."""
    handler = ListOrdersHandler(bootstrap.unit_of_work())

    try:
        orders = handler.handle(obj.principal(), status=status)
    except DomainException as exc:
        raise fail(exc)

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<6} {'Number':<12} {'Status':<11} {'Shopkeeper':<14} {'Total':>10}")
    click.echo("-" * 57)
    for dto in orders:
        click.echo(
            f"{dto.id:<6} {dto.order_number:<12} {dto.status:<11} "
            f"{dto.shopkeeper_id:<14} {dto.total_amount:>10}"
        )


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option(
    "--to",
    "new_status",
    required=True,
    type=click.Choice([s.value for s in OrderStatus]),
    help="Target status.",
)
@click.pass_obj
def order_status(obj: CliContext, order_id: int, new_status: str) -> None:
    """Move an order along its lifecycle (delivery takes stock out)."""
    handler = ChangeOrderStatusHandler(bootstrap.unit_of_work())

    try:
        dto = handler.handle(obj.principal(), order_id, new_status)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Order {dto.order_number} is now {dto.status}.")


@click.command("invoice")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.pass_obj
def order_invoice(obj: CliContext, order_id: int) -> None:
    """Print the invoice for an order."""
    handler = RenderInvoiceHandler(
        bootstrap.unit_of_work(),
        renderer=bootstrap.invoice_renderer(),
        directory=bootstrap.party_directory(),
    )

    try:
        result = handler.handle(obj.principal(), order_id)
    except DomainException as exc:
        raise fail(exc)

    if result.document:
        click.echo(result.document, nl=False)
    echo_warnings(result.warnings)
