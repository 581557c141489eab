"""CLI commands for line-item returns."""

from __future__ import annotations

import click

from foodhub.application.change_return_status import ChangeReturnStatusHandler
from foodhub.application.request_return import RequestReturnHandler
from foodhub.domain.exceptions import DomainException
from foodhub.domain.model.order import ReturnStatus
from foodhub.infrastructure import bootstrap
from foodhub.infrastructure.cli.common import CliContext, fail


@click.command("request")
@click.option("--order", "order_id", required=True, type=int, help="Order ID.")
@click.option("--product", "product_id", required=True, help="Product ID within the order.")
@click.option("--quantity", required=True, type=int, help="Units to return.")
@click.option("--reason", default=None, help="Why the goods go back.")
@click.pass_obj
def return_request(obj: CliContext, order_id: int, product_id: str, quantity: int, reason) -> None:
    """Ask to return part of a delivered line item."""
    handler = RequestReturnHandler(
        bootstrap.unit_of_work(), return_bound=bootstrap.settings().return_bound
    )

    try:
        dto = handler.handle(obj.principal(), order_id, product_id, quantity, reason)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Return of {quantity} x {product_id} requested on order {dto.order_number}.")


@click.command("status")
@click.option("--order", "order_id", required=True, type=int, help="Order ID.")
@click.option("--product", "product_id", required=True, help="Product ID within the order.")
@click.option(
    "--to",
    "new_status",
    required=True,
    type=click.Choice([s.value for s in ReturnStatus if s is not ReturnStatus.PENDING]),
    help="Target return status.",
)
@click.pass_obj
def return_status(obj: CliContext, order_id: int, product_id: str, new_status: str) -> None:
    """Approve, reject or complete a return (approval restocks)."""
    handler = ChangeReturnStatusHandler(bootstrap.unit_of_work())

    try:
        dto = handler.handle(obj.principal(), order_id, product_id, new_status)
    except DomainException as exc:
        raise fail(exc)

    click.echo(
        f"Return of {product_id} on order {dto.order_number} is {new_status} "
        f"(order status={dto.status})."
    )
