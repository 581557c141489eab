"""CLI commands for order disputes."""

from __future__ import annotations

import click

from foodhub.application.add_dispute import AddDisputeHandler
from foodhub.application.change_dispute_status import ChangeDisputeStatusHandler
from foodhub.domain.exceptions import DomainException
from foodhub.domain.model.dispute import DisputeStatus
from foodhub.infrastructure import bootstrap
from foodhub.infrastructure.cli.common import CliContext, fail


@click.command("add")
@click.option("--order", "order_id", required=True, type=int, help="Order ID.")
@click.option("--description", required=True, help="What went wrong.")
@click.pass_obj
def dispute_add(obj: CliContext, order_id: int, description: str) -> None:
    """Raise a dispute on an order."""
    handler = AddDisputeHandler(bootstrap.unit_of_work())

    try:
        dto = handler.handle(obj.principal(), order_id, description)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Dispute #{len(dto.disputes) - 1} raised on order {dto.order_number}.")


@click.command("status")
@click.option("--order", "order_id", required=True, type=int, help="Order ID.")
@click.option("--index", "dispute_index", required=True, type=int, help="Dispute number.")
@click.option(
    "--to",
    "new_status",
    required=True,
    type=click.Choice([s.value for s in DisputeStatus if s is not DisputeStatus.OPEN]),
    help="Target dispute status.",
)
@click.pass_obj
def dispute_status(obj: CliContext, order_id: int, dispute_index: int, new_status: str) -> None:
    """Move a dispute along (superadmin only)."""
    handler = ChangeDisputeStatusHandler(bootstrap.unit_of_work())

    try:
        dto = handler.handle(obj.principal(), order_id, dispute_index, new_status)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Dispute #{dispute_index} on order {dto.order_number} is {new_status}.")
