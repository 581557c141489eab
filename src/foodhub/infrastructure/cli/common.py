"""Helpers shared by the CLI command modules."""

from __future__ import annotations

from dataclasses import dataclass

import click

from foodhub.application.dto import OrderDTO
from foodhub.domain.exceptions import DomainException
from foodhub.domain.model.principal import Principal, Role


@dataclass
class CliContext:
    user_id: str | None
    role: str | None

    def principal(self) -> Principal:
        if not self.user_id or not self.role:
            raise click.UsageError("--user and --role are required for this command")
        return Principal(user_id=self.user_id, role=Role(self.role))


def fail(exc: DomainException) -> click.ClickException:
    return click.ClickException(f"{exc.kind}: {exc}")


def echo_warnings(warnings: list[str]) -> None:
    for warning in warnings:
        click.echo(f"Warning: {warning}", err=True)


def display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.order_number} (#{dto.id})  status={dto.status}")
    click.echo(f"Shopkeeper: {dto.shopkeeper_id}   Supplier: {dto.supplier_id}")
    click.echo(f"Payment:    {dto.payment_method} ({dto.payment_status})")
    click.echo(f"Created:    {dto.created_at}")
    if dto.notes:
        click.echo(f"Notes:      {dto.notes}")
    click.echo()

    click.echo(
        f"  {'Product':<20} {'Qty':>5} {'Price':>10} {'Total':>10} "
        f"{'Returned':>9} {'Return':>10}"
    )
    click.echo(f"  {'-' * 69}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<20} {item.quantity:>5} {item.price:>10} "
            f"{item.line_total:>10} {item.returned:>9} {item.return_status or '-':>10}"
        )
    click.echo(f"  {'-' * 69}")
    click.echo(f"  {'Order Total':<27} {dto.total_amount:>20}")

    if dto.history:
        click.echo()
        click.echo("History:")
        for change in dto.history:
            click.echo(f"  {change.changed_at}  {change.status:<11} by {change.changed_by}")

    if dto.disputes:
        click.echo()
        click.echo("Disputes:")
        for dispute in dto.disputes:
            click.echo(
                f"  [{dispute.index}] {dispute.status:<11} {dispute.description} "
                f"(raised by {dispute.raised_by})"
            )
