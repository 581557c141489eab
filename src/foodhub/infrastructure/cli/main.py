import click

from foodhub.domain.exceptions import DomainException
from foodhub.domain.model.principal import Role
from foodhub.infrastructure import bootstrap
from foodhub.infrastructure.cli.common import CliContext, fail
from foodhub.infrastructure.cli.dispute_commands import dispute_add, dispute_status
from foodhub.infrastructure.cli.order_commands import (
    order_create,
    order_invoice,
    order_list,
    order_show,
    order_status,
)
from foodhub.infrastructure.cli.product_commands import (
    product_add,
    product_deactivate,
    product_expired,
    product_expiring,
    product_list,
    product_low_stock,
    product_set_stock,
    product_update,
)
from foodhub.infrastructure.cli.return_commands import return_request, return_status
from foodhub.infrastructure.logging_config import configure_logging


@click.group()
@click.option("--user", "user_id", envvar="FOODHUB_USER", default=None, help="Acting user id.")
@click.option(
    "--role",
    envvar="FOODHUB_ROLE",
    type=click.Choice([r.value for r in Role]),
    default=None,
    help="Acting user's role.",
)
@click.pass_context
def cli(ctx: click.Context, user_id: str | None, role: str | None) -> None:
    """FoodHub — order lifecycle and stock reconciliation."""
    try:
        configure_logging(bootstrap.settings().log_level)
    except DomainException as exc:
        raise fail(exc)
    ctx.obj = CliContext(user_id=user_id, role=role)


@cli.group()
def db() -> None:
    """Manage the database."""


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def product() -> None:
    """Manage products and stock."""


@cli.group("return")
def return_group() -> None:
    """Manage line-item returns."""


@cli.group()
def dispute() -> None:
    """Manage order disputes."""


@db.command("init")
def db_init() -> None:
    """Create any missing tables."""
    bootstrap.session_factory()
    click.echo(f"Database ready at {bootstrap.settings().database_url}")


# Register subcommands
order.add_command(order_create)
order.add_command(order_invoice)
order.add_command(order_list)
order.add_command(order_show)
order.add_command(order_status)
product.add_command(product_add)
product.add_command(product_deactivate)
product.add_command(product_list)
product.add_command(product_low_stock)
product.add_command(product_set_stock)
product.add_command(product_update)
product.add_command(product_expiring)
product.add_command(product_expired)
return_group.add_command(return_request)
return_group.add_command(return_status)
dispute.add_command(dispute_add)
dispute.add_command(dispute_status)
