import click

from stockledger.config.logging import configure_logging
from stockledger.infrastructure.cli.audit_commands import audit_verify
from stockledger.infrastructure.cli.inventory_commands import (
    inventory_adjust,
    inventory_show,
)
from stockledger.infrastructure.cli.order_commands import order_allocate, order_preview


@click.group()
def cli() -> None:
    """stockledger: inventory ledger and order allocation"""
    configure_logging()


@cli.group()
def inventory() -> None:
    """Inspect and adjust scoped inventory."""


@cli.group()
def order() -> None:
    """Allocate stock to orders."""


@cli.group()
def audit() -> None:
    """Inspect the inventory audit log."""


# Register subcommands
inventory.add_command(inventory_adjust)
inventory.add_command(inventory_show)
order.add_command(order_allocate)
order.add_command(order_preview)
audit.add_command(audit_verify)
