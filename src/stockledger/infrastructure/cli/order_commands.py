"""CLI commands for allocating stock to orders."""

from __future__ import annotations

import click

from stockledger.application.allocate_order import AllocateOrderHandler
from stockledger.application.dto import AllocationOptions
from stockledger.application.preview_allocation import PreviewAllocationHandler
from stockledger.application.retry import run_with_retry
from stockledger.config.settings import get_settings
from stockledger.domain.exceptions import DomainException
from stockledger.domain.model.value_objects import ProductKey
from stockledger.infrastructure.bootstrap import status_lookup, unit_of_work

_STRATEGY = click.Choice(["FEFO", "FIFO"], case_sensitive=False)


@click.command("allocate")
@click.option("--id", "order_id", required=True, help="Order ID to allocate for.")
@click.option("--sku", "sku_id", default=None, help="SKU of the order item.")
@click.option("--material", "material_id", default=None, help="Packaging material of the order item.")
@click.option("--quantity", required=True, type=int, help="Quantity to allocate.")
@click.option("--warehouse", "warehouse_id", required=True, help="Warehouse to draw stock from.")
@click.option("--strategy", type=_STRATEGY, default=None, help="FEFO (default) or FIFO.")
@click.option("--lot", "lot_ids", multiple=True, help="Allocate only from these lots (repeatable).")
@click.option("--allow-partial", is_flag=True, default=False, help="Accept a partial manual allocation.")
@click.option("--exclude-expired", is_flag=True, default=None, help="Skip expired lots under FEFO.")
@click.option("--user", "performed_by", default=None, help="User performing the allocation.")
def order_allocate(
    order_id: str,
    sku_id: str | None,
    material_id: str | None,
    quantity: int,
    warehouse_id: str,
    strategy: str | None,
    lot_ids: tuple[str, ...],
    allow_partial: bool,
    exclude_expired: bool | None,
    performed_by: str | None,
) -> None:
    """Reserve stock for one order item from one or more lots."""
    if bool(sku_id) == bool(material_id):
        raise click.UsageError("Pass exactly one of --sku or --material.")

    settings = get_settings()
    options = AllocationOptions(
        warehouse_id=warehouse_id,
        lot_ids=lot_ids,
        allow_partial=allow_partial,
        exclude_expired=settings.exclude_expired if exclude_expired is None else exclude_expired,
        performed_by=performed_by,
    )
    handler = AllocateOrderHandler(uow=unit_of_work(), status_lookup=status_lookup())

    try:
        summary = run_with_retry(
            lambda: handler.handle(
                order_id,
                ProductKey(sku_id=sku_id, packaging_material_id=material_id),
                quantity,
                strategy=strategy or settings.default_strategy,
                options=options,
            ),
            max_attempts=settings.retry_max_attempts,
            delay=settings.retry_delay_seconds,
            multiplier=settings.retry_multiplier,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Order {summary.order_id} item {summary.order_item_id}: allocated "
        f"{summary.allocated_quantity} of {summary.requested_quantity} ({summary.strategy})"
    )
    for lot in summary.lots:
        click.echo(f"  {lot.lot_id:<20} {lot.allocated_quantity:>8}")
    if summary.remaining:
        click.echo(f"  Remaining: {summary.remaining}")
    click.echo(f"Item status: {summary.item_status}  Order status: {summary.order_status}")


@click.command("preview")
@click.option("--id", "order_id", required=True, help="Order ID to preview.")
@click.option("--warehouse", "warehouse_id", required=True, help="Warehouse to draw stock from.")
@click.option("--strategy", type=_STRATEGY, default=None, help="FEFO (default) or FIFO.")
@click.option("--exclude-expired", is_flag=True, default=None, help="Skip expired lots under FEFO.")
def order_preview(
    order_id: str,
    warehouse_id: str,
    strategy: str | None,
    exclude_expired: bool | None,
) -> None:
    """Show how the order's open items would be allocated, without reserving."""
    settings = get_settings()
    handler = PreviewAllocationHandler(uow=unit_of_work())

    try:
        previews = handler.handle(
            order_id,
            warehouse_id,
            strategy=strategy or settings.default_strategy,
            exclude_expired=settings.exclude_expired if exclude_expired is None else exclude_expired,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not previews:
        click.echo(f"Order {order_id} has no items awaiting allocation.")
        return

    for preview in previews:
        state = "fulfilled" if preview.fulfilled else f"short by {preview.remaining}"
        click.echo(
            f"{preview.order_item_id} ({preview.product}): "
            f"{preview.allocated_total}/{preview.quantity_needed} {state}"
        )
        for lot in preview.lots:
            click.echo(f"  {lot.lot_id:<20} {lot.allocated_quantity:>8}")
