"""CLI commands for scoped inventory records."""

from __future__ import annotations

import json
from pathlib import Path

import click

from stockledger.application.adjust_inventory import AdjustInventoryHandler
from stockledger.application.retry import run_with_retry
from stockledger.application.show_inventory import ShowInventoryHandler
from stockledger.config.settings import get_settings
from stockledger.domain.exceptions import DomainException
from stockledger.domain.model.adjustment import AdjustmentRequest
from stockledger.domain.model.value_objects import BatchType
from stockledger.infrastructure.bootstrap import status_lookup, unit_of_work


def _parse_requests(path: Path) -> list[AdjustmentRequest]:
    """Parse a JSON list of adjustment records into requests."""
    try:
        raw_records = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"'{path}' is not valid JSON: {exc}")
    if not isinstance(raw_records, list):
        raise click.BadParameter(f"'{path}' must contain a JSON list of records.")

    requests: list[AdjustmentRequest] = []
    for index, raw in enumerate(raw_records):
        try:
            requests.append(
                AdjustmentRequest(
                    batch_id=raw["batch_id"],
                    batch_type=BatchType(raw.get("batch_type", BatchType.PRODUCT.value)),
                    quantity=raw["quantity"],
                    warehouse_id=raw.get("warehouse_id"),
                    location_id=raw.get("location_id"),
                    inventory_action_type_id=raw.get("inventory_action_type_id"),
                    adjustment_type_id=raw.get("adjustment_type_id"),
                    comments=raw.get("comments"),
                    meta=raw.get("meta") or {},
                )
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise click.BadParameter(f"Invalid record {index}: {exc}")
    return requests


@click.command("show")
def inventory_show() -> None:
    """Show on-hand, reserved and available stock per scope record."""
    handler = ShowInventoryHandler(uow=unit_of_work())
    lines = handler.handle()

    if not lines:
        click.echo("No inventory records found.")
        return

    click.echo(
        f"{'Scope':<10} {'Scope ID':<14} {'Batch':<14} "
        f"{'On hand':>8} {'Reserved':>10} {'Available':>10}"
    )
    click.echo("-" * 71)
    for line in lines:
        click.echo(
            f"{line.scope:<10} {line.scope_id:<14} {line.batch_id:<14} "
            f"{line.on_hand:>8} {line.reserved:>10} {line.available:>10}"
        )


@click.command("adjust")
@click.option(
    "--file",
    "file_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON list of adjustment records.",
)
@click.option("--user", "performed_by", default=None, help="User performing the adjustment.")
def inventory_adjust(file_path: Path, performed_by: str | None) -> None:
    """Set absolute on-hand quantities for up to 20 records at once."""
    requests = _parse_requests(file_path)
    settings = get_settings()
    handler = AdjustInventoryHandler(uow=unit_of_work(), status_lookup=status_lookup())

    try:
        result = run_with_retry(
            lambda: handler.handle(requests, performed_by=performed_by),
            max_attempts=settings.retry_max_attempts,
            delay=settings.retry_delay_seconds,
            multiplier=settings.retry_multiplier,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Adjusted {len(result.inventory_record_ids)} record(s); "
        f"{len(result.audit_log_ids)} audit entr{'y' if len(result.audit_log_ids) == 1 else 'ies'} written."
    )
