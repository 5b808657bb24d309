"""CLI commands for the inventory audit log."""

from __future__ import annotations

import click

from stockledger.application.verify_audit_log import VerifyAuditLogHandler
from stockledger.infrastructure.bootstrap import unit_of_work


@click.command("verify")
def audit_verify() -> None:
    """Recompute every audit entry checksum and report tampered entries."""
    report = VerifyAuditLogHandler(uow=unit_of_work()).handle()

    if report.intact:
        click.echo(f"Audit log intact: {report.checked} entries verified.")
        return

    for entry_id in report.invalid_entry_ids:
        click.echo(f"Checksum mismatch: {entry_id}")
    raise click.ClickException(
        f"{len(report.invalid_entry_ids)} of {report.checked} audit entries failed verification."
    )
