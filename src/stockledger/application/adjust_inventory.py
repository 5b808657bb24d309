"""Application service: Adjust Inventory use case.

Applies manual absolute-quantity adjustments inside one unit of work:
lock every touched scope record and its lot, compute the plan from the
locked rows, persist the updates, carry the new on-hand quantities over to
the matching lots, and append the audit entries.  Ledger, lots and audit
trail commit together or not at all.
"""

from __future__ import annotations

from collections.abc import Sequence

from stockledger.application.dto import AdjustmentResult
from stockledger.config.logging import get_logger
from stockledger.domain.clock import Clock
from stockledger.domain.exceptions import BusinessError, DomainException
from stockledger.domain.model.adjustment import AdjustmentRequest
from stockledger.domain.repository.status_lookup import StatusLookup
from stockledger.domain.repository.unit_of_work import (
    INVENTORY_TABLE,
    LOT_TABLE,
    UnitOfWork,
)
from stockledger.domain.service.inventory_adjustment_service import (
    InventoryAdjustmentService,
)

logger = get_logger(__name__)


class AdjustInventoryHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        status_lookup: StatusLookup,
        clock: Clock | None = None,
    ) -> None:
        self._uow = uow
        self._statuses = status_lookup
        self._clock = clock

    def handle(
        self,
        requests: Sequence[AdjustmentRequest],
        performed_by: str | None = None,
    ) -> AdjustmentResult:
        InventoryAdjustmentService.validate_shape(requests)
        logger.info(
            "inventory_adjustment_started",
            record_count=len(requests),
            performed_by=performed_by,
        )
        try:
            with self._uow as uow:
                # Lock in a stable order so concurrent adjustments cannot deadlock.
                keys = sorted(
                    {key for r in requests for key in r.scope_keys()}, key=lambda k: k.row_id
                )
                for table in (LOT_TABLE, INVENTORY_TABLE):
                    for key in keys:
                        uow.lock_row(table, key.row_id)

                service = InventoryAdjustmentService(
                    uow.inventory, uow.batches, self._statuses, self._clock
                )
                plan = service.compute_adjustments(requests, performed_by=performed_by)
                for key in plan.composite_keys:
                    uow.lock_row(INVENTORY_TABLE, key.row_id)

                record_ids = uow.inventory.persist_updates(plan.all_updates())
                for update in plan.all_updates():
                    uow.lock_row(LOT_TABLE, update.key.row_id)
                lot_ids = uow.batches.mirror_updates(plan.all_updates())
                log_ids = uow.audit_log.append_entries(plan.log_entries)
                uow.commit()
        except DomainException as exc:
            logger.warning(
                "inventory_adjustment_rejected",
                error=str(exc),
                error_type=type(exc).__name__,
                **getattr(exc, "context", {}),
            )
            raise
        except Exception as exc:
            logger.exception("inventory_adjustment_failed", record_count=len(requests))
            raise BusinessError("Inventory adjustment failed.") from exc

        logger.info(
            "inventory_adjustment_completed",
            records_updated=len(record_ids),
            lots_updated=len(lot_ids),
            audit_entries=len(log_ids),
        )
        return AdjustmentResult(inventory_record_ids=record_ids, audit_log_ids=log_ids)
