"""Domain service: Inventory Adjustment.

Turns a batch of manual adjustment requests (absolute target quantities)
into an ``AdjustmentPlan``: one update payload per touched scope record,
the composite keys to lock, and one audit entry per mutated record.

The design is validate-then-compute: every request is checked and every
record is evaluated before the plan is returned, and a single invalid
request aborts the whole call.  Nothing is written here; the plan is
applied by the application layer inside a unit of work.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from stockledger.config.logging import get_logger
from stockledger.domain.clock import Clock, SystemClock
from stockledger.domain.exceptions import (
    BusinessError,
    DomainException,
    EntityNotFoundError,
    ValidationError,
)
from stockledger.domain.model.adjustment import (
    AdjustmentPlan,
    AdjustmentRequest,
    InventoryUpdate,
    ScopedInstruction,
)
from stockledger.domain.model.audit import AuditLogEntry
from stockledger.domain.model.inventory import InventoryRecord
from stockledger.domain.model.value_objects import SourceType, StatusCode
from stockledger.domain.repository.batch_repository import BatchRepository
from stockledger.domain.repository.inventory_repository import InventoryRepository
from stockledger.domain.repository.status_lookup import StatusLookup
from stockledger.domain.service.merge import (
    merge_by_composite_key,
    merge_inventory_fields,
)

logger = get_logger(__name__)

MAX_BULK_RECORDS = 20

_REQUEST_KEY = ("warehouse_id", "location_id", "batch_id")
_SCOPE_KEY = ("key",)


class InventoryAdjustmentService:

    def __init__(
        self,
        inventory_repo: InventoryRepository,
        batch_repo: BatchRepository,
        status_lookup: StatusLookup,
        clock: Clock | None = None,
    ) -> None:
        self._inventory_repo = inventory_repo
        self._batch_repo = batch_repo
        self._statuses = status_lookup
        self._clock = clock or SystemClock()

    def compute_adjustments(
        self,
        requests: Sequence[AdjustmentRequest],
        performed_by: str | None = None,
    ) -> AdjustmentPlan:
        """Validate, normalize and evaluate *requests* into an AdjustmentPlan."""
        self.validate_shape(requests)
        try:
            self._validate_batches(requests)
            instructions = self.normalize(requests)
            return self._compute(instructions, performed_by)
        except DomainException:
            raise
        except Exception as exc:
            logger.exception(
                "inventory_adjustment_compute_failed",
                record_count=len(requests),
            )
            raise BusinessError("Failed to compute inventory adjustments.") from exc

    # --- Step 1 & 2: validation -----------------------------------------------

    @staticmethod
    def validate_shape(requests: Sequence[AdjustmentRequest]) -> None:
        if not requests:
            raise ValidationError("No inventory records provided.", field="records")
        if len(requests) > MAX_BULK_RECORDS:
            raise ValidationError(
                f"Bulk limit is {MAX_BULK_RECORDS} records (got {len(requests)}).",
                field="records",
            )
        for index, request in enumerate(requests):
            if not isinstance(request.quantity, int) or isinstance(request.quantity, bool):
                raise ValidationError(
                    f"Quantity must be an integer (record {index})",
                    field="quantity",
                    record_index=index,
                )
            if request.quantity < 0:
                raise ValidationError(
                    f"Quantity cannot be negative (record {index})",
                    field="quantity",
                    record_index=index,
                )
            if not request.warehouse_id and not request.location_id:
                raise ValidationError(
                    f"Record {index} names neither a warehouse nor a location",
                    field="scope",
                    record_index=index,
                )

    def _validate_batches(self, requests: Sequence[AdjustmentRequest]) -> None:
        for index, request in enumerate(requests):
            entry = self._batch_repo.get_registry_entry(request.batch_id)
            if entry is None:
                raise EntityNotFoundError(
                    f"Batch '{request.batch_id}' (record {index}) is not registered"
                )
            if entry.batch_type != request.batch_type:
                raise ValidationError(
                    f"Batch '{request.batch_id}' is a {entry.batch_type.value} batch, "
                    f"not {request.batch_type.value}",
                    field="batch_type",
                    record_index=index,
                    key=request.batch_id,
                )

    # --- Step 3: normalization ------------------------------------------------

    @staticmethod
    def normalize(requests: Sequence[AdjustmentRequest]) -> list[ScopedInstruction]:
        """Deduplicate requests so each scope record gets one net instruction."""
        merged = merge_by_composite_key(requests, _REQUEST_KEY, merge_inventory_fields)
        scoped = [
            ScopedInstruction(
                key=key,
                quantity=request.quantity,
                inventory_action_type_id=request.inventory_action_type_id,
                adjustment_type_id=request.adjustment_type_id,
                comments=request.comments,
                meta=dict(request.meta),
                requested_at=request.requested_at,
            )
            for request in merged
            for key in request.scope_keys()
        ]
        return merge_by_composite_key(scoped, _SCOPE_KEY, merge_inventory_fields)

    # --- Step 4 & 5: evaluation -----------------------------------------------

    def _compute(
        self,
        instructions: list[ScopedInstruction],
        performed_by: str | None,
    ) -> AdjustmentPlan:
        in_stock_id = self._statuses.get_status_id(StatusCode.IN_STOCK)
        out_of_stock_id = self._statuses.get_status_id(StatusCode.OUT_OF_STOCK)
        default_action_id = self._statuses.get_status_id(StatusCode.ACTION_MANUAL_ADJUSTMENT)
        now = self._clock.now()

        records = {
            record.key: record
            for record in self._inventory_repo.fetch_quantities(
                [i.key for i in instructions]
            )
        }

        plan = AdjustmentPlan()
        for instruction in instructions:
            record = records.get(instruction.key)
            if record is None:
                raise EntityNotFoundError(
                    f"No matching {instruction.scope} inventory record for {instruction.key}"
                )
            update, entry = self._evaluate(
                instruction,
                record,
                in_stock_id=in_stock_id,
                out_of_stock_id=out_of_stock_id,
                default_action_id=default_action_id,
                performed_by=performed_by,
                now=now,
            )
            plan.add(update, entry)

        logger.debug("inventory_adjustment_computed", records=len(plan))
        return plan

    @staticmethod
    def _evaluate(
        instruction: ScopedInstruction,
        record: InventoryRecord,
        *,
        in_stock_id: str,
        out_of_stock_id: str,
        default_action_id: str,
        performed_by: str | None,
        now: datetime,
    ) -> tuple[InventoryUpdate, AuditLogEntry]:
        quantity = instruction.quantity
        if record.reserved_quantity > quantity:
            raise ValidationError(
                f"Reserved quantity ({record.reserved_quantity}) exceeds updated "
                f"{instruction.scope} quantity ({quantity}) for {instruction.key}",
                field="quantity",
                key=str(instruction.key),
            )

        # Only the two stock statuses are derived; any other status is kept.
        new_status = record.status_id
        status_date = None
        if record.status_id in (in_stock_id, out_of_stock_id):
            new_status = in_stock_id if quantity > 0 else out_of_stock_id
            if new_status != record.status_id:
                status_date = now

        update = InventoryUpdate(
            key=instruction.key,
            record_id=record.id,
            quantity=quantity,
            status_id=new_status,
            status_date=status_date,
            last_update=now,
        )
        entry = AuditLogEntry.create(
            scope_record_id=record.id,
            inventory_scope=instruction.key.kind,
            quantity=quantity,
            previous_quantity=record.on_hand_quantity,
            status_id=new_status,
            status_date=status_date,
            action_type_id=instruction.inventory_action_type_id or default_action_id,
            adjustment_type_id=instruction.adjustment_type_id,
            comments=instruction.comments,
            source_type=SourceType.MANUAL,
            performed_by=performed_by,
            recorded_at=now,
            meta=dict(instruction.meta),
        )
        return update, entry
