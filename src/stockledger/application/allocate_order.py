"""Application service: Allocate Order use case.

Reserves stock for one order item across one or more lots, inside a
single unit of work:

1. Validate the requested quantity and the order/item status.
2. Resolve candidate lots in strategy order: the caller's explicit lots
   (manual override) or every lot of the product in the warehouse.
3. For each lot: lock it and its scope record *before* reading quantities,
   take ``min(available, remaining)``, and re-check the item's allocated
   total against the ordered quantity.
4. Insert allocation rows, increment reserved quantities, and append one
   audit entry per take.
5. Resolve the item and order statuses and persist them.

Any error rolls back every reservation made by the call.  Lots are always
consumed strictly sequentially; FEFO/FIFO correctness depends on it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from stockledger.application.dto import AllocationOptions, AllocationSummary, LotTakeDTO
from stockledger.config.logging import get_logger
from stockledger.domain.clock import Clock, SystemClock
from stockledger.domain.exceptions import (
    BusinessError,
    DomainException,
    EntityNotFoundError,
    ValidationError,
)
from stockledger.domain.model.allocation import InventoryAllocation
from stockledger.domain.model.audit import AuditLogEntry
from stockledger.domain.model.batch import Batch
from stockledger.domain.model.inventory import InventoryRecord
from stockledger.domain.model.order import Order, OrderItem, OrderStatus
from stockledger.domain.model.value_objects import (
    AllocationStrategy,
    ProductKey,
    ScopeKey,
    ScopeKind,
    SourceType,
    StatusCode,
)
from stockledger.domain.repository.status_lookup import StatusLookup
from stockledger.domain.repository.unit_of_work import (
    INVENTORY_TABLE,
    LOT_TABLE,
    ORDER_TABLE,
    UnitOfWork,
)
from stockledger.domain.service.batch_allocation import order_candidates, sort_by_strategy

logger = get_logger(__name__)


@dataclass
class _Take:
    lot: Batch
    record: InventoryRecord
    quantity: int
    reserved_before: int


class AllocateOrderHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        status_lookup: StatusLookup,
        clock: Clock | None = None,
    ) -> None:
        self._uow = uow
        self._statuses = status_lookup
        self._clock = clock or SystemClock()

    def handle(
        self,
        order_id: str,
        product_key: ProductKey,
        quantity: int,
        strategy: AllocationStrategy | str = AllocationStrategy.FEFO,
        options: AllocationOptions | None = None,
    ) -> AllocationSummary:
        """Allocate *quantity* of *product_key* for an order.

        Manual lot selection must satisfy the whole quantity unless
        ``options.allow_partial`` is set; automatic selection always
        accepts a partial result.
        """
        strategy = AllocationStrategy.of(strategy)
        if options is None:
            raise ValidationError("Allocation options with a warehouse are required")
        if not options.warehouse_id:
            raise ValidationError("Warehouse id is required", field="warehouse_id")
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            raise ValidationError(
                "Quantity must be a positive number greater than zero.", field="quantity"
            )

        log = logger.bind(
            order_id=order_id,
            product=str(product_key),
            quantity=quantity,
            strategy=strategy.value,
            manual=options.is_manual,
        )
        log.info("allocation_started")
        try:
            with self._uow as uow:
                summary = self._allocate(uow, order_id, product_key, quantity, strategy, options)
                uow.commit()
        except DomainException as exc:
            log.warning(
                "allocation_rejected",
                error=str(exc),
                error_type=type(exc).__name__,
                **getattr(exc, "context", {}),
            )
            raise
        except Exception as exc:
            log.exception("allocation_failed")
            raise BusinessError("Inventory allocation failed.") from exc

        log.info(
            "allocation_completed",
            allocated=summary.allocated_quantity,
            remaining=summary.remaining,
            item_status=summary.item_status,
            order_status=summary.order_status,
        )
        return summary

    # --- Workflow -------------------------------------------------------------

    def _allocate(
        self,
        uow: UnitOfWork,
        order_id: str,
        product_key: ProductKey,
        quantity: int,
        strategy: AllocationStrategy,
        options: AllocationOptions,
    ) -> AllocationSummary:
        now = options.now or self._clock.now()

        # The order row lock serializes attempts on the same order.
        uow.lock_row(ORDER_TABLE, order_id)
        order = uow.orders.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order {order_id} not found")
        order.ensure_allocatable()
        item = order.find_item_by_product(product_key)
        item.ensure_allocatable()

        ordered = item.quantity_ordered.value
        if quantity > ordered:
            raise ValidationError(
                f"Requested quantity ({quantity}) exceeds ordered quantity "
                f"({ordered}) for product {product_key}.",
                field="quantity",
            )

        lots = self._candidate_lots(uow, item, strategy, options, now)
        item.start_allocation()

        already_allocated = uow.allocations.total_allocated(order.id, item.id)
        takes = self._take_from_lots(
            uow, item, lots, quantity, already_allocated, strategy, options, now
        )
        taken = sum(t.quantity for t in takes)
        remaining = quantity - taken

        if remaining > 0 and options.is_manual and not options.allow_partial:
            raise ValidationError(
                f"Selected lots cover only {taken} of {quantity} requested "
                f"for product {product_key}",
                field="lot_ids",
            )

        total_allocated = already_allocated + taken
        item.complete_allocation(total_allocated)
        allocation_ids, log_ids = self._persist_takes(
            uow, order, item, takes, remaining == 0, strategy, options, now
        )
        order.refresh_status()
        uow.orders.save(order)

        return AllocationSummary(
            order_id=order.id,
            order_item_id=item.id,
            strategy=strategy.value,
            requested_quantity=quantity,
            allocated_quantity=taken,
            remaining=remaining,
            item_status=item.status.value,
            order_status=order.status.value,
            lots=[LotTakeDTO(t.lot.batch_id, t.quantity) for t in takes],
            allocation_ids=allocation_ids,
            inventory_record_ids=list(dict.fromkeys(t.record.id for t in takes)),
            audit_log_ids=log_ids,
            item_fulfillment={
                i.id: i.status == OrderStatus.ALLOCATED for i in order.items
            },
        )

    def _candidate_lots(
        self,
        uow: UnitOfWork,
        item: OrderItem,
        strategy: AllocationStrategy,
        options: AllocationOptions,
        now: datetime,
    ) -> list[Batch]:
        if not options.is_manual:
            return order_candidates(
                uow.batches.find_lots(item.product_key, options.warehouse_id),
                strategy,
                exclude_expired=options.exclude_expired,
                now=now,
            )

        lots: list[Batch] = []
        for lot_id in dict.fromkeys(options.lot_ids):
            key = ScopeKey(ScopeKind.WAREHOUSE, options.warehouse_id, lot_id)
            lot = uow.batches.get_lot(key)
            if lot is None:
                raise EntityNotFoundError(
                    f"Lot {lot_id} not found in warehouse {options.warehouse_id}"
                )
            if lot.product_key != item.product_key:
                raise ValidationError(
                    f"Lot {lot_id} holds {lot.product_key}, not {item.product_key}",
                    field="lot_ids",
                    key=lot_id,
                )
            lots.append(lot)
        return sort_by_strategy(lots, strategy)

    def _take_from_lots(
        self,
        uow: UnitOfWork,
        item: OrderItem,
        lots: list[Batch],
        quantity: int,
        already_allocated: int,
        strategy: AllocationStrategy,
        options: AllocationOptions,
        now: datetime,
    ) -> list[_Take]:
        ordered = item.quantity_ordered.value
        takes: list[_Take] = []
        remaining = quantity

        for candidate in lots:
            if remaining <= 0:
                break

            # Lock before reading: the candidate list may already be stale.
            uow.lock_row(LOT_TABLE, candidate.key.row_id)
            lot = uow.batches.get_lot(candidate.key)
            if lot is None:
                raise EntityNotFoundError(f"Lot {candidate.key} no longer exists")
            uow.lock_row(INVENTORY_TABLE, lot.key.row_id)
            record = uow.inventory.get(lot.key)
            if record is None:
                raise EntityNotFoundError(
                    f"No matching warehouse inventory record for {lot.key}"
                )

            if (
                options.exclude_expired
                and strategy == AllocationStrategy.FEFO
                and lot.is_expired(now)
            ):
                continue

            available = min(lot.available_quantity, record.available_quantity)
            take = min(available, remaining)
            if take <= 0:
                continue

            allocated_to_date = already_allocated + sum(t.quantity for t in takes)
            if allocated_to_date + take > ordered:
                raise ValidationError(
                    f"Allocating {take} more would exceed ordered quantity "
                    f"{ordered} for item {item.id} (already {allocated_to_date})",
                    field="quantity",
                )

            reserved_before = record.reserved_quantity
            lot.reserve(take)
            record.reserve(take, at=now)
            uow.batches.save(lot)
            uow.inventory.save(record)
            takes.append(_Take(lot, record, take, reserved_before))
            remaining -= take

        return takes

    def _persist_takes(
        self,
        uow: UnitOfWork,
        order: Order,
        item: OrderItem,
        takes: list[_Take],
        satisfied: bool,
        strategy: AllocationStrategy,
        options: AllocationOptions,
        now: datetime,
    ) -> tuple[list[str], list[str]]:
        if not takes:
            return [], []

        status_code = StatusCode.ALLOC_COMPLETED if satisfied else StatusCode.ALLOC_PARTIAL
        status_id = self._statuses.get_status_id(status_code)
        action_id = self._statuses.get_status_id(StatusCode.ACTION_ORDER_ALLOCATION)

        allocation_ids: list[str] = []
        entries: list[AuditLogEntry] = []
        for take in takes:
            allocation = uow.allocations.insert(
                InventoryAllocation(
                    order_id=order.id,
                    order_item_id=item.id,
                    lot_key=take.lot.key,
                    inventory_record_id=take.record.id,
                    allocated_quantity=take.quantity,
                    status_id=status_id,
                    created_at=now,
                    created_by=options.performed_by,
                )
            )
            allocation_ids.append(allocation.id)
            entries.append(
                AuditLogEntry.create(
                    scope_record_id=take.record.id,
                    inventory_scope=take.record.scope,
                    quantity=take.reserved_before + take.quantity,
                    previous_quantity=take.reserved_before,
                    status_id=take.record.status_id,
                    action_type_id=action_id,
                    source_type=SourceType.ORDER,
                    source_ref_id=allocation.id,
                    order_id=order.id,
                    performed_by=options.performed_by,
                    recorded_at=now,
                    meta={
                        "quantity_field": "reserved_quantity",
                        "lot_id": take.lot.batch_id,
                        "order_item_id": item.id,
                        "strategy": strategy.value,
                        "selection": "manual" if options.is_manual else "auto",
                        "allocation_status": status_code,
                    },
                )
            )

        log_ids = uow.audit_log.append_entries(entries)
        return allocation_ids, log_ids
