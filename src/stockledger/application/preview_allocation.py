"""Application service: Preview Allocation use case (query).

Shows how every open item of an order would be satisfied from the lots
currently in a warehouse, without reserving anything.  A lot offers no
more than its warehouse inventory record has available, the same cap an
actual allocation applies.
"""

from __future__ import annotations

import dataclasses

from stockledger.application.dto import ItemPreviewDTO, LotTakeDTO
from stockledger.domain.clock import Clock, SystemClock
from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.model.allocation import AllocationDemand
from stockledger.domain.model.batch import Batch
from stockledger.domain.model.order import ALLOCATABLE_STATUSES
from stockledger.domain.model.value_objects import AllocationStrategy, ScopeKind
from stockledger.domain.repository.unit_of_work import UnitOfWork
from stockledger.domain.service.batch_allocation import allocate_batches_for_order_items


class PreviewAllocationHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock | None = None) -> None:
        self._uow = uow
        self._clock = clock or SystemClock()

    def handle(
        self,
        order_id: str,
        warehouse_id: str,
        strategy: AllocationStrategy | str = AllocationStrategy.FEFO,
        exclude_expired: bool = False,
    ) -> list[ItemPreviewDTO]:
        strategy = AllocationStrategy.of(strategy)
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order {order_id} not found")

            demands = []
            for item in order.items:
                if item.status not in ALLOCATABLE_STATUSES:
                    continue
                outstanding = item.quantity_ordered.value - uow.allocations.total_allocated(
                    order.id, item.id
                )
                if outstanding > 0:
                    demands.append(
                        AllocationDemand(item.id, item.product_key, outstanding)
                    )

            results = allocate_batches_for_order_items(
                demands,
                _available_lots(uow, warehouse_id),
                strategy=strategy,
                exclude_expired=exclude_expired,
                now=self._clock.now(),
            )

        return [
            ItemPreviewDTO(
                order_item_id=result.order_item_id,
                product=str(result.demand.product_key),
                quantity_needed=result.demand.quantity_ordered,
                allocated_total=result.outcome.allocated_total,
                remaining=result.outcome.remaining,
                fulfilled=result.outcome.fulfilled,
                lots=[
                    LotTakeDTO(b.batch_id, b.allocated_quantity)
                    for b in result.outcome.allocated_batches
                ],
            )
            for result in results
        ]


def _available_lots(uow: UnitOfWork, warehouse_id: str) -> list[Batch]:
    lots = []
    for lot in uow.batches.list_by_scope(warehouse_id, ScopeKind.WAREHOUSE):
        record = uow.inventory.get(lot.key)
        if record is None:
            continue
        available = min(lot.available_quantity, record.available_quantity)
        lots.append(
            dataclasses.replace(lot, reserved_quantity=lot.on_hand_quantity - available)
        )
    return lots
