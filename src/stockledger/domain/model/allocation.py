"""Allocation demand, per-call outcomes, and persisted allocation rows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.batch import Batch
from stockledger.domain.model.value_objects import ProductKey, ScopeKey


@dataclass(frozen=True)
class AllocationDemand:
    """One order line asking for stock of one product."""

    order_item_id: str
    product_key: ProductKey | None
    quantity_ordered: int

    def __post_init__(self) -> None:
        if self.quantity_ordered <= 0:
            raise ValidationError(
                f"Demand for item {self.order_item_id} must be positive",
                field="quantity_ordered",
            )


@dataclass(frozen=True)
class AllocatedBatch:
    batch: Batch
    allocated_quantity: int

    @property
    def batch_id(self) -> str:
        return self.batch.batch_id


@dataclass(frozen=True)
class AllocationOutcome:
    """Result of satisfying one demand from a pool of batches."""

    allocated_batches: tuple[AllocatedBatch, ...]
    allocated_total: int
    remaining: int

    @property
    def fulfilled(self) -> bool:
        return self.remaining == 0

    @staticmethod
    def empty(required_quantity: int) -> AllocationOutcome:
        return AllocationOutcome((), 0, max(0, required_quantity))


@dataclass(frozen=True)
class ItemAllocationResult:
    demand: AllocationDemand
    outcome: AllocationOutcome

    @property
    def order_item_id(self) -> str:
        return self.demand.order_item_id


@dataclass(frozen=True)
class InventoryAllocation:
    """A persisted reservation of part of one lot for one order item."""

    order_id: str
    order_item_id: str
    lot_key: ScopeKey
    inventory_record_id: str
    allocated_quantity: int
    status_id: str
    created_at: datetime
    created_by: str | None = None
    id: str | None = None
