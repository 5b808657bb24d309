"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class AllocationOptions:
    """Input: where and how an allocation attempt may draw stock."""

    warehouse_id: str
    lot_ids: tuple[str, ...] = ()  # manual override when non-empty
    allow_partial: bool = False  # only consulted for manual lot selection
    exclude_expired: bool = False
    performed_by: str | None = None
    now: datetime | None = None

    @property
    def is_manual(self) -> bool:
        return bool(self.lot_ids)


@dataclass(frozen=True)
class LotTakeDTO:
    lot_id: str
    allocated_quantity: int


@dataclass(frozen=True)
class AllocationSummary:
    """Output: what one allocation attempt reserved and where it left the order."""

    order_id: str
    order_item_id: str
    strategy: str
    requested_quantity: int
    allocated_quantity: int
    remaining: int
    item_status: str
    order_status: str
    lots: list[LotTakeDTO] = field(default_factory=list)
    allocation_ids: list[str] = field(default_factory=list)
    inventory_record_ids: list[str] = field(default_factory=list)
    audit_log_ids: list[str] = field(default_factory=list)
    item_fulfillment: dict[str, bool] = field(default_factory=dict)

    @property
    def fulfilled(self) -> bool:
        return self.remaining == 0


@dataclass(frozen=True)
class AdjustmentResult:
    """Output: records touched by a manual adjustment."""

    inventory_record_ids: list[str]
    audit_log_ids: list[str]


@dataclass(frozen=True)
class ItemPreviewDTO:
    """Output: how one order item would be allocated right now."""

    order_item_id: str
    product: str
    quantity_needed: int
    allocated_total: int
    remaining: int
    fulfilled: bool
    lots: list[LotTakeDTO] = field(default_factory=list)


@dataclass(frozen=True)
class AuditVerificationReport:
    checked: int
    invalid_entry_ids: list[str]

    @property
    def intact(self) -> bool:
        return not self.invalid_entry_ids
