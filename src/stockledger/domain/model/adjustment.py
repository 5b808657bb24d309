"""Manual inventory adjustment inputs and the plan computed from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterator

from stockledger.domain.model.audit import AuditLogEntry
from stockledger.domain.model.value_objects import BatchType, ScopeKey, ScopeKind


@dataclass(frozen=True)
class AdjustmentRequest:
    """One requested absolute target quantity for a batch.

    A request may name a warehouse, a location, or both; every named scope
    receives the same target quantity.
    """

    batch_id: str
    batch_type: BatchType
    quantity: int
    warehouse_id: str | None = None
    location_id: str | None = None
    inventory_action_type_id: str | None = None
    adjustment_type_id: str | None = None
    comments: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)
    requested_at: datetime | None = None

    def scope_keys(self) -> list[ScopeKey]:
        keys: list[ScopeKey] = []
        if self.warehouse_id:
            keys.append(ScopeKey(ScopeKind.WAREHOUSE, self.warehouse_id, self.batch_id))
        if self.location_id:
            keys.append(ScopeKey(ScopeKind.LOCATION, self.location_id, self.batch_id))
        return keys


@dataclass(frozen=True)
class ScopedInstruction:
    """A normalized, deduplicated target for exactly one scope record."""

    key: ScopeKey
    quantity: int
    inventory_action_type_id: str | None = None
    adjustment_type_id: str | None = None
    comments: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)
    requested_at: datetime | None = None

    @property
    def scope(self) -> str:
        return self.key.kind.value

    @property
    def scope_id(self) -> str:
        return self.key.scope_id

    @property
    def batch_id(self) -> str:
        return self.key.batch_id


@dataclass(frozen=True)
class InventoryUpdate:
    """Update payload for one scope record."""

    key: ScopeKey
    record_id: str
    quantity: int
    status_id: str
    last_update: datetime
    status_date: datetime | None = None


@dataclass
class AdjustmentPlan:
    """Everything needed to apply a set of adjustments in one transaction."""

    updates: dict[ScopeKind, dict[str, InventoryUpdate]] = field(
        default_factory=lambda: {kind: {} for kind in ScopeKind}
    )
    composite_keys: list[ScopeKey] = field(default_factory=list)
    log_entries: list[AuditLogEntry] = field(default_factory=list)

    def add(self, update: InventoryUpdate, entry: AuditLogEntry) -> None:
        self.updates[update.key.kind][update.key.composite] = update
        self.composite_keys.append(update.key)
        self.log_entries.append(entry)

    def all_updates(self) -> Iterator[InventoryUpdate]:
        for kind in ScopeKind:
            yield from self.updates[kind].values()

    def __len__(self) -> int:
        return len(self.composite_keys)
