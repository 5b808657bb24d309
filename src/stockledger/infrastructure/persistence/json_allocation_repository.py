"""JSON-file-backed implementation of AllocationRepository."""

from __future__ import annotations

import dataclasses
import uuid

from stockledger.domain.model.allocation import InventoryAllocation
from stockledger.domain.model.value_objects import ScopeKey, ScopeKind
from stockledger.domain.repository.allocation_repository import AllocationRepository
from stockledger.infrastructure.persistence.json_store import (
    WorkingTables,
    dump_datetime,
    load_datetime,
)

TABLE = "allocations"


class JsonAllocationRepository(AllocationRepository):

    def __init__(self, tables: WorkingTables) -> None:
        self._tables = tables

    def insert(self, allocation: InventoryAllocation) -> InventoryAllocation:
        stored = dataclasses.replace(allocation, id=str(uuid.uuid4()))
        self._tables.put(TABLE, stored.id, self._to_raw(stored))
        return stored

    def list_for_order(self, order_id: str) -> list[InventoryAllocation]:
        return [
            self._to_domain(raw)
            for raw in self._tables.rows(TABLE)
            if raw["order_id"] == order_id
        ]

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(allocation: InventoryAllocation) -> dict:
        return {
            "id": allocation.id,
            "order_id": allocation.order_id,
            "order_item_id": allocation.order_item_id,
            "scope": allocation.lot_key.kind.value,
            "scope_id": allocation.lot_key.scope_id,
            "batch_id": allocation.lot_key.batch_id,
            "inventory_record_id": allocation.inventory_record_id,
            "allocated_quantity": allocation.allocated_quantity,
            "status_id": allocation.status_id,
            "created_at": dump_datetime(allocation.created_at),
            "created_by": allocation.created_by,
        }

    @staticmethod
    def _to_domain(raw: dict) -> InventoryAllocation:
        return InventoryAllocation(
            id=raw["id"],
            order_id=raw["order_id"],
            order_item_id=raw["order_item_id"],
            lot_key=ScopeKey(ScopeKind(raw["scope"]), raw["scope_id"], raw["batch_id"]),
            inventory_record_id=raw["inventory_record_id"],
            allocated_quantity=raw["allocated_quantity"],
            status_id=raw["status_id"],
            created_at=load_datetime(raw["created_at"]),
            created_by=raw.get("created_by"),
        )
