"""JSON-file-backed implementation of InventoryRepository."""

from __future__ import annotations

from collections.abc import Iterable

from stockledger.domain.model.inventory import InventoryRecord
from stockledger.domain.model.value_objects import ScopeKey, ScopeKind
from stockledger.domain.repository.inventory_repository import InventoryRepository
from stockledger.infrastructure.persistence.json_store import (
    WorkingTables,
    dump_datetime,
    load_datetime,
)

TABLE = "inventory"


class JsonInventoryRepository(InventoryRepository):

    def __init__(self, tables: WorkingTables) -> None:
        self._tables = tables

    # --- InventoryRepository interface ----------------------------------------

    def fetch_quantities(self, keys: Iterable[ScopeKey]) -> list[InventoryRecord]:
        records = []
        for key in keys:
            raw = self._tables.get(TABLE, key.row_id)
            if raw is not None:
                records.append(self._to_domain(raw))
        return records

    def list_all(self) -> list[InventoryRecord]:
        return [self._to_domain(raw) for raw in self._tables.rows(TABLE)]

    def save(self, record: InventoryRecord) -> None:
        self._tables.put(TABLE, record.key.row_id, self._to_raw(record))

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(record: InventoryRecord) -> dict:
        return {
            "id": record.id,
            "scope": record.scope.value,
            "scope_id": record.scope_id,
            "batch_id": record.batch_id,
            "on_hand_quantity": record.on_hand_quantity,
            "reserved_quantity": record.reserved_quantity,
            "status_id": record.status_id,
            "last_update": dump_datetime(record.last_update),
            "status_date": dump_datetime(record.status_date),
        }

    @staticmethod
    def _to_domain(raw: dict) -> InventoryRecord:
        return InventoryRecord(
            id=raw["id"],
            key=ScopeKey(
                ScopeKind(raw.get("scope", "warehouse")), raw["scope_id"], raw["batch_id"]
            ),
            on_hand_quantity=raw["on_hand_quantity"],
            reserved_quantity=raw.get("reserved_quantity", 0),
            status_id=raw["status_id"],
            last_update=load_datetime(raw.get("last_update")),
            status_date=load_datetime(raw.get("status_date")),
        )
