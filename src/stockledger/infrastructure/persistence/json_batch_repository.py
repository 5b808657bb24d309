"""JSON-file-backed implementation of BatchRepository.

The batch registry and the per-scope lots are separate tables: a batch is
registered once, and a lot row exists for every scope that holds it.
"""

from __future__ import annotations

from stockledger.domain.model.batch import Batch, BatchRegistryEntry
from stockledger.domain.model.value_objects import (
    BatchType,
    ProductKey,
    ScopeKey,
    ScopeKind,
)
from stockledger.domain.repository.batch_repository import BatchRepository
from stockledger.infrastructure.persistence.json_store import (
    WorkingTables,
    dump_datetime,
    load_datetime,
)

LOTS = "lots"
REGISTRY = "batch_registry"


def _product_key(raw: dict) -> ProductKey | None:
    if raw.get("sku_id") or raw.get("packaging_material_id"):
        return ProductKey(raw.get("sku_id"), raw.get("packaging_material_id"))
    return None


class JsonBatchRepository(BatchRepository):

    def __init__(self, tables: WorkingTables) -> None:
        self._tables = tables

    # --- BatchRepository interface --------------------------------------------

    def get_registry_entry(self, batch_id: str) -> BatchRegistryEntry | None:
        raw = self._tables.get(REGISTRY, batch_id)
        if raw is None:
            return None
        return BatchRegistryEntry(
            batch_id=raw["batch_id"],
            batch_type=BatchType(raw["batch_type"]),
            product_key=_product_key(raw),
        )

    def get_lot(self, key: ScopeKey) -> Batch | None:
        raw = self._tables.get(LOTS, key.row_id)
        return self._to_domain(raw) if raw is not None else None

    def list_by_scope(
        self, scope_id: str, kind: ScopeKind = ScopeKind.WAREHOUSE
    ) -> list[Batch]:
        return [
            self._to_domain(raw)
            for raw in self._tables.rows(LOTS)
            if raw["scope"] == kind.value and raw["scope_id"] == scope_id
        ]

    def save(self, batch: Batch) -> None:
        self._tables.put(LOTS, batch.key.row_id, self._to_raw(batch))

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(batch: Batch) -> dict:
        return {
            "scope": batch.key.kind.value,
            "scope_id": batch.scope_id,
            "batch_id": batch.batch_id,
            "sku_id": batch.product_key.sku_id,
            "packaging_material_id": batch.product_key.packaging_material_id,
            "on_hand_quantity": batch.on_hand_quantity,
            "reserved_quantity": batch.reserved_quantity,
            "expiry_date": dump_datetime(batch.expiry_date),
            "inbound_date": dump_datetime(batch.inbound_date),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Batch:
        return Batch(
            key=ScopeKey(
                ScopeKind(raw.get("scope", "warehouse")), raw["scope_id"], raw["batch_id"]
            ),
            product_key=_product_key(raw),
            on_hand_quantity=raw["on_hand_quantity"],
            reserved_quantity=raw.get("reserved_quantity", 0),
            expiry_date=load_datetime(raw.get("expiry_date")),
            inbound_date=load_datetime(raw.get("inbound_date")),
        )
