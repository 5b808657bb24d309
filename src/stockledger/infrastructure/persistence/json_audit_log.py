"""JSON-file-backed append-only audit log."""

from __future__ import annotations

import uuid
from collections.abc import Sequence

from stockledger.domain.model.audit import AuditLogEntry
from stockledger.domain.model.value_objects import ScopeKind, SourceType
from stockledger.domain.repository.audit_log_sink import AuditLogSink
from stockledger.infrastructure.persistence.json_store import (
    WorkingTables,
    dump_datetime,
    load_datetime,
)

TABLE = "audit_log"


class JsonAuditLog(AuditLogSink):

    def __init__(self, tables: WorkingTables) -> None:
        self._tables = tables

    def append_entries(self, entries: Sequence[AuditLogEntry]) -> list[str]:
        ids = []
        for entry in entries:
            stored = entry.with_id(str(uuid.uuid4()))
            self._tables.put(TABLE, stored.id, self._to_raw(stored))
            ids.append(stored.id)
        return ids

    def list_all(self) -> list[AuditLogEntry]:
        return [self._to_domain(raw) for raw in self._tables.rows(TABLE)]

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(entry: AuditLogEntry) -> dict:
        return {
            "id": entry.id,
            "scope_record_id": entry.scope_record_id,
            "inventory_scope": entry.inventory_scope.value,
            "quantity": entry.quantity,
            "previous_quantity": entry.previous_quantity,
            "quantity_change": entry.quantity_change,
            "status_id": entry.status_id,
            "status_date": dump_datetime(entry.status_date),
            "action_type_id": entry.action_type_id,
            "adjustment_type_id": entry.adjustment_type_id,
            "comments": entry.comments,
            "source_type": entry.source_type.value,
            "source_ref_id": entry.source_ref_id,
            "order_id": entry.order_id,
            "performed_by": entry.performed_by,
            "recorded_at": dump_datetime(entry.recorded_at),
            "meta": entry.meta,
            "checksum": entry.checksum,
        }

    @staticmethod
    def _to_domain(raw: dict) -> AuditLogEntry:
        return AuditLogEntry(
            id=raw["id"],
            scope_record_id=raw["scope_record_id"],
            inventory_scope=ScopeKind(raw["inventory_scope"]),
            quantity=raw["quantity"],
            previous_quantity=raw["previous_quantity"],
            quantity_change=raw["quantity_change"],
            status_id=raw["status_id"],
            status_date=load_datetime(raw.get("status_date")),
            action_type_id=raw.get("action_type_id"),
            adjustment_type_id=raw.get("adjustment_type_id"),
            comments=raw.get("comments"),
            source_type=SourceType(raw["source_type"]),
            source_ref_id=raw.get("source_ref_id"),
            order_id=raw.get("order_id"),
            performed_by=raw.get("performed_by"),
            recorded_at=load_datetime(raw["recorded_at"]),
            meta=raw.get("meta", {}),
            checksum=raw["checksum"],
        )
