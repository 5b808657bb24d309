"""Inventory audit log entries.

Entries are append-only.  Each one carries a checksum over its canonical
content so a single stored row can be verified on its own, without
reference to its neighbours.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from stockledger.domain.hashing import hash_payload
from stockledger.domain.model.value_objects import ScopeKind, SourceType


@dataclass(frozen=True)
class AuditLogEntry:
    scope_record_id: str
    inventory_scope: ScopeKind
    quantity: int
    previous_quantity: int
    quantity_change: int
    status_id: str
    action_type_id: str | None
    source_type: SourceType
    recorded_at: datetime
    checksum: str
    status_date: datetime | None = None
    adjustment_type_id: str | None = None
    comments: str | None = None
    source_ref_id: str | None = None
    order_id: str | None = None
    performed_by: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)
    id: str | None = None

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def create(
        *,
        scope_record_id: str,
        inventory_scope: ScopeKind,
        quantity: int,
        previous_quantity: int,
        status_id: str,
        action_type_id: str | None,
        source_type: SourceType,
        recorded_at: datetime,
        status_date: datetime | None = None,
        adjustment_type_id: str | None = None,
        comments: str | None = None,
        source_ref_id: str | None = None,
        order_id: str | None = None,
        performed_by: str | None = None,
        meta: dict[str, Any] | None = None,
    ) -> AuditLogEntry:
        """Build a draft entry with ``quantity_change`` and checksum derived."""
        merged_meta = {
            "source": source_type.value,
            "source_level": inventory_scope.value,
            **(meta or {}),
        }
        draft = AuditLogEntry(
            scope_record_id=scope_record_id,
            inventory_scope=inventory_scope,
            quantity=quantity,
            previous_quantity=previous_quantity,
            quantity_change=quantity - previous_quantity,
            status_id=status_id,
            status_date=status_date,
            action_type_id=action_type_id,
            adjustment_type_id=adjustment_type_id,
            comments=comments,
            source_type=source_type,
            source_ref_id=source_ref_id,
            order_id=order_id,
            performed_by=performed_by,
            recorded_at=recorded_at,
            meta=merged_meta,
            checksum="",
        )
        return dataclasses.replace(draft, checksum=draft.compute_checksum())

    # --- Integrity ------------------------------------------------------------

    def checksum_payload(self) -> dict[str, Any]:
        """Every field except the storage id and the checksum itself."""
        return {
            "scope_record_id": self.scope_record_id,
            "inventory_scope": self.inventory_scope.value,
            "quantity": self.quantity,
            "previous_quantity": self.previous_quantity,
            "quantity_change": self.quantity_change,
            "status_id": self.status_id,
            "status_date": self.status_date,
            "action_type_id": self.action_type_id,
            "adjustment_type_id": self.adjustment_type_id,
            "comments": self.comments,
            "source_type": self.source_type.value,
            "source_ref_id": self.source_ref_id,
            "order_id": self.order_id,
            "performed_by": self.performed_by,
            "recorded_at": self.recorded_at,
            "meta": self.meta,
        }

    def compute_checksum(self) -> str:
        return hash_payload(self.checksum_payload())

    def verify_checksum(self) -> bool:
        return self.checksum == self.compute_checksum()

    def with_id(self, entry_id: str) -> AuditLogEntry:
        return dataclasses.replace(self, id=entry_id)
