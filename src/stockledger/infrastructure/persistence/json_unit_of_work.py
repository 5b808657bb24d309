"""JSON-file-backed implementation of UnitOfWork.

A unit of work works on a private copy of the store's tables.  Locking a
row refreshes that row from the store, so quantities read after the lock
is held are current, and locking an order also pulls in its committed
allocation rows.  ``commit()`` writes back only the rows the
transaction changed; leaving without a commit drops the copy.
"""

from __future__ import annotations

from stockledger.config.logging import get_logger
from stockledger.domain.repository.unit_of_work import ORDER_TABLE, UnitOfWork
from stockledger.infrastructure.persistence.json_allocation_repository import (
    TABLE as ALLOCATION_TABLE,
    JsonAllocationRepository,
)
from stockledger.infrastructure.persistence.json_audit_log import JsonAuditLog
from stockledger.infrastructure.persistence.json_batch_repository import (
    JsonBatchRepository,
)
from stockledger.infrastructure.persistence.json_inventory_repository import (
    JsonInventoryRepository,
)
from stockledger.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from stockledger.infrastructure.persistence.json_store import JsonStore, WorkingTables
from stockledger.infrastructure.persistence.locks import RowLockManager

logger = get_logger(__name__)


class JsonUnitOfWork(UnitOfWork):

    def __init__(self, store: JsonStore, locks: RowLockManager) -> None:
        super().__init__()
        self._store = store
        self._locks = locks
        self._tables: WorkingTables | None = None

    # --- Transaction boundary -------------------------------------------------

    def _begin(self) -> None:
        self._tables = WorkingTables(self._store.snapshot())
        self.inventory = JsonInventoryRepository(self._tables)
        self.batches = JsonBatchRepository(self._tables)
        self.orders = JsonOrderRepository(self._tables)
        self.allocations = JsonAllocationRepository(self._tables)
        self.audit_log = JsonAuditLog(self._tables)

    def _commit(self) -> None:
        changes = self._tables.changes()
        self._store.apply(changes)
        logger.debug(
            "unit_of_work_committed",
            rows={table: len(rows) for table, rows in changes.items()},
        )

    def rollback(self) -> None:
        if self._tables is not None and self._tables.changes():
            logger.debug("unit_of_work_rolled_back")
        self._tables = None

    # --- Row locking ----------------------------------------------------------

    def _acquire(self, table: str, row_id: str) -> None:
        self._locks.acquire(table, row_id)
        if self._tables is None:
            return
        self._tables.refresh(table, row_id, self._store.read_row(table, row_id))
        if table == ORDER_TABLE:
            # Allocation rows of an order are only written under its order lock.
            committed = self._store.read_rows(
                ALLOCATION_TABLE, lambda raw: raw["order_id"] == row_id
            )
            for allocation_id, raw in committed.items():
                self._tables.refresh(ALLOCATION_TABLE, allocation_id, raw)

    def _release(self, table: str, row_id: str) -> None:
        self._locks.release(table, row_id)
