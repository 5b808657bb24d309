"""Abstract unit of work: one transaction plus the row locks taken inside it.

Usage::

    with uow:
        uow.lock_row(LOT_TABLE, key.row_id)
        ...
        uow.commit()

Leaving the block without ``commit()``, including by exception, rolls
back every change.  Locks taken with ``lock_row`` are held until the block
exits, on every exit path.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager

from stockledger.domain.repository.allocation_repository import AllocationRepository
from stockledger.domain.repository.audit_log_sink import AuditLogSink
from stockledger.domain.repository.batch_repository import BatchRepository
from stockledger.domain.repository.inventory_repository import InventoryRepository
from stockledger.domain.repository.order_repository import OrderRepository

LOT_TABLE = "lots"
INVENTORY_TABLE = "inventory"
ORDER_TABLE = "orders"


class UnitOfWork(ABC):

    inventory: InventoryRepository
    batches: BatchRepository
    orders: OrderRepository
    allocations: AllocationRepository
    audit_log: AuditLogSink

    def __init__(self) -> None:
        self._held_locks: list[tuple[str, str]] = []
        self._committed = False

    # --- Transaction boundary -------------------------------------------------

    def __enter__(self) -> UnitOfWork:
        self._committed = False
        self._begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if not self._committed:
                self.rollback()
        finally:
            self._release_all()

    def commit(self) -> None:
        self._commit()
        self._committed = True

    @abstractmethod
    def rollback(self) -> None:
        """Discard every change made since the transaction began."""

    @abstractmethod
    def _begin(self) -> None: ...

    @abstractmethod
    def _commit(self) -> None: ...

    # --- Row locking ----------------------------------------------------------

    def lock_row(self, table: str, row_id: str) -> None:
        """Take an exclusive lock held until the unit of work exits."""
        if (table, row_id) in self._held_locks:
            return
        self._acquire(table, row_id)
        self._held_locks.append((table, row_id))

    @contextmanager
    def with_lock(self, table: str, row_id: str) -> Iterator[None]:
        """Hold an exclusive lock only for the duration of the block."""
        if (table, row_id) in self._held_locks:
            yield
            return
        self._acquire(table, row_id)
        try:
            yield
        finally:
            self._release(table, row_id)

    @property
    def held_locks(self) -> list[tuple[str, str]]:
        return list(self._held_locks)

    def _release_all(self) -> None:
        while self._held_locks:
            table, row_id = self._held_locks.pop()
            self._release(table, row_id)

    @abstractmethod
    def _acquire(self, table: str, row_id: str) -> None: ...

    @abstractmethod
    def _release(self, table: str, row_id: str) -> None: ...
