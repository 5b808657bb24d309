"""Process-wide exclusive row locks shared by every unit of work."""

from __future__ import annotations

import threading

from stockledger.domain.exceptions import LockTimeoutError


class RowLockManager:

    def __init__(self, timeout: float = 5.0) -> None:
        self._timeout = timeout
        self._guard = threading.Lock()
        self._locks: dict[tuple[str, str], threading.Lock] = {}

    def acquire(self, table: str, row_id: str) -> None:
        """Block until the row is free; raise LockTimeoutError after the timeout."""
        with self._guard:
            lock = self._locks.setdefault((table, row_id), threading.Lock())
        if not lock.acquire(timeout=self._timeout):
            raise LockTimeoutError(table, row_id, self._timeout)

    def release(self, table: str, row_id: str) -> None:
        with self._guard:
            lock = self._locks.get((table, row_id))
        if lock is not None and lock.locked():
            lock.release()

    def is_locked(self, table: str, row_id: str) -> bool:
        with self._guard:
            lock = self._locks.get((table, row_id))
        return lock is not None and lock.locked()
