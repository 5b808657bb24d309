"""JSON-file table store shared by every JsonUnitOfWork of a process.

Each table lives in ``<data_dir>/<table>.json`` as a list of objects.  In
memory the rows are keyed by their row id so a unit of work can refresh a
single row after locking it and write back only the rows it changed.
"""

from __future__ import annotations

import copy
import json
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

Row = dict[str, Any]


def dump_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def load_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value)


def scoped_row_id(raw: Row) -> str:
    return f"{raw.get('scope', 'warehouse')}:{raw['scope_id']}::{raw['batch_id']}"


ROW_IDS: dict[str, Callable[[Row], str]] = {
    "inventory": scoped_row_id,
    "lots": scoped_row_id,
    "batch_registry": lambda raw: raw["batch_id"],
    "orders": lambda raw: raw["id"],
    "allocations": lambda raw: raw["id"],
    "audit_log": lambda raw: raw["id"],
}


class JsonStore:

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = data_dir
        self._mutex = threading.Lock()
        self._tables: dict[str, dict[str, Row]] = {
            table: self._load(table) for table in ROW_IDS
        }

    # --- Reads ----------------------------------------------------------------

    def snapshot(self) -> dict[str, dict[str, Row]]:
        with self._mutex:
            return copy.deepcopy(self._tables)

    def read_row(self, table: str, row_id: str) -> Row | None:
        with self._mutex:
            row = self._tables[table].get(row_id)
            return copy.deepcopy(row) if row is not None else None

    def read_rows(self, table: str, predicate: Callable[[Row], bool]) -> dict[str, Row]:
        with self._mutex:
            return {
                row_id: copy.deepcopy(raw)
                for row_id, raw in self._tables[table].items()
                if predicate(raw)
            }

    # --- Writes ---------------------------------------------------------------

    def apply(self, changes: dict[str, dict[str, Row]]) -> None:
        """Write changed rows back and flush the affected tables to disk."""
        with self._mutex:
            for table, rows in changes.items():
                if not rows:
                    continue
                self._tables[table].update(copy.deepcopy(rows))
                self._persist(table)

    # --- File helpers ---------------------------------------------------------

    def _path(self, table: str) -> Path:
        return self._data_dir / f"{table}.json"

    def _load(self, table: str) -> dict[str, Row]:
        path = self._path(table)
        if not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("[]", encoding="utf-8")
        raw_rows = json.loads(path.read_text(encoding="utf-8"))
        row_id = ROW_IDS[table]
        return {row_id(raw): raw for raw in raw_rows}

    def _persist(self, table: str) -> None:
        self._path(table).write_text(
            json.dumps(list(self._tables[table].values()), indent=2) + "\n",
            encoding="utf-8",
        )


class WorkingTables:
    """One transaction's private copy of the tables, with dirty-row tracking."""

    def __init__(self, tables: dict[str, dict[str, Row]]) -> None:
        self._tables = tables
        self._dirty: dict[str, set[str]] = {table: set() for table in tables}

    def rows(self, table: str) -> list[Row]:
        return list(self._tables[table].values())

    def get(self, table: str, row_id: str) -> Row | None:
        return self._tables[table].get(row_id)

    def put(self, table: str, row_id: str, raw: Row) -> None:
        self._tables[table][row_id] = raw
        self._dirty[table].add(row_id)

    def refresh(self, table: str, row_id: str, raw: Row | None) -> None:
        """Replace a row with the store's current copy unless this transaction changed it."""
        if raw is not None and row_id not in self._dirty[table]:
            self._tables[table][row_id] = raw

    def changes(self) -> dict[str, dict[str, Row]]:
        return {
            table: {row_id: self._tables[table][row_id] for row_id in row_ids}
            for table, row_ids in self._dirty.items()
            if row_ids
        }
