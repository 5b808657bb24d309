"""Abstract repository for InventoryRecord aggregates."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.model.adjustment import InventoryUpdate
from stockledger.domain.model.inventory import InventoryRecord
from stockledger.domain.model.value_objects import ScopeKey


class InventoryRepository(ABC):

    @abstractmethod
    def fetch_quantities(self, keys: Iterable[ScopeKey]) -> list[InventoryRecord]:
        """Return the records that exist for *keys*, in key order."""

    @abstractmethod
    def list_all(self) -> list[InventoryRecord]:
        """Return every inventory record."""

    @abstractmethod
    def save(self, record: InventoryRecord) -> None:
        """Persist a new or updated inventory record."""

    def get(self, key: ScopeKey) -> InventoryRecord | None:
        found = self.fetch_quantities([key])
        return found[0] if found else None

    def persist_updates(self, updates: Iterable[InventoryUpdate]) -> list[str]:
        """Apply absolute-quantity updates; return the touched record ids."""
        touched: list[str] = []
        for update in updates:
            record = self.get(update.key)
            if record is None:
                raise EntityNotFoundError(
                    f"No matching {update.key.kind.value} inventory record for {update.key}"
                )
            record.set_quantity(
                update.quantity,
                status_id=update.status_id,
                at=update.last_update,
                status_date=update.status_date,
            )
            self.save(record)
            touched.append(record.id)
        return touched
