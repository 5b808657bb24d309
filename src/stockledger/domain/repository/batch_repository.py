"""Abstract repository for batches: the registry lookup and the lots per scope.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, in-memory)
live in the infrastructure layer and the test fakes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from stockledger.domain.model.adjustment import InventoryUpdate
from stockledger.domain.model.batch import Batch, BatchRegistryEntry
from stockledger.domain.model.value_objects import ProductKey, ScopeKey, ScopeKind


class BatchRepository(ABC):

    @abstractmethod
    def get_registry_entry(self, batch_id: str) -> BatchRegistryEntry | None:
        """Return the registry entry for a batch id, or None."""

    @abstractmethod
    def get_lot(self, key: ScopeKey) -> Batch | None:
        """Return one lot by its scope key, or None."""

    @abstractmethod
    def list_by_scope(
        self, scope_id: str, kind: ScopeKind = ScopeKind.WAREHOUSE
    ) -> list[Batch]:
        """Return every lot held in one scope of the given kind."""

    @abstractmethod
    def save(self, batch: Batch) -> None:
        """Persist the quantity fields of a lot."""

    def find_lots(
        self, product_key: ProductKey, scope_id: str, kind: ScopeKind = ScopeKind.WAREHOUSE
    ) -> list[Batch]:
        return [b for b in self.list_by_scope(scope_id, kind) if b.product_key == product_key]

    def mirror_updates(self, updates: Iterable[InventoryUpdate]) -> list[str]:
        """Carry adjusted on-hand quantities over to the lots at the same keys."""
        touched: list[str] = []
        for update in updates:
            lot = self.get_lot(update.key)
            if lot is None:
                continue
            lot.set_on_hand(update.quantity)
            self.save(lot)
            touched.append(lot.batch_id)
        return touched
