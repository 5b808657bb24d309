"""Abstract repository for persisted inventory allocations."""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.allocation import InventoryAllocation


class AllocationRepository(ABC):

    @abstractmethod
    def insert(self, allocation: InventoryAllocation) -> InventoryAllocation:
        """Store a new allocation and return it with its id assigned."""

    @abstractmethod
    def list_for_order(self, order_id: str) -> list[InventoryAllocation]:
        """Return every allocation made for an order."""

    def total_allocated(self, order_id: str, order_item_id: str) -> int:
        return sum(
            a.allocated_quantity
            for a in self.list_for_order(order_id)
            if a.order_item_id == order_item_id
        )
