"""Application service: Show Inventory use case (query)."""

from __future__ import annotations

from dataclasses import dataclass

from stockledger.domain.repository.unit_of_work import UnitOfWork


@dataclass(frozen=True)
class InventoryLineDTO:
    scope: str
    scope_id: str
    batch_id: str
    on_hand: int
    reserved: int
    available: int
    status_id: str


class ShowInventoryHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> list[InventoryLineDTO]:
        with self._uow as uow:
            records = uow.inventory.list_all()
        return [
            InventoryLineDTO(
                scope=record.scope.value,
                scope_id=record.scope_id,
                batch_id=record.batch_id,
                on_hand=record.on_hand_quantity,
                reserved=record.reserved_quantity,
                available=record.available_quantity,
                status_id=record.status_id,
            )
            for record in sorted(records, key=lambda r: r.key.row_id)
        ]
