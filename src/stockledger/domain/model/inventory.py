"""InventoryRecord aggregate — on-hand and reserved stock of one batch in one scope.

A record is identified by its ``ScopeKey`` (warehouse or location, scope id,
batch id).  Records are created at stock intake, mutated by manual
adjustments and order reservations, and never deleted; a depleted record
is zeroed and marked out of stock instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.value_objects import ScopeKey, ScopeKind


@dataclass
class InventoryRecord:
    """Aggregate root for scoped inventory tracking.

    Invariants:
    - ``reserved_quantity`` can never exceed ``on_hand_quantity``
    - both quantities are non-negative integers
    """

    id: str
    key: ScopeKey
    on_hand_quantity: int
    status_id: str
    reserved_quantity: int = 0
    last_update: datetime | None = None
    status_date: datetime | None = None

    @property
    def scope(self) -> ScopeKind:
        return self.key.kind

    @property
    def scope_id(self) -> str:
        return self.key.scope_id

    @property
    def batch_id(self) -> str:
        return self.key.batch_id

    @property
    def available_quantity(self) -> int:
        return max(0, self.on_hand_quantity - self.reserved_quantity)

    def reserve(self, quantity: int, at: datetime | None = None) -> None:
        """Reserve stock for confirmed demand.

        Raises ValidationError if insufficient stock is available.
        """
        if quantity <= 0:
            raise ValidationError("Reservation quantity must be positive", field="quantity")
        if quantity > self.available_quantity:
            raise ValidationError(
                f"Insufficient inventory in {self.scope.value} {self.key} "
                f"(need {quantity}, have {self.available_quantity} available)",
                key=str(self.key),
            )
        self.reserved_quantity += quantity
        if at is not None:
            self.last_update = at

    def set_quantity(
        self,
        quantity: int,
        status_id: str,
        at: datetime,
        status_date: datetime | None = None,
    ) -> None:
        """Overwrite the on-hand quantity with an absolute target."""
        if quantity < 0:
            raise ValidationError("On-hand quantity cannot be negative", key=str(self.key))
        if self.reserved_quantity > quantity:
            raise ValidationError(
                f"Reserved quantity exceeds updated {self.scope.value} quantity for {self.key}",
                key=str(self.key),
            )
        self.on_hand_quantity = quantity
        self.status_id = status_id
        self.last_update = at
        if status_date is not None:
            self.status_date = status_date
