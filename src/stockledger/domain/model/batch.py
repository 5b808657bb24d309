"""Batch (lot) reference data.

A batch is a physically distinct unit of stock with its own expiry and
inbound dates.  Apart from the quantity fields, which mirror the scope
record holding it, a batch is treated as immutable.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.value_objects import BatchType, ProductKey, ScopeKey


@dataclass(frozen=True)
class BatchRegistryEntry:
    """What the batch registry knows about a batch id."""

    batch_id: str
    batch_type: BatchType
    product_key: ProductKey | None = None


@dataclass
class Batch:
    """A lot of one product held in one scope."""

    key: ScopeKey
    product_key: ProductKey
    on_hand_quantity: int
    reserved_quantity: int = 0
    expiry_date: datetime | None = None
    inbound_date: datetime | None = None

    @property
    def batch_id(self) -> str:
        return self.key.batch_id

    @property
    def scope_id(self) -> str:
        return self.key.scope_id

    @property
    def available_quantity(self) -> int:
        return max(0, self.on_hand_quantity - max(0, self.reserved_quantity))

    def is_expired(self, now: datetime) -> bool:
        if self.expiry_date is None:
            return False
        expiry = self.expiry_date
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return expiry < now

    def reserve(self, quantity: int) -> None:
        if quantity <= 0:
            raise ValidationError("Reservation quantity must be positive", field="quantity")
        if quantity > self.available_quantity:
            raise ValidationError(
                f"Lot {self.key} has only {self.available_quantity} available "
                f"(requested {quantity})",
                key=str(self.key),
            )
        self.reserved_quantity += quantity

    def set_on_hand(self, quantity: int) -> None:
        """Follow an absolute adjustment of the scope record holding this lot."""
        if quantity < 0:
            raise ValidationError("On-hand quantity cannot be negative", key=str(self.key))
        if self.reserved_quantity > quantity:
            raise ValidationError(
                f"Reserved quantity exceeds updated quantity for lot {self.key}",
                key=str(self.key),
            )
        self.on_hand_quantity = quantity
