"""Order aggregate — the allocation lifecycle of an order and its items.

Each item moves through ``CONFIRMED -> ALLOCATING -> {ALLOCATED,
PARTIALLY_ALLOCATED, BACKORDERED}``.  Only ALLOCATED is terminal; the
other two outcomes permit further allocation attempts.  The order-level
allocation state is a rollup over its items rather than independent data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.value_objects import ProductKey, Quantity


class OrderStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    ALLOCATING = "ALLOCATING"
    PARTIALLY_ALLOCATED = "PARTIALLY_ALLOCATED"
    ALLOCATED = "ALLOCATED"
    BACKORDERED = "BACKORDERED"
    CANCELLED = "CANCELLED"


# Statuses from which a new allocation attempt may start.
ALLOCATABLE_STATUSES = frozenset(
    {
        OrderStatus.CONFIRMED,
        OrderStatus.PARTIALLY_ALLOCATED,
        OrderStatus.BACKORDERED,
    }
)


def _expected(statuses: frozenset[OrderStatus]) -> str:
    return ", ".join(sorted(s.value for s in statuses))


@dataclass
class OrderItem:
    """One order line.  ``quantity_ordered`` never changes after confirmation."""

    id: str
    product_key: ProductKey
    quantity_ordered: Quantity
    status: OrderStatus = OrderStatus.CONFIRMED

    def ensure_allocatable(self) -> None:
        if self.status not in ALLOCATABLE_STATUSES:
            raise ValidationError(
                f"Order item {self.id} is not confirmed for allocation — "
                f"current status is {self.status.value}, "
                f"expected one of {_expected(ALLOCATABLE_STATUSES)}",
                field="order_item_status",
            )

    def start_allocation(self) -> None:
        """Transition an allocatable item to ALLOCATING."""
        self.ensure_allocatable()
        self.status = OrderStatus.ALLOCATING

    def complete_allocation(self, total_allocated: int) -> OrderStatus:
        """Resolve ALLOCATING into its outcome from the running allocated total."""
        if self.status != OrderStatus.ALLOCATING:
            raise ValidationError(
                f"Order item {self.id} is not being allocated "
                f"(status {self.status.value})"
            )
        ordered = self.quantity_ordered.value
        if total_allocated > ordered:
            raise ValidationError(
                f"Allocated total {total_allocated} exceeds ordered quantity "
                f"{ordered} for item {self.id}",
                field="quantity",
            )
        if total_allocated == ordered:
            self.status = OrderStatus.ALLOCATED
        elif total_allocated > 0:
            self.status = OrderStatus.PARTIALLY_ALLOCATED
        else:
            self.status = OrderStatus.BACKORDERED
        return self.status


@dataclass
class Order:
    """Aggregate root for an order awaiting stock allocation."""

    id: str
    items: list[OrderItem]
    status: OrderStatus = OrderStatus.CONFIRMED
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Validation -----------------------------------------------------------

    def ensure_allocatable(self) -> None:
        if self.status not in ALLOCATABLE_STATUSES:
            raise ValidationError(
                f"Order must be confirmed before allocation — "
                f"current status is {self.status.value}, "
                f"expected one of {_expected(ALLOCATABLE_STATUSES)}",
                field="order_status",
            )

    # --- Lookup ---------------------------------------------------------------

    def find_item_by_product(self, product_key: ProductKey) -> OrderItem:
        for item in self.items:
            if item.product_key == product_key:
                return item
        raise ValidationError(
            f"Product {product_key} is not part of order {self.id}",
            field="product_key",
        )

    # --- Status rollup --------------------------------------------------------

    @property
    def allocation_status(self) -> OrderStatus:
        """Order-wide state derived from the items, never stored independently."""
        statuses = [item.status for item in self.items]
        if not statuses:
            return self.status
        if all(s == OrderStatus.ALLOCATED for s in statuses):
            return OrderStatus.ALLOCATED
        if OrderStatus.ALLOCATING in statuses:
            return OrderStatus.ALLOCATING
        if any(
            s in (OrderStatus.ALLOCATED, OrderStatus.PARTIALLY_ALLOCATED)
            for s in statuses
        ):
            return OrderStatus.PARTIALLY_ALLOCATED
        if any(s == OrderStatus.BACKORDERED for s in statuses):
            return OrderStatus.BACKORDERED
        return OrderStatus.CONFIRMED

    def refresh_status(self) -> OrderStatus:
        """Align the persisted order status with the item rollup."""
        self.status = self.allocation_status
        return self.status
