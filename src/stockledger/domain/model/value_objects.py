"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from stockledger.domain.exceptions import ValidationError


class ScopeKind(Enum):
    """The physical context a quantity is tracked under."""

    WAREHOUSE = "warehouse"
    LOCATION = "location"


class BatchType(Enum):
    PRODUCT = "product"
    PACKAGING_MATERIAL = "packaging_material"


class AllocationStrategy(Enum):
    FEFO = "FEFO"  # earliest expiry first
    FIFO = "FIFO"  # earliest inbound first

    @staticmethod
    def of(value: str | AllocationStrategy) -> AllocationStrategy:
        if isinstance(value, AllocationStrategy):
            return value
        try:
            return AllocationStrategy(str(value).upper())
        except ValueError as exc:
            raise ValidationError(
                f"Unknown allocation strategy {value!r} (expected FEFO or FIFO)",
                field="strategy",
            ) from exc


class SourceType(Enum):
    MANUAL = "manual"
    ORDER = "order"


class StatusCode:
    """Vocabulary resolved to status ids through a StatusLookup."""

    IN_STOCK = "inventory_in_stock"
    OUT_OF_STOCK = "inventory_out_of_stock"
    ALLOC_COMPLETED = "ALLOC_COMPLETED"
    ALLOC_PARTIAL = "ALLOC_PARTIAL"
    ACTION_MANUAL_ADJUSTMENT = "action_manual_adjustment"
    ACTION_ORDER_ALLOCATION = "action_order_allocation"

    ALL = (
        IN_STOCK,
        OUT_OF_STOCK,
        ALLOC_COMPLETED,
        ALLOC_PARTIAL,
        ACTION_MANUAL_ADJUSTMENT,
        ACTION_ORDER_ALLOCATION,
    )


@dataclass(frozen=True)
class ScopeKey:
    """Identity of an inventory record: one batch inside one scope."""

    kind: ScopeKind
    scope_id: str
    batch_id: str

    def __post_init__(self) -> None:
        if not self.scope_id:
            raise ValidationError(f"{self.kind.value} id is required", field="scope_id")
        if not self.batch_id:
            raise ValidationError("Batch id is required", field="batch_id")

    @property
    def composite(self) -> str:
        """``scopeId-batchId`` form used to key update payloads."""
        return f"{self.scope_id}-{self.batch_id}"

    @property
    def row_id(self) -> str:
        """Lock/row identifier, unique across both scope kinds."""
        return f"{self.kind.value}:{self.scope_id}::{self.batch_id}"

    def __str__(self) -> str:
        return f"{self.scope_id}::{self.batch_id}"


@dataclass(frozen=True)
class ProductKey:
    """What a batch contains: exactly one of a SKU or a packaging material."""

    sku_id: str | None = None
    packaging_material_id: str | None = None

    def __post_init__(self) -> None:
        if bool(self.sku_id) == bool(self.packaging_material_id):
            raise ValidationError(
                "Exactly one of sku_id or packaging_material_id must be set",
                field="product_key",
            )

    @staticmethod
    def sku(sku_id: str) -> ProductKey:
        return ProductKey(sku_id=sku_id)

    @staticmethod
    def material(packaging_material_id: str) -> ProductKey:
        return ProductKey(packaging_material_id=packaging_material_id)

    def __str__(self) -> str:
        if self.sku_id:
            return f"sku:{self.sku_id}"
        return f"material:{self.packaging_material_id}"


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot demand zero or negative items.
    """

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}",
                field="quantity",
            )
        if self.value <= 0:
            raise ValidationError(
                "Quantity must be a positive number greater than zero", field="quantity"
            )

    def __str__(self) -> str:
        return str(self.value)
