"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

from stockledger.domain.model.order import Order, OrderItem, OrderStatus
from stockledger.domain.model.value_objects import ProductKey, Quantity
from stockledger.domain.repository.order_repository import OrderRepository
from stockledger.infrastructure.persistence.json_store import (
    WorkingTables,
    dump_datetime,
    load_datetime,
)

TABLE = "orders"


class JsonOrderRepository(OrderRepository):

    def __init__(self, tables: WorkingTables) -> None:
        self._tables = tables

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: str) -> Order | None:
        raw = self._tables.get(TABLE, order_id)
        return self._to_domain(raw) if raw is not None else None

    def save(self, order: Order) -> None:
        self._tables.put(TABLE, order.id, self._to_raw(order))

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "status": order.status.value,
            "created_at": dump_datetime(order.created_at),
            "items": [
                {
                    "id": item.id,
                    "sku_id": item.product_key.sku_id,
                    "packaging_material_id": item.product_key.packaging_material_id,
                    "quantity_ordered": item.quantity_ordered.value,
                    "status": item.status.value,
                }
                for item in order.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        items = [
            OrderItem(
                id=i["id"],
                product_key=ProductKey(i.get("sku_id"), i.get("packaging_material_id")),
                quantity_ordered=Quantity(i["quantity_ordered"]),
                status=OrderStatus(i.get("status", OrderStatus.CONFIRMED.value)),
            )
            for i in raw["items"]
        ]
        order = Order(
            id=raw["id"],
            items=items,
            status=OrderStatus(raw["status"]),
        )
        created_at = load_datetime(raw.get("created_at"))
        if created_at is not None:
            order.created_at = created_at
        return order
