import json

import pytest

SKU_LOTS = [
    {
        "scope": "warehouse",
        "scope_id": "WH1",
        "batch_id": "A",
        "sku_id": "SKU-1",
        "on_hand_quantity": 5,
        "reserved_quantity": 0,
        "expiry_date": "2030-01-20T00:00:00+00:00",
        "inbound_date": "2029-12-01T00:00:00+00:00",
    },
    {
        "scope": "warehouse",
        "scope_id": "WH1",
        "batch_id": "B",
        "sku_id": "SKU-1",
        "on_hand_quantity": 10,
        "reserved_quantity": 0,
        "expiry_date": "2030-02-01T00:00:00+00:00",
        "inbound_date": "2029-11-01T00:00:00+00:00",
    },
]


def _record(batch_id, on_hand):
    return {
        "id": f"rec-{batch_id}",
        "scope": "warehouse",
        "scope_id": "WH1",
        "batch_id": batch_id,
        "on_hand_quantity": on_hand,
        "reserved_quantity": 0,
        "status_id": "in-stock",
    }


@pytest.fixture
def data_dir(tmp_path):
    """A data directory holding two SKU-1 lots in WH1 and one confirmed order."""
    files = {
        "lots.json": SKU_LOTS,
        "inventory.json": [_record("A", 5), _record("B", 10)],
        "batch_registry.json": [
            {"batch_id": "A", "batch_type": "product", "sku_id": "SKU-1"},
            {"batch_id": "B", "batch_type": "product", "sku_id": "SKU-1"},
        ],
        "orders.json": [
            {
                "id": "O1",
                "status": "CONFIRMED",
                "created_at": "2030-01-01T00:00:00+00:00",
                "items": [
                    {
                        "id": "item-1",
                        "sku_id": "SKU-1",
                        "quantity_ordered": 8,
                        "status": "CONFIRMED",
                    }
                ],
            }
        ],
        "statuses.json": {
            "inventory_in_stock": "in-stock",
            "inventory_out_of_stock": "out-of-stock",
        },
    }
    for name, content in files.items():
        (tmp_path / name).write_text(json.dumps(content), encoding="utf-8")
    return tmp_path
