"""Tests for the inventory query."""

from stockledger.application.show_inventory import ShowInventoryHandler
from tests.fakes import FakeUnitOfWork, location_key, make_record, warehouse_key


class TestShowInventory:

    def test_lines_sorted_with_available(self):
        uow = FakeUnitOfWork(
            inventory=[
                make_record(warehouse_key("WH1", "B1"), on_hand=10, reserved=4),
                make_record(location_key("LOC-1", "B1"), on_hand=3),
            ]
        )
        lines = ShowInventoryHandler(uow).handle()
        assert [(line.scope, line.scope_id, line.available) for line in lines] == [
            ("location", "LOC-1", 3),
            ("warehouse", "WH1", 6),
        ]

    def test_empty(self):
        assert ShowInventoryHandler(FakeUnitOfWork()).handle() == []
