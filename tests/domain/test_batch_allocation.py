"""Unit tests for the pure batch allocation engine."""

from datetime import datetime, timezone

import pytest

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.allocation import AllocationDemand
from stockledger.domain.model.value_objects import AllocationStrategy, ProductKey
from stockledger.domain.service.batch_allocation import (
    allocate_batches_by_strategy,
    allocate_batches_for_order_items,
    order_candidates,
)
from tests.fakes import make_lot

NOW = datetime(2024, 1, 15, tzinfo=timezone.utc)


def _utc(year, month, day):
    return datetime(year, month, day, tzinfo=timezone.utc)


def _fefo_pool():
    return [
        make_lot("B", 10, expiry=_utc(2024, 2, 1)),
        make_lot("A", 5, expiry=_utc(2024, 1, 1)),
    ]


class TestAllocateByStrategy:

    def test_fefo_takes_earliest_expiry_first(self):
        outcome = allocate_batches_by_strategy(_fefo_pool(), 8)
        assert [(a.batch_id, a.allocated_quantity) for a in outcome.allocated_batches] == [
            ("A", 5),
            ("B", 3),
        ]

    def test_full_allocation(self):
        outcome = allocate_batches_by_strategy(_fefo_pool(), 8)
        assert outcome.allocated_total == 8
        assert outcome.remaining == 0
        assert outcome.fulfilled

    def test_partial_allocation(self):
        outcome = allocate_batches_by_strategy(_fefo_pool(), 20)
        assert outcome.allocated_total == 15
        assert outcome.remaining == 5
        assert not outcome.fulfilled

    def test_fifo_uses_inbound_date(self):
        lots = [
            make_lot("NEW", 5, inbound=_utc(2024, 1, 10), expiry=_utc(2024, 1, 20)),
            make_lot("OLD", 5, inbound=_utc(2024, 1, 1), expiry=_utc(2024, 6, 1)),
        ]
        outcome = allocate_batches_by_strategy(lots, 6, strategy=AllocationStrategy.FIFO)
        assert [a.batch_id for a in outcome.allocated_batches] == ["OLD", "NEW"]

    def test_missing_sort_date_goes_last(self):
        lots = [make_lot("UNDATED", 5), make_lot("DATED", 5, expiry=_utc(2025, 1, 1))]
        outcome = allocate_batches_by_strategy(lots, 7)
        assert [a.batch_id for a in outcome.allocated_batches] == ["DATED", "UNDATED"]

    def test_reserved_stock_is_not_available(self):
        lots = [make_lot("A", 5, reserved=5, expiry=_utc(2024, 1, 1)), make_lot("B", 4)]
        outcome = allocate_batches_by_strategy(lots, 3)
        assert [a.batch_id for a in outcome.allocated_batches] == ["B"]

    def test_expired_lots_excluded_only_when_asked(self):
        lots = [make_lot("OLD", 5, expiry=_utc(2023, 12, 1)), make_lot("FRESH", 5, expiry=_utc(2024, 6, 1))]
        kept = allocate_batches_by_strategy(lots, 5, now=NOW)
        dropped = allocate_batches_by_strategy(lots, 5, exclude_expired=True, now=NOW)
        assert kept.allocated_batches[0].batch_id == "OLD"
        assert dropped.allocated_batches[0].batch_id == "FRESH"

    def test_expiry_not_checked_under_fifo(self):
        lots = [make_lot("OLD", 5, expiry=_utc(2023, 12, 1), inbound=_utc(2023, 1, 1))]
        outcome = allocate_batches_by_strategy(
            lots, 5, strategy=AllocationStrategy.FIFO, exclude_expired=True, now=NOW
        )
        assert outcome.fulfilled

    def test_inputs_are_not_mutated(self):
        lots = _fefo_pool()
        allocate_batches_by_strategy(lots, 8)
        assert [lot.batch_id for lot in lots] == ["B", "A"]
        assert all(lot.reserved_quantity == 0 for lot in lots)

    def test_deterministic(self):
        first = allocate_batches_by_strategy(_fefo_pool(), 8, now=NOW)
        second = allocate_batches_by_strategy(_fefo_pool(), 8, now=NOW)
        assert first == second

    def test_no_candidates(self):
        outcome = allocate_batches_by_strategy([], 4)
        assert outcome.allocated_total == 0
        assert outcome.remaining == 4


class TestOrderCandidates:

    def test_drops_empty_lots(self):
        lots = [make_lot("EMPTY", 0), make_lot("FULL", 3)]
        assert [b.batch_id for b in order_candidates(lots)] == ["FULL"]

    def test_naive_and_aware_dates_compare(self):
        lots = [
            make_lot("AWARE", 1, expiry=_utc(2024, 3, 1)),
            make_lot("NAIVE", 1, expiry=datetime(2024, 2, 1)),
        ]
        assert [b.batch_id for b in order_candidates(lots)] == ["NAIVE", "AWARE"]


class TestAllocateForOrderItems:

    def test_each_demand_matches_its_product(self):
        sku = ProductKey.sku("SKU-1")
        material = ProductKey.material("BOX-1")
        lots = [
            make_lot("S1", 10, product=sku),
            make_lot("M1", 4, product=material),
        ]
        results = allocate_batches_for_order_items(
            [AllocationDemand("item-1", sku, 6), AllocationDemand("item-2", material, 6)],
            lots,
        )
        assert results[0].outcome.fulfilled
        assert results[0].outcome.allocated_batches[0].batch_id == "S1"
        assert results[1].outcome.allocated_total == 4
        assert results[1].outcome.remaining == 2

    def test_demand_without_product_matches_nothing(self):
        results = allocate_batches_for_order_items(
            [AllocationDemand("item-1", None, 3)], [make_lot("S1", 10)]
        )
        assert results[0].outcome.allocated_total == 0
        assert results[0].order_item_id == "item-1"

    def test_demand_must_be_positive(self):
        with pytest.raises(ValidationError, match="must be positive"):
            AllocationDemand("item-1", ProductKey.sku("SKU-1"), 0)
