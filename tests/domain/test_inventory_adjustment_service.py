"""Unit tests for the inventory adjustment engine."""

import pytest

from stockledger.domain.clock import FixedClock
from stockledger.domain.exceptions import EntityNotFoundError, ValidationError
from stockledger.domain.model.adjustment import AdjustmentRequest
from stockledger.domain.model.value_objects import BatchType, ScopeKind, SourceType
from stockledger.domain.service.inventory_adjustment_service import (
    InventoryAdjustmentService,
)
from tests.fakes import (
    IN_STOCK,
    OUT_OF_STOCK,
    FakeBatchRepository,
    FakeInventoryRepository,
    FakeStatusLookup,
    location_key,
    make_record,
    register,
    warehouse_key,
)


def _request(
    qty, batch="B1", warehouse="WH1", location=None, batch_type=BatchType.PRODUCT, **kwargs
):
    return AdjustmentRequest(
        batch_id=batch,
        batch_type=batch_type,
        quantity=qty,
        warehouse_id=warehouse,
        location_id=location,
        **kwargs,
    )


def _setup(records, batches=("B1",)):
    inventory = FakeInventoryRepository(records)
    batch_repo = FakeBatchRepository(registry=[register(b) for b in batches])
    service = InventoryAdjustmentService(
        inventory, batch_repo, FakeStatusLookup(), FixedClock()
    )
    return service, inventory, batch_repo


class TestShapeValidation:

    def test_empty_input_rejected(self):
        service, _, _ = _setup([])
        with pytest.raises(ValidationError, match="No inventory records"):
            service.compute_adjustments([])

    def test_bulk_ceiling_checked_before_any_lookup(self):
        service, inventory, batch_repo = _setup([])
        requests = [_request(1, batch=f"B{i}") for i in range(21)]
        with pytest.raises(ValidationError, match="Bulk limit is 20") as exc_info:
            service.compute_adjustments(requests)
        assert exc_info.value.field == "records"
        assert batch_repo.registry_calls == 0
        assert inventory.fetch_calls == 0

    def test_twenty_records_accepted(self):
        keys = [warehouse_key("WH1", f"B{i}") for i in range(20)]
        service, _, _ = _setup(
            [make_record(k, on_hand=1) for k in keys], batches=[k.batch_id for k in keys]
        )
        plan = service.compute_adjustments([_request(2, batch=k.batch_id) for k in keys])
        assert len(plan) == 20

    def test_negative_quantity_names_record(self):
        service, _, _ = _setup([])
        with pytest.raises(ValidationError, match="record 1") as exc_info:
            service.compute_adjustments([_request(1), _request(-3)])
        assert exc_info.value.record_index == 1

    def test_request_without_scope_rejected(self):
        service, _, _ = _setup([])
        with pytest.raises(ValidationError, match="neither a warehouse nor a location"):
            service.compute_adjustments([_request(1, warehouse=None)])


class TestBatchValidation:

    def test_unregistered_batch_not_found(self):
        service, _, _ = _setup([], batches=())
        with pytest.raises(EntityNotFoundError, match="'B1'"):
            service.compute_adjustments([_request(1)])

    def test_batch_type_mismatch(self):
        service, _, _ = _setup([make_record(warehouse_key("WH1", "B1"), on_hand=1)])
        with pytest.raises(ValidationError, match="is a product batch"):
            service.compute_adjustments(
                [_request(1, batch_type=BatchType.PACKAGING_MATERIAL)]
            )

    def test_missing_scope_record_not_found(self):
        service, _, _ = _setup([])
        with pytest.raises(EntityNotFoundError, match="No matching warehouse inventory record"):
            service.compute_adjustments([_request(1)])


class TestInvariant:

    def test_cannot_adjust_below_reserved(self):
        service, _, _ = _setup(
            [make_record(warehouse_key("WH1", "B1"), on_hand=20, reserved=15)]
        )
        with pytest.raises(ValidationError, match="Reserved quantity") as exc_info:
            service.compute_adjustments([_request(10)])
        assert exc_info.value.key == "WH1::B1"

    def test_adjust_down_to_reserved_allowed(self):
        service, _, _ = _setup(
            [make_record(warehouse_key("WH1", "B1"), on_hand=20, reserved=15)]
        )
        plan = service.compute_adjustments([_request(15)])
        assert next(plan.all_updates()).quantity == 15

    def test_one_bad_record_aborts_whole_plan(self):
        service, _, _ = _setup(
            [
                make_record(warehouse_key("WH1", "B1"), on_hand=5),
                make_record(warehouse_key("WH1", "B2"), on_hand=9, reserved=9),
            ],
            batches=("B1", "B2"),
        )
        with pytest.raises(ValidationError):
            service.compute_adjustments([_request(7), _request(1, batch="B2")])


class TestNormalization:

    def test_duplicate_requests_summed(self):
        service, _, _ = _setup([make_record(warehouse_key("WH1", "B1"), on_hand=0)])
        plan = service.compute_adjustments([_request(3), _request(4)])
        assert len(plan) == 1
        assert next(plan.all_updates()).quantity == 7

    def test_warehouse_and_location_each_get_one_instruction(self):
        wh, loc = warehouse_key("WH1", "B1"), location_key("LOC-1", "B1")
        service, _, _ = _setup([make_record(wh, on_hand=1), make_record(loc, on_hand=1)])
        plan = service.compute_adjustments([_request(6, location="LOC-1")])
        assert plan.composite_keys == [wh, loc]
        assert plan.updates[ScopeKind.WAREHOUSE]["WH1-B1"].quantity == 6
        assert plan.updates[ScopeKind.LOCATION]["LOC-1-B1"].quantity == 6

    def test_overlapping_scopes_merged_per_record(self):
        wh, loc = warehouse_key("WH1", "B1"), location_key("LOC-1", "B1")
        service, _, _ = _setup([make_record(wh, on_hand=0), make_record(loc, on_hand=0)])
        plan = service.compute_adjustments(
            [_request(2, location="LOC-1"), _request(5)]
        )
        assert plan.updates[ScopeKind.WAREHOUSE]["WH1-B1"].quantity == 7
        assert plan.updates[ScopeKind.LOCATION]["LOC-1-B1"].quantity == 2


class TestStatusAndAudit:

    def test_zero_moves_to_out_of_stock_with_status_date(self):
        service, _, _ = _setup([make_record(warehouse_key("WH1", "B1"), on_hand=8)])
        plan = service.compute_adjustments([_request(0)])
        update = next(plan.all_updates())
        assert update.status_id == OUT_OF_STOCK
        assert update.status_date == FixedClock().now()
        assert plan.log_entries[0].status_date == FixedClock().now()

    def test_restock_moves_to_in_stock(self):
        service, _, _ = _setup(
            [make_record(warehouse_key("WH1", "B1"), on_hand=0, status_id=OUT_OF_STOCK)]
        )
        update = next(service.compute_adjustments([_request(4)]).all_updates())
        assert update.status_id == IN_STOCK

    def test_unchanged_status_has_no_status_date(self):
        service, _, _ = _setup([make_record(warehouse_key("WH1", "B1"), on_hand=8)])
        plan = service.compute_adjustments([_request(3)])
        assert next(plan.all_updates()).status_date is None
        assert plan.log_entries[0].status_date is None

    def test_untracked_status_left_alone(self):
        service, _, _ = _setup(
            [make_record(warehouse_key("WH1", "B1"), on_hand=8, status_id="quarantined")]
        )
        update = next(service.compute_adjustments([_request(0)]).all_updates())
        assert update.status_id == "quarantined"

    def test_audit_entry_per_record(self):
        service, _, _ = _setup([make_record(warehouse_key("WH1", "B1"), on_hand=8)])
        plan = service.compute_adjustments(
            [_request(5, comments="cycle count")], performed_by="user-1"
        )
        entry = plan.log_entries[0]
        assert entry.source_type == SourceType.MANUAL
        assert entry.previous_quantity == 8
        assert entry.quantity_change == -3
        assert entry.action_type_id == "action-manual"
        assert entry.performed_by == "user-1"
        assert entry.comments == "cycle count"
        assert entry.verify_checksum()

    def test_explicit_action_type_kept(self):
        service, _, _ = _setup([make_record(warehouse_key("WH1", "B1"), on_hand=8)])
        plan = service.compute_adjustments([_request(5, inventory_action_type_id="recount")])
        assert plan.log_entries[0].action_type_id == "recount"

    def test_plan_is_computed_from_absolute_targets(self):
        records = [make_record(warehouse_key("WH1", "B1"), on_hand=8)]
        first, _, _ = _setup(records)
        second, _, _ = _setup(records)
        a = next(first.compute_adjustments([_request(5)]).all_updates())
        b = next(second.compute_adjustments([_request(5)]).all_updates())
        assert a == b
