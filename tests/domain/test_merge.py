"""Unit tests for the composite-key merge reducer."""

from datetime import datetime, timezone

from stockledger.domain.model.adjustment import AdjustmentRequest
from stockledger.domain.model.value_objects import BatchType
from stockledger.domain.service.merge import (
    composite_key,
    merge_by_composite_key,
    merge_inventory_fields,
)

KEY = ("warehouse_id", "location_id", "batch_id")


def _request(qty, batch="B1", warehouse="WH1", **kwargs):
    return AdjustmentRequest(
        batch_id=batch,
        batch_type=BatchType.PRODUCT,
        quantity=qty,
        warehouse_id=warehouse,
        **kwargs,
    )


class TestCompositeKey:

    def test_reads_attributes(self):
        assert composite_key(_request(1), KEY) == ("WH1", None, "B1")

    def test_reads_mappings(self):
        assert composite_key({"a": 1, "b": 2}, ("a", "b")) == (1, 2)

    def test_missing_field_gives_none(self):
        assert composite_key({"a": 1}, ("a", "b")) is None


class TestMergeByCompositeKey:

    def test_same_key_sums_quantities(self):
        merged = merge_by_composite_key(
            [_request(3), _request(4)], KEY, merge_inventory_fields
        )
        assert len(merged) == 1
        assert merged[0].quantity == 7

    def test_distinct_keys_kept_in_first_appearance_order(self):
        merged = merge_by_composite_key(
            [_request(1, batch="B2"), _request(2, batch="B1"), _request(3, batch="B2")],
            KEY,
            merge_inventory_fields,
        )
        assert [(r.batch_id, r.quantity) for r in merged] == [("B2", 4), ("B1", 2)]

    def test_merge_is_commutative_for_quantities(self):
        a, b = _request(5, comments="first"), _request(9, comments="second")
        ab = merge_by_composite_key([a, b], KEY, merge_inventory_fields)
        ba = merge_by_composite_key([b, a], KEY, merge_inventory_fields)
        assert ab[0].quantity == ba[0].quantity == 14

    def test_inputs_are_not_mutated(self):
        a, b = _request(5), _request(9)
        merge_by_composite_key([a, b], KEY, merge_inventory_fields)
        assert a.quantity == 5
        assert b.quantity == 9

    def test_malformed_keys_form_singletons(self):
        records = [{"batch_id": "B1", "quantity": 1}, {"batch_id": "B1", "quantity": 2}]
        merged = merge_by_composite_key(records, ("scope_id", "batch_id"), lambda a, b: a)
        assert merged == records

    def test_empty_input(self):
        assert merge_by_composite_key([], KEY, merge_inventory_fields) == []


class TestMergeInventoryFields:

    def test_later_requested_at_wins(self):
        early = datetime(2024, 1, 1, tzinfo=timezone.utc)
        late = datetime(2024, 3, 1, tzinfo=timezone.utc)
        merged = merge_inventory_fields(
            _request(1, requested_at=late), _request(1, requested_at=early)
        )
        assert merged.requested_at == late

    def test_distinct_comments_concatenated(self):
        merged = merge_inventory_fields(
            _request(1, comments="recount"), _request(1, comments="recount")
        )
        assert merged.comments == "recount"
        merged = merge_inventory_fields(merged, _request(1, comments="damaged"))
        assert merged.comments == "recount; damaged"

    def test_meta_shallow_merged_second_wins(self):
        merged = merge_inventory_fields(
            _request(1, meta={"a": 1, "b": 1}), _request(1, meta={"b": 2})
        )
        assert merged.meta == {"a": 1, "b": 2}

    def test_first_type_id_kept(self):
        merged = merge_inventory_fields(
            _request(1, adjustment_type_id="adj-1"), _request(1, adjustment_type_id="adj-2")
        )
        assert merged.adjustment_type_id == "adj-1"
