"""Unit tests for Value Objects."""

import pytest

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.value_objects import (
    AllocationStrategy,
    ProductKey,
    Quantity,
    ScopeKey,
    ScopeKind,
)


class TestQuantity:

    def test_valid_quantity(self):
        assert Quantity(5).value == 5

    @pytest.mark.parametrize("value", [0, -1])
    def test_non_positive_rejected(self, value):
        with pytest.raises(ValidationError, match="positive"):
            Quantity(value)

    @pytest.mark.parametrize("value", [1.5, "3", True])
    def test_non_integer_rejected(self, value):
        with pytest.raises(ValidationError, match="must be an integer"):
            Quantity(value)


class TestScopeKey:

    def test_composite_and_row_id(self):
        key = ScopeKey(ScopeKind.LOCATION, "LOC-1", "B1")
        assert key.composite == "LOC-1-B1"
        assert key.row_id == "location:LOC-1::B1"

    def test_row_id_distinguishes_scope_kinds(self):
        warehouse = ScopeKey(ScopeKind.WAREHOUSE, "X", "B1")
        location = ScopeKey(ScopeKind.LOCATION, "X", "B1")
        assert warehouse != location
        assert warehouse.row_id != location.row_id

    def test_blank_ids_rejected(self):
        with pytest.raises(ValidationError, match="Batch id is required"):
            ScopeKey(ScopeKind.WAREHOUSE, "WH1", "")


class TestProductKey:

    def test_exactly_one_identifier(self):
        with pytest.raises(ValidationError, match="Exactly one"):
            ProductKey(sku_id="S", packaging_material_id="M")
        with pytest.raises(ValidationError, match="Exactly one"):
            ProductKey()

    def test_str(self):
        assert str(ProductKey.sku("S1")) == "sku:S1"
        assert str(ProductKey.material("M1")) == "material:M1"


class TestAllocationStrategy:

    def test_case_insensitive(self):
        assert AllocationStrategy.of("fifo") is AllocationStrategy.FIFO

    def test_unknown_rejected(self):
        with pytest.raises(ValidationError, match="Unknown allocation strategy"):
            AllocationStrategy.of("LIFO")
