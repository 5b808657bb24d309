"""Tests for audit log checksum verification."""

from stockledger.application.adjust_inventory import AdjustInventoryHandler
from stockledger.application.verify_audit_log import VerifyAuditLogHandler
from stockledger.domain.clock import FixedClock
from stockledger.domain.model.adjustment import AdjustmentRequest
from stockledger.domain.model.value_objects import BatchType
from tests.fakes import FakeStatusLookup, FakeUnitOfWork, make_record, register, warehouse_key


def _adjusted_uow():
    uow = FakeUnitOfWork(
        inventory=[
            make_record(warehouse_key("WH1", "B1"), on_hand=10),
            make_record(warehouse_key("WH1", "B2"), on_hand=10),
        ],
        registry=[register("B1"), register("B2")],
    )
    AdjustInventoryHandler(uow, FakeStatusLookup(), FixedClock()).handle(
        [
            AdjustmentRequest("B1", BatchType.PRODUCT, 4, warehouse_id="WH1"),
            AdjustmentRequest("B2", BatchType.PRODUCT, 0, warehouse_id="WH1"),
        ]
    )
    return uow


class TestVerifyAuditLog:

    def test_untouched_log_is_intact(self):
        report = VerifyAuditLogHandler(_adjusted_uow()).handle()
        assert report.checked == 2
        assert report.intact

    def test_tampered_entry_reported(self):
        uow = _adjusted_uow()
        uow.audit_log.tamper(1, quantity=7)
        report = VerifyAuditLogHandler(uow).handle()
        assert not report.intact
        assert report.invalid_entry_ids == ["log-2"]

    def test_empty_log(self):
        report = VerifyAuditLogHandler(FakeUnitOfWork()).handle()
        assert report.checked == 0
        assert report.intact
