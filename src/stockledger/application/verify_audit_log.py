"""Application service: Verify Audit Log use case (query).

Recomputes the checksum of every stored audit entry and reports the
entries whose content no longer matches.
"""

from __future__ import annotations

from stockledger.application.dto import AuditVerificationReport
from stockledger.config.logging import get_logger
from stockledger.domain.repository.unit_of_work import UnitOfWork

logger = get_logger(__name__)


class VerifyAuditLogHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> AuditVerificationReport:
        with self._uow as uow:
            entries = uow.audit_log.list_all()

        invalid = [entry.id or "?" for entry in entries if not entry.verify_checksum()]
        for entry_id in invalid:
            logger.error("audit_checksum_mismatch", entry_id=entry_id)
        logger.info("audit_log_verified", checked=len(entries), invalid=len(invalid))
        return AuditVerificationReport(checked=len(entries), invalid_entry_ids=invalid)
