"""Append-only sink for inventory audit entries."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from stockledger.domain.model.audit import AuditLogEntry


class AuditLogSink(ABC):

    @abstractmethod
    def append_entries(self, entries: Sequence[AuditLogEntry]) -> list[str]:
        """Append entries in the given order and return their new ids."""

    @abstractmethod
    def list_all(self) -> list[AuditLogEntry]:
        """Return every stored entry in append order."""
