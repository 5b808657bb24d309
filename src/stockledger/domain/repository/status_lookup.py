"""Read-only lookup from status codes to status ids."""

from __future__ import annotations

from abc import ABC, abstractmethod


class StatusLookup(ABC):

    @abstractmethod
    def get_status_id(self, code: str) -> str:
        """Return the id for *code*; raise EntityNotFoundError if unknown."""
