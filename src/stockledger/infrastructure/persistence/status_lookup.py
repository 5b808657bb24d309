"""Status code to id mapping, loaded once and read-only afterwards."""

from __future__ import annotations

import json
import uuid
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.model.value_objects import StatusCode
from stockledger.domain.repository.status_lookup import StatusLookup

_NAMESPACE = uuid.UUID("6f1c8a4e-2b7d-4d2a-9a55-0c6b3f2e8d11")


def default_status_ids() -> dict[str, str]:
    """Stable ids derived from the codes themselves."""
    return {code: str(uuid.uuid5(_NAMESPACE, code)) for code in StatusCode.ALL}


class InMemoryStatusLookup(StatusLookup):

    def __init__(self, mapping: Mapping[str, str] | None = None) -> None:
        self._ids = MappingProxyType(dict(mapping or default_status_ids()))

    @classmethod
    def from_file(cls, file_path: Path) -> InMemoryStatusLookup:
        """Load ``{code: id}`` from a JSON file, falling back to derived ids."""
        mapping = default_status_ids()
        if file_path.exists():
            mapping.update(json.loads(file_path.read_text(encoding="utf-8")))
        return cls(mapping)

    def get_status_id(self, code: str) -> str:
        try:
            return self._ids[code]
        except KeyError:
            raise EntityNotFoundError(f"Status code '{code}' not found") from None
