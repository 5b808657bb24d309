"""Deterministic hashing utilities.

Audit checksums must be reproducible from the stored entry alone, so the
payload is serialized to canonical JSON (sorted keys, no whitespace,
normalized special types) before hashing.
"""

from __future__ import annotations

import hashlib
import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID


def _json_serializer(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        return str(obj.normalize())
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.value
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def canonicalize_json(data: Any) -> str:
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        default=_json_serializer,
    )


def hash_payload(payload: dict[str, Any]) -> str:
    """Hex-encoded SHA-256 of the canonical JSON form of *payload*."""
    cleaned = {k: v for k, v in payload.items() if v is not None}
    return hashlib.sha256(canonicalize_json(cleaned).encode("utf-8")).hexdigest()
