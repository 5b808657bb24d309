"""Composite-key merge reducer.

Collapses records that target the same composite key into one record.
The reducer is pure: inputs are never mutated, and ``combine`` must return
a new record.  Groups come back in order of first appearance.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeVar

R = TypeVar("R")

_MISSING = object()
_SINGLETON = object()


def composite_key(record: Any, key_fields: Sequence[str]) -> tuple | None:
    """Return the key tuple, or None when a key field is absent."""
    values = []
    for name in key_fields:
        if isinstance(record, Mapping):
            value = record.get(name, _MISSING)
        else:
            value = getattr(record, name, _MISSING)
        if value is _MISSING:
            return None
        values.append(value)
    return tuple(values)


def merge_by_composite_key(
    records: Sequence[R],
    key_fields: Sequence[str],
    combine: Callable[[R, R], R],
) -> list[R]:
    """Fold every record into the first record sharing its composite key.

    Records with a malformed key (a key field missing entirely) form their
    own singleton group.
    """
    groups: dict[tuple, R] = {}
    for index, record in enumerate(records):
        key = composite_key(record, key_fields)
        if key is None:
            key = (_SINGLETON, index)
        if key in groups:
            groups[key] = combine(groups[key], record)
        else:
            groups[key] = record
    return list(groups.values())


def _later(a, b):
    if a is None:
        return b
    if b is None:
        return a
    return max(a, b)


def _join_comments(a: str | None, b: str | None) -> str | None:
    parts: list[str] = []
    for text in (a, b):
        for piece in (text or "").split("; "):
            if piece and piece not in parts:
                parts.append(piece)
    return "; ".join(parts) or None


def merge_inventory_fields(a: R, b: R) -> R:
    """Combine two adjustment records for the same key.

    Quantities add.  The later ``requested_at`` wins, distinct comments are
    concatenated, metadata maps are shallow-merged with *b* taking
    precedence, and type ids keep the first value set.
    """
    return dataclasses.replace(
        a,
        quantity=a.quantity + b.quantity,
        requested_at=_later(a.requested_at, b.requested_at),
        comments=_join_comments(a.comments, b.comments),
        meta={**a.meta, **b.meta},
        inventory_action_type_id=a.inventory_action_type_id or b.inventory_action_type_id,
        adjustment_type_id=a.adjustment_type_id or b.adjustment_type_id,
    )
