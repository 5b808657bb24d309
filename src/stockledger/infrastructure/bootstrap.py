"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from stockledger.config.settings import get_settings
from stockledger.infrastructure.persistence.json_store import JsonStore
from stockledger.infrastructure.persistence.json_unit_of_work import JsonUnitOfWork
from stockledger.infrastructure.persistence.locks import RowLockManager
from stockledger.infrastructure.persistence.status_lookup import InMemoryStatusLookup


def _data_dir() -> Path:
    return Path(get_settings().data_dir)


@lru_cache
def _store() -> JsonStore:
    return JsonStore(_data_dir())


@lru_cache
def _locks() -> RowLockManager:
    return RowLockManager(timeout=get_settings().lock_timeout_seconds)


def unit_of_work() -> JsonUnitOfWork:
    return JsonUnitOfWork(_store(), _locks())


@lru_cache
def status_lookup() -> InMemoryStatusLookup:
    return InMemoryStatusLookup.from_file(_data_dir() / "statuses.json")


def reset() -> None:
    """Forget the cached store, locks and statuses (after settings change)."""
    _store.cache_clear()
    _locks.cache_clear()
    status_lookup.cache_clear()
