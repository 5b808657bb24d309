"""Whole-call retry on transient storage contention.

Retries wrap an entire handler call, never an individual lot or record
operation: a failed attempt has already been rolled back in full, so the
next attempt starts from committed state.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TypeVar

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from stockledger.config.logging import get_logger
from stockledger.domain.exceptions import TransientStorageError

logger = get_logger(__name__)

T = TypeVar("T")


def _log_retry(retry_state: RetryCallState) -> None:
    """Log retry attempts."""
    logger.warning(
        "retrying_after_contention",
        attempt=retry_state.attempt_number,
        wait_seconds=retry_state.next_action.sleep if retry_state.next_action else None,
        error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
    )


def run_with_retry(
    fn: Callable[[], T],
    *,
    max_attempts: int = 3,
    delay: float = 0.05,
    multiplier: float = 2.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call *fn*, retrying only on TransientStorageError with exponential back-off.

    The n-th wait is ``delay * multiplier ** (n - 1)``.
    """
    retrying = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=delay, exp_base=multiplier, min=delay),
        retry=retry_if_exception_type(TransientStorageError),
        before_sleep=_log_retry,
        sleep=sleep,
        reraise=True,
    )
    try:
        return retrying(fn)
    except TransientStorageError as exc:
        logger.error("retry_exhausted", attempts=max_attempts, error=str(exc))
        raise
