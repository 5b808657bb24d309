"""Pure batch allocation: choose which lots satisfy a demand.

No I/O, no logging, no mutation of inputs.  Given the same candidates and
the same ``now`` the result is always the same, which is what lets the
orchestrator replay the same order under row locks.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from stockledger.domain.model.allocation import (
    AllocatedBatch,
    AllocationDemand,
    AllocationOutcome,
    ItemAllocationResult,
)
from stockledger.domain.model.batch import Batch
from stockledger.domain.model.value_objects import AllocationStrategy, ProductKey

_FAR_FUTURE = datetime.max.replace(tzinfo=timezone.utc)


def _sort_value(batch: Batch, strategy: AllocationStrategy) -> datetime:
    value = batch.expiry_date if strategy == AllocationStrategy.FEFO else batch.inbound_date
    if value is None:
        return _FAR_FUTURE
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def sort_by_strategy(
    batches: Iterable[Batch],
    strategy: AllocationStrategy = AllocationStrategy.FEFO,
) -> list[Batch]:
    """Stable ascending sort on the strategy's date; missing dates go last."""
    return sorted(batches, key=lambda b: _sort_value(b, strategy))


def order_candidates(
    batches: Iterable[Batch],
    strategy: AllocationStrategy = AllocationStrategy.FEFO,
    *,
    exclude_expired: bool = False,
    now: datetime | None = None,
) -> list[Batch]:
    """Available batches in consumption order for *strategy*.

    Batches with nothing available are dropped.  Expired batches are dropped
    only for FEFO with ``exclude_expired``.  Batches missing the sort date
    go last; ties keep their input order.
    """
    candidates = [b for b in batches if b.available_quantity > 0]
    if exclude_expired and strategy == AllocationStrategy.FEFO:
        reference = now or datetime.now(timezone.utc)
        candidates = [b for b in candidates if not b.is_expired(reference)]
    return sort_by_strategy(candidates, strategy)


def allocate_batches_by_strategy(
    batches: Sequence[Batch],
    required_quantity: int,
    *,
    strategy: AllocationStrategy = AllocationStrategy.FEFO,
    exclude_expired: bool = False,
    now: datetime | None = None,
) -> AllocationOutcome:
    """Greedily consume candidates in strategy order until demand is met."""
    if required_quantity <= 0:
        return AllocationOutcome.empty(0)

    allocated: list[AllocatedBatch] = []
    total = 0
    for batch in order_candidates(
        batches, strategy, exclude_expired=exclude_expired, now=now
    ):
        if total >= required_quantity:
            break
        take = min(batch.available_quantity, required_quantity - total)
        if take <= 0:
            continue
        allocated.append(AllocatedBatch(batch=batch, allocated_quantity=take))
        total += take

    return AllocationOutcome(
        allocated_batches=tuple(allocated),
        allocated_total=total,
        remaining=max(0, required_quantity - total),
    )


def allocate_batches_for_order_items(
    demands: Sequence[AllocationDemand],
    batches: Sequence[Batch],
    *,
    strategy: AllocationStrategy = AllocationStrategy.FEFO,
    exclude_expired: bool = False,
    now: datetime | None = None,
) -> list[ItemAllocationResult]:
    """Allocate every demand line, indexing the batch pool by product once.

    Each line is evaluated against the full pool independently; lines for
    the same product are not netted against each other.
    """
    by_product: dict[ProductKey, list[Batch]] = defaultdict(list)
    for batch in batches:
        by_product[batch.product_key].append(batch)

    results: list[ItemAllocationResult] = []
    for demand in demands:
        candidates = by_product.get(demand.product_key, []) if demand.product_key else []
        outcome = allocate_batches_by_strategy(
            candidates,
            demand.quantity_ordered,
            strategy=strategy,
            exclude_expired=exclude_expired,
            now=now,
        )
        results.append(ItemAllocationResult(demand=demand, outcome=outcome))
    return results
