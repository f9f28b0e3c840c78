"""
Round-robin dispatcher.

The i-th record (0-indexed, source order) goes to queue `i % len(queues)`.
`put` suspends while the target queue is full, so a slow worker throttles
reading from the source. Every queue is closed on the way out, whether the
source was exhausted or raised.
"""

from __future__ import annotations

import asyncio
from typing import Iterable, Optional, Sequence

from check_domains.domain.models import Record
from check_domains.utils.logging import get_logger

log = get_logger(__name__)


def worker_index_for(sequence_number: int, workers: int) -> int:
    return sequence_number % workers


async def close_queues(queues: Sequence["asyncio.Queue[Optional[Record]]"]) -> None:
    """Enqueue the end-of-input marker on every queue."""
    for queue in queues:
        await queue.put(None)


async def dispatch(
    records: Iterable[Record],
    queues: Sequence["asyncio.Queue[Optional[Record]]"],
) -> int:
    """
    Route `records` across `queues` round-robin and close them all.

    Returns the number of records enqueued. Errors raised by the source
    propagate after the queues are closed; records already enqueued are left
    for the workers to finish.
    """
    if not queues:
        raise ValueError("dispatch needs at least one queue")

    dispatched = 0
    try:
        for sequence_number, record in enumerate(records):
            target = worker_index_for(sequence_number, len(queues))
            await queues[target].put(record)
            dispatched += 1
    except Exception:
        log.error(
            f"record source failed after {dispatched} record(s); no further records dispatched",
            extra={"dispatched": dispatched},
        )
        await close_queues(queues)
        raise

    await close_queues(queues)
    log.info(f"dispatched {dispatched} record(s)", extra={"dispatched": dispatched})
    return dispatched


__all__ = ["close_queues", "dispatch", "worker_index_for"]
