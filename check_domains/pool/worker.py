"""
Worker loop: drain one bounded queue through a prober into a sink.

A worker only stops when its queue delivers the end-of-input marker (`None`).
Probe outcomes, including failures, never end the loop.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from check_domains.domain.models import Classification, Failure, Record, WorkerStats
from check_domains.pool.sink import ResultSink
from check_domains.probers.abstract import Prober
from check_domains.utils.logging import get_logger

log = get_logger(__name__)


async def _probe_once(index: int, prober: Prober, record: Record) -> Classification:
    try:
        return await prober.probe(record.domain)
    except Exception as exc:  # noqa: BLE001 - a prober bug must not take the worker down
        log.exception(
            f"[{index}] prober {prober.name} raised on {record.domain}",
            extra={"worker": index, "domain": record.domain, "rank": record.rank},
        )
        return Failure(f"prober error: {exc!r}")


async def run_worker(
    index: int,
    queue: "asyncio.Queue[Optional[Record]]",
    prober: Prober,
    sink: ResultSink,
) -> WorkerStats:
    """
    Probe every record from `queue` until the end-of-input marker arrives.

    Returns the worker's per-outcome counters.
    """
    stats = WorkerStats(index=index)
    while True:
        record = await queue.get()
        try:
            if record is None:
                break
            result = await _probe_once(index, prober, record)
            stats.count(result)
            if isinstance(result, Failure):
                log.debug(
                    f"[{index}] {record.domain}: {result.reason}",
                    extra={
                        "worker": index,
                        "domain": record.domain,
                        "rank": record.rank,
                        "outcome": result.outcome,
                        "reason": result.reason,
                    },
                )
            sink.emit(index, record, result)
        finally:
            queue.task_done()

    log.debug(f"[{index}] queue closed after {stats.probed} probes", extra={"worker": index})
    return stats


__all__ = ["run_worker"]
