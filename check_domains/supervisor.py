"""
Pool supervisor: owns the worker slots for one run.

Usage:
    from check_domains.supervisor import run_pool

    summary = run_pool(iter_records("domains.csv"), PoolConfig(workers=50, queue_capacity=10),
                       TlsHandshakeProber(), ConsoleSink())

Lifecycle of a run:
1. create N bounded queues and N worker tasks before any record is read;
2. dispatch records round-robin; the dispatcher closes every queue when done;
3. wait for all workers to drain, in any order;
4. re-raise a fatal source error only after every worker has terminated.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Iterable, List, Optional

from check_domains.domain.models import PoolConfig, Record, RunSummary, WorkerStats
from check_domains.pool.dispatcher import dispatch
from check_domains.pool.sink import ResultSink
from check_domains.pool.worker import run_worker
from check_domains.probers.abstract import Prober
from check_domains.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class WorkerSlot:
    index: int
    queue: "asyncio.Queue[Optional[Record]]"
    task: "asyncio.Task[WorkerStats]"


class PoolSupervisor:
    """
    Fixed pool of `config.workers` workers, each fed by its own queue of
    `config.queue_capacity` slots.
    """

    def __init__(self, config: PoolConfig, prober: Prober, sink: ResultSink) -> None:
        self.config = config
        self.prober = prober
        self.sink = sink

    def _spawn_slots(self) -> List[WorkerSlot]:
        slots: List[WorkerSlot] = []
        for index in range(self.config.workers):
            queue: "asyncio.Queue[Optional[Record]]" = asyncio.Queue(
                maxsize=self.config.queue_capacity
            )
            task = asyncio.create_task(
                run_worker(index, queue, self.prober, self.sink), name=f"worker-{index}"
            )
            slots.append(WorkerSlot(index=index, queue=queue, task=task))
        return slots

    async def _wait_all(self, dispatcher: "asyncio.Task[int]", slots: List[WorkerSlot]) -> None:
        """
        Wait for the dispatcher and every worker. A crashed worker would leave
        its queue full forever, so it cancels the rest of the run.
        """
        pending = {dispatcher, *(slot.task for slot in slots)}
        while pending:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_EXCEPTION)
            crashed = [
                task
                for task in done
                if task is not dispatcher and not task.cancelled() and task.exception()
            ]
            if crashed:
                for task in pending:
                    task.cancel()
                await asyncio.gather(*pending, return_exceptions=True)
                raise crashed[0].exception()  # type: ignore[misc]

    async def run(self, records: Iterable[Record]) -> RunSummary:
        log.info(
            f"starting {self.config.workers} workers with {self.prober.name}",
            extra={"workers": self.config.workers, "queue_capacity": self.config.queue_capacity},
        )
        start = time.perf_counter()
        slots = self._spawn_slots()
        dispatcher = asyncio.create_task(
            dispatch(records, [slot.queue for slot in slots]), name="dispatcher"
        )

        await self._wait_all(dispatcher, slots)

        summary = RunSummary(
            workers=self.config.workers,
            duration_seconds=time.perf_counter() - start,
            per_worker=[slot.task.result() for slot in slots],
        )
        # raises the fatal source error, if any, now that every worker has drained
        summary.dispatched = dispatcher.result()

        log.info(
            f"run complete: {summary.probed} probed, {summary.ok} ok, "
            f"{summary.blocked} blocked, {summary.failed} failed",
            extra={"dispatched": summary.dispatched, "workers": summary.workers},
        )
        return summary


def run_pool(
    records: Iterable[Record],
    config: PoolConfig,
    prober: Prober,
    sink: ResultSink,
) -> RunSummary:
    """
    Run a pool to completion from synchronous code.

    Raises RuntimeError when called from inside a running event loop; await
    `PoolSupervisor.run` there instead.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        raise RuntimeError(
            "run_pool() cannot be called from an async context; "
            "use 'await PoolSupervisor(...).run(records)' instead"
        )
    return asyncio.run(PoolSupervisor(config, prober, sink).run(records))


__all__ = ["PoolSupervisor", "WorkerSlot", "run_pool"]
