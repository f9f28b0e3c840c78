"""
Worker pool building blocks: round-robin dispatch, worker loop and result sinks.
"""

from check_domains.pool.dispatcher import close_queues, dispatch, worker_index_for
from check_domains.pool.sink import ConsoleSink, ResultSink, format_result
from check_domains.pool.worker import run_worker

__all__ = [
    "ConsoleSink",
    "ResultSink",
    "close_queues",
    "dispatch",
    "format_result",
    "run_worker",
    "worker_index_for",
]
