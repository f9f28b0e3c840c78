"""
Domain package for check-domains.

Exports the value types shared by the record source, probers, worker pool and
reporting code. Keep this package free of I/O.
"""

from check_domains.domain.models import (
    Blocked,
    Classification,
    Failure,
    PoolConfig,
    Record,
    RunSummary,
    Success,
    WorkerStats,
)

__all__ = [
    "Blocked",
    "Classification",
    "Failure",
    "PoolConfig",
    "Record",
    "RunSummary",
    "Success",
    "WorkerStats",
]
