"""
Infrastructure package for check-domains.

Holds file I/O concerns (the CSV record source), decoupled from the worker
pool and probers.
"""

from check_domains.infrastructure.record_source import (
    REQUIRED_COLUMNS,
    iter_records,
    iter_records_from_stream,
)

__all__ = [
    "REQUIRED_COLUMNS",
    "iter_records",
    "iter_records_from_stream",
]
