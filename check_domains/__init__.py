"""
check-domains - detect TLS handshakes blocked on the server name.

Reads a ranked domain list, pushes each domain through a fixed pool of
asyncio workers fed round-robin by bounded queues, and classifies one TLS
handshake per domain as:

- ok: the handshake completed
- blocked: the connection was reset or alerted away once the SNI was sent
- failed: anything else (DNS, refused, timeout, certificate problems)
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from check_domains.config import Settings, get_settings
from check_domains.domain.models import (
    Blocked,
    Classification,
    Failure,
    PoolConfig,
    Record,
    RunSummary,
    Success,
)
from check_domains.errors import CheckDomainsError, ProberConfigurationError, RecordSourceError
from check_domains.infrastructure.record_source import iter_records
from check_domains.pool.sink import ConsoleSink
from check_domains.probers import AbstractProber, Prober, TlsHandshakeProber
from check_domains.supervisor import PoolSupervisor, run_pool
from check_domains.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "Blocked",
    "Classification",
    "Failure",
    "PoolConfig",
    "Record",
    "RunSummary",
    "Success",
    # Errors
    "CheckDomainsError",
    "ProberConfigurationError",
    "RecordSourceError",
    # Pool
    "ConsoleSink",
    "PoolSupervisor",
    "iter_records",
    "run_pool",
    # Probers
    "AbstractProber",
    "Prober",
    "TlsHandshakeProber",
    # Logging
    "configure_logging",
    "get_logger",
]
