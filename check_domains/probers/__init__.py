"""
Probers package for check-domains.

Re-exports the prober interface and the concrete strategies so callers can
import from `check_domains.probers` directly.
"""

from check_domains.probers.abstract import AbstractProber, Prober
from check_domains.probers.tls_handshake import TlsHandshakeProber

__all__ = [
    # Abstracts
    "AbstractProber",
    "Prober",
    # Concrete probers
    "TlsHandshakeProber",
]
