"""
TLS handshake prober.

Connects to `domain:port` over TCP, then negotiates TLS on that stream with the
domain as SNI. Splitting the two phases means a reset is only treated as
interference when it happens after the ClientHello went out, i.e. once the
server name has been disclosed in cleartext.

The blocked signature is read from the error codes the ssl module exposes:

- `SSLError.errno` of SSL_ERROR_SYSCALL (5) or SSL_ERROR_EOF: the peer dropped
  the connection mid-handshake;
- `SSLError.reason` of an "unrecognized name" or "handshake failure" alert.

When no SSL error code is available (asyncio reports a peer close during the
handshake as a plain `ConnectionResetError`), an abrupt close during
negotiation is the fallback signature.
"""

from __future__ import annotations

import asyncio
import contextlib
import socket
import ssl
from typing import Optional

from check_domains.config import get_settings
from check_domains.domain.models import Blocked, Classification, Failure, Success
from check_domains.errors import ProberConfigurationError
from check_domains.probers.abstract import AbstractProber
from check_domains.utils.logging import get_logger

log = get_logger(__name__)

BLOCKED_SSL_ERRNOS = {
    ssl.SSL_ERROR_SYSCALL: "SSL_ERROR_SYSCALL",
    ssl.SSL_ERROR_EOF: "SSL_ERROR_EOF",
}
BLOCKED_ALERT_REASONS = frozenset({"TLSV1_UNRECOGNIZED_NAME", "SSLV3_ALERT_HANDSHAKE_FAILURE"})
ABRUPT_CLOSE_ERRORS = (
    ConnectionResetError,
    ConnectionAbortedError,
    BrokenPipeError,
    asyncio.IncompleteReadError,
)


def build_client_context() -> ssl.SSLContext:
    """
    Default verifying client context: hostname check and system trust store.
    """
    try:
        return ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    except (ssl.SSLError, OSError) as exc:
        raise ProberConfigurationError(f"cannot build TLS client context: {exc}") from exc


def _describe_os_error(exc: OSError) -> str:
    return exc.strerror or str(exc) or type(exc).__name__


def classify_connect_error(exc: BaseException) -> Failure:
    """Map a TCP-phase error to a failure; nothing before the ClientHello counts as a block."""
    if isinstance(exc, TimeoutError):
        return Failure("connect timed out")
    if isinstance(exc, UnicodeError):
        # idna refuses empty or over-long labels before any lookup happens
        return Failure("name resolution failed: invalid host name")
    if isinstance(exc, socket.gaierror):
        return Failure(f"name resolution failed: {_describe_os_error(exc)}")
    if isinstance(exc, OSError):
        return Failure(f"connect failed: {_describe_os_error(exc)}")
    return Failure(f"connect failed: {exc!r}")


def classify_handshake_error(exc: BaseException) -> Classification:
    """Map an error raised during TLS negotiation to a classification."""
    if isinstance(exc, ssl.SSLCertVerificationError):
        return Failure(f"certificate verification failed: {exc.verify_message}")
    if isinstance(exc, ssl.SSLError):
        reason = getattr(exc, "reason", None)
        if reason in BLOCKED_ALERT_REASONS:
            return Blocked(signal=reason)
        if exc.errno in BLOCKED_SSL_ERRNOS:
            return Blocked(signal=BLOCKED_SSL_ERRNOS[exc.errno])
        return Failure(f"TLS error: {reason or exc}")
    if isinstance(exc, ABRUPT_CLOSE_ERRORS):
        return Blocked(signal=type(exc).__name__)
    if isinstance(exc, TimeoutError):
        return Failure("TLS handshake timed out")
    if isinstance(exc, OSError):
        return Failure(f"TLS handshake failed: {_describe_os_error(exc)}")
    return Failure(f"TLS handshake failed: {exc!r}")


class TlsHandshakeProber(AbstractProber):
    """
    One TCP connection and one TLS handshake per call, no reuse.
    """

    name: str = "tls_handshake"
    description: str = "TCP connect then TLS handshake with SNI; alert/EOF codes mark a block."

    def __init__(
        self,
        port: Optional[int] = None,
        timeout: Optional[float] = None,
        context: Optional[ssl.SSLContext] = None,
    ) -> None:
        settings = get_settings()
        self.port = port or settings.probe_port
        self.timeout = timeout or settings.probe_timeout_seconds
        self._context = context or build_client_context()

    async def _close(self, writer: asyncio.StreamWriter) -> None:
        writer.close()
        # shutdown errors after the outcome is known carry no signal
        with contextlib.suppress(OSError, ssl.SSLError, TimeoutError):
            await asyncio.wait_for(writer.wait_closed(), self.timeout)

    async def probe(self, domain: str) -> Classification:
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(domain, self.port), self.timeout
            )
        except (OSError, TimeoutError, UnicodeError) as exc:
            return classify_connect_error(exc)

        try:
            await asyncio.wait_for(
                writer.start_tls(
                    self._context,
                    server_hostname=domain,
                    # the outer wait_for must fire first: asyncio reports its own
                    # handshake timeout as ConnectionAbortedError
                    ssl_handshake_timeout=self.timeout * 2,
                ),
                self.timeout,
            )
        except (OSError, TimeoutError, EOFError) as exc:
            # start_tls already closed the transport; no TLS shutdown to wait for
            writer.close()
            result = classify_handshake_error(exc)
            log.debug(
                f"handshake with {domain} failed: {exc!r}",
                extra={"domain": domain, "outcome": result.outcome},
            )
            return result

        await self._close(writer)
        return Success()


__all__ = [
    "BLOCKED_ALERT_REASONS",
    "BLOCKED_SSL_ERRNOS",
    "TlsHandshakeProber",
    "build_client_context",
    "classify_connect_error",
    "classify_handshake_error",
]
