"""
Prober behaviour against real loopback sockets.

Each test starts a tiny asyncio server on 127.0.0.1 that misbehaves the way a
middlebox or a broken host would once the ClientHello arrives. Only the
non-resolvable host test needs outbound DNS; it runs with RUN_NETWORK_TESTS=1.
The TLS server tests use a throwaway certificate from the openssl binary and
skip when it is missing.
"""

from __future__ import annotations

import asyncio
import contextlib
import os
import shutil
import socket
import ssl
import struct
import subprocess
from pathlib import Path
from typing import AsyncIterator, Awaitable, Callable, Optional, Tuple

import pytest

from check_domains.domain.models import Blocked, Failure, PoolConfig, Success
from check_domains.probers.tls_handshake import TlsHandshakeProber
from check_domains.supervisor import PoolSupervisor
from tests.conftest import RecordingSink, build_records

LOOPBACK = "127.0.0.1"
PROBE_TIMEOUT = 2.0

Handler = Callable[[asyncio.StreamReader, asyncio.StreamWriter], Awaitable[None]]


@contextlib.asynccontextmanager
async def serving(
    handler: Handler, tls: Optional[ssl.SSLContext] = None
) -> AsyncIterator[int]:
    server = await asyncio.start_server(handler, LOOPBACK, 0, ssl=tls)
    port = server.sockets[0].getsockname()[1]
    try:
        yield port
    finally:
        server.close()


async def reset_after_client_hello(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
    await reader.read(1)
    sock = writer.get_extra_info("socket")
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_LINGER, struct.pack("ii", 1, 0))
    writer.close()


async def close_after_client_hello(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
    await reader.read(1)
    writer.close()


async def answer_plain_http(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
    await reader.read(1)
    writer.write(b"HTTP/1.1 400 Bad Request\r\nContent-Length: 0\r\n\r\n")
    await writer.drain()
    # hold the connection until the client gives up
    await reader.read()
    writer.close()


async def stay_silent(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
    await reader.read()
    writer.close()


@pytest.fixture(scope="module")
def localhost_cert(tmp_path_factory: pytest.TempPathFactory) -> Tuple[Path, Path]:
    """
    Self-signed certificate for "localhost", made with the openssl binary.

    Skips the TLS tests when openssl is not installed.
    """
    openssl = shutil.which("openssl")
    if openssl is None:
        pytest.skip("openssl binary not available")

    directory = tmp_path_factory.mktemp("tls")
    cert, key = directory / "cert.pem", directory / "key.pem"
    try:
        subprocess.run(
            [
                openssl, "req", "-x509", "-newkey", "rsa:2048", "-nodes",
                "-keyout", str(key), "-out", str(cert), "-days", "1",
                "-subj", "/CN=localhost",
                "-addext", "subjectAltName=DNS:localhost",
            ],
            check=True,
            capture_output=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        pytest.skip(f"cannot create a test certificate: {exc}")
    return cert, key


def _server_context(cert: Path, key: Path) -> ssl.SSLContext:
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.load_cert_chain(cert, key)
    return context


def _client_context(cert: Path) -> ssl.SSLContext:
    context = ssl.create_default_context(cafile=str(cert))
    # the test certificate is its own issuer and carries no key usage extensions
    context.verify_flags &= ~ssl.VERIFY_X509_STRICT
    return context


async def hold_until_client_closes(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
    await reader.read()
    writer.close()


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((LOOPBACK, 0))
        return sock.getsockname()[1]


@pytest.mark.asyncio
async def test_reset_after_client_hello_is_blocked() -> None:
    async with serving(reset_after_client_hello) as port:
        result = await TlsHandshakeProber(port=port, timeout=PROBE_TIMEOUT).probe(LOOPBACK)

    assert isinstance(result, Blocked)


@pytest.mark.asyncio
async def test_close_after_client_hello_is_blocked() -> None:
    async with serving(close_after_client_hello) as port:
        result = await TlsHandshakeProber(port=port, timeout=PROBE_TIMEOUT).probe(LOOPBACK)

    assert isinstance(result, Blocked)


@pytest.mark.asyncio
async def test_non_tls_answer_is_failure() -> None:
    async with serving(answer_plain_http) as port:
        result = await TlsHandshakeProber(port=port, timeout=PROBE_TIMEOUT).probe(LOOPBACK)

    assert isinstance(result, Failure)
    assert result.reason.startswith("TLS error")


@pytest.mark.asyncio
async def test_silent_server_times_out_as_failure() -> None:
    async with serving(stay_silent) as port:
        result = await TlsHandshakeProber(port=port, timeout=0.2).probe(LOOPBACK)

    assert result == Failure("TLS handshake timed out")


@pytest.mark.asyncio
async def test_refused_connection_is_failure() -> None:
    result = await TlsHandshakeProber(port=_free_port(), timeout=PROBE_TIMEOUT).probe(LOOPBACK)

    assert isinstance(result, Failure)
    assert result.reason.startswith("connect failed")


@pytest.mark.asyncio
async def test_pool_against_resetting_server_reports_every_domain_blocked() -> None:
    sink = RecordingSink()
    async with serving(reset_after_client_hello) as port:

        class _LoopbackProber(TlsHandshakeProber):
            async def probe(self, domain: str):
                return await super().probe(LOOPBACK)

        summary = await PoolSupervisor(
            PoolConfig(workers=3, queue_capacity=2),
            _LoopbackProber(port=port, timeout=PROBE_TIMEOUT),
            sink,
        ).run(iter(build_records(7)))

    assert summary.blocked == 7
    assert sorted(r.rank for _, r, _ in sink.emitted) == list(range(1, 8))


@pytest.mark.asyncio
@pytest.mark.network
@pytest.mark.skipif(
    os.getenv("RUN_NETWORK_TESTS", "0") != "1",
    reason="needs a resolver; set RUN_NETWORK_TESTS=1",
)
async def test_unresolvable_host_is_failure() -> None:
    result = await TlsHandshakeProber(timeout=PROBE_TIMEOUT).probe("does-not-exist.invalid")

    assert isinstance(result, Failure)


@pytest.mark.asyncio
async def test_completed_handshake_is_success(localhost_cert: Tuple[Path, Path]) -> None:
    cert, key = localhost_cert
    async with serving(hold_until_client_closes, tls=_server_context(cert, key)) as port:
        prober = TlsHandshakeProber(port=port, timeout=PROBE_TIMEOUT, context=_client_context(cert))
        result = await prober.probe("localhost")

    assert result == Success()


@pytest.mark.asyncio
async def test_unrecognized_name_alert_is_blocked(localhost_cert: Tuple[Path, Path]) -> None:
    cert, key = localhost_cert
    server_context = _server_context(cert, key)

    def refuse_server_name(ssl_object, server_name, context):
        return ssl.ALERT_DESCRIPTION_UNRECOGNIZED_NAME

    server_context.sni_callback = refuse_server_name
    async with serving(hold_until_client_closes, tls=server_context) as port:
        prober = TlsHandshakeProber(port=port, timeout=PROBE_TIMEOUT, context=_client_context(cert))
        result = await prober.probe("localhost")

    assert isinstance(result, Blocked)


@pytest.mark.asyncio
async def test_untrusted_certificate_is_failure(localhost_cert: Tuple[Path, Path]) -> None:
    cert, key = localhost_cert
    async with serving(hold_until_client_closes, tls=_server_context(cert, key)) as port:
        # default trust store does not know the self-signed certificate
        prober = TlsHandshakeProber(port=port, timeout=PROBE_TIMEOUT)
        result = await prober.probe("localhost")

    assert isinstance(result, Failure)
    assert result.reason.startswith("certificate verification failed")
