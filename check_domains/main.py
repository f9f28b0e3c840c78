from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from check_domains.config import get_settings
from check_domains.errors import CheckDomainsError
from check_domains.infrastructure.record_source import iter_records
from check_domains.pool.sink import ConsoleSink
from check_domains.probers.tls_handshake import TlsHandshakeProber
from check_domains.reporter import print_summary
from check_domains.supervisor import run_pool
from check_domains.utils.logging import configure_logging, get_logger

USAGE = "Usage:\n  check-domains <<domains.csv>>"

app = typer.Typer(help="Probe domains for TLS handshakes blocked on the server name.")
log = get_logger(__name__)


@app.command()
def run(
    file: Optional[Path] = typer.Argument(
        None,
        help="CSV list with 'Rank', 'Domain' and 'Open Page Rank' columns.",
        show_default=False,
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", min=1, help="Number of workers (default from settings)."
    ),
    queue_capacity: Optional[int] = typer.Option(
        None, "--queue-capacity", "-q", min=1, help="Records buffered per worker."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", "-t", min=0.001, help="Seconds allowed for TCP connect and for the handshake."
    ),
    report_failures: Optional[bool] = typer.Option(
        None,
        "--report-failures/--no-report-failures",
        help="Also print non-blocked failures to stderr (default from settings).",
        show_default=False,
    ),
    summary: bool = typer.Option(
        False, "--summary/--no-summary", help="Print a summary table to stderr."
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON."),
) -> None:
    """
    Probe every domain in FILE once and report successes and blocked handshakes.
    """
    try:
        settings = get_settings()
    except ValidationError as exc:
        typer.echo(f"error: invalid settings: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    configure_logging(
        level=log_level or settings.log_level,
        json_logs=json_logs or settings.json_logs,
    )

    if file is None:
        typer.echo(USAGE, err=True)
        return

    updates = {
        "workers": workers,
        "queue_capacity": queue_capacity,
        "probe_timeout_seconds": timeout,
        "report_failures": report_failures,
    }
    settings = settings.model_copy(update={k: v for k, v in updates.items() if v is not None})

    try:
        prober = TlsHandshakeProber(port=settings.probe_port, timeout=settings.probe_timeout_seconds)
        result = run_pool(
            iter_records(file),
            settings.pool_config(),
            prober,
            ConsoleSink(report_failures=settings.report_failures),
        )
    except CheckDomainsError as exc:
        log.debug("run aborted", exc_info=True)
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    except BrokenPipeError as exc:
        # stdout reader went away; stop instead of dumping a traceback
        typer.echo(f"error: output closed: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if summary:
        print_summary(result)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
