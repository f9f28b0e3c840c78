from __future__ import annotations

from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from check_domains.domain.models import RunSummary


def print_summary(summary: RunSummary, console: Optional[Console] = None) -> None:
    """
    Render run totals and the per-worker breakdown as a rich table on stderr.

    Workers that probed nothing are left out of the breakdown.
    """
    console = console or Console(stderr=True)

    table = Table(
        title="check-domains run summary",
        box=box.ROUNDED,
        caption=(
            f"{summary.dispatched:,} dispatched │ {summary.workers} workers │ "
            f"{summary.duration_seconds:.1f}s │ {summary.probes_per_sec:,.2f} probes/s"
        ),
    )

    table.add_column("Worker", style="cyan", no_wrap=True)
    table.add_column("Probed", justify="right", style="magenta")
    table.add_column("OK", justify="right", style="green")
    table.add_column("Blocked", justify="right", style="bold red")
    table.add_column("Failed", justify="right", style="yellow")

    for stats in summary.per_worker:
        if not stats.probed:
            continue
        table.add_row(
            str(stats.index),
            f"{stats.probed:,}",
            f"{stats.ok:,}",
            f"{stats.blocked:,}",
            f"{stats.failed:,}",
        )

    table.add_section()
    table.add_row(
        "Total",
        f"{summary.probed:,}",
        f"{summary.ok:,}",
        f"{summary.blocked:,}",
        f"{summary.failed:,}",
        style="bold",
    )

    console.print(table)
