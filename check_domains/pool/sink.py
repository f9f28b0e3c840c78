"""
Result sinks: where classified probe results end up.

`ConsoleSink` prints successes on stdout and blocked detections on stderr.
Failures are only printed when `report_failures` is set.
"""

from __future__ import annotations

from typing import Optional, Protocol, TextIO

import typer

from check_domains.domain.models import Blocked, Classification, Failure, Record, Success


class ResultSink(Protocol):
    def emit(self, worker_index: int, record: Record, result: Classification) -> None:
        ...


def format_result(worker_index: int, record: Record, result: Classification) -> Optional[str]:
    """Render the output line for a result, or None when the result is not printed."""
    if isinstance(result, Success):
        return f"[{worker_index}] ok {record}"
    if isinstance(result, Blocked):
        return f"BLOCKED! domain {record}"
    if isinstance(result, Failure):
        return f"[{worker_index}] ERR! domain {record}, {result.reason}"
    raise TypeError(f"unknown classification {result!r}")


class ConsoleSink:
    def __init__(
        self,
        report_failures: bool = False,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
    ) -> None:
        self.report_failures = report_failures
        self._out = out
        self._err = err

    def emit(self, worker_index: int, record: Record, result: Classification) -> None:
        if isinstance(result, Failure) and not self.report_failures:
            return
        line = format_result(worker_index, record, result)
        if isinstance(result, Success):
            typer.echo(line, file=self._out)
        else:
            typer.echo(line, file=self._err, err=self._err is None)


__all__ = ["ConsoleSink", "ResultSink", "format_result"]
