"""
CSV record source for check-domains.

Rows are deserialized lazily, one `Record` per row, so the dispatcher pulls
from the file only as fast as the worker queues accept records. Any row that
does not fit the `Record` shape raises `RecordSourceError`; there is no
skip-and-continue mode.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterator, TextIO

from pydantic import ValidationError

from check_domains.domain.models import Record
from check_domains.errors import RecordSourceError

REQUIRED_COLUMNS = ("Rank", "Domain", "Open Page Rank")


def _describe(exc: ValidationError) -> str:
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()))
        problems.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return "; ".join(problems)


def iter_records_from_stream(stream: TextIO) -> Iterator[Record]:
    """
    Yield records from an open CSV stream whose header names the required columns.
    """
    reader = csv.DictReader(stream)
    try:
        header = reader.fieldnames
    except csv.Error as exc:
        raise RecordSourceError(f"unreadable header: {exc}", line=reader.line_num) from exc
    if header is None:
        return
    missing = [name for name in REQUIRED_COLUMNS if name not in header]
    if missing:
        raise RecordSourceError(f"missing column(s): {', '.join(missing)}", line=1)

    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as exc:
            raise RecordSourceError(f"malformed row: {exc}", line=reader.line_num) from exc
        if None in row:
            raise RecordSourceError("row has more fields than the header", line=reader.line_num)
        try:
            yield Record.model_validate(row)
        except ValidationError as exc:
            raise RecordSourceError(_describe(exc), line=reader.line_num) from exc


def iter_records(path: Path | str) -> Iterator[Record]:
    """
    Yield records from the CSV file at `path`, keeping the file open while iterating.
    """
    try:
        f = Path(path).open("r", newline="", encoding="utf-8")
    except OSError as exc:
        raise RecordSourceError(f"cannot open {path}: {exc.strerror or exc}") from exc
    with f:
        try:
            yield from iter_records_from_stream(f)
        except UnicodeDecodeError as exc:
            raise RecordSourceError(f"{path} is not valid UTF-8: {exc.reason}") from exc


__all__ = ["REQUIRED_COLUMNS", "iter_records", "iter_records_from_stream"]
