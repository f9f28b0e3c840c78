"""
Fatal, run-aborting errors.

Per-probe network failures are never raised; probers turn them into a
`Failure` or `Blocked` classification.
"""

from __future__ import annotations

from typing import Optional


class CheckDomainsError(Exception):
    """Base class for errors that abort a run."""


class RecordSourceError(CheckDomainsError):
    """The input list could not be opened or a row could not be deserialized."""

    def __init__(self, message: str, line: Optional[int] = None) -> None:
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class ProberConfigurationError(CheckDomainsError):
    """The TLS client configuration could not be built."""


__all__ = ["CheckDomainsError", "ProberConfigurationError", "RecordSourceError"]
