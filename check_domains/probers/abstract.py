"""
Prober interface for check-domains.

A prober makes exactly one attempt to reach a domain and reports the outcome
as a `Classification`. Network and handshake errors never escape a prober;
they are part of the result.
"""

from __future__ import annotations

import abc
from typing import Protocol, runtime_checkable

from check_domains.domain.models import Classification


@runtime_checkable
class Prober(Protocol):
    """
    Common interface all probing strategies implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    description : str
        A human-friendly summary of the approach.
    """

    name: str
    description: str

    async def probe(self, domain: str) -> Classification:
        """
        Probe `domain` once and classify the outcome.

        Parameters
        ----------
        domain : str
            Bare host name, used both to connect and as the TLS server name.

        Returns
        -------
        Classification
            `Success`, `Blocked` or `Failure(reason)`.
        """
        ...


class AbstractProber(abc.ABC):
    """
    Optional ABC helper for class-based implementations.

    Subclasses should set `name` and `description` and implement `probe`.
    """

    name: str
    description: str

    @abc.abstractmethod
    async def probe(self, domain: str) -> Classification:  # pragma: no cover - interface only
        """Probe the domain and classify the outcome."""
        raise NotImplementedError


__all__ = ["AbstractProber", "Prober"]
