"""
Domain models for check-domains.

`Record` mirrors one row of the input list (`Rank`, `Domain`, `Open Page Rank`
columns). `Success`, `Blocked` and `Failure` form the closed set of probe
outcomes. The remaining dataclasses carry pool configuration and run counters.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Literal, Union

from pydantic import BaseModel, Field, field_validator


class Record(BaseModel):
    """
    One domain entry to probe.
    """

    rank: int = Field(..., gt=0, alias="Rank", description="Position in the source list.")
    domain: str = Field(..., min_length=1, alias="Domain", description="Bare host name.")
    popularity_score: float = Field(
        ..., alias="Open Page Rank", description="Informational popularity score."
    )

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "str_strip_whitespace": True,
    }

    @field_validator("domain")
    @classmethod
    def _bare_host_name(cls, value: str) -> str:
        if any(ch in value for ch in "/:@ \t"):
            raise ValueError("domain must be a bare host name without scheme, path or port")
        return value

    @property
    def score_text(self) -> str:
        score = self.popularity_score
        if math.isnan(score):
            return "NaN"
        if math.isinf(score):
            return "inf" if score > 0 else "-inf"
        if score.is_integer():
            return str(int(score))
        # shortest round-trip digits, never exponent notation
        return format(Decimal(repr(score)), "f")

    def __str__(self) -> str:
        return f"Domain: {self.domain}, Rank = {self.rank}, Open Page Rank = {self.score_text}"


@dataclass(frozen=True)
class Success:
    outcome: Literal["ok"] = field(default="ok", init=False)


@dataclass(frozen=True)
class Blocked:
    # which signature matched, e.g. "SSL_ERROR_SYSCALL" or "TLSV1_UNRECOGNIZED_NAME"
    signal: str = ""
    outcome: Literal["blocked"] = field(default="blocked", init=False)


@dataclass(frozen=True)
class Failure:
    reason: str
    outcome: Literal["failed"] = field(default="failed", init=False)


Classification = Union[Success, Blocked, Failure]


@dataclass(frozen=True)
class PoolConfig:
    """
    Fixed sizing of the worker pool: `workers` queues of `queue_capacity` slots each.
    """

    workers: int = 50
    queue_capacity: int = 10

    def __post_init__(self) -> None:
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        if self.queue_capacity < 1:
            raise ValueError(f"queue_capacity must be >= 1, got {self.queue_capacity}")


@dataclass
class WorkerStats:
    index: int
    probed: int = 0
    ok: int = 0
    blocked: int = 0
    failed: int = 0

    def count(self, result: Classification) -> None:
        self.probed += 1
        if isinstance(result, Success):
            self.ok += 1
        elif isinstance(result, Blocked):
            self.blocked += 1
        else:
            self.failed += 1


@dataclass
class RunSummary:
    workers: int
    dispatched: int = 0
    duration_seconds: float = 0.0
    per_worker: list[WorkerStats] = field(default_factory=list)

    @property
    def probed(self) -> int:
        return sum(s.probed for s in self.per_worker)

    @property
    def ok(self) -> int:
        return sum(s.ok for s in self.per_worker)

    @property
    def blocked(self) -> int:
        return sum(s.blocked for s in self.per_worker)

    @property
    def failed(self) -> int:
        return sum(s.failed for s in self.per_worker)

    @property
    def probes_per_sec(self) -> float:
        return self.probed / self.duration_seconds if self.duration_seconds > 0 else 0.0


__all__ = [
    "Blocked",
    "Classification",
    "Failure",
    "PoolConfig",
    "Record",
    "RunSummary",
    "Success",
    "WorkerStats",
]
