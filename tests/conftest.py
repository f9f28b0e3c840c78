"""
Pytest configuration for check-domains.

Provides fixtures for:
- Record factories
- A scripted prober and a recording sink standing in for the network and console
- Settings cache isolation
"""

from __future__ import annotations

import asyncio
from typing import Callable, Dict, List, Optional, Tuple

import pytest

from check_domains.config import get_settings
from check_domains.domain.models import Classification, Record, Success


class ScriptedProber:
    """Returns a preset classification per domain, `Success` otherwise."""

    name = "scripted"
    description = "test prober with canned outcomes"

    def __init__(
        self,
        outcomes: Optional[Dict[str, Classification]] = None,
        delay: float = 0.0,
    ) -> None:
        self.outcomes = outcomes or {}
        self.delay = delay
        self.calls: List[str] = []

    async def probe(self, domain: str) -> Classification:
        self.calls.append(domain)
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.outcomes.get(domain, Success())


class RecordingSink:
    def __init__(self) -> None:
        self.emitted: List[Tuple[int, Record, Classification]] = []

    def emit(self, worker_index: int, record: Record, result: Classification) -> None:
        self.emitted.append((worker_index, record, result))


def build_records(count: int, start_rank: int = 1) -> List[Record]:
    return [
        Record(rank=rank, domain=f"site{rank}.example", popularity_score=rank / 2)
        for rank in range(start_rank, start_rank + count)
    ]


@pytest.fixture
def make_records() -> Callable[..., List[Record]]:
    return build_records


@pytest.fixture
def scripted_prober() -> ScriptedProber:
    return ScriptedProber()


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    """Isolate tests from the caller's CHECK_DOMAINS_* / LOG_* environment."""
    for name in (
        "CHECK_DOMAINS_WORKERS",
        "CHECK_DOMAINS_QUEUE_CAPACITY",
        "CHECK_DOMAINS_PORT",
        "CHECK_DOMAINS_TIMEOUT",
        "CHECK_DOMAINS_REPORT_FAILURES",
        "LOG_LEVEL",
        "LOG_JSON",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
