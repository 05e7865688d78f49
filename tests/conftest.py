"""Shared fixtures: a deterministic in-memory similarity oracle."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import pytest

from modguard.core.config_types import ModerationConfig
from modguard.core.engine import ModerationEngine
from modguard.core.errors import OracleError
from modguard.oracles.base import BaseSimilarityOracle
from modguard.rules.base import OracleMatch

Scripted = Union[Tuple[str, float], Exception, None]


class FakeOracle(BaseSimilarityOracle):
    """
    Answers from a fixed table: unit -> (label, score), an exception to raise,
    or None. Unknown units return a low-score miss. ``delays`` lets a test
    control completion order.
    """

    def __init__(
        self,
        table: Optional[Dict[str, Scripted]] = None,
        delays: Optional[Dict[str, float]] = None,
    ):
        self.table = table or {}
        self.delays = delays or {}
        self.queries: List[str] = []
        self.upserted: List[Dict[str, Any]] = []
        self.closed = False

    async def query(self, unit: str) -> Optional[OracleMatch]:
        self.queries.append(unit)
        await asyncio.sleep(self.delays.get(unit, 0))
        scripted = self.table.get(unit, ("unrelated", 0.1))
        if isinstance(scripted, Exception):
            raise scripted
        if scripted is None:
            return None
        label, score = scripted
        return OracleMatch(label=label, score=score)

    async def upsert(self, entries: Sequence[Dict[str, Any]]) -> int:
        self.upserted.extend(entries)
        return len(entries)

    async def aclose(self):
        self.closed = True


@pytest.fixture
def fake_oracle() -> FakeOracle:
    return FakeOracle()


@pytest.fixture
def make_engine():
    def _make(table=None, delays=None, **config_overrides) -> Tuple[ModerationEngine, FakeOracle]:
        oracle = FakeOracle(table, delays)
        engine = ModerationEngine(ModerationConfig(**config_overrides), oracle=oracle)
        return engine, oracle

    return _make


@pytest.fixture
def oracle_error() -> OracleError:
    return OracleError("index unavailable")
