import asyncio
import logging
from typing import Any, Dict, Optional

from modguard.oracles.base import BaseSimilarityOracle
from modguard.rules.allowlist import AllowlistPolicy
from modguard.rules.base import BaseUnitRule, MatchCandidate, OracleMatch

logger = logging.getLogger(__name__)


class SimilarityRule(BaseUnitRule):
    """
    Looks a unit up in the similarity oracle and keeps the hit when its score
    is strictly above ``threshold``.

    A failed or timed-out lookup counts as "no match" for that unit only.
    """

    source = "unit"

    def __init__(
        self,
        name: str,
        oracle: BaseSimilarityOracle,
        threshold: float,
        timeout: Optional[float] = None,
    ):
        self.name = name
        self.oracle = oracle
        self.threshold = threshold
        self.timeout = timeout

    async def _lookup(self, unit: str) -> Optional[OracleMatch]:
        try:
            if self.timeout is None:
                return await self.oracle.query(unit)
            return await asyncio.wait_for(self.oracle.query(unit), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("[%s] Timeout after %.2fs for unit '%s'", self.name, self.timeout, unit)
        except Exception as e:
            logger.warning("[%s] Lookup failed for unit '%s': %s", self.name, unit, e)
        return None

    def _accept(self, match: OracleMatch, context: Dict[str, Any]) -> bool:
        return True

    async def apply(self, unit: str, context: Dict[str, Any]) -> Optional[MatchCandidate]:
        match = await self._lookup(unit)
        if match is None or not match.score > self.threshold:
            return None
        if not self._accept(match, context):
            return None
        logger.debug(
            "[%s] '%s' matched '%s' (score=%.4f > %.2f)",
            self.name,
            unit,
            match.label,
            match.score,
            self.threshold,
        )
        return MatchCandidate(
            label=match.label, score=match.score, context=unit, source=self.source
        )


class WordMatchRule(SimilarityRule):
    """Single-token rule: honours both the general and the context allowlist."""

    source = "word"

    def __init__(
        self,
        oracle: BaseSimilarityOracle,
        policy: AllowlistPolicy,
        threshold: float = 0.95,
        timeout: Optional[float] = None,
        name: str = "word_match",
    ):
        super().__init__(name=name, oracle=oracle, threshold=threshold, timeout=timeout)
        self.policy = policy

    def _accept(self, match: OracleMatch, context: Dict[str, Any]) -> bool:
        return not self.policy.is_exempt(match.label, context.get("full_context", ""))

    async def apply(self, unit: str, context: Dict[str, Any]) -> Optional[MatchCandidate]:
        if self.policy.is_generally_allowed(unit):
            return None
        return await super().apply(unit, context)


class SemanticMatchRule(SimilarityRule):
    """Chunk rule: phrase matches are already disambiguated, no allowlist."""

    source = "semantic"

    def __init__(
        self,
        oracle: BaseSimilarityOracle,
        threshold: float = 0.96,
        timeout: Optional[float] = None,
        name: str = "semantic_match",
    ):
        super().__init__(name=name, oracle=oracle, threshold=threshold, timeout=timeout)
