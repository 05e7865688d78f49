import asyncio
import logging
from typing import Any, Dict, Iterator, List, Optional

from modguard.core.errors import AggregationError
from modguard.rules.base import AnalysisResult, BaseUnitRule, MatchCandidate
from modguard.utils.segmenter import Segments

logger = logging.getLogger(__name__)


class FlaggedSet:
    """
    Per-request accumulator of match candidates, keyed by label.

    By default a later record for a label replaces the earlier one, whatever
    its score, so under concurrent completion the surviving entry for a label
    depends on which lookup finished last. ``keep_highest_per_label`` keeps
    the best score per label instead.

    Only touched from the event loop thread, so a plain dict is enough.
    """

    def __init__(self, keep_highest_per_label: bool = False):
        self.keep_highest_per_label = keep_highest_per_label
        self._entries: Dict[str, MatchCandidate] = {}

    def record(self, candidate: MatchCandidate) -> None:
        current = self._entries.get(candidate.label)
        if (
            self.keep_highest_per_label
            and current is not None
            and current.score >= candidate.score
        ):
            return
        self._entries[candidate.label] = candidate

    def best(self) -> Optional[MatchCandidate]:
        """Highest score wins; on an exact tie the earliest inserted label stays."""
        highest: Optional[MatchCandidate] = None
        max_score = -1.0
        for candidate in self._entries.values():
            if candidate.score > max_score:
                max_score = candidate.score
                highest = candidate
        return highest

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[MatchCandidate]:
        return iter(self._entries.values())

    def __contains__(self, label: str) -> bool:
        return label in self._entries


class ScoringRuntime:
    """
    Scatter/gather scorer: every word unit and every chunk gets its own
    oracle lookup, all in flight at once, then the FlaggedSet is reduced to a
    single verdict.
    """

    def __init__(
        self,
        word_rule: BaseUnitRule,
        semantic_rule: BaseUnitRule,
        keep_highest_per_label: bool = False,
    ):
        self.word_rule = word_rule
        self.semantic_rule = semantic_rule
        self.keep_highest_per_label = keep_highest_per_label

    async def _score_unit(
        self,
        rule: BaseUnitRule,
        unit: str,
        context: Dict[str, Any],
        flagged: FlaggedSet,
    ) -> None:
        candidate = await rule.apply(unit, context)
        if candidate is not None:
            flagged.record(candidate)

    async def _fan_out(
        self,
        rule: BaseUnitRule,
        units: List[str],
        context: Dict[str, Any],
        flagged: FlaggedSet,
    ) -> None:
        if not units:
            return
        tasks = [
            asyncio.ensure_future(self._score_unit(rule, unit, context, flagged))
            for unit in units
        ]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            # one unit failed: stop the siblings and collect their outcomes
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def run_once(
        self, sanitized: str, segments: Segments, context: Optional[Dict[str, Any]] = None
    ) -> AnalysisResult:
        if context is None:
            context = {}
        context["full_context"] = sanitized
        flagged = FlaggedSet(keep_highest_per_label=self.keep_highest_per_label)

        try:
            await self._fan_out(self.word_rule, segments.words, context, flagged)
            await self._fan_out(self.semantic_rule, segments.chunks, context, flagged)
            highest = flagged.best()
        except Exception as e:
            logger.error("[ScoringRuntime] Aggregation failed: %s", e)
            raise AggregationError(f"Aggregation failed: {e}") from e

        context["flagged"] = [c.label for c in flagged]

        if highest is None:
            logger.info(
                "[ScoringRuntime] Clean (words=%d, chunks=%d)",
                len(segments.words),
                len(segments.chunks),
            )
            return AnalysisResult.clean()

        logger.info(
            "[ScoringRuntime] Flagged '%s' (score=%.4f, source=%s, candidates=%d)",
            highest.label,
            highest.score,
            highest.source,
            len(flagged),
        )
        return AnalysisResult.from_candidate(highest)
