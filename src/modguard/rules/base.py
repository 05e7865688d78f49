from dataclasses import dataclass
from typing import Any, Dict, Optional

from modguard.utils.helpers import strip_none


@dataclass(frozen=True)
class OracleMatch:
    """Nearest reference entry returned by a similarity oracle."""

    label: str
    score: float


@dataclass(frozen=True)
class MatchCandidate:
    """
    A unit that cleared its threshold and survived allowlist filtering.

    Attributes:
        label (str): The matched reference entry.
        score (float): Similarity score in [0, 1].
        context (str): Text of the unit that produced the match.
        source (str): "word" or "semantic".
    """

    label: str
    score: float
    context: str
    source: str = "word"


@dataclass(frozen=True)
class AnalysisResult:
    is_flagged: bool
    score: float
    label: Optional[str] = None
    context: Optional[str] = None

    @classmethod
    def clean(cls) -> "AnalysisResult":
        return cls(is_flagged=False, score=0)

    @classmethod
    def from_candidate(cls, candidate: MatchCandidate) -> "AnalysisResult":
        return cls(
            is_flagged=True,
            score=candidate.score,
            label=candidate.label,
            context=candidate.context,
        )

    def to_dict(self) -> Dict[str, Any]:
        return strip_none(
            {
                "isFlagged": self.is_flagged,
                "score": self.score,
                "label": self.label,
                "context": self.context,
            }
        )


class BaseUnitRule:
    """Base class for the per-unit scoring rules."""

    name: str = "unit_rule"

    async def apply(self, unit: str, context: Dict[str, Any]) -> Optional[MatchCandidate]:
        """
        Score a single text unit.
        Returns a MatchCandidate when the unit should be recorded, else None.
        """
        raise NotImplementedError
