from typing import Any, Dict, List, Optional, Sequence

from modguard.rules.base import OracleMatch


class BaseSimilarityOracle:
    async def query(self, unit: str) -> Optional[OracleMatch]:
        raise NotImplementedError

    async def upsert(self, entries: Sequence[Dict[str, Any]]) -> int:
        """Add reference entries ({"id", "data", "metadata": {"text"}}). Returns the count written."""
        raise NotImplementedError

    async def aclose(self):
        return


def parse_query_response(results: List[Dict[str, Any]]) -> Optional[OracleMatch]:
    """
    Turn the top hit of a vector query into an OracleMatch.

    Hits without a numeric score or without ``metadata.text`` are treated as
    no match.
    """
    if not results:
        return None
    top = results[0]
    if not isinstance(top, dict):
        return None
    score = top.get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return None
    label = (top.get("metadata") or {}).get("text")
    if not isinstance(label, str) or not label:
        return None
    return OracleMatch(label=label, score=float(score))
