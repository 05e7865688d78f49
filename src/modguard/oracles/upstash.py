import logging
from typing import Any, Dict, Optional, Sequence

import httpx

from modguard.core.errors import OracleError
from modguard.oracles.base import BaseSimilarityOracle, parse_query_response
from modguard.rules.base import OracleMatch

logger = logging.getLogger(__name__)


class UpstashVectorOracle(BaseSimilarityOracle):
    """
    Client for an Upstash Vector index that embeds raw text server-side.

    Every lookup is one ``POST /query-data`` asking for the single nearest
    entry with its metadata. The index stores the reference text under
    ``metadata.text`` and that text doubles as the match label.
    """

    def __init__(
        self,
        url: str,
        token: str,
        top_k: int = 1,
        include_metadata: bool = True,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not url or not token:
            raise ValueError("UpstashVectorOracle needs both VECTOR_URL and VECTOR_TOKEN")
        self.url = url.rstrip("/")
        self.top_k = top_k
        self.include_metadata = include_metadata
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)
        self._headers = {"Authorization": f"Bearer {token}"}

    async def _post(self, path: str, payload: Any, unit: Optional[str] = None) -> Any:
        try:
            response = await self.client.post(
                f"{self.url}/{path}", json=payload, headers=self._headers
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise OracleError(
                f"Vector index returned {e.response.status_code} for /{path}", unit=unit
            ) from e
        except httpx.HTTPError as e:
            raise OracleError(f"Could not reach vector index at {self.url}: {e}", unit=unit) from e
        except ValueError as e:
            raise OracleError(f"Malformed JSON from /{path}: {e}", unit=unit) from e

        if isinstance(body, dict) and body.get("error"):
            raise OracleError(f"Vector index error: {body['error']}", unit=unit)
        return body.get("result") if isinstance(body, dict) else None

    async def query(self, unit: str) -> Optional[OracleMatch]:
        payload = {
            "data": unit,
            "topK": self.top_k,
            "includeMetadata": self.include_metadata,
        }
        result = await self._post("query-data", payload, unit=unit)
        if result is not None and not isinstance(result, list):
            raise OracleError("Unexpected query result shape", unit=unit)
        return parse_query_response(result or [])

    async def upsert(self, entries: Sequence[Dict[str, Any]]) -> int:
        if not entries:
            return 0
        await self._post("upsert-data", list(entries))
        logger.debug("[UpstashVectorOracle] Upserted %d entries", len(entries))
        return len(entries)

    async def aclose(self):
        if self._owns_client:
            await self.client.aclose()
