import logging
from typing import Any, Dict, List, Optional, Sequence

import chromadb
from sentence_transformers import SentenceTransformer

from modguard.core.errors import OracleError
from modguard.oracles.base import BaseSimilarityOracle, parse_query_response
from modguard.rules.base import OracleMatch
from modguard.utils.helpers import run_blocking

logger = logging.getLogger(__name__)


class LocalVectorOracle(BaseSimilarityOracle):
    """
    In-process oracle for development and offline evaluation:
    - Embeds with SentenceTransformer(all-MiniLM-L6-v2), normalized
    - Stores vectors in an ephemeral Chroma collection (cosine space)
    - Reports similarity as 1 - cosine distance
    """

    def __init__(
        self,
        model_name: str = "all-MiniLM-L6-v2",
        collection_name: str = "moderation_reference_v1",
        top_k: int = 1,
        encoder: Optional[SentenceTransformer] = None,
        client: Optional[Any] = None,
    ):
        self.top_k = top_k
        self.encoder = encoder or SentenceTransformer(model_name)
        self.client = client or chromadb.Client()
        self.collection_name = collection_name
        self.collection = self.client.get_or_create_collection(
            name=collection_name,
            metadata={"hnsw:space": "cosine"},
        )
        logger.info(
            "[LocalVectorOracle] Ready (collection=%s, entries=%d)",
            collection_name,
            self.collection.count(),
        )

    def _encode(self, texts: List[str]) -> List[List[float]]:
        embeddings = self.encoder.encode(texts, normalize_embeddings=True)
        return [list(map(float, e)) for e in embeddings]

    def _query_sync(self, unit: str) -> Optional[OracleMatch]:
        if self.collection.count() == 0:
            logger.warning("[LocalVectorOracle] Reference collection is empty.")
            return None
        results = self.collection.query(
            query_embeddings=self._encode([unit]),
            n_results=self.top_k,
            include=["documents", "distances", "metadatas"],
        )
        distances = (results.get("distances") or [[]])[0]
        metadatas = (results.get("metadatas") or [[]])[0]
        hits = [
            {"score": 1 - d, "metadata": m or {}}
            for d, m in zip(distances, metadatas)
        ]
        return parse_query_response(hits)

    async def query(self, unit: str) -> Optional[OracleMatch]:
        try:
            return await run_blocking(self._query_sync, unit)
        except Exception as e:
            raise OracleError(f"Local index lookup failed: {e}", unit=unit) from e

    def _upsert_sync(self, entries: Sequence[Dict[str, Any]]) -> int:
        documents = [str(e["data"]) for e in entries]
        self.collection.upsert(
            ids=[str(e["id"]) for e in entries],
            embeddings=self._encode(documents),
            documents=documents,
            metadatas=[e.get("metadata") or {"text": e["data"]} for e in entries],
        )
        return len(entries)

    async def upsert(self, entries: Sequence[Dict[str, Any]]) -> int:
        if not entries:
            return 0
        written = await run_blocking(self._upsert_sync, entries)
        logger.debug("[LocalVectorOracle] Upserted %d entries", written)
        return written
