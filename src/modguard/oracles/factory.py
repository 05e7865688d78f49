from modguard.core.config_types import OracleConfig
from modguard.oracles.base import BaseSimilarityOracle


def build_oracle(config: OracleConfig) -> BaseSimilarityOracle:
    """Instantiate the oracle named by ``config.provider``."""
    provider = (config.provider or "").lower()

    if provider == "upstash":
        from modguard.oracles.upstash import UpstashVectorOracle

        return UpstashVectorOracle(
            url=config.url,
            token=config.token,
            top_k=config.top_k,
            include_metadata=config.include_metadata,
            timeout=config.request_timeout,
        )

    if provider == "local":
        # heavy imports (torch, chromadb) only when asked for
        from modguard.oracles.local import LocalVectorOracle

        return LocalVectorOracle(
            model_name=config.embedding_model,
            collection_name=config.collection_name,
            top_k=config.top_k,
        )

    raise ValueError(f"Unknown oracle provider: '{config.provider}'")
