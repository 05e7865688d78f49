from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple


DEFAULT_GENERAL_ALLOWLIST = ("black", "swear")
DEFAULT_CONTEXT_ALLOWLIST = {
    "black": ("black belt", "black coffee", "black friday"),
}


@dataclass(frozen=True)
class AllowlistTable:
    """Process-wide exemptions, built once at startup and never mutated."""

    general: FrozenSet[str] = frozenset(DEFAULT_GENERAL_ALLOWLIST)
    context_specific: Mapping[str, Tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_CONTEXT_ALLOWLIST))
    )

    @classmethod
    def from_mapping(
        cls,
        general: Iterable[str],
        context_specific: Mapping[str, Iterable[str]],
    ) -> "AllowlistTable":
        frozen_contexts = {
            str(label).lower(): tuple(str(c).lower() for c in contexts)
            for label, contexts in context_specific.items()
        }
        return cls(
            general=frozenset(str(w).lower() for w in general),
            context_specific=MappingProxyType(frozen_contexts),
        )


@dataclass(frozen=True)
class OracleConfig:
    provider: str = "upstash"
    url: Optional[str] = None
    token: Optional[str] = None
    top_k: int = 1
    include_metadata: bool = True
    request_timeout: float = 10.0
    # local provider only
    embedding_model: str = "all-MiniLM-L6-v2"
    collection_name: str = "moderation_reference_v1"
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ModerationConfig:
    chunk_size: int = 25
    chunk_overlap: int = 8
    word_threshold: float = 0.95
    semantic_threshold: float = 0.96
    max_words: int = 35
    max_chars: int = 1000
    # per-lookup deadline in seconds; None waits for the oracle indefinitely
    oracle_timeout: Optional[float] = None
    keep_highest_per_label: bool = False
    oracle: OracleConfig = field(default_factory=OracleConfig)
    allowlist: AllowlistTable = field(default_factory=AllowlistTable)
    tracing_enabled: bool = False
