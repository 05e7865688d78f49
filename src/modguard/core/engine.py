# src/modguard/core/engine.py

import asyncio
import logging
from typing import Any, Dict, Optional

from modguard.core.config_types import ModerationConfig
from modguard.core.errors import RequestValidationError
from modguard.core.runtime import ScoringRuntime
from modguard.oracles.base import BaseSimilarityOracle
from modguard.oracles.factory import build_oracle
from modguard.rules.allowlist import AllowlistPolicy
from modguard.rules.base import AnalysisResult
from modguard.rules.similarity_rules import SemanticMatchRule, WordMatchRule
from modguard.utils.helpers import count_words, sanitize_text, timeit_async
from modguard.utils.segmenter import TextSegmenter

logger = logging.getLogger(__name__)


class ModerationEngine:
    """
    Entry point for a single moderation request:
    validate -> sanitize -> segment -> concurrent scoring -> verdict.

    The engine holds only read-only state (config, allowlist, oracle client),
    so one instance serves any number of concurrent requests.
    """

    def __init__(
        self,
        config: Optional[ModerationConfig] = None,
        oracle: Optional[BaseSimilarityOracle] = None,
    ):
        self.config = config or ModerationConfig()
        self.oracle = oracle or build_oracle(self.config.oracle)
        self.policy = AllowlistPolicy(self.config.allowlist)
        self.segmenter = TextSegmenter(
            chunk_size=self.config.chunk_size,
            chunk_overlap=self.config.chunk_overlap,
        )

        self.word_rule = WordMatchRule(
            oracle=self.oracle,
            policy=self.policy,
            threshold=self.config.word_threshold,
            timeout=self.config.oracle_timeout,
        )
        self.semantic_rule = SemanticMatchRule(
            oracle=self.oracle,
            threshold=self.config.semantic_threshold,
            timeout=self.config.oracle_timeout,
        )
        self.runtime = ScoringRuntime(
            word_rule=self.word_rule,
            semantic_rule=self.semantic_rule,
            keep_highest_per_label=self.config.keep_highest_per_label,
        )
        logger.info(
            "[ModerationEngine] Initialized with %s", type(self.oracle).__name__
        )

    def validate_message(self, message: Any) -> str:
        if not isinstance(message, str) or not message.strip():
            raise RequestValidationError("Message is required.", status_code=400)

        if count_words(message) > self.config.max_words or len(message) > self.config.max_chars:
            raise RequestValidationError(
                f"Limit exceeded: at most {self.config.max_words} words "
                f"or {self.config.max_chars} characters.",
                status_code=413,
            )
        return message

    async def _score(self, message: str, context: Dict[str, Any]) -> AnalysisResult:
        sanitized = sanitize_text(message)
        if not sanitized:
            return AnalysisResult.clean()
        segments = self.segmenter.segment(sanitized)
        context["sanitized"] = sanitized
        return await self.runtime.run_once(sanitized, segments, context)

    async def analyze_async(
        self, message: Any, context: Optional[Dict[str, Any]] = None
    ) -> AnalysisResult:
        context = context if context is not None else {}
        message = self.validate_message(message)

        if not self.config.tracing_enabled:
            return await self._score(message, context)

        result, took = await timeit_async(self._score)(message, context)
        logger.info("[trace] took=%.3fs flagged=%s", took, result.is_flagged)
        return result

    def analyze(self, message: Any, context: Optional[Dict[str, Any]] = None) -> AnalysisResult:
        return asyncio.run(self.analyze_async(message, context))

    async def aclose(self):
        await self.oracle.aclose()
