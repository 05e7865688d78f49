import sys
import os
SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src'))
if SRC_PATH not in sys.path:
    sys.path.append(SRC_PATH)
import asyncio
from modguard.core.config_types import ModerationConfig, OracleConfig
from modguard.core.engine import ModerationEngine
from modguard.core.errors import RequestValidationError
from modguard.oracles.local import LocalVectorOracle
from modguard.retrieval.seed_index import seed
from modguard.utils.logging_setup import configure_logging

# A tiny reference set so the demo runs without a remote index.
REFERENCE_TEXTS = [
    "black",
    "idiot",
    "shut up you moron",
    "i will hurt you",
]


async def run_test(engine: ModerationEngine, test_name: str, message: str):
    """Helper function to run a single test case and print the output."""
    print(f"\n--- Test Case: {test_name} ---")
    print(f'Message: "{message}"')
    try:
        result = await engine.analyze_async(message)
        print(f"Result: {result.to_dict()}")
    except RequestValidationError as e:
        print(f"Rejected ({e.status_code}): {e.message}")


async def demo():
    print("==============================================")
    print("  Vector Similarity Moderation Demo ")
    print("==============================================")

    configure_logging("INFO")
    cfg = ModerationConfig(
        oracle=OracleConfig(provider="local"),
        tracing_enabled=True,
    )
    oracle = LocalVectorOracle(collection_name="demo_reference")
    await seed(oracle, [{"text": t} for t in REFERENCE_TEXTS])
    engine = ModerationEngine(cfg, oracle=oracle)

    # --- Test Case 1: Clean sentence ---
    await run_test(engine, "Clean Sentence", "What a lovely day for a walk!")

    # --- Test Case 2: Allowed in context ---
    await run_test(engine, "Context Allowlist", "This is a black belt competition")

    # --- Test Case 3: Single flagged token ---
    await run_test(engine, "Flagged Word", "You absolute idiot.")

    # --- Test Case 4: Phrase-level match ---
    await run_test(engine, "Semantic Match", "Shut up, you moron!")

    # --- Test Case 5: Over the word limit ---
    await run_test(engine, "Over Limit", "word " * 40)

    await engine.aclose()


if __name__ == "__main__":
    asyncio.run(demo())
