# src/modguard/retrieval/seed_index.py
"""
Load reference entries from a CSV file (one "text" column) into the
similarity index used by the moderation service.

Usage:
    python -m modguard.retrieval.seed_index training_data.csv [--batch-size 30]
"""

import argparse
import asyncio
import csv
import logging
from pathlib import Path
from typing import Dict, List

from modguard.core.config_loader import load_config
from modguard.oracles.base import BaseSimilarityOracle
from modguard.oracles.factory import build_oracle
from modguard.utils.logging_setup import configure_logging

logger = logging.getLogger("modguard.seed")

STEP = 30


def parse_csv(file_path: Path) -> List[Dict[str, str]]:
    with open(file_path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f, delimiter=",")
        if not reader.fieldnames or "text" not in reader.fieldnames:
            raise ValueError(f"{file_path} has no 'text' column")
        return [row for row in reader if (row.get("text") or "").strip()]


def build_entries(rows: List[Dict[str, str]], offset: int) -> List[Dict]:
    return [
        {"id": offset + i, "data": row["text"], "metadata": {"text": row["text"]}}
        for i, row in enumerate(rows)
    ]


async def seed(oracle: BaseSimilarityOracle, rows: List[Dict[str, str]], step: int = STEP) -> int:
    written = 0
    for i in range(0, len(rows), step):
        batch = build_entries(rows[i : i + step], offset=i)
        written += await oracle.upsert(batch)
        logger.info("[seed] %d/%d entries written", written, len(rows))
    return written


async def _main(args):
    rows = parse_csv(Path(args.csv_path))
    oracle = build_oracle(load_config(args.config).oracle)
    try:
        await seed(oracle, rows, step=args.batch_size)
    finally:
        await oracle.aclose()


def main():
    parser = argparse.ArgumentParser(description="Seed the moderation reference index.")
    parser.add_argument("csv_path")
    parser.add_argument("--batch-size", type=int, default=STEP)
    parser.add_argument("--config", default=None)
    configure_logging()
    asyncio.run(_main(parser.parse_args()))


if __name__ == "__main__":
    main()
