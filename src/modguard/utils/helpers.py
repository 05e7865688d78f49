from __future__ import annotations
import asyncio
import functools
import re
import time
from typing import Any, Dict, List

SANITIZATION_PATTERN = re.compile(r"[^\w\s]")
WHITESPACE_PATTERN = re.compile(r"\s+")


def timeit_async(fn):
    @functools.wraps(fn)
    async def _wrap(*args, **kwargs):
        t0 = time.time()
        out = await fn(*args, **kwargs)
        return out, time.time() - t0

    return _wrap


def strip_none(d: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


def sanitize_text(text: str) -> str:
    """Lowercase, drop everything that is not a word character or whitespace, trim."""
    return SANITIZATION_PATTERN.sub("", text.lower()).strip()


def split_into_words(text: str) -> List[str]:
    return [w for w in WHITESPACE_PATTERN.split(text) if w]


def count_words(text: str) -> int:
    return len(split_into_words(text))


async def run_blocking(func, *args, loop=None, **kwargs):
    loop = loop or asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))
