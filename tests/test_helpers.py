"""Tests for text sanitization and word splitting."""

import pytest

from modguard.utils.helpers import (
    count_words,
    run_blocking,
    sanitize_text,
    split_into_words,
    strip_none,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Hello, World!", "hello world"),
        ("  This is a BLACK belt competition.  ", "this is a black belt competition"),
        ("snake_case stays", "snake_case stays"),
        ("¡¿?!...", ""),
        ("", ""),
        ("Café 42", "café 42"),
    ],
)
def test_sanitize_text(raw, expected):
    assert sanitize_text(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["Hello, World!", "  a -- b  ", "Mixed CASE\twith\ttabs!!", "émoji 🙂 text", "___"],
)
def test_sanitize_is_idempotent(raw):
    once = sanitize_text(raw)
    assert sanitize_text(once) == once


def test_split_into_words_drops_empty_runs():
    assert split_into_words("  one   two\tthree\n") == ["one", "two", "three"]
    assert split_into_words("") == []
    assert count_words("a b  c") == 3


def test_strip_none():
    assert strip_none({"a": 1, "b": None, "c": 0}) == {"a": 1, "c": 0}


@pytest.mark.asyncio
async def test_run_blocking_uses_running_loop():
    def add(a, b=0):
        return a + b

    assert await run_blocking(add, 2, b=3) == 5
