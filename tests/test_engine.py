"""End-to-end tests for ModerationEngine with a scripted oracle."""

import pytest

from modguard.core.errors import RequestValidationError


@pytest.mark.asyncio
async def test_black_belt_scenario_is_clean(make_engine):
    engine, oracle = make_engine({"black": ("black", 0.97)})
    result = await engine.analyze_async("This is a black belt competition")
    assert result.to_dict() == {"isFlagged": False, "score": 0}
    assert "black" not in oracle.queries


@pytest.mark.asyncio
async def test_black_word_match_exempt_even_when_not_generally_allowed(make_engine):
    from modguard.core.config_types import AllowlistTable

    table = AllowlistTable.from_mapping([], {"black": ["black belt"]})
    engine, oracle = make_engine({"black": ("black", 0.97)}, allowlist=table)
    result = await engine.analyze_async("this is a black belt competition")
    assert "black" in oracle.queries
    assert not result.is_flagged


@pytest.mark.asyncio
async def test_flagged_token_reported_with_context(make_engine):
    engine, _ = make_engine({"jerk": ("jerk", 0.99)})
    result = await engine.analyze_async("Stop it, JERK!")
    assert result.to_dict() == {
        "isFlagged": True,
        "score": 0.99,
        "label": "jerk",
        "context": "jerk",
    }


@pytest.mark.asyncio
async def test_sanitized_text_feeds_both_words_and_chunks(make_engine):
    engine, oracle = make_engine()
    context = {}
    await engine.analyze_async("Hello, there friend!", context)
    assert context["sanitized"] == "hello there friend"
    assert {"hello", "there", "friend"} <= set(oracle.queries)
    assert "hello there friend" in oracle.queries


@pytest.mark.asyncio
async def test_single_word_skips_semantic_lookups(make_engine):
    engine, oracle = make_engine()
    await engine.analyze_async("hello")
    assert oracle.queries == ["hello"]


@pytest.mark.asyncio
async def test_punctuation_only_message_is_clean_without_lookups(make_engine):
    engine, oracle = make_engine()
    result = await engine.analyze_async("?!?!")
    assert not result.is_flagged
    assert oracle.queries == []


@pytest.mark.parametrize("message", ["", "   ", None, 42])
def test_missing_message_rejected(make_engine, message):
    engine, _ = make_engine()
    with pytest.raises(RequestValidationError) as exc:
        engine.validate_message(message)
    assert exc.value.status_code == 400


def test_too_many_words_rejected(make_engine):
    engine, _ = make_engine()
    with pytest.raises(RequestValidationError) as exc:
        engine.validate_message("word " * 36)
    assert exc.value.status_code == 413


def test_too_many_chars_rejected(make_engine):
    engine, _ = make_engine()
    with pytest.raises(RequestValidationError) as exc:
        engine.validate_message("a" * 1001)
    assert exc.value.status_code == 413


def test_limits_are_inclusive(make_engine):
    engine, _ = make_engine()
    assert engine.validate_message("word " * 35)
    assert engine.validate_message("a" * 1000)


def test_sync_analyze(make_engine):
    engine, _ = make_engine({"jerk": ("jerk", 0.99)})
    assert engine.analyze("jerk").is_flagged


@pytest.mark.asyncio
async def test_tracing_does_not_change_result(make_engine):
    engine, _ = make_engine({"jerk": ("jerk", 0.99)}, tracing_enabled=True)
    result = await engine.analyze_async("jerk")
    assert result.label == "jerk"


@pytest.mark.asyncio
async def test_aclose_closes_oracle(make_engine):
    engine, oracle = make_engine()
    await engine.aclose()
    assert oracle.closed
