"""Tests for the FastAPI moderation service."""

import pytest
from fastapi.testclient import TestClient

from modguard.core.config_types import ModerationConfig
from modguard.core.engine import ModerationEngine
from services.moderation_service import create_app

from conftest import FakeOracle


@pytest.fixture
def oracle():
    return FakeOracle({"jerk": ("jerk", 0.99), "black": ("black", 0.97)})


@pytest.fixture
def client(oracle):
    engine = ModerationEngine(ModerationConfig(), oracle=oracle)
    with TestClient(create_app(engine)) as c:
        yield c


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_flagged_message(client):
    r = client.post("/", json={"message": "you jerk"})
    assert r.status_code == 200
    assert r.json() == {"isFlagged": True, "score": 0.99, "label": "jerk", "context": "jerk"}


def test_clean_message_omits_optional_keys(client):
    r = client.post("/", json={"message": "this is a black belt competition"})
    assert r.status_code == 200
    assert r.json() == {"isFlagged": False, "score": 0}


def test_non_json_content_type(client):
    r = client.post("/", content="message=hi", headers={"Content-Type": "text/plain"})
    assert r.status_code == 406


def test_missing_message(client):
    r = client.post("/", json={})
    assert r.status_code == 400


def test_non_string_message(client):
    r = client.post("/", json={"message": ["a", "b"]})
    assert r.status_code == 400


def test_invalid_json(client):
    r = client.post("/", content=b"{not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400


def test_too_long_message(client):
    r = client.post("/", json={"message": "word " * 40})
    assert r.status_code == 413
    assert "35" in r.json()["error"]


def test_internal_failure_is_500(oracle):
    class BrokenEngine(ModerationEngine):
        async def analyze_async(self, message, context=None):
            raise RuntimeError("kaboom")

    engine = BrokenEngine(ModerationConfig(), oracle=oracle)
    with TestClient(create_app(engine)) as c:
        r = c.post("/", json={"message": "hello"})
    assert r.status_code == 500
    assert r.json()["details"] == "kaboom"


def test_cors_headers(client):
    r = client.post("/", json={"message": "hi"}, headers={"Origin": "https://example.com"})
    assert r.headers.get("access-control-allow-origin") == "*"


def test_shutdown_closes_oracle(oracle):
    engine = ModerationEngine(ModerationConfig(), oracle=oracle)
    with TestClient(create_app(engine)):
        pass
    assert oracle.closed
