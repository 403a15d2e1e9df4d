from __future__ import annotations

from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from ticketmarket.core.config import settings
from ticketmarket.middleware import rate_limit
from ticketmarket.middleware.rate_limit import parse_rate


class FakeRedis:
    def __init__(self):
        self.counts: dict[str, int] = {}

    def incr(self, key: str) -> int:
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    def expire(self, key: str, seconds: int) -> bool:
        return True


def test_health_and_response_headers(client: TestClient):
    resp = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers["X-Request-ID"] == "req-123"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert "Cache-Control" not in resp.headers

    api = client.get("/api/events")
    assert api.headers["Cache-Control"] == "no-store"
    assert api.headers["X-Request-ID"]


@pytest.mark.parametrize(
    "rate,expected",
    [("10/second", (10, 1)), ("60/minute", (60, 60)), ("5/hour", (5, 3600)), ("1/day", (1, 86400))],
)
def test_parse_rate(rate, expected):
    assert parse_rate(rate) == expected


@pytest.mark.parametrize("rate", ["10", "10/fortnight"])
def test_parse_rate_rejects_garbage(rate):
    with pytest.raises(ValueError):
        parse_rate(rate)


def test_auth_paths_use_stricter_limit(client: TestClient, monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(
        rate_limit,
        "settings",
        replace(settings, rate_limit_enabled=True, rate_limit_auth="2/minute"),
    )
    monkeypatch.setattr(rate_limit, "get_redis", lambda: fake)

    for _ in range(2):
        resp = client.post("/api/login", json={"username": "x", "password": "y"})
        assert resp.status_code == 401

    resp = client.post("/api/login", json={"username": "x", "password": "y"})
    assert resp.status_code == 429
    assert resp.json()["detail"]["code"] == "RATE_LIMITED"
    assert resp.headers["X-RateLimit-Remaining"] == "0"
    assert "Retry-After" in resp.headers

    assert client.get("/api/events").status_code == 200
    assert client.get("/health").status_code == 200
