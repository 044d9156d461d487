from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from utils.rate_limit import TOO_MANY, FixedWindowLimiter, RateLimitMiddleware


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limited_client(clock):
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, limiter=FixedWindowLimiter(3, 600, clock=clock))

    @app.get("/api/ping")
    def ping():
        return {"success": True}

    @app.get("/")
    def root():
        return {"success": True}

    return TestClient(app)


def test_limit_applies_per_window(limited_client, clock):
    responses = [limited_client.get("/api/ping") for _ in range(4)]

    assert [r.status_code for r in responses] == [200, 200, 200, 429]
    assert responses[0].headers["X-RateLimit-Limit"] == "3"
    assert responses[2].headers["X-RateLimit-Remaining"] == "0"
    assert responses[3].json() == {"success": False, "error": TOO_MANY}
    assert responses[3].headers["Retry-After"] == "600"

    clock.now += 600
    assert limited_client.get("/api/ping").status_code == 200


def test_paths_outside_api_are_not_counted(limited_client):
    for _ in range(5):
        assert limited_client.get("/").status_code == 200
    assert limited_client.get("/api/ping").status_code == 200


def test_limiter_counts_each_client_separately(clock):
    limiter = FixedWindowLimiter(1, 60, clock=clock)

    assert limiter.allowed(limiter.hit("10.0.0.1"))
    assert limiter.allowed(limiter.hit("10.0.0.2"))
    assert not limiter.allowed(limiter.hit("10.0.0.1"))


def test_expired_windows_are_pruned(clock):
    limiter = FixedWindowLimiter(5, 60, clock=clock)
    limiter.hit("a")
    clock.now += 61
    limiter.hit("b")

    assert set(limiter._windows) == {"b"}
