# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for the token bucket limiters and RateLimitFilter."""

from __future__ import annotations

import pytest
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from stockfly.kernel.exceptions import RateLimitException
from stockfly.resilience.rate_limiter import KeyedRateLimiter, RateLimiter
from stockfly.web.adapters.starlette import create_app
from stockfly.web.adapters.starlette.filters import RateLimitFilter


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


async def _ok(request: Request) -> PlainTextResponse:
    return PlainTextResponse("OK")


class TestRateLimiter:
    async def test_burst_then_reject(self):
        clock = FakeClock()
        limiter = RateLimiter(max_tokens=2, refill_rate=1.0, clock=clock)
        await limiter.acquire()
        await limiter.acquire()
        with pytest.raises(RateLimitException) as exc_info:
            await limiter.acquire()
        assert exc_info.value.code == "RATE_LIMITED"
        assert exc_info.value.context["retry_after"] == 1.0

    async def test_refill(self):
        clock = FakeClock()
        limiter = RateLimiter(max_tokens=1, refill_rate=2.0, clock=clock)
        await limiter.acquire()
        clock.now = 0.5
        await limiter.acquire()
        assert limiter.available_tokens == 0.0

    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            RateLimiter(max_tokens=0)
        with pytest.raises(ValueError):
            RateLimiter(refill_rate=0)


class TestKeyedRateLimiter:
    async def test_keys_have_separate_buckets(self):
        limiter = KeyedRateLimiter(max_tokens=1, refill_rate=1.0, clock=FakeClock())
        await limiter.acquire("a")
        await limiter.acquire("b")
        with pytest.raises(RateLimitException):
            await limiter.acquire("a")

    async def test_least_recently_used_key_is_pruned(self):
        limiter = KeyedRateLimiter(max_tokens=1, refill_rate=1.0, max_keys=2, clock=FakeClock())
        await limiter.acquire("a")
        await limiter.acquire("b")
        await limiter.acquire("c")
        assert len(limiter) == 2
        await limiter.acquire("a")

    async def test_full_buckets_are_pruned_first(self):
        clock = FakeClock()
        limiter = KeyedRateLimiter(max_tokens=1, refill_rate=1.0, max_keys=2, clock=clock)
        await limiter.acquire("a")
        clock.now = 5.0
        await limiter.acquire("b")
        await limiter.acquire("c")
        with pytest.raises(RateLimitException):
            await limiter.acquire("b")


class TestRateLimitFilter:
    def _make_client(self) -> TestClient:
        limiter = KeyedRateLimiter(max_tokens=2, refill_rate=0.5, clock=FakeClock())
        app = create_app(
            routes=[Route("/api/items", _ok), Route("/actuator/health", _ok)],
            filters=[RateLimitFilter(limiter)],
        )
        return TestClient(app)

    def test_rejects_with_retry_after(self):
        client = self._make_client()
        assert client.get("/api/items").status_code == 200
        assert client.get("/api/items").status_code == 200

        resp = client.get("/api/items")
        assert resp.status_code == 429
        assert resp.headers["Retry-After"] == "2"
        assert resp.json()["error"]["code"] == "RATE_LIMITED"

    def test_non_api_paths_are_not_limited(self):
        client = self._make_client()
        for _ in range(5):
            assert client.get("/actuator/health").status_code == 200
