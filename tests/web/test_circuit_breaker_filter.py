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
"""Tests for CircuitBreaker and CircuitBreakerFilter."""

from __future__ import annotations

from datetime import timedelta

import pytest
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from stockfly.actuator.health import CircuitBreakerHealthIndicator
from stockfly.kernel.exceptions import CircuitBreakerException
from stockfly.resilience.circuit_breaker import CircuitBreaker, CircuitState
from stockfly.web.adapters.starlette import create_app
from stockfly.web.adapters.starlette.filters import CircuitBreakerFilter


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _breaker(clock: FakeClock, threshold: int = 2) -> CircuitBreaker:
    return CircuitBreaker("store", failure_threshold=threshold, recovery_timeout=timedelta(seconds=10), clock=clock)


def _open(breaker: CircuitBreaker) -> None:
    for _ in range(breaker._failure_threshold):
        breaker.acquire()
        breaker.record_failure()


class TestCircuitBreaker:
    def test_opens_after_consecutive_failures(self):
        breaker = _breaker(FakeClock())
        breaker.record_failure()
        assert breaker.state is CircuitState.CLOSED
        breaker.record_failure()
        assert breaker.state is CircuitState.OPEN

    def test_success_resets_the_streak(self):
        breaker = _breaker(FakeClock())
        breaker.record_failure()
        breaker.record_success()
        breaker.record_failure()
        assert breaker.state is CircuitState.CLOSED
        assert breaker.failure_count == 1

    def test_open_circuit_refuses_calls(self):
        clock = FakeClock()
        breaker = _breaker(clock)
        _open(breaker)
        clock.now = 4.0
        with pytest.raises(CircuitBreakerException) as exc_info:
            breaker.acquire()
        assert exc_info.value.code == "CIRCUIT_OPEN"
        assert exc_info.value.context == {"circuit": "store", "retry_after": 6.0}

    def test_half_open_admits_a_single_trial(self):
        clock = FakeClock()
        breaker = _breaker(clock)
        _open(breaker)
        clock.now = 10.0
        assert breaker.state is CircuitState.HALF_OPEN
        breaker.acquire()
        with pytest.raises(CircuitBreakerException):
            breaker.acquire()

    def test_successful_trial_closes(self):
        clock = FakeClock()
        breaker = _breaker(clock)
        _open(breaker)
        clock.now = 10.0
        breaker.acquire()
        breaker.record_success()
        assert breaker.state is CircuitState.CLOSED
        breaker.acquire()

    def test_failed_trial_reopens_immediately(self):
        clock = FakeClock()
        breaker = _breaker(clock, threshold=3)
        _open(breaker)
        clock.now = 10.0
        breaker.acquire()
        breaker.record_failure()
        assert breaker.state is CircuitState.OPEN
        clock.now = 19.0
        assert breaker.state is CircuitState.OPEN

    def test_released_trial_lets_the_next_one_in(self):
        clock = FakeClock()
        breaker = _breaker(clock)
        _open(breaker)
        clock.now = 10.0
        breaker.acquire()
        breaker.release()
        breaker.acquire()

    def test_abandoned_trial_expires(self):
        clock = FakeClock()
        breaker = _breaker(clock)
        _open(breaker)
        clock.now = 10.0
        breaker.acquire()
        clock.now = 20.0
        breaker.acquire()

    async def test_call_wraps_a_coroutine(self):
        breaker = _breaker(FakeClock(), threshold=1)

        async def boom() -> None:
            raise ConnectionError("down")

        with pytest.raises(ConnectionError):
            await breaker.call(boom)
        with pytest.raises(CircuitBreakerException):
            await breaker.call(boom)

    def test_invalid_threshold(self):
        with pytest.raises(ValueError):
            CircuitBreaker(failure_threshold=0)


class TestCircuitBreakerFilter:
    def _make_client(self, breaker: CircuitBreaker) -> TestClient:
        async def failing(request: Request) -> PlainTextResponse:
            raise ConnectionError("database is gone")

        async def unavailable(request: Request) -> JSONResponse:
            return JSONResponse({}, status_code=503)

        async def missing(request: Request) -> JSONResponse:
            return JSONResponse({}, status_code=404)

        async def ok(request: Request) -> PlainTextResponse:
            return PlainTextResponse("OK")

        app = create_app(
            routes=[
                Route("/api/failing", failing),
                Route("/api/unavailable", unavailable),
                Route("/api/missing", missing),
                Route("/api/ok", ok),
                Route("/actuator/health", failing),
            ],
            filters=[CircuitBreakerFilter(breaker)],
        )
        return TestClient(app, raise_server_exceptions=False)

    def test_failures_open_the_circuit(self):
        clock = FakeClock()
        breaker = _breaker(clock)
        client = self._make_client(breaker)
        assert client.get("/api/failing").status_code == 500
        assert client.get("/api/unavailable").status_code == 503
        assert breaker.state is CircuitState.OPEN

        resp = client.get("/api/ok")
        assert resp.status_code == 503
        assert resp.headers["Retry-After"] == "10"
        assert resp.json()["error"]["code"] == "CIRCUIT_OPEN"

    def test_recovers_after_timeout(self):
        clock = FakeClock()
        breaker = _breaker(clock)
        client = self._make_client(breaker)
        client.get("/api/failing")
        client.get("/api/failing")
        clock.now = 10.0
        assert client.get("/api/ok").status_code == 200
        assert breaker.state is CircuitState.CLOSED

    def test_client_errors_are_neutral(self):
        breaker = _breaker(FakeClock())
        client = self._make_client(breaker)
        client.get("/api/failing")
        for _ in range(3):
            assert client.get("/api/missing").status_code == 404
        assert breaker.failure_count == 1
        assert breaker.state is CircuitState.CLOSED

    def test_non_api_paths_are_not_guarded(self):
        breaker = _breaker(FakeClock(), threshold=1)
        client = self._make_client(breaker)
        client.get("/actuator/health")
        assert breaker.state is CircuitState.CLOSED


class TestCircuitBreakerHealth:
    async def test_reports_down_while_open(self):
        breaker = _breaker(FakeClock(), threshold=1)
        indicator = CircuitBreakerHealthIndicator(breaker)
        assert (await indicator.health()).status == "UP"
        breaker.record_failure()
        status = await indicator.health()
        assert status.status == "DOWN"
        assert status.details == {"state": "OPEN", "failures": 1}
