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
"""Component health checks for ``/actuator/health``."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol, runtime_checkable

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from stockfly.odata.cache import ODataCacheStore
from stockfly.resilience.circuit_breaker import CircuitBreaker, CircuitState

logger = logging.getLogger(__name__)

Status = Literal["UP", "DOWN"]


@dataclass
class HealthStatus:
    status: Status
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class HealthResult:
    """Overall status plus the per-component statuses it was derived from."""

    status: Status
    components: dict[str, HealthStatus] = field(default_factory=dict)

    @property
    def is_up(self) -> bool:
        return self.status == "UP"

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"status": self.status}
        if self.components:
            body["components"] = {
                name: {"status": component.status, "details": component.details}
                for name, component in self.components.items()
            }
        return body


@runtime_checkable
class HealthIndicator(Protocol):
    async def health(self) -> HealthStatus: ...


class DatabaseHealthIndicator:
    """UP when a trivial ``SELECT 1`` round-trips."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def health(self) -> HealthStatus:
        async with self._engine.connect() as connection:
            await connection.execute(text("SELECT 1"))
        return HealthStatus("UP", {"dialect": self._engine.dialect.name})


class ODataCacheHealthIndicator:
    """Always UP; publishes cache occupancy and hit counters as details."""

    def __init__(self, cache: ODataCacheStore, enabled: bool = True) -> None:
        self._cache = cache
        self._enabled = enabled

    async def health(self) -> HealthStatus:
        return HealthStatus("UP", {**self._cache.stats().to_dict(), "enabled": self._enabled})


class CircuitBreakerHealthIndicator:
    """DOWN while the circuit is open; reports its state and failure streak."""

    def __init__(self, breaker: CircuitBreaker) -> None:
        self._breaker = breaker

    async def health(self) -> HealthStatus:
        state = self._breaker.state
        details = {"state": state.name, "failures": self._breaker.failure_count}
        return HealthStatus("DOWN" if state is CircuitState.OPEN else "UP", details)


class HealthAggregator:
    """Runs every registered indicator; one DOWN component makes the whole result DOWN.

    An indicator that raises counts as DOWN with the exception type as its
    only detail. With nothing registered the result is UP.
    """

    def __init__(self) -> None:
        self._indicators: dict[str, HealthIndicator] = {}

    def add_indicator(self, name: str, indicator: HealthIndicator) -> None:
        self._indicators[name] = indicator

    async def check(self) -> HealthResult:
        components = {
            name: await self._check_indicator(name, indicator) for name, indicator in self._indicators.items()
        }
        healthy = all(component.status == "UP" for component in components.values())
        return HealthResult("UP" if healthy else "DOWN", components)

    @staticmethod
    async def _check_indicator(name: str, indicator: HealthIndicator) -> HealthStatus:
        try:
            return await indicator.health()
        except Exception as exc:
            logger.exception("Health check %r failed", name)
            return HealthStatus("DOWN", {"error": type(exc).__name__})
