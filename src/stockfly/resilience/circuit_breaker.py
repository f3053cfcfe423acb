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
"""Circuit breaker guarding calls to a failing dependency."""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from datetime import timedelta
from enum import Enum, auto
from typing import Any

from stockfly.kernel.exceptions import CircuitBreakerException

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class CircuitState(Enum):
    CLOSED = auto()
    OPEN = auto()
    HALF_OPEN = auto()


class CircuitBreaker:
    """Opens after consecutive failures, then lets one trial call through.

    While OPEN every call is refused with :class:`CircuitBreakerException`.
    Once ``recovery_timeout`` has passed the breaker is HALF_OPEN: a single
    trial is admitted; success closes the circuit, failure re-opens it. A
    trial that never reports back is abandoned after another
    ``recovery_timeout``.

    Args:
        name: Label used in logs and error context.
        failure_threshold: Consecutive failures that open the circuit.
        recovery_timeout: Time the circuit stays open before a trial.
        clock: Monotonic time source, in seconds.
    """

    def __init__(
        self,
        name: str = "default",
        failure_threshold: int = 5,
        recovery_timeout: timedelta = timedelta(seconds=30),
        clock: Clock = time.monotonic,
    ) -> None:
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        self._name = name
        self._failure_threshold = failure_threshold
        self._recovery_timeout = recovery_timeout.total_seconds()
        self._clock = clock
        self._failure_count = 0
        self._opened_at: float | None = None
        self._trial_started: float | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def failure_count(self) -> int:
        return self._failure_count

    @property
    def state(self) -> CircuitState:
        if self._opened_at is None:
            return CircuitState.CLOSED
        if self._clock() - self._opened_at >= self._recovery_timeout:
            return CircuitState.HALF_OPEN
        return CircuitState.OPEN

    def acquire(self) -> None:
        """Admit a call or raise :class:`CircuitBreakerException`."""
        state = self.state
        if state is CircuitState.CLOSED:
            return
        now = self._clock()
        if state is CircuitState.HALF_OPEN:
            if self._trial_started is None or now - self._trial_started >= self._recovery_timeout:
                self._trial_started = now
                logger.info("Circuit '%s' half-open, admitting a trial call", self._name)
                return
            retry_after = self._recovery_timeout - (now - self._trial_started)
        else:
            retry_after = self._opened_at + self._recovery_timeout - now  # type: ignore[operator]
        raise CircuitBreakerException(
            f"Circuit '{self._name}' is open",
            code="CIRCUIT_OPEN",
            context={"circuit": self._name, "retry_after": round(max(retry_after, 0.0), 3)},
        )

    def record_success(self) -> None:
        if self._opened_at is not None:
            logger.info("Circuit '%s' closed", self._name)
        self._failure_count = 0
        self._opened_at = None
        self._trial_started = None

    def record_failure(self) -> None:
        self._failure_count += 1
        if self._trial_started is not None or self._failure_count >= self._failure_threshold:
            if self._opened_at is None:
                logger.warning("Circuit '%s' opened after %d failures", self._name, self._failure_count)
            self._opened_at = self._clock()
            self._trial_started = None

    def release(self) -> None:
        """End a call whose outcome says nothing about the dependency's health."""
        self._trial_started = None

    async def call(self, func: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any) -> Any:
        self.acquire()
        try:
            result = await func(*args, **kwargs)
        except Exception:
            self.record_failure()
            raise
        self.record_success()
        return result
