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
"""Circuit breaker filter: fail fast with 503 while the store keeps failing."""

from __future__ import annotations

import math
from typing import cast

from starlette.requests import Request
from starlette.responses import Response

from stockfly.core.ordering import HIGHEST_PRECEDENCE, order
from stockfly.kernel.exceptions import CircuitBreakerException
from stockfly.resilience.circuit_breaker import CircuitBreaker
from stockfly.web.errors import error_response
from stockfly.web.filters import OncePerRequestFilter
from stockfly.web.ports.filter import CallNext


@order(HIGHEST_PRECEDENCE + 350)
class CircuitBreakerFilter(OncePerRequestFilter):
    """Feeds ``/api/*`` outcomes into a :class:`CircuitBreaker`.

    Unhandled exceptions and 5xx responses count as failures, 2xx/3xx as
    successes. Client errors are neutral.
    """

    url_patterns = ["/api/*"]

    def __init__(self, breaker: CircuitBreaker) -> None:
        self._breaker = breaker

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    async def do_filter(self, request: Request, call_next: CallNext) -> Response:
        try:
            self._breaker.acquire()
        except CircuitBreakerException as exc:
            retry_after = max(1, math.ceil(exc.context.get("retry_after", 1)))
            return error_response(request, exc, headers={"Retry-After": str(retry_after)})

        try:
            response = cast(Response, await call_next(request))
        except Exception:
            self._breaker.record_failure()
            raise
        if response.status_code >= 500:
            self._breaker.record_failure()
        elif response.status_code < 400:
            self._breaker.record_success()
        else:
            self._breaker.release()
        return response
