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
"""Rate limit filter: one token bucket per client address."""

from __future__ import annotations

import math
from typing import cast

from starlette.requests import Request
from starlette.responses import Response

from stockfly.core.ordering import HIGHEST_PRECEDENCE, order
from stockfly.kernel.exceptions import RateLimitException
from stockfly.resilience.rate_limiter import KeyedRateLimiter
from stockfly.web.errors import error_response
from stockfly.web.filters import OncePerRequestFilter
from stockfly.web.ports.filter import CallNext


@order(HIGHEST_PRECEDENCE + 300)
class RateLimitFilter(OncePerRequestFilter):
    """Answers 429 with ``Retry-After`` once a client's bucket is empty."""

    url_patterns = ["/api/*"]

    def __init__(self, limiter: KeyedRateLimiter) -> None:
        self._limiter = limiter

    async def do_filter(self, request: Request, call_next: CallNext) -> Response:
        client = request.client.host if request.client else "unknown"
        try:
            await self._limiter.acquire(client)
        except RateLimitException as exc:
            retry_after = max(1, math.ceil(exc.context.get("retry_after", 1)))
            return error_response(request, exc, headers={"Retry-After": str(retry_after)})
        return cast(Response, await call_next(request))
