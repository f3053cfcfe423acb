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
"""Access log: one structured event per request."""

from __future__ import annotations

import time

import structlog
from starlette.requests import Request
from starlette.responses import Response

from stockfly.core.ordering import HIGHEST_PRECEDENCE, order
from stockfly.web.filters import OncePerRequestFilter
from stockfly.web.ports.filter import CallNext

logger = structlog.get_logger("stockfly.web")


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


@order(HIGHEST_PRECEDENCE + 200)
class RequestLoggingFilter(OncePerRequestFilter):
    """Emits ``http_request`` (or ``http_request_failed``) for every request.

    Runs inside the transaction-id filter, so the id arrives through the
    structlog context. List responses add their ``X-Cache`` outcome. 4xx
    responses log at warning level and 5xx at error level.
    """

    exclude_patterns = ["/actuator/health"]

    async def do_filter(self, request: Request, call_next: CallNext) -> Response:
        log = logger.bind(method=request.method, path=request.url.path)
        started = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception as exc:
            log.error("http_request_failed", duration_ms=_elapsed_ms(started), error_type=type(exc).__name__)
            raise

        status = response.status_code
        emit = log.error if status >= 500 else log.warning if status >= 400 else log.info
        emit(
            "http_request",
            query=request.url.query or None,
            status_code=status,
            duration_ms=_elapsed_ms(started),
            cache=response.headers.get("X-Cache"),
        )
        return response
