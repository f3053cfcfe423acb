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
"""Exception to HTTP response mapping.

Every error leaves the API in the same envelope::

    {"success": false,
     "error": {"message": ..., "code": ..., "status": ..., "path": ...,
               "transaction_id": ..., "timestamp": ..., "context": {...}}}
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import Any

from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from stockfly.kernel.exceptions import (
    BusinessException,
    CircuitBreakerException,
    ConflictException,
    ForbiddenException,
    InfrastructureException,
    InvalidRequestException,
    RateLimitException,
    ResourceNotFoundException,
    SecurityException,
    StockflyException,
    UnauthorizedException,
    ValidationException,
)

logger = logging.getLogger("stockfly.web")

# Exception -> HTTP status code mapping (most specific first)
_STATUS_MAP: dict[type, int] = {
    # Business
    ValidationException: 422,
    ResourceNotFoundException: 404,
    ConflictException: 409,
    InvalidRequestException: 400,
    # Security
    UnauthorizedException: 401,
    ForbiddenException: 403,
    SecurityException: 401,
    # Infrastructure
    RateLimitException: 429,
    CircuitBreakerException: 503,
    # Catch-all
    BusinessException: 400,
    InfrastructureException: 503,
}

_HTTP_CODES = {404: "NOT_FOUND", 405: "METHOD_NOT_ALLOWED"}


def status_for(exc: Exception) -> int:
    """Map exception type to HTTP status code."""
    for exc_type, status in _STATUS_MAP.items():
        if isinstance(exc, exc_type):
            return status
    return 500


def error_body(exc: Exception, path: str, transaction_id: str | None = None) -> tuple[int, dict[str, Any]]:
    """Build ``(status, body)`` for *exc*; non-Stockfly errors are masked."""
    if isinstance(exc, StockflyException):
        status = status_for(exc)
        error: dict[str, Any] = {
            "message": str(exc),
            "code": exc.code or type(exc).__name__,
        }
    else:
        status = 500
        error = {"message": "Internal server error", "code": "INTERNAL_ERROR"}

    error.update(
        status=status,
        path=path,
        transaction_id=transaction_id or str(uuid.uuid4()),
        timestamp=datetime.now(UTC).isoformat(),
    )
    if isinstance(exc, StockflyException) and exc.context:
        error["context"] = exc.context
    return status, {"success": False, "error": error}


def error_response(request: Request, exc: Exception, headers: dict[str, str] | None = None) -> JSONResponse:
    status, body = error_body(exc, request.url.path, getattr(request.state, "transaction_id", None))
    return JSONResponse(body, status_code=status, headers=headers)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render any exception raised by a route as the error envelope."""
    if not isinstance(exc, StockflyException):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    elif status_for(exc) >= 500:
        logger.warning("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
    return error_response(request, exc)


async def http_exception_handler(request: Request, exc: HTTPException) -> Response:
    """Render router-level errors (unknown path, wrong method) in the same envelope."""
    if exc.status_code in (204, 304):
        return Response(status_code=exc.status_code, headers=exc.headers)
    body = {
        "success": False,
        "error": {
            "message": exc.detail,
            "code": _HTTP_CODES.get(exc.status_code, "HTTP_ERROR"),
            "status": exc.status_code,
            "path": request.url.path,
            "transaction_id": getattr(request.state, "transaction_id", None) or str(uuid.uuid4()),
            "timestamp": datetime.now(UTC).isoformat(),
        },
    }
    return JSONResponse(body, status_code=exc.status_code, headers=exc.headers)

