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
"""Security filter: extracts JWT Bearer tokens and populates SecurityContext."""

from __future__ import annotations

import logging
from typing import cast

from starlette.requests import Request
from starlette.responses import Response

from stockfly.core.ordering import HIGHEST_PRECEDENCE, order
from stockfly.kernel.exceptions import UnauthorizedException
from stockfly.security.context import SecurityContext
from stockfly.security.jwt import JWTService
from stockfly.web.filters import OncePerRequestFilter
from stockfly.web.ports.filter import CallNext

logger = logging.getLogger(__name__)

_BEARER = "bearer "


@order(HIGHEST_PRECEDENCE + 400)
class SecurityFilter(OncePerRequestFilter):
    """Populates ``request.state.security_context`` for API requests.

    Missing or invalid tokens yield an anonymous context. The rejection, if
    any, is kept on ``request.state.auth_error`` so handlers that require
    authentication can report why.
    """

    url_patterns = ["/api/*"]

    def __init__(self, jwt_service: JWTService) -> None:
        self._jwt_service = jwt_service

    async def do_filter(self, request: Request, call_next: CallNext) -> Response:
        auth_header = request.headers.get("authorization", "")
        auth_error: UnauthorizedException | None = None
        if auth_header.lower().startswith(_BEARER) and auth_header[len(_BEARER) :].strip():
            try:
                security_context = self._jwt_service.to_security_context(auth_header[len(_BEARER) :].strip())
            except UnauthorizedException as exc:
                logger.debug("Rejected bearer token: %s", exc.code)
                security_context = SecurityContext.anonymous()
                auth_error = exc
        else:
            security_context = SecurityContext.anonymous()

        request.state.security_context = security_context
        request.state.auth_error = auth_error
        return cast(Response, await call_next(request))
