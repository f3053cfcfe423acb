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
"""OData filter: parses ``$``-parameters before list handlers run."""

from __future__ import annotations

import logging
from typing import cast

from starlette.requests import Request
from starlette.responses import Response

from stockfly.core.ordering import HIGHEST_PRECEDENCE, order
from stockfly.kernel.exceptions import MalformedQueryException
from stockfly.odata.parser import QueryStringParser
from stockfly.web.errors import error_response
from stockfly.web.filters import OncePerRequestFilter
from stockfly.web.ports.filter import CallNext

logger = logging.getLogger(__name__)


@order(HIGHEST_PRECEDENCE + 500)
class ODataRequestFilter(OncePerRequestFilter):
    """Sets ``request.state.odata_query`` on ``GET /api/*`` requests.

    The value is ``None`` when the request carries no ``$``-parameter. A
    malformed parameter is answered with 400 here and the handler never runs.
    """

    url_patterns = ["/api/*"]
    methods = frozenset({"GET"})

    def __init__(self, parser: QueryStringParser | None = None) -> None:
        self._parser = parser or QueryStringParser()

    async def do_filter(self, request: Request, call_next: CallNext) -> Response:
        params = request.query_params
        try:
            query = self._parser.parse(params) if self._parser.has_odata_parameters(params) else None
        except MalformedQueryException as exc:
            logger.info("Rejected OData query on %s: %s", request.url.path, exc)
            return error_response(request, exc)
        request.state.odata_query = query
        return cast(Response, await call_next(request))
